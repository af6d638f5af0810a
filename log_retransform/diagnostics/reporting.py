"""
Console reporting for retransformation diagnostics.

Each value line is ``label: value`` so the printed report can be captured
and parsed.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .dataclasses import RetransformDiagnostics


def format_diagnostics(diag: 'RetransformDiagnostics', decimals: int = 4) -> str:
    """
    Format diagnostics as a plain-text report.

    Parameters
    ----------
    diag : RetransformDiagnostics
        In-sample diagnostics.
    decimals : int, default=4
        Number of decimal places for numeric values.

    Returns
    -------
    str
    """
    width = 70
    lines = []

    def header(title):
        lines.append("=" * width)
        lines.append(f" {title}")
        lines.append("=" * width)

    def section(title):
        lines.append("")
        lines.append(f"--- {title} " + "-" * (width - len(title) - 5))

    header("LOG-LEVEL RETRANSFORMATION SUMMARY")

    section("Correction Factors")
    lines.append(f"  Alpha_0 hat (smearing):     {diag.alpha_hat:.{decimals}f}")
    lines.append(f"  Alpha_0 tilde (Wooldridge): {diag.alpha_tilde:.{decimals}f}")
    lines.append(f"  Applied method:             {diag.factors.method}")

    section("Fit on Original Scale")
    lines.append(f"  R2 (original scale):        {diag.r2_original:.{decimals}f}")
    lines.append(f"  Mean of y:                  {diag.y_mean:.{decimals}f}")
    lines.append(f"  Mean naive prediction:      {diag.naive_mean:.{decimals}f}")
    lines.append(f"  Mean corrected prediction:  {diag.corrected_mean:.{decimals}f}")
    lines.append(f"  Naive bias (relative):      {diag.bias_pct:+.{decimals}f}")

    section("Sample")
    lines.append(f"  N observations:             {diag.n_obs}")
    lines.append(f"  Residual df:                {diag.residual_df:g}")
    lines.append(f"  Confidence level:           {diag.confidence_level:.{decimals}f}")
    lines.append(f"  t critical:                 {diag.t_critical:.{decimals}f}")

    lines.append("=" * width)
    return "\n".join(lines)


def print_diagnostics(diag: 'RetransformDiagnostics', decimals: int = 4):
    """Print formatted diagnostics to console."""
    print(format_diagnostics(diag, decimals=decimals))


def parse_report(text: str) -> dict:
    """
    Read ``label: value`` pairs back from a printed report.

    Numeric values are returned as floats, everything else as strings.
    """
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if ':' not in line or line.startswith(('=', '---')):
            continue
        label, _, raw = line.partition(':')
        raw = raw.strip()
        try:
            values[label.strip()] = float(raw)
        except ValueError:
            values[label.strip()] = raw
    return values
