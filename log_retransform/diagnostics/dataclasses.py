"""
Data classes for retransformation results.

These classes hold the correction factors, the in-sample diagnostics and
the prediction table returned by a retransformation run.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ..columns import CORRECTED


@dataclass(frozen=True)
class CorrectionFactors:
    """
    Retransformation correction factors estimated on the original sample.

    Attributes
    ----------
    alpha_hat : float
        Smearing estimate, mean of exp(residual).
    alpha_tilde : float
        Wooldridge estimate, slope of y on exp(fitted_log) through the origin.
    method : str
        Which factor is applied to predictions: 'wooldridge' or 'smearing'.
    """
    alpha_hat: float
    alpha_tilde: float
    method: str = 'wooldridge'

    @property
    def applied(self) -> float:
        """Factor used for corrected predictions and intervals."""
        return self.alpha_tilde if self.method == 'wooldridge' else self.alpha_hat

    def to_dict(self) -> Dict[str, Any]:
        return {
            'alpha_hat': self.alpha_hat,
            'alpha_tilde': self.alpha_tilde,
            'method': self.method,
            'applied': self.applied,
        }


@dataclass
class RetransformDiagnostics:
    """In-sample fit quality on the original (level) scale."""
    factors: CorrectionFactors
    r2_original: float
    n_obs: int
    residual_df: float
    confidence_level: float
    t_critical: float
    y_mean: float
    naive_mean: float
    corrected_mean: float

    @property
    def alpha_hat(self) -> float:
        return self.factors.alpha_hat

    @property
    def alpha_tilde(self) -> float:
        return self.factors.alpha_tilde

    @property
    def bias_pct(self) -> float:
        """Percentage by which the naive mean prediction misses mean(y)."""
        return (self.naive_mean - self.y_mean) / self.y_mean

    def to_dict(self) -> Dict[str, Any]:
        result = self.factors.to_dict()
        result.update({
            'r2_original': self.r2_original,
            'n_obs': self.n_obs,
            'residual_df': self.residual_df,
            'confidence_level': self.confidence_level,
            't_critical': self.t_critical,
            'y_mean': self.y_mean,
            'naive_mean': self.naive_mean,
            'corrected_mean': self.corrected_mean,
        })
        return result

    def print_summary(self, decimals: int = 4):
        """Print formatted summary to console."""
        from .reporting import print_diagnostics
        print_diagnostics(self, decimals=decimals)


@dataclass
class RetransformResult:
    """
    Output of a retransformation run.

    Attributes
    ----------
    predictions : pd.DataFrame
        One row per target observation; see ``log_retransform.COLUMNS``.
    factors : CorrectionFactors
        Correction factors estimated on the original sample.
    diagnostics : Optional[RetransformDiagnostics]
        In-sample diagnostics. None for new-data predictions.
    """
    predictions: 'pd.DataFrame'  # Forward reference to avoid import
    factors: CorrectionFactors
    diagnostics: Optional[RetransformDiagnostics] = None

    @property
    def in_sample(self) -> bool:
        return self.diagnostics is not None

    @property
    def corrected(self) -> np.ndarray:
        return self.predictions[CORRECTED].to_numpy()

    def print_summary(self, decimals: int = 4):
        if self.diagnostics is None:
            raise ValueError("Diagnostics not available for new-data predictions.")
        self.diagnostics.print_summary(decimals=decimals)

    def plot_predictions(self, figsize: Tuple[int, int] = (12, 5),
                         save_path: Optional[str] = None):
        """Plot corrected predictions with their confidence intervals."""
        from .plotting import plot_predictions
        return plot_predictions(self.predictions, figsize=figsize, save_path=save_path)
