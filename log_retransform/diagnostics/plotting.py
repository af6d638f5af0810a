"""
Plotting utilities for retransformed predictions.
"""

from typing import Optional, Tuple

import numpy as np

from ..columns import CI_LOWER, CI_UPPER, CORRECTED, NAIVE, REAL


def plot_predictions(
    predictions,
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None,
    title: str = 'Retransformed Predictions'
):
    """
    Plot corrected predictions on the original scale.

    In-sample tables get two panels (actual vs predicted, and predictions
    with confidence intervals). New-data tables have no actual values and
    get the interval panel only.

    Parameters
    ----------
    predictions : pd.DataFrame
        Prediction table from LogRetransformer.predict().
    figsize : tuple, default=(12, 5)
        Figure size.
    save_path : str, optional
        If provided, save figure to this path.
    title : str, default='Retransformed Predictions'
        Figure title.

    Returns
    -------
    matplotlib.figure.Figure
        The generated figure.
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for plot_predictions()")

    real = predictions[REAL].to_numpy(dtype=float)
    corrected = predictions[CORRECTED].to_numpy(dtype=float)
    naive = predictions[NAIVE].to_numpy(dtype=float)
    has_real = bool(np.any(np.isfinite(real)))

    n_panels = 2 if has_real else 1
    fig, axes = plt.subplots(1, n_panels, figsize=figsize, squeeze=False)
    axes = axes[0]
    fig.suptitle(title, fontsize=14, fontweight='bold')

    # 1. Actual vs Predicted
    if has_real:
        ax1 = axes[0]
        ax1.scatter(real, naive, alpha=0.6, label='Naive exp(fit)', marker='x')
        ax1.scatter(real, corrected, alpha=0.6, label='Corrected')
        lims = [np.nanmin([real.min(), naive.min(), corrected.min()]),
                np.nanmax([real.max(), naive.max(), corrected.max()])]
        ax1.plot(lims, lims, 'r--', linewidth=1)
        ax1.set_xlabel('Actual')
        ax1.set_ylabel('Predicted')
        ax1.set_title('Actual vs Predicted')
        ax1.legend()

    # 2. Predictions with intervals, sorted by prediction
    ax2 = axes[-1]
    order = np.argsort(corrected)
    positions = np.arange(len(order))
    lower = predictions[CI_LOWER].to_numpy(dtype=float)[order]
    upper = predictions[CI_UPPER].to_numpy(dtype=float)[order]
    point = corrected[order]
    ax2.errorbar(positions, point, yerr=[point - lower, upper - point],
                 fmt='o', markersize=3, capsize=2, label='Corrected (CI)')
    if has_real:
        ax2.scatter(positions, real[order], color='black', s=10, label='Actual')
    ax2.set_xlabel('Observation (sorted by prediction)')
    ax2.set_ylabel('Original scale')
    ax2.set_title('Confidence Intervals')
    ax2.legend()

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
