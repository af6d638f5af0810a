"""
Core diagnostic computation on the original (level) scale.

Provides:
- Original-scale R2 (squared correlation definition)
- compute_diagnostics for in-sample retransformation runs
"""

import numpy as np

from .dataclasses import CorrectionFactors, RetransformDiagnostics


def original_scale_r2(y, y_pred):
    """
    Squared Pearson correlation between actual and predicted values.

    This is not 1 - SSE/SST: a prediction that is off in level but
    perfectly correlated with y still scores 1. The squared-correlation
    definition is the usual goodness-of-fit measure for retransformed
    log models, since it is invariant to the correction factor.

    Parameters
    ----------
    y : array-like of shape (n_samples,)
        Observed original-scale values.
    y_pred : array-like of shape (n_samples,)
        Predictions on the original scale.

    Returns
    -------
    r2 : float
        Value in [0, 1]; NaN if either input is constant.
    """
    y = np.asarray(y, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if np.ptp(y) == 0 or np.ptp(y_pred) == 0:
        return np.nan
    r = np.corrcoef(y, y_pred)[0, 1]
    return float(min(r ** 2, 1.0))


def compute_diagnostics(y, naive, corrected, factors: CorrectionFactors,
                        residual_df, confidence_level, t_critical):
    """Build RetransformDiagnostics for an in-sample run."""
    y = np.asarray(y, dtype=float)
    return RetransformDiagnostics(
        factors=factors,
        r2_original=original_scale_r2(y, corrected),
        n_obs=len(y),
        residual_df=float(residual_df),
        confidence_level=float(confidence_level),
        t_critical=float(t_critical),
        y_mean=float(np.mean(y)),
        naive_mean=float(np.mean(naive)),
        corrected_mean=float(np.mean(corrected)),
    )
