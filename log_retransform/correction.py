"""
Retransformation correction factors.

When y is modelled as log(y) = xb + u, exp(xb) estimates the conditional
median of y. The conditional mean is alpha * exp(xb) with
alpha = E[exp(u)]. Two estimators of alpha are provided:

- Smearing (Duan, 1983): alpha_hat = mean(exp(u_hat)). Consistent if u is
  independent of x.
- Wooldridge: alpha_tilde is the slope of the regression of y on
  m_hat = exp(xb_hat) without intercept. Consistent whenever
  E[y|x] = alpha * exp(xb), with no moment assumption on exp(u).

Both are estimated on the original estimation sample only.

References
----------
Wooldridge, J.M. "Introductory Econometrics: A Modern Approach", Section 6.4.
Duan, N. (1983). "Smearing Estimate: A Nonparametric Retransformation
Method." JASA, 78(383), 605-610.
"""

import warnings

import numpy as np
from sklearn.linear_model import LinearRegression

from .diagnostics.dataclasses import CorrectionFactors
from .exceptions import DegenerateFitError

METHODS = ('wooldridge', 'smearing')

# Relative spread below which the naive predictions count as constant
_CONSTANT_RTOL = 1e-12


def validate_method(method):
    if method not in METHODS:
        raise ValueError(f"Unknown method: {method!r}. Use one of {METHODS}.")


def smearing_factor(residual):
    """
    Mean of the exponentiated log-scale residuals.

    Parameters
    ----------
    residual : array-like of shape (n_samples,)
        In-sample residuals on the log scale.

    Returns
    -------
    alpha_hat : float
    """
    residual = np.asarray(residual, dtype=float)
    if residual.size == 0:
        raise DegenerateFitError("Cannot estimate smearing factor from an empty sample")
    return float(np.mean(np.exp(residual)))


def wooldridge_factor(y, fitted_log):
    """
    Slope of the no-intercept regression of y on exp(fitted_log).

    Parameters
    ----------
    y : array-like of shape (n_samples,)
        Original-scale response on the estimation sample.
    fitted_log : array-like of shape (n_samples,)
        Fitted log values on the same rows.

    Returns
    -------
    alpha_tilde : float

    Raises
    ------
    DegenerateFitError
        If exp(fitted_log) is constant across the sample (e.g. an
        intercept-only log model), leaving the auxiliary regression with no
        explanatory information.
    """
    y = np.asarray(y, dtype=float)
    m_hat = np.exp(np.asarray(fitted_log, dtype=float))

    if m_hat.size == 0:
        raise DegenerateFitError("Cannot estimate Wooldridge factor from an empty sample")
    if not np.all(np.isfinite(m_hat)):
        raise DegenerateFitError("exp(fitted_log) overflowed; check the model response scale")
    if np.ptp(m_hat) <= _CONSTANT_RTOL * np.max(np.abs(m_hat)):
        raise DegenerateFitError(
            "Naive predictions exp(fitted_log) are constant across the sample; "
            "the auxiliary regression of y on exp(fitted_log) is rank-deficient"
        )

    aux = LinearRegression(fit_intercept=False)
    aux.fit(m_hat.reshape(-1, 1), y)
    return float(aux.coef_[0])


def estimate_correction(y, fitted_log, residual, method='wooldridge'):
    """
    Estimate both correction factors on the original sample.

    Parameters
    ----------
    y : array-like of shape (n_samples,)
        Original-scale response.
    fitted_log : array-like of shape (n_samples,)
        Fitted log values.
    residual : array-like of shape (n_samples,)
        Log-scale residuals.
    method : {'wooldridge', 'smearing'}, default='wooldridge'
        Which factor is applied to predictions.

    Returns
    -------
    CorrectionFactors
    """
    validate_method(method)
    factors = CorrectionFactors(
        alpha_hat=smearing_factor(residual),
        alpha_tilde=wooldridge_factor(y, fitted_log),
        method=method,
    )

    if not np.isfinite(factors.applied) or factors.applied <= 0:
        warnings.warn(
            f"Correction factor ({method}) is {factors.applied:.6g}; corrected predictions "
            "are not meaningful. Was the model fitted on log(y) with y > 0?",
            UserWarning
        )
    return factors
