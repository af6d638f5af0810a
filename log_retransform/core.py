"""
LogRetransformer: mean-consistent predictions from log-linear models.

Takes a regression fitted on log(y), estimates the retransformation
correction factor on the original sample and produces original-scale point
predictions, confidence intervals and fit diagnostics, for the estimation
sample or for new covariate rows.

Reference: Wooldridge, J.M. "Introductory Econometrics", Section 6.4,
           "Predicting y when log(y) is the dependent variable".
"""

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_is_fitted

from .adapters import as_log_model
from .columns import (
    REAL, CORRECTED, CI_LOWER, CI_UPPER, LOG_FITTED, LOG_SE, NAIVE,
    RESIDUAL, SMEARING,
)
from .correction import estimate_correction, validate_method
from .diagnostics.core import compute_diagnostics
from .diagnostics.dataclasses import RetransformResult
from .exceptions import DegenerateFitError, InvalidConfidenceLevel


def validate_confidence_level(confidence_level):
    """Raise InvalidConfidenceLevel unless 0 < confidence_level < 1."""
    try:
        level = float(confidence_level)
    except (TypeError, ValueError) as e:
        raise InvalidConfidenceLevel(
            f"confidence_level must be a number in (0, 1), got {confidence_level!r}"
        ) from e
    if not 0.0 < level < 1.0:
        raise InvalidConfidenceLevel(
            f"confidence_level must be in the open interval (0, 1), got {confidence_level!r}"
        )
    return level


def validate_residual_df(residual_df):
    df = float(residual_df)
    if not np.isfinite(df) or df <= 0:
        raise DegenerateFitError(
            f"Model has no residual degrees of freedom (df_resid={residual_df}); "
            "confidence intervals are undefined"
        )
    return df


def t_critical(confidence_level, residual_df):
    """Two-sided Student-t critical value."""
    level = validate_confidence_level(confidence_level)
    df = validate_residual_df(residual_df)
    return float(stats.t.ppf((1.0 + level) / 2.0, df))


def retransform_interval(fitted_log, se_log, alpha, t_crit):
    """
    Retransform log-scale fits and intervals to the original scale.

    The interval is built symmetrically on the log scale first and then
    exponentiated, so it is asymmetric around the point prediction on the
    original scale. Rows with zero standard error get a degenerate interval
    equal to the point prediction.

    Parameters
    ----------
    fitted_log : array-like of shape (n,)
        Fitted log values.
    se_log : array-like of shape (n,)
        Standard errors of the fitted log values.
    alpha : float
        Correction factor.
    t_crit : float
        Student-t critical value.

    Returns
    -------
    y_hat, lower, upper : ndarray of shape (n,)
    """
    fitted_log = np.asarray(fitted_log, dtype=float)
    se_log = np.asarray(se_log, dtype=float)

    half_width = t_crit * se_log
    log_lower = fitted_log - half_width
    log_upper = fitted_log + half_width

    y_hat = alpha * np.exp(fitted_log)
    lower = alpha * np.exp(log_lower)
    upper = alpha * np.exp(log_upper)
    return y_hat, lower, upper


def _as_frame(data, name):
    if isinstance(data, pd.DataFrame):
        return data
    try:
        return pd.DataFrame(data)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{name} must be a pandas DataFrame or convertible to one: {e}") from e


class LogRetransformer(BaseEstimator):
    """
    Correct retransformation bias of a log-linear regression.

    A model fitted on log(y) predicts exp(fitted_log), which estimates the
    conditional median of y and understates its mean. This estimator
    computes the correction factor on the original estimation sample and
    applies it to predictions and confidence intervals.

    The wrapped model is assumed to have log(y) as its response. This is
    not checked; a model on any other scale gives meaningless output.

    Parameters
    ----------
    method : {'wooldridge', 'smearing'}, default='wooldridge'
        Correction applied to predictions:
        - 'wooldridge': slope of y on exp(fitted_log) through the origin
        - 'smearing': mean of exp(residual) (Duan)
        Both factors are always estimated and reported.

    confidence_level : float, default=0.95
        Confidence level of the intervals, in (0, 1).

    full : bool, default=False
        If True, add log residuals and smearing-corrected predictions to the
        prediction table.

    Attributes
    ----------
    adapter_ : LogModelAdapter
        Capability adapter around the fitted model.

    factors_ : CorrectionFactors
        Both correction factors and the applied method.

    alpha_hat_ : float
        Smearing factor.

    alpha_tilde_ : float
        Wooldridge factor.

    alpha_ : float
        Factor applied to predictions.

    residual_df_ : float
        Residual degrees of freedom of the log model.

    n_obs_ : int
        Number of rows in the estimation sample.

    y_ : ndarray of shape (n_obs_,)
        Original-scale response aligned with the estimation rows.

    Examples
    --------
    >>> import numpy as np
    >>> import statsmodels.formula.api as smf
    >>> from log_retransform import LogRetransformer
    >>>
    >>> res = smf.ols('np.log(price) ~ np.log(nox) + rooms', data=hprice2).fit()
    >>> rt = LogRetransformer(confidence_level=0.95)
    >>> rt.fit(res, hprice2, 'price')
    >>> print(rt.alpha_tilde_)
    >>> table = rt.predict()                    # estimation sample
    >>> new = rt.predict(pd.DataFrame({'nox': [5.0], 'rooms': [6]}))
    """

    def __init__(self, method='wooldridge', confidence_level=0.95, full=False):
        self.method = method
        self.confidence_level = confidence_level
        self.full = full

    def _validate_params(self):
        validate_method(self.method)
        validate_confidence_level(self.confidence_level)

    def fit(self, model, data, response_name):
        """
        Estimate the correction factors on the original sample.

        Parameters
        ----------
        model : statsmodels RegressionResults or LogModelAdapter
            Regression fitted on log(response_name).
        data : pd.DataFrame
            Data the model was fitted on, including the original-scale response.
        response_name : str
            Column of the original-scale response in data.

        Returns
        -------
        self : object
        """
        self._validate_params()
        adapter = as_log_model(model)
        data = _as_frame(data, 'data')

        y = adapter.response_values(data, response_name)
        residual_df = validate_residual_df(adapter.residual_df)
        factors = estimate_correction(y, adapter.fitted_log, adapter.residual,
                                      method=self.method)

        self.adapter_ = adapter
        self.data_ = data
        self.response_name_ = response_name
        self.y_ = y
        self.factors_ = factors
        self.alpha_hat_ = factors.alpha_hat
        self.alpha_tilde_ = factors.alpha_tilde
        self.alpha_ = factors.applied
        self.residual_df_ = residual_df
        self.n_obs_ = len(y)
        return self

    def retransform(self, new_data=None):
        """
        Original-scale predictions with intervals and diagnostics.

        Parameters
        ----------
        new_data : pd.DataFrame, optional
            Covariate rows to predict. If None, predicts the estimation sample.
            The correction factor always comes from the estimation sample.

        Returns
        -------
        RetransformResult
            Prediction table, correction factors and, for in-sample runs,
            diagnostics (None for new data).
        """
        check_is_fitted(self)
        self._validate_params()
        t_crit = t_critical(self.confidence_level, self.residual_df_)

        adapter = self.adapter_
        in_sample = new_data is None
        if in_sample:
            fitted_log, se_log = adapter.fitted_log, adapter.se_log
            index = adapter.used_index if adapter.used_index is not None else pd.RangeIndex(self.n_obs_)
            real = self.y_
            residual = adapter.residual
        else:
            new_data = _as_frame(new_data, 'new_data')
            fitted_log, se_log, index = adapter.predict_new(
                new_data, self.data_, self.response_name_
            )
            real = np.full(len(fitted_log), np.nan)
            residual = np.full(len(fitted_log), np.nan)

        y_hat, lower, upper = retransform_interval(fitted_log, se_log, self.alpha_, t_crit)
        naive = np.exp(fitted_log)

        table = pd.DataFrame({
            REAL: real,
            CORRECTED: y_hat,
            CI_LOWER: lower,
            CI_UPPER: upper,
            LOG_FITTED: fitted_log,
            LOG_SE: se_log,
            NAIVE: naive,
        }, index=index)
        if self.full:
            table[RESIDUAL] = residual
            table[SMEARING] = self.alpha_hat_ * naive

        diagnostics = None
        if in_sample:
            diagnostics = compute_diagnostics(
                real, naive, y_hat, self.factors_,
                residual_df=self.residual_df_,
                confidence_level=self.confidence_level,
                t_critical=t_crit,
            )

        return RetransformResult(predictions=table, factors=self.factors_,
                                 diagnostics=diagnostics)

    def predict(self, new_data=None):
        """
        Original-scale prediction table.

        Parameters
        ----------
        new_data : pd.DataFrame, optional
            Covariate rows to predict. If None, predicts the estimation sample.

        Returns
        -------
        pd.DataFrame
        """
        return self.retransform(new_data).predictions


def predict_level(model, data, response_name, new_data=None, confidence_level=0.95,
                  method='wooldridge', full=False, verbose=False):
    """
    Corrected original-scale predictions for a log(y) regression.

    Convenience wrapper around LogRetransformer. Each call is independent.

    Parameters
    ----------
    model : statsmodels RegressionResults or LogModelAdapter
        Regression fitted on log(response_name).
    data : pd.DataFrame
        Data the model was fitted on.
    response_name : str
        Original-scale response column in data.
    new_data : pd.DataFrame, optional
        Covariate rows to predict instead of the estimation sample.
    confidence_level : float, default=0.95
        Confidence level of the intervals.
    method : {'wooldridge', 'smearing'}, default='wooldridge'
        Correction applied to predictions.
    full : bool, default=False
        Add residuals and smearing-corrected predictions to the table.
    verbose : bool, default=False
        Print the diagnostic summary for in-sample runs.

    Returns
    -------
    RetransformResult

    Raises
    ------
    AlignmentError
        Response column or new_data covariates missing, or rows misaligned.
    DegenerateFitError
        Constant naive predictions or no residual degrees of freedom.
    InvalidConfidenceLevel
        confidence_level outside (0, 1).

    Examples
    --------
    >>> result = predict_level(res, hprice2, 'price', verbose=True)
    >>> result.predictions.head()
    >>> result.diagnostics.r2_original
    """
    retransformer = LogRetransformer(method=method, confidence_level=confidence_level, full=full)
    result = retransformer.fit(model, data, response_name).retransform(new_data)
    if verbose and result.diagnostics is not None:
        result.diagnostics.print_summary()
    return result
