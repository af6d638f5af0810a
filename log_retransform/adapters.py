"""
Fitted-model adapters.

The correction only needs four things from the regression that produced
the log-scale fit: the fitted log values, their standard errors, the
in-sample residuals and the residual degrees of freedom. Adapters expose
exactly that capability set, plus the labels of the rows the fit actually
used, so that any fitting component (statsmodels OLS/WLS, a robust variant,
a hand-rolled solver) can be plugged in.

Precondition (documented, not checked): the wrapped model was estimated
with ``log(y)`` as its response.
"""

import ast
import re
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from patsy import PatsyError
from sklearn.utils.validation import check_consistent_length, column_or_1d

from .exceptions import AlignmentError

_CONSTANT_NAMES = ('const', 'Intercept')
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _referenced_names(code):
    """
    Data names read by one formula factor.

    Callables and module prefixes (``np``, ``C``, ``I``) are not data;
    ``Q("floor area")`` refers to the quoted column.
    """
    try:
        tree = ast.parse(code, mode='eval')
    except SyntaxError:
        return set(_IDENTIFIER.findall(code))

    not_data = set()
    names = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
            not_data.add(id(node.func))
            if node.func.id == 'Q':
                names.update(arg.value for arg in node.args
                             if isinstance(arg, ast.Constant) and isinstance(arg.value, str))
        elif isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            not_data.add(id(node.value))
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and id(node) not in not_data:
            names.add(node.id)
    return names


def _as_float_array(values, name):
    try:
        return np.asarray(column_or_1d(values), dtype=float)
    except ValueError as e:
        raise AlignmentError(f"{name} must be one-dimensional: {e}") from e


class LogModelAdapter:
    """
    Base class for fitted log-linear model adapters.

    Attributes
    ----------
    fitted_log : ndarray of shape (n_obs,)
        Fitted values of log(y) on the estimation sample.
    se_log : ndarray of shape (n_obs,)
        Standard errors of the fitted log values.
    residual : ndarray of shape (n_obs,)
        In-sample residuals on the log scale.
    residual_df : float
        Residual degrees of freedom of the fit.
    used_index : pandas.Index or None
        Labels of the rows used in estimation. None means the fit used every
        row of the data, in order.
    """

    fitted_log: np.ndarray
    se_log: np.ndarray
    residual: np.ndarray
    residual_df: float
    used_index: Optional[pd.Index] = None

    @property
    def n_obs(self) -> int:
        return len(self.fitted_log)

    def required_columns(self, data: pd.DataFrame, response_name: str) -> List[str]:
        """Covariate columns new data must provide."""
        return []

    def predict_new(self, new_data: pd.DataFrame, data: pd.DataFrame,
                    response_name: str) -> Tuple[np.ndarray, np.ndarray, pd.Index]:
        """Return ``(fitted_log, se_log, index)`` for the rows of new_data."""
        raise NotImplementedError

    def check_new_data(self, new_data, data, response_name):
        missing = [c for c in self.required_columns(data, response_name)
                   if c not in new_data.columns]
        if missing:
            raise AlignmentError(
                f"new_data is missing covariate column(s) required by the model: {missing}"
            )

    def response_values(self, data: pd.DataFrame, response_name: str) -> np.ndarray:
        """
        Original-scale response aligned with the estimation rows.

        Alignment is by row label when the fit reports which rows it used,
        so rows dropped for missing values never shift the response.
        """
        if response_name not in data.columns:
            raise AlignmentError(f"Response column '{response_name}' not found in data")

        if self.used_index is None:
            if len(data) != self.n_obs:
                raise AlignmentError(
                    f"data has {len(data)} rows but the model was fitted on {self.n_obs}; "
                    "provide the row labels used in estimation"
                )
            return data[response_name].to_numpy(dtype=float)

        if not data.index.is_unique:
            raise AlignmentError("data index must be unique to align estimation rows")
        absent = self.used_index.difference(data.index)
        if len(absent) > 0:
            raise AlignmentError(
                f"{len(absent)} estimation row label(s) not found in data, e.g. {list(absent[:5])}"
            )
        return data.loc[self.used_index, response_name].to_numpy(dtype=float)


class StatsmodelsAdapter(LogModelAdapter):
    """
    Adapter for statsmodels regression results (OLS, WLS, GLS).

    Works with both the formula API (``smf.ols('np.log(y) ~ x', data)``)
    and the array API (``sm.OLS(np.log(y), sm.add_constant(X))``).

    Parameters
    ----------
    results : statsmodels RegressionResults
        Fitted results exposing ``get_prediction``, ``resid`` and ``df_resid``.
    """

    def __init__(self, results):
        self.results = results
        prediction = results.get_prediction()
        self.fitted_log = np.asarray(prediction.predicted_mean, dtype=float)
        self.se_log = np.asarray(prediction.se_mean, dtype=float)
        self.residual = np.asarray(results.resid, dtype=float)
        self.residual_df = float(results.df_resid)

        row_labels = getattr(results.model.data, 'row_labels', None)
        self.used_index = pd.Index(row_labels) if row_labels is not None else None
        self.formula = getattr(results.model, 'formula', None)

    @property
    def exog_names(self) -> List[str]:
        return list(self.results.model.exog_names)

    def required_columns(self, data, response_name):
        if self.formula is not None:
            names = set()
            for code in self._factor_codes():
                names.update(_referenced_names(code))
            return [c for c in data.columns if c != response_name and str(c) in names]
        return [n for n in self.exog_names if n not in _CONSTANT_NAMES]

    def _factor_codes(self):
        design_info = getattr(self.results.model.data, 'design_info', None)
        if design_info is not None:
            return [factor.code for factor in design_info.factor_infos
                    if hasattr(factor, 'code')]
        return [str(self.formula).split('~', 1)[-1]]

    def _array_exog(self, new_data):
        covariates = [n for n in self.exog_names if n not in _CONSTANT_NAMES]
        exog = new_data[covariates].copy()
        for position, name in enumerate(self.exog_names):
            if name in _CONSTANT_NAMES:
                exog.insert(position, name, 1.0)
        return exog

    def predict_new(self, new_data, data, response_name):
        self.check_new_data(new_data, data, response_name)
        exog = new_data if self.formula is not None else self._array_exog(new_data)
        try:
            prediction = self.results.get_prediction(exog)
        except PatsyError as e:
            raise AlignmentError(f"new_data cannot be reconciled with the model formula: {e}") from e

        fitted_log = np.asarray(prediction.predicted_mean, dtype=float)
        se_log = np.asarray(prediction.se_mean, dtype=float)
        if len(fitted_log) != len(new_data):
            raise AlignmentError(
                f"Model returned {len(fitted_log)} predictions for {len(new_data)} new rows; "
                "check new_data for missing covariate values"
            )
        return fitted_log, se_log, new_data.index


class ArrayAdapter(LogModelAdapter):
    """
    Adapter built directly from the capability set.

    Use this for fitting components without a statsmodels interface.

    Parameters
    ----------
    fitted_log, se_log, residual : array-like of shape (n_obs,)
        Fitted log values, their standard errors and log-scale residuals.
    residual_df : float
        Residual degrees of freedom.
    used_index : sequence, optional
        Labels of the data rows used in the fit. If omitted the data must have
        exactly n_obs rows, taken in order.
    predict_fn : callable, optional
        ``predict_fn(new_data) -> (fitted_log, se_log)``; required for new-data
        predictions.
    required_columns : sequence of str, optional
        Covariates that new_data must contain.

    Examples
    --------
    >>> adapter = ArrayAdapter(fit, se, resid, residual_df=n - k - 1)
    >>> predict_level(adapter, data, 'price')
    """

    def __init__(self, fitted_log, se_log, residual, residual_df,
                 used_index: Optional[Sequence] = None,
                 predict_fn: Optional[Callable] = None,
                 required_columns: Optional[Sequence[str]] = None):
        self.fitted_log = _as_float_array(fitted_log, 'fitted_log')
        self.se_log = _as_float_array(se_log, 'se_log')
        self.residual = _as_float_array(residual, 'residual')
        try:
            check_consistent_length(self.fitted_log, self.se_log, self.residual)
        except ValueError as e:
            raise AlignmentError(str(e)) from e

        self.residual_df = float(residual_df)
        self.used_index = pd.Index(used_index) if used_index is not None else None
        if self.used_index is not None and len(self.used_index) != self.n_obs:
            raise AlignmentError(
                f"used_index has {len(self.used_index)} labels for {self.n_obs} fitted values"
            )
        self.predict_fn = predict_fn
        self._required_columns = list(required_columns) if required_columns else []

    def required_columns(self, data, response_name):
        return list(self._required_columns)

    def predict_new(self, new_data, data, response_name):
        if self.predict_fn is None:
            raise AlignmentError("Model has no predict_fn; cannot predict on new_data")
        self.check_new_data(new_data, data, response_name)

        fitted_log, se_log = self.predict_fn(new_data)
        fitted_log = _as_float_array(fitted_log, 'fitted_log')
        se_log = _as_float_array(se_log, 'se_log')
        if len(fitted_log) != len(new_data) or len(se_log) != len(new_data):
            raise AlignmentError(
                f"predict_fn returned {len(fitted_log)} fitted values and {len(se_log)} "
                f"standard errors for {len(new_data)} new rows"
            )
        return fitted_log, se_log, new_data.index


def as_log_model(model) -> LogModelAdapter:
    """
    Wrap a fitted model in the matching adapter.

    Parameters
    ----------
    model : LogModelAdapter or statsmodels RegressionResults
        Adapters are returned unchanged.

    Raises
    ------
    TypeError
        If the object does not expose the required capabilities.
    """
    if isinstance(model, LogModelAdapter):
        return model
    if hasattr(model, 'get_prediction') and hasattr(model, 'df_resid'):
        return StatsmodelsAdapter(model)
    raise TypeError(
        f"Unsupported model type {type(model).__name__}: pass statsmodels regression "
        "results or wrap fitted values with ArrayAdapter"
    )
