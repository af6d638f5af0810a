"""
Utility functions for log-level retransformation.

Provides:
- Synthetic log-linear data generation
- Theoretical retransformation bias under normal errors
"""

import numpy as np
import pandas as pd


def lognormal_correction(sigma):
    """
    Theoretical correction factor exp(sigma^2 / 2) for normal log errors.

    If log(y) = xb + u with u ~ N(0, sigma^2), then
    E[y|x] = exp(sigma^2 / 2) * exp(xb).

    Parameters
    ----------
    sigma : float
        Standard deviation of the log-scale error.

    Returns
    -------
    alpha : float

    Examples
    --------
    >>> lognormal_correction(0.5)  # ≈ 1.1331
    """
    return float(np.exp(sigma ** 2 / 2.0))


def generate_log_linear_data(
    n_samples=100,
    coef=(0.5, -0.3),
    intercept=2.0,
    sigma=0.5,
    missing_frac=0.0,
    response_name='y',
    random_state=None
):
    """
    Generate data from a log-linear model with multiplicative error.

    Model: y = exp(intercept + X @ coef + u), u ~ N(0, sigma^2)

    Parameters
    ----------
    n_samples : int, default=100
        Number of rows.

    coef : sequence of float, default=(0.5, -0.3)
        Slopes for covariates x1, x2, ...

    intercept : float, default=2.0
        Intercept on the log scale.

    sigma : float, default=0.5
        Standard deviation of the log-scale error. Larger values produce more
        right-skewed y and a larger retransformation bias.

    missing_frac : float, default=0.0
        Fraction of rows whose first covariate is set to NaN, to exercise
        row dropping by the fitting library.

    response_name : str, default='y'
        Name of the response column.

    random_state : int or None, default=None
        Random seed for reproducibility.

    Returns
    -------
    data : pd.DataFrame
        Columns x1..xk and the response, with a RangeIndex.

    Examples
    --------
    >>> data = generate_log_linear_data(200, sigma=0.8, random_state=42)
    >>> data['y'].skew() > 0
    True
    """
    rng = np.random.default_rng(random_state)
    coef = np.asarray(coef, dtype=float)
    n_features = len(coef)

    X = rng.normal(loc=0.0, scale=1.0, size=(n_samples, n_features))
    u = rng.normal(loc=0.0, scale=sigma, size=n_samples)
    y = np.exp(intercept + X @ coef + u)

    data = pd.DataFrame(X, columns=[f'x{i + 1}' for i in range(n_features)])
    data[response_name] = y

    n_missing = int(round(missing_frac * n_samples))
    if n_missing > 0:
        rows = rng.choice(n_samples, size=n_missing, replace=False)
        data.loc[rows, 'x1'] = np.nan

    return data
