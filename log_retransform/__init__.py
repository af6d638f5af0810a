"""
Log-Level Retransformation
==========================

Mean-consistent predictions from regressions estimated on log(y).

Exponentiating the fitted values of a log(y) regression estimates the
conditional median of y and systematically understates its mean. This
package estimates the retransformation correction factor (Wooldridge's
regression-through-the-origin estimator, and Duan's smearing estimator) on
the original sample and produces corrected predictions, asymmetric
original-scale confidence intervals and an original-scale R2.

Main Classes
------------
LogRetransformer : Estimator computing correction factors and predictions
ArrayAdapter : Plug in fitted values from any regression library

Quick Start
-----------
>>> import numpy as np
>>> import statsmodels.formula.api as smf
>>> from log_retransform import predict_level
>>>
>>> res = smf.ols('np.log(price) ~ np.log(nox) + rooms', data=hprice2).fit()
>>> result = predict_level(res, hprice2, 'price', verbose=True)
>>> result.predictions[['Real', 'Previsto_Wooldridge', 'IC_Inferior', 'IC_Superior']]

References
----------
Wooldridge, J.M. "Introductory Econometrics: A Modern Approach", Section 6.4.
Duan, N. (1983). "Smearing Estimate: A Nonparametric Retransformation Method."
"""

from .core import (
    LogRetransformer,
    predict_level,
    retransform_interval,
    t_critical,
    validate_confidence_level,
)
from .adapters import (
    LogModelAdapter,
    StatsmodelsAdapter,
    ArrayAdapter,
    as_log_model,
)
from .correction import (
    METHODS,
    smearing_factor,
    wooldridge_factor,
    estimate_correction,
)
from .columns import COLUMNS, FULL_COLUMNS
from .diagnostics import (
    CorrectionFactors,
    RetransformDiagnostics,
    RetransformResult,
    original_scale_r2,
    format_diagnostics,
    parse_report,
    plot_predictions,
)
from .exceptions import (
    RetransformError,
    AlignmentError,
    DegenerateFitError,
    InvalidConfidenceLevel,
)
from .utils import (
    generate_log_linear_data,
    lognormal_correction,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    'LogRetransformer',
    'predict_level',
    'retransform_interval',
    't_critical',
    'validate_confidence_level',

    # Adapters
    'LogModelAdapter',
    'StatsmodelsAdapter',
    'ArrayAdapter',
    'as_log_model',

    # Correction factors
    'METHODS',
    'smearing_factor',
    'wooldridge_factor',
    'estimate_correction',

    # Output
    'COLUMNS',
    'FULL_COLUMNS',
    'CorrectionFactors',
    'RetransformDiagnostics',
    'RetransformResult',
    'original_scale_r2',
    'format_diagnostics',
    'parse_report',
    'plot_predictions',

    # Errors
    'RetransformError',
    'AlignmentError',
    'DegenerateFitError',
    'InvalidConfidenceLevel',

    # Utilities
    'generate_log_linear_data',
    'lognormal_correction',
]
