"""
Exception hierarchy for log-scale retransformation.

All errors derive from ValueError so callers already catching the
scikit-learn style ``ValueError`` keep working.
"""


class RetransformError(ValueError):
    """Base class for retransformation errors."""


class AlignmentError(RetransformError):
    """Columns or row labels of model, data and new data cannot be reconciled."""


class DegenerateFitError(RetransformError):
    """The correction factor or interval cannot be estimated from the sample."""


class InvalidConfidenceLevel(RetransformError):
    """Confidence level outside the open interval (0, 1)."""
