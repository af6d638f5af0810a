"""
Diagnostics module for log-level retransformation.

Provides:
- Correction factor and diagnostic data classes
- Original-scale R2 (squared correlation)
- Console summary report
- Prediction plots
"""

# Data classes
from .dataclasses import (
    CorrectionFactors,
    RetransformDiagnostics,
    RetransformResult,
)

# Core diagnostics
from .core import (
    original_scale_r2,
    compute_diagnostics,
)

# Reporting
from .reporting import (
    format_diagnostics,
    print_diagnostics,
    parse_report,
)

# Plotting
from .plotting import plot_predictions

__all__ = [
    # Data classes
    'CorrectionFactors',
    'RetransformDiagnostics',
    'RetransformResult',
    # Core
    'original_scale_r2',
    'compute_diagnostics',
    # Reporting
    'format_diagnostics',
    'print_diagnostics',
    'parse_report',
    # Plotting
    'plot_predictions',
]
