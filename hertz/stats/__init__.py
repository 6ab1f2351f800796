"""
Statistical utilities for the excitation-potential fit.

Modules:
    regression:
        Ordinary least-squares fit of peak voltage against peak rank.

    uncertainty:
        Residual standard deviation, slope/intercept standard errors,
        Student-t confidence intervals and value ± uncertainty rounding.

This subpackage depends only on the value types in ``hertz.schema`` and the
error taxonomy; it has no parsing or plotting logic.
"""

from .regression import fit_residuals, linear_fit, peak_ranks
from .uncertainty import (
    REFERENCE_T_VALUE,
    critical_t_value,
    estimate_uncertainty,
    format_value_with_uncertainty,
    round_value_to_uncertainty,
)

__all__ = [
    "linear_fit",
    "fit_residuals",
    "peak_ranks",
    "REFERENCE_T_VALUE",
    "critical_t_value",
    "estimate_uncertainty",
    "format_value_with_uncertainty",
    "round_value_to_uncertainty",
]
