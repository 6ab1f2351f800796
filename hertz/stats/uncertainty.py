"""
Residual statistics, standard errors and confidence intervals for the rank fit.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence, Tuple

import numpy as np
from scipy.stats import t as student_t

from ..errors import DegenerateUncertaintyError, InsufficientPeaksError
from ..schema import ConfidenceInterval, FitResult, Peak, Uncertainty
from .regression import fit_residuals, peak_ranks

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.95

# Two-sided 95% value for 4 degrees of freedom. Kept for reproducing
# results computed with a constant critical value.
REFERENCE_T_VALUE = 2.776


def critical_t_value(dof: int, confidence: float = DEFAULT_CONFIDENCE) -> float:
    """
    Two-sided Student-t critical value.

    dof: residual degrees of freedom (n - 2 for a straight line).
    confidence: coverage of the interval, e.g. 0.95.
    """
    if dof < 1:
        raise ValueError(f"dof must be >= 1, got {dof}")
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    return float(student_t.ppf(0.5 + 0.5 * confidence, dof))


def estimate_uncertainty(
    peaks: Sequence[Peak],
    fit: FitResult,
    confidence: float = DEFAULT_CONFIDENCE,
    t_value: float | None = None,
) -> Uncertainty:
    """Propagate fit residuals into slope/intercept standard errors.

    Args:
        peaks (Sequence[Peak]): The peaks that produced ``fit``, in rank order.
        fit (FitResult): Output of :func:`hertz.stats.regression.linear_fit`.
        confidence (float, optional): Interval coverage. Defaults to ``0.95``.
        t_value (float, optional): Fixed critical value. When omitted the
            Student-t quantile for ``n - 2`` degrees of freedom is used.

    Returns:
        Uncertainty: Standard errors, residual standard deviation, residuals
        and the slope confidence interval ``slope ∓ t * se_slope``.

    Raises:
        InsufficientPeaksError: If fewer than two peaks are given.
        DegenerateUncertaintyError: If exactly two peaks are given; the line
            passes through both and no residual degrees of freedom remain.

    Note:
        With ``r = 1..n``::

            s        = sqrt(Σresidual² / (n - 2))
            Sxx      = Σr² - (Σr)² / n
            se_slope = s / sqrt(Sxx)
            se_icpt  = s * sqrt(Σr² / (n Sxx))
    """
    n = len(peaks)
    if n < 2:
        raise InsufficientPeaksError(n)
    if n == 2:
        raise DegenerateUncertaintyError(n)

    dof = n - 2
    residuals = fit_residuals(peaks, fit)
    s = math.sqrt(float(np.sum(residuals**2)) / dof)

    x = peak_ranks(n)
    sum_x = float(np.sum(x))
    sum_x2 = float(np.sum(x * x))
    sxx = sum_x2 - sum_x**2 / n

    se_slope = s / math.sqrt(sxx)
    se_intercept = s * math.sqrt(sum_x2 / (n * sxx))

    if t_value is None:
        t_crit = critical_t_value(dof, confidence)
    else:
        t_crit = float(t_value)
        logger.debug("Using fixed critical value t=%.4g for dof=%d", t_crit, dof)

    ci = ConfidenceInterval(
        lower=fit.slope - t_crit * se_slope,
        upper=fit.slope + t_crit * se_slope,
        level=float(confidence),
        t_value=t_crit,
    )
    return Uncertainty(
        slope_std_error=float(se_slope),
        intercept_std_error=float(se_intercept),
        confidence_interval=ci,
        residual_std=float(s),
        residuals=tuple(float(r) for r in residuals),
        dof=dof,
    )


def _round_uncertainty(u: float) -> Tuple[float, int]:
    if u <= 0 or not math.isfinite(u):
        return u, 0

    u = abs(float(u))
    exponent = math.floor(math.log10(u))
    leading = u / (10**exponent)

    sig_figs = 2 if 1.0 <= leading < 2.0 else 1
    ndigits = sig_figs - 1 - exponent

    ru = round(u, ndigits)

    if ru == 0:
        ndigits = sig_figs - exponent
        ru = round(u, ndigits)

    return float(ru), int(ndigits)


def round_value_to_uncertainty(value: float, uncertainty: float) -> Tuple[float, float]:
    """
    Round an uncertainty to 1 s.f. (2 if its leading digit is 1) and the
    value to the same decimal place.
    """
    ru, ndigits = _round_uncertainty(abs(float(uncertainty)))
    if not math.isfinite(ru) or ru == 0:
        return float(value), float(uncertainty)
    return float(round(float(value), ndigits)), float(ru)


def format_value_with_uncertainty(
    value: float, uncertainty: float, unit: str = ""
) -> str:
    ru, ndigits = _round_uncertainty(abs(float(uncertainty)))
    if ru == 0 or not math.isfinite(ru):
        v = f"{value:.6g}"
        u = f"{uncertainty:.6g}"
        return f"{v} ± {u} {unit}".strip()

    places = max(ndigits, 0)
    v_str = f"{round(float(value), ndigits):.{places}f}"
    u_str = f"{ru:.{places}f}"
    return f"{v_str} ± {u_str} {unit}".strip()
