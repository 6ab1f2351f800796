"""Fit peak voltages against peak rank by ordinary least squares.

The fitted line ``U_n = a + n * ΔU`` gives the first excitation potential as
its slope.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence, Tuple

import numpy as np

from ..errors import InsufficientPeaksError
from ..schema import FitResult, Peak

logger = logging.getLogger(__name__)

MIN_FIT_PEAKS = 2


def peak_ranks(n: int) -> np.ndarray:
    """Return the 1-based ranks ``1..n`` as floats."""
    return np.arange(1, int(n) + 1, dtype=float)


def rank_voltage_arrays(peaks: Sequence[Peak]) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(rank, voltage)`` arrays for an index-ordered peak sequence."""
    voltage = np.array([p.voltage for p in peaks], dtype=float)
    return peak_ranks(len(voltage)), voltage


def linear_fit(peaks: Sequence[Peak]) -> FitResult:
    """Regress peak voltage on peak rank.

    Args:
        peaks (Sequence[Peak]): Peaks ordered by sample index; the ``i``-th
            peak has rank ``i + 1``.

    Returns:
        FitResult: Slope (V per rank, i.e. ΔU), intercept (V), ``r_squared``
        and the number of fitted peaks.

    Raises:
        InsufficientPeaksError: If fewer than two peaks are given.

    Note:
        The closed-form sums are used directly::

            slope     = (n Σxy - Σx Σy) / (n Σx² - (Σx)²)
            intercept = (Σy - slope Σx) / n

        The denominator is positive for any ``n >= 2`` because the ranks are
        distinct. When every peak voltage is identical ``SStot`` is zero and
        ``r_squared`` is reported as NaN.
    """
    n = len(peaks)
    if n < MIN_FIT_PEAKS:
        raise InsufficientPeaksError(n, required=MIN_FIT_PEAKS)

    x, y = rank_voltage_arrays(peaks)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    yhat = slope * x + intercept
    ss_res = float(np.sum((y - yhat) ** 2))
    ss_tot = float(np.sum((y - sum_y / n) ** 2))
    if ss_tot > 0:
        r2 = 1.0 - ss_res / ss_tot
    else:
        logger.warning("All %d peak voltages are identical; R^2 is undefined", n)
        r2 = math.nan

    return FitResult(
        slope=float(slope), intercept=float(intercept), r_squared=float(r2), n=n
    )


def fit_residuals(peaks: Sequence[Peak], fit: FitResult) -> np.ndarray:
    """Return ``U_i - (slope * rank_i + intercept)`` for each peak (V)."""
    x, y = rank_voltage_arrays(peaks)
    return y - (fit.slope * x + fit.intercept)
