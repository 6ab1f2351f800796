"""
Franck-Hertz excitation potential analysis.

A sweep of accelerating voltage U_G2K against collector current I is analyzed
to estimate the first excitation potential ΔU:

- Parse the ``| U | I |`` table rows into samples.
- Detect current maxima with the configured peak policy.
- Fit U_n = a + n ΔU by ordinary least squares over the peak rank n.
- Propagate the fit residuals into standard errors and a Student-t
  confidence interval for ΔU.

Each run is a pure function of its input text and options. The only shared
state is :class:`ResultSlot`, which keeps the last successful result for
rendering and refuses overlapping runs.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from .data_processing import load_measurement_text, parse_measurement_table
from .errors import DegenerateUncertaintyError, RunInProgressError
from .peak_detection import PeakPolicy, WindowPeakPolicy, detect_peaks
from .schema import AnalysisResult
from .stats.regression import linear_fit
from .stats.uncertainty import DEFAULT_CONFIDENCE, estimate_uncertainty

logger = logging.getLogger(__name__)


def analyze_sweep(
    text: str,
    policy: PeakPolicy | None = None,
    confidence: float = DEFAULT_CONFIDENCE,
    t_value: float | None = None,
    require_uncertainty: bool = True,
) -> AnalysisResult:
    """Run parse → detect → fit → uncertainty on one text blob.

    Args:
        text (str): Measurement table text.
        policy (PeakPolicy, optional): Peak detection strategy. Defaults to
            ``WindowPeakPolicy.fixed()``.
        confidence (float, optional): Slope interval coverage.
        t_value (float, optional): Fixed critical value instead of the
            Student-t quantile for ``n - 2`` degrees of freedom.
        require_uncertainty (bool, optional): When ``False``, a two-peak fit
            is returned with ``uncertainty=None`` instead of raising
            :class:`DegenerateUncertaintyError`.

    Returns:
        AnalysisResult: Samples, peaks, fit and uncertainty of this run.

    Raises:
        EmptyInputError: No table rows matched.
        InsufficientPeaksError: Fewer than two peaks were detected.
        DegenerateUncertaintyError: Exactly two peaks and
            ``require_uncertainty`` is set.
    """
    if policy is None:
        policy = WindowPeakPolicy.fixed()

    samples = parse_measurement_table(text)
    peaks = detect_peaks(samples, policy)
    fit = linear_fit(peaks)

    try:
        uncertainty = estimate_uncertainty(
            peaks, fit, confidence=confidence, t_value=t_value
        )
    except DegenerateUncertaintyError:
        if require_uncertainty:
            raise
        logger.warning("Only %d peaks; uncertainty not available", len(peaks))
        uncertainty = None

    logger.info(
        "ΔU = %.4f V from %d peaks (R^2 = %.5f)", fit.slope, fit.n, fit.r_squared
    )
    return AnalysisResult(
        samples=tuple(samples),
        peaks=tuple(peaks),
        fit=fit,
        uncertainty=uncertainty,
        detector=policy.name,
    )


def analyze_file(filepath: str, **kwargs) -> AnalysisResult:
    """Read ``filepath`` as UTF-8 and pass its text to :func:`analyze_sweep`."""
    logger.info("Processing %s", filepath)
    return analyze_sweep(load_measurement_text(filepath), **kwargs)


class ResultSlot:
    """Holds the most recent successful :class:`AnalysisResult`.

    Runs through :meth:`run` are serialized: a run submitted while another is
    executing raises :class:`RunInProgressError` instead of waiting. The
    stored result is replaced only after a run completes; a failed run keeps
    the previous one.
    """

    def __init__(self) -> None:
        self._run_lock = threading.Lock()
        self._result: Optional[AnalysisResult] = None

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def run(self, text: str, **kwargs) -> AnalysisResult:
        if not self._run_lock.acquire(blocking=False):
            raise RunInProgressError("An analysis run is already in progress.")
        try:
            start = time.time()
            result = analyze_sweep(text, **kwargs)
            self._result = result
            logger.info("Run completed in %.3f seconds", time.time() - start)
            return result
        finally:
            self._run_lock.release()

    def current(self) -> Optional[AnalysisResult]:
        return self._result

    def clear(self) -> None:
        self._result = None


CURRENT_RESULT = ResultSlot()
