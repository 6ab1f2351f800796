"""Locate Franck-Hertz current maxima in a voltage sweep.

Two strategies are available and selected by the policy object passed to
:func:`detect_peaks`:

- ``WindowPeakPolicy``: sliding-window comparison against neighbouring
  currents with a noise floor, optionally adaptive in window size, relaxed by
  a tolerance, and backed by a best-effort fallback pass for sparse sweeps.
- ``DerivativePeakPolicy``: Gaussian smoothing followed by a sign change of
  the first derivative, refined on the raw signal and filtered by
  half-maximum width.

Both return peaks ordered by sample index; the rank used by the fitter is the
position in that list.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np

from .data_processing import samples_to_arrays
from .schema import Peak, Sample

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 5
DEFAULT_NOISE_FRACTION = 0.1
DEFAULT_TOLERANCE = 0.05
DEFAULT_FALLBACK_NOISE_FRACTION = 0.05
DEFAULT_SIGMA = 2.0
DEFAULT_MIN_WIDTH = 3

ADAPTIVE_WINDOW_DIVISOR = 20
ADAPTIVE_WINDOW_MIN = 3
ADAPTIVE_WINDOW_MAX = 10


@dataclass(frozen=True)
class WindowPeakPolicy:
    """Configuration for sliding-window peak detection.

    Attributes:
        window_size: Half-width ``w`` of the comparison window. Ignored when
            ``adaptive`` is set.
        adaptive: Use ``clamp(floor(N / 20), 3, 10)`` as the window size.
        relaxed: Accept window neighbours up to ``tolerance`` above the
            candidate, provided the candidate is an immediate local maximum.
        tolerance: Fractional tolerance for the relaxed comparison.
        noise_fraction: Candidates must exceed this fraction of the global
            maximum current.
        fallback: Run an immediate-neighbour pass when the primary pass finds
            fewer than two peaks.
        fallback_noise_fraction: Noise floor used by the fallback pass.
        fallback_max_peaks: Number of leading fallback candidates returned.
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    adaptive: bool = False
    relaxed: bool = False
    tolerance: float = DEFAULT_TOLERANCE
    noise_fraction: float = DEFAULT_NOISE_FRACTION
    fallback: bool = False
    fallback_noise_fraction: float = DEFAULT_FALLBACK_NOISE_FRACTION
    fallback_max_peaks: int = 2

    name = "window"

    def __post_init__(self) -> None:
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")

    @classmethod
    def fixed(cls, window_size: int = DEFAULT_WINDOW_SIZE) -> "WindowPeakPolicy":
        """Strict comparison over a fixed window with a 10% noise floor."""
        return cls(window_size=window_size)

    @classmethod
    def adaptive_relaxed(cls) -> "WindowPeakPolicy":
        """Adaptive window, 5% tolerance and noise floor, fallback enabled."""
        return cls(adaptive=True, relaxed=True, noise_fraction=0.05, fallback=True)

    def resolve_window(self, n_samples: int) -> int:
        if not self.adaptive:
            return int(self.window_size)
        w = n_samples // ADAPTIVE_WINDOW_DIVISOR
        return int(min(max(w, ADAPTIVE_WINDOW_MIN), ADAPTIVE_WINDOW_MAX))


@dataclass(frozen=True)
class DerivativePeakPolicy:
    """Configuration for smoothed-derivative peak detection.

    Attributes:
        sigma: Gaussian kernel standard deviation in samples.
        noise_fraction: Candidates must exceed this fraction of the global
            maximum current.
        min_width: Minimum half-maximum width in samples, peak included.
    """

    sigma: float = DEFAULT_SIGMA
    noise_fraction: float = DEFAULT_NOISE_FRACTION
    min_width: int = DEFAULT_MIN_WIDTH

    name = "derivative"


PeakPolicy = Union[WindowPeakPolicy, DerivativePeakPolicy]


def detect_peaks(
    samples: Sequence[Sample], policy: PeakPolicy | None = None
) -> List[Peak]:
    """Detect current maxima with the strategy named by ``policy``.

    Args:
        samples (Sequence[Sample]): Parsed sweep in input order.
        policy (WindowPeakPolicy | DerivativePeakPolicy, optional): Detection
            strategy and thresholds. Defaults to ``WindowPeakPolicy.fixed()``.

    Returns:
        list[Peak]: Peaks ordered by increasing sample index. Empty for flat,
        monotonic or too-short sweeps.

    Raises:
        TypeError: If ``policy`` is not a known policy type.
    """
    if policy is None:
        policy = WindowPeakPolicy.fixed()

    if isinstance(policy, WindowPeakPolicy):
        peaks = _window_peaks(samples, policy)
    elif isinstance(policy, DerivativePeakPolicy):
        peaks = _derivative_peaks(samples, policy)
    else:
        raise TypeError(f"Unsupported peak policy: {type(policy).__name__}")

    logger.info("Detected %d peaks with %s strategy", len(peaks), policy.name)
    return peaks


# ----------------------------
# Sliding window
# ----------------------------


def _noise_floor(current: np.ndarray, fraction: float) -> float:
    return float(fraction) * float(np.max(current))


def _strict_window_max(current: np.ndarray, i: int, w: int) -> bool:
    left = current[i - w : i]
    right = current[i + 1 : i + w + 1]
    return bool(np.all(current[i] > left) and np.all(current[i] > right))


def _relaxed_window_max(current: np.ndarray, i: int, w: int, tolerance: float) -> bool:
    if not (current[i] >= current[i - 1] and current[i] > current[i + 1]):
        return False
    ceiling = current[i] * (1.0 + tolerance)
    window = np.concatenate((current[i - w : i], current[i + 1 : i + w + 1]))
    return bool(np.all(window <= ceiling))


def _window_peaks(samples: Sequence[Sample], policy: WindowPeakPolicy) -> List[Peak]:
    voltage, current = samples_to_arrays(samples)
    n = len(current)
    if n == 0 or float(np.max(current)) <= 0:
        return []

    w = policy.resolve_window(n)
    floor = _noise_floor(current, policy.noise_fraction)

    peaks: List[Peak] = []
    # Indices closer than w to either end have an incomplete window.
    for i in range(w, n - w):
        if policy.relaxed:
            is_peak = _relaxed_window_max(current, i, w, policy.tolerance)
        else:
            is_peak = _strict_window_max(current, i, w)
        if is_peak and current[i] > floor:
            peaks.append(Peak(float(voltage[i]), float(current[i]), i))

    if len(peaks) >= 2 or not policy.fallback:
        return peaks

    fallback = _neighbour_peaks(voltage, current, policy.fallback_noise_fraction)
    fallback = fallback[: policy.fallback_max_peaks]
    logger.warning(
        "Window pass (w=%d) found %d peaks; fallback pass returned %d",
        w,
        len(peaks),
        len(fallback),
    )
    return fallback if len(fallback) > len(peaks) else peaks


def _neighbour_peaks(
    voltage: np.ndarray, current: np.ndarray, noise_fraction: float
) -> List[Peak]:
    floor = _noise_floor(current, noise_fraction)
    out = []
    for i in range(1, len(current) - 1):
        if current[i] > current[i - 1] and current[i] > current[i + 1] and current[i] > floor:
            out.append(Peak(float(voltage[i]), float(current[i]), i))
    return out


# ----------------------------
# Smoothing + derivative
# ----------------------------


def gaussian_kernel(sigma: float) -> np.ndarray:
    """Return normalized weights ``exp(-i^2 / (2 sigma^2))`` for ``|i| <= ceil(3 sigma)``."""
    if sigma <= 0:
        raise ValueError(f"sigma must be > 0, got {sigma!r}")
    radius = int(math.ceil(3.0 * sigma))
    offsets = np.arange(-radius, radius + 1, dtype=float)
    weights = np.exp(-(offsets**2) / (2.0 * sigma**2))
    return weights / np.sum(weights)


def gaussian_smooth(values: np.ndarray, sigma: float) -> np.ndarray:
    """Convolve ``values`` with a Gaussian kernel.

    Near the ends the kernel is truncated and its remaining weights are
    renormalized, so a constant signal stays constant.
    """
    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return values.copy()
    kernel = gaussian_kernel(sigma)
    radius = len(kernel) // 2
    n = len(values)
    # Slice the full convolution so output length matches input shorter than the kernel.
    num = np.convolve(values, kernel, mode="full")[radius : radius + n]
    norm = np.convolve(np.ones(n), kernel, mode="full")[radius : radius + n]
    return num / norm


def centered_derivative(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Centered first difference ``dy/dx``; zero where ``x`` does not change."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(y) < 2:
        return np.zeros_like(y)
    dy = np.gradient(y)
    dx = np.gradient(x)
    return np.divide(dy, dx, out=np.zeros_like(dy), where=dx != 0)


def _climb(current: np.ndarray, i: int) -> int:
    n = len(current)
    while i + 1 < n and current[i + 1] > current[i]:
        i += 1
    while i - 1 >= 0 and current[i - 1] > current[i]:
        i -= 1
    return i


def half_max_width(current: np.ndarray, i: int) -> int:
    """Count the peak plus the consecutive samples on each side above half its current."""
    half = 0.5 * current[i]
    left = 0
    j = i - 1
    while j >= 0 and current[j] > half:
        left += 1
        j -= 1
    right = 0
    j = i + 1
    while j < len(current) and current[j] > half:
        right += 1
        j += 1
    return 1 + left + right


def _derivative_peaks(
    samples: Sequence[Sample], policy: DerivativePeakPolicy
) -> List[Peak]:
    voltage, current = samples_to_arrays(samples)
    if len(current) < 3 or float(np.max(current)) <= 0:
        return []
    # Rounding in the smoother can put sign flips on a constant signal.
    if float(np.ptp(current)) == 0.0:
        return []

    smoothed = gaussian_smooth(current, policy.sigma)
    # Orient the slope along the sample index so descending sweeps behave the same.
    slope = centered_derivative(voltage, smoothed) * np.sign(np.gradient(voltage))
    floor = _noise_floor(current, policy.noise_fraction)

    crossings = np.flatnonzero((slope[:-1] > 0) & (slope[1:] <= 0))

    accepted = {}
    for k in crossings:
        idx = _climb(current, int(k))
        if idx in accepted or current[idx] <= floor:
            continue
        width = half_max_width(current, idx)
        if width < policy.min_width:
            logger.debug("Rejected candidate at index %d: width %d", idx, width)
            continue
        accepted[idx] = Peak(float(voltage[idx]), float(current[idx]), idx, width)

    return [accepted[i] for i in sorted(accepted)]
