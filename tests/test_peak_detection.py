"""Unit tests for the window and derivative peak strategies."""

import numpy as np
import pytest

from hertz.data_processing import parse_measurement_table
from hertz.peak_detection import (
    DerivativePeakPolicy,
    WindowPeakPolicy,
    centered_derivative,
    detect_peaks,
    gaussian_kernel,
    gaussian_smooth,
    half_max_width,
)
from hertz.schema import Sample


def _samples(current, step=1.0):
    return [Sample(i * step, float(c)) for i, c in enumerate(current)]


@pytest.fixture()
def unimodal():
    i = np.arange(41)
    return _samples(10.0 * np.exp(-((i - 20) ** 2) / 8.0))


@pytest.mark.parametrize(
    "policy", [WindowPeakPolicy.fixed(), DerivativePeakPolicy()], ids=["window", "derivative"]
)
def test_single_sharp_maximum(unimodal, policy):
    peaks = detect_peaks(unimodal, policy)
    assert len(peaks) == 1
    assert peaks[0].index == 20
    assert peaks[0].voltage == 20.0


@pytest.mark.parametrize(
    "policy",
    [WindowPeakPolicy.fixed(), WindowPeakPolicy.adaptive_relaxed(), DerivativePeakPolicy()],
    ids=["fixed", "adaptive_relaxed", "derivative"],
)
def test_monotonic_and_flat_sweeps_have_no_peaks(policy):
    assert detect_peaks(_samples(np.arange(50, dtype=float)), policy) == []
    assert detect_peaks(_samples(np.full(50, 5.0)), policy) == []
    assert detect_peaks(_samples(np.zeros(50)), policy) == []


def test_sequence_shorter_than_window_yields_nothing():
    current = [0, 1, 2, 3, 9, 3, 2, 1, 0, 0]
    assert detect_peaks(_samples(current), WindowPeakPolicy(window_size=5)) == []


def test_noise_floor_rejects_small_maxima():
    current = np.zeros(40)
    current[10] = 0.5
    current[25] = 10.0
    peaks = detect_peaks(_samples(current), WindowPeakPolicy.fixed())
    assert [p.index for p in peaks] == [25]


def test_adaptive_window_size_is_clamped():
    policy = WindowPeakPolicy(adaptive=True)
    assert policy.resolve_window(20) == 3
    assert policy.resolve_window(100) == 5
    assert policy.resolve_window(1000) == 10
    assert WindowPeakPolicy(window_size=7).resolve_window(1000) == 7


def test_relaxed_comparison_accepts_near_equal_neighbour():
    current = np.zeros(25)
    current[9:14] = [5.0, 10.0, 6.0, 10.3, 5.0]
    strict = detect_peaks(_samples(current), WindowPeakPolicy.fixed())
    relaxed = detect_peaks(_samples(current), WindowPeakPolicy(relaxed=True))
    assert [p.index for p in strict] == [12]
    assert [p.index for p in relaxed] == [10, 12]


def test_fallback_returns_leading_neighbour_maxima():
    current = np.ones(30)
    current[9:15] = [3.0, 5.0, 3.0, 4.0, 6.0, 4.0]
    primary = detect_peaks(_samples(current), WindowPeakPolicy.fixed())
    assert [p.index for p in primary] == [13]

    policy = WindowPeakPolicy(fallback=True)
    peaks = detect_peaks(_samples(current), policy)
    assert [p.index for p in peaks] == [10, 13]
    assert all(p.width is None for p in peaks)


def test_fallback_is_capped():
    current = np.ones(30)
    for i in (5, 8, 11, 14):
        current[i] = 4.0
    peaks = detect_peaks(_samples(current), WindowPeakPolicy(window_size=5, fallback=True))
    assert [p.index for p in peaks] == [5, 8]


def test_window_strategy_on_sweep(sweep_text):
    peaks = detect_peaks(parse_measurement_table(sweep_text))
    assert [p.voltage for p in peaks] == [10.0, 15.0, 20.0, 25.0, 30.0, 35.0]
    assert [p.index for p in peaks] == [20, 30, 40, 50, 60, 70]


def test_derivative_strategy_on_sweep_records_width(sweep_text):
    peaks = detect_peaks(parse_measurement_table(sweep_text), DerivativePeakPolicy())
    assert [p.voltage for p in peaks] == [10.0, 15.0, 20.0, 25.0, 30.0, 35.0]
    assert all(p.width is not None and p.width >= 3 for p in peaks)


def test_derivative_strategy_rejects_narrow_spike():
    i = np.arange(80)
    current = 10.0 * np.exp(-((i - 50) ** 2) / 18.0)
    current[20] = 10.0
    peaks = detect_peaks(_samples(current), DerivativePeakPolicy())
    assert len(peaks) == 1
    assert peaks[0].index == 50
    assert peaks[0].width == 7


def test_gaussian_kernel_shape():
    kernel = gaussian_kernel(2.0)
    assert len(kernel) == 13
    assert np.isclose(kernel.sum(), 1.0)
    assert np.argmax(kernel) == 6
    with pytest.raises(ValueError):
        gaussian_kernel(0.0)


def test_gaussian_smooth_preserves_constant():
    out = gaussian_smooth(np.full(20, 3.0), 1.5)
    assert np.allclose(out, 3.0)


def test_gaussian_smooth_keeps_length_of_short_input():
    out = gaussian_smooth(np.full(5, 2.0), 2.0)
    assert out.shape == (5,)
    assert np.allclose(out, 2.0)


@pytest.mark.parametrize("n", [3, 5, 8, 12])
def test_derivative_strategy_on_sweeps_shorter_than_kernel(n):
    samples = [Sample(float(i), 1.0 + (i % 3)) for i in range(n)]
    peaks = detect_peaks(samples, DerivativePeakPolicy())
    assert all(0 <= p.index < n for p in peaks)


def test_derivative_strategy_on_descending_voltage(unimodal):
    reversed_sweep = [Sample(40.0 - s.voltage, s.current) for s in unimodal]
    peaks = detect_peaks(reversed_sweep, DerivativePeakPolicy())
    assert len(peaks) == 1
    assert peaks[0].index == 20
    assert peaks[0].voltage == 20.0


def test_centered_derivative_on_falling_voltage():
    slope = centered_derivative([3.0, 2.0, 1.0], [1.0, 2.0, 3.0])
    assert np.allclose(slope, -1.0)


def test_half_max_width_counts_both_sides():
    current = np.array([0.0, 1.0, 6.0, 10.0, 7.0, 5.0, 0.0])
    assert half_max_width(current, 3) == 3


def test_unknown_policy_type():
    with pytest.raises(TypeError):
        detect_peaks(_samples([1.0, 2.0, 1.0]), policy="window")


def test_window_size_must_be_positive():
    with pytest.raises(ValueError):
        WindowPeakPolicy(window_size=0)
