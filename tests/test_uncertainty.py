import math

import pytest

from hertz.errors import DegenerateUncertaintyError, InsufficientPeaksError
from hertz.schema import Peak
from hertz.stats.regression import linear_fit
from hertz.stats.uncertainty import (
    REFERENCE_T_VALUE,
    critical_t_value,
    estimate_uncertainty,
    format_value_with_uncertainty,
    round_value_to_uncertainty,
)

from test_regression import exact_peaks, worked_example_peaks


def test_exact_fit_has_zero_standard_error():
    peaks = exact_peaks()
    fit = linear_fit(peaks)
    unc = estimate_uncertainty(peaks, fit)
    assert unc.slope_std_error == pytest.approx(0.0, abs=1e-9)
    assert unc.intercept_std_error == pytest.approx(0.0, abs=1e-9)
    assert unc.confidence_interval.lower == pytest.approx(fit.slope, abs=1e-9)
    assert unc.confidence_interval.upper == pytest.approx(fit.slope, abs=1e-9)
    assert unc.dof == 4


def test_worked_example_with_reference_t_value():
    peaks = worked_example_peaks()
    fit = linear_fit(peaks)
    unc = estimate_uncertainty(peaks, fit, t_value=REFERENCE_T_VALUE)

    s = math.sqrt(0.004 / 3)
    assert unc.residual_std == pytest.approx(s, rel=1e-6)
    assert unc.slope_std_error == pytest.approx(s / math.sqrt(10), rel=1e-6)
    assert unc.intercept_std_error == pytest.approx(s * math.sqrt(55 / 50), rel=1e-6)

    half = 2.776 * s / math.sqrt(10)
    assert unc.confidence_interval.t_value == 2.776
    assert unc.confidence_interval.lower == pytest.approx(12.38 - half, rel=1e-9)
    assert unc.confidence_interval.upper == pytest.approx(12.38 + half, rel=1e-9)
    assert unc.confidence_interval.half_width == pytest.approx(half, rel=1e-9)


def test_default_critical_value_follows_degrees_of_freedom():
    peaks = worked_example_peaks()
    unc = estimate_uncertainty(peaks, linear_fit(peaks))
    assert unc.dof == 3
    assert unc.confidence_interval.t_value == pytest.approx(3.182, abs=1e-3)
    assert unc.confidence_interval.level == 0.95


def test_critical_t_value_table():
    assert critical_t_value(4) == pytest.approx(REFERENCE_T_VALUE, abs=1e-3)
    assert critical_t_value(1) == pytest.approx(12.706, abs=1e-3)
    assert critical_t_value(10, confidence=0.99) == pytest.approx(3.169, abs=1e-3)
    with pytest.raises(ValueError):
        critical_t_value(0)
    with pytest.raises(ValueError):
        critical_t_value(3, confidence=1.0)


def test_two_peaks_are_degenerate():
    peaks = exact_peaks(n=2)
    fit = linear_fit(peaks)
    with pytest.raises(DegenerateUncertaintyError) as excinfo:
        estimate_uncertainty(peaks, fit)
    assert excinfo.value.peak_count == 2


def test_fewer_than_two_peaks_rejected():
    fit = linear_fit(exact_peaks(n=3))
    with pytest.raises(InsufficientPeaksError):
        estimate_uncertainty(exact_peaks(n=1), fit)


def test_round_value_to_uncertainty():
    assert round_value_to_uncertainty(12.3812, 0.0116) == (12.381, 0.012)
    assert round_value_to_uncertainty(4.5678, 0.03) == (4.57, 0.03)
    assert round_value_to_uncertainty(4.5678, 0.0) == (4.5678, 0.0)


def test_format_value_with_uncertainty():
    assert format_value_with_uncertainty(12.3812, 0.0116, "V") == "12.381 ± 0.012 V"
    assert format_value_with_uncertainty(11.6, 0.4, "V") == "11.6 ± 0.4 V"
    assert format_value_with_uncertainty(123.0, 40.0) == "120 ± 40"
