"""Define the immutable value types passed between pipeline stages."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .units import energy_gap_joules, temperature_equivalent_kelvin


@dataclass(frozen=True)
class Sample:
    """One (voltage, current) reading in input line order."""

    voltage: float
    current: float


@dataclass(frozen=True)
class Peak:
    """A detected current maximum.

    Attributes:
        voltage: Accelerating voltage at the maximum (V).
        current: Collector current at the maximum (same unit as the input).
        index: 0-based position of the maximum in the sample sequence.
        width: Half-maximum width in samples. Only the derivative strategy
            measures it; ``None`` otherwise.
    """

    voltage: float
    current: float
    index: int
    width: Optional[int] = None


@dataclass(frozen=True)
class FitResult:
    """Least-squares line ``U = intercept + slope * rank``."""

    slope: float
    intercept: float
    r_squared: float
    n: int

    @property
    def first_excitation_potential(self) -> float:
        return self.slope

    def predict(self, rank: float) -> float:
        return self.slope * float(rank) + self.intercept


@dataclass(frozen=True)
class ConfidenceInterval:
    """Two-sided interval for the slope at confidence ``level``."""

    lower: float
    upper: float
    level: float = 0.95
    t_value: float = math.nan

    @property
    def half_width(self) -> float:
        return 0.5 * (self.upper - self.lower)


@dataclass(frozen=True)
class Uncertainty:
    """Statistical scatter of the fit.

    Attributes:
        slope_std_error: Standard error of the slope, ``s / sqrt(Sxx)`` (V).
        intercept_std_error: Standard error of the intercept (V).
        confidence_interval: Two-sided interval for the slope.
        residual_std: Residual standard deviation ``s`` (V).
        residuals: ``U_i - (slope * rank_i + intercept)`` per peak (V).
        dof: Residual degrees of freedom, ``n - 2``.

    Note:
        These values describe scatter about the fitted line only and do not
        include systematic instrument uncertainty.
    """

    slope_std_error: float
    intercept_std_error: float
    confidence_interval: ConfidenceInterval
    residual_std: float
    residuals: Tuple[float, ...] = ()
    dof: int = 0


@dataclass(frozen=True)
class AnalysisResult:
    """Complete output of one pipeline run.

    ``uncertainty`` is ``None`` only when the run was made with
    ``require_uncertainty=False`` and the fit had too few peaks for it.
    """

    samples: Tuple[Sample, ...]
    peaks: Tuple[Peak, ...]
    fit: FitResult
    uncertainty: Optional[Uncertainty]
    detector: str = field(default="window")

    @property
    def excitation_potential(self) -> float:
        return self.fit.slope

    @property
    def energy_gap(self) -> float:
        return energy_gap_joules(self.fit.slope)

    @property
    def temperature_equivalent(self) -> float:
        return temperature_equivalent_kelvin(self.energy_gap)


@dataclass(frozen=True)
class ResultColumns:
    """Standardized column labels for result DataFrames.

    Attributes:
        voltage: Accelerating voltage U_G2K in volts.
        current: Collector current; the Franck-Hertz apparatus reports nA.
        rank: 1-based peak rank, the regression's independent variable.
        sample_index: 0-based position of a peak in the sample table.
        width: Half-maximum width of a peak in samples.
        fitted: Voltage predicted by the fitted line at the peak's rank.
        residual: Measured minus fitted peak voltage.
    """

    voltage: str = "Voltage (V)"
    current: str = "Current (nA)"
    rank: str = "Peak rank"
    sample_index: str = "Sample index"
    width: str = "Half-max width (samples)"
    fitted: str = "Fitted voltage (V)"
    residual: str = "Residual (V)"
