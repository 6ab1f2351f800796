"""Assemble display data for chart and derivation rendering.

This module is the boundary between the numerical pipeline and whatever draws
the results. It performs no new statistics: every value comes from an
:class:`~hertz.schema.AnalysisResult`.
"""

from __future__ import annotations

import math
from typing import Dict, List

import numpy as np
import pandas as pd

from .data_processing import samples_to_frame
from .schema import AnalysisResult, ResultColumns
from .stats.regression import fit_residuals, peak_ranks
from .stats.uncertainty import format_value_with_uncertainty
from .units import BOLTZMANN_J_PER_K, ELEMENTARY_CHARGE_C

COLUMNS = ResultColumns()


def uncertainty_forms(value: float, uncertainty: float) -> tuple[float, float]:
    """Return fractional and percentage uncertainty forms.

    Args:
        value (float): Reported quantity (any unit).
        uncertainty (float): Absolute uncertainty in the same unit.

    Returns:
        tuple[float, float]: ``(fractional, percentage)``; ``(nan, nan)`` when
        ``value`` is zero or either input is non-finite.
    """
    v = float(value)
    u = float(uncertainty)
    if not np.isfinite(v) or not np.isfinite(u) or v == 0:
        return np.nan, np.nan
    frac = abs(u / v)
    return float(frac), float(frac * 100.0)


def build_chart_dataset(result: AnalysisResult) -> Dict[str, List[Dict[str, float]]]:
    """Build the point series drawn by the chart.

    Args:
        result (AnalysisResult): Completed pipeline run.

    Returns:
        dict: ``curve`` (every sample as ``{"x": U, "y": I}``), ``peaks``
        (detected maxima, same form) and ``fit_line`` (fitted voltage at
        ranks 1 and n as ``{"x": rank, "y": U}``).
    """
    n = len(result.peaks)
    return {
        "curve": [{"x": s.voltage, "y": s.current} for s in result.samples],
        "peaks": [{"x": p.voltage, "y": p.current} for p in result.peaks],
        "fit_line": [
            {"x": 1.0, "y": result.fit.predict(1)},
            {"x": float(n), "y": result.fit.predict(n)},
        ],
    }


def build_summary(result: AnalysisResult) -> Dict[str, object]:
    """Collect headline values for the results panel.

    Returns:
        dict: Excitation potential (V), energy gap (J), temperature
        equivalent (K), R², peak count, and formatted strings. Uncertainty
        entries are NaN / ``None`` when the run carries no uncertainty.
    """
    fit = result.fit
    unc = result.uncertainty
    se = unc.slope_std_error if unc is not None else math.nan
    frac, pct = uncertainty_forms(fit.slope, se)

    return {
        "peak_count": len(result.peaks),
        "detector": result.detector,
        "excitation_potential": fit.slope,
        "excitation_potential_uncertainty": se,
        "excitation_potential_fractional_uncertainty": frac,
        "excitation_potential_percentage_uncertainty": pct,
        "intercept": fit.intercept,
        "r_squared": fit.r_squared,
        "confidence_interval": (
            (unc.confidence_interval.lower, unc.confidence_interval.upper)
            if unc is not None
            else None
        ),
        "energy_gap": result.energy_gap,
        "temperature_equivalent": result.temperature_equivalent,
        "excitation_potential_text": (
            format_value_with_uncertainty(fit.slope, se, "V")
            if unc is not None
            else f"{fit.slope:.2f} V"
        ),
        "energy_gap_text": f"{result.energy_gap:.2e} J",
        "temperature_text": f"{result.temperature_equivalent:.0f} K",
    }


def build_derivation(result: AnalysisResult) -> List[str]:
    """Write out the least-squares and uncertainty derivation step by step.

    Returns:
        list[str]: Plain-text lines; formula typesetting is left to the
        renderer.
    """
    fit = result.fit
    n = len(result.peaks)
    x = peak_ranks(n)
    y = np.array([p.voltage for p in result.peaks], dtype=float)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))

    lines = ["Peak positions:"]
    for rank, peak in zip(x, result.peaks):
        lines.append(f"  n={int(rank)}: U = {peak.voltage:.2f} V, I = {peak.current:.2f}")

    lines += [
        "Least-squares fit U = a + n ΔU:",
        f"  Σx = {sum_x:g}",
        f"  Σy = {sum_y:.4g}",
        f"  Σxy = {sum_xy:.4g}",
        f"  Σx² = {sum_x2:g}",
        f"  ΔU = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)"
        f" = ({n}×{sum_xy:.4g} - {sum_x:g}×{sum_y:.4g}) / ({n}×{sum_x2:g} - {sum_x:g}²)"
        f" = {fit.slope:.2f} V",
        f"  a = (Σy - ΔUΣx) / n = ({sum_y:.4g} - {fit.slope:.2f}×{sum_x:g}) / {n}"
        f" = {fit.intercept:.2f} V",
        f"  R² = {fit.r_squared:.4f}",
    ]

    unc = result.uncertainty
    if unc is not None:
        residuals = fit_residuals(result.peaks, fit)
        sxx = sum_x2 - sum_x**2 / n
        lines.append("Uncertainty:")
        for rank, r in zip(x, residuals):
            lines.append(f"  residual n={int(rank)}: {r:+.3f} V")
        lines += [
            f"  Σresidual² = {float(np.sum(residuals**2)):.4g}",
            f"  s = sqrt(Σresidual² / ({n}-2)) = {unc.residual_std:.4g} V",
            f"  u(ΔU) = s / sqrt(Sxx) = {unc.residual_std:.4g} / sqrt({sxx:g})"
            f" = {unc.slope_std_error:.4f} V",
            f"  u(a) = {unc.intercept_std_error:.4f} V",
            f"  {unc.confidence_interval.level:.0%} interval (t = {unc.confidence_interval.t_value:.3f}):"
            f" [{unc.confidence_interval.lower:.2f}, {unc.confidence_interval.upper:.2f}] V",
        ]

    lines += [
        "Energy gap ΔE = eΔU:",
        f"  e = {ELEMENTARY_CHARGE_C:.4g} C",
        f"  ΔE = {result.energy_gap:.2e} J",
        f"  T = ΔE / k = ΔE / {BOLTZMANN_J_PER_K:.5g} = {result.temperature_equivalent:.0f} K",
    ]
    return lines


def peaks_dataframe(result: AnalysisResult) -> pd.DataFrame:
    """Tabulate peaks with their rank, fitted voltage and residual."""
    n = len(result.peaks)
    ranks = peak_ranks(n)
    fitted = result.fit.slope * ranks + result.fit.intercept
    return pd.DataFrame(
        {
            COLUMNS.rank: ranks.astype(int),
            COLUMNS.voltage: [p.voltage for p in result.peaks],
            COLUMNS.current: [p.current for p in result.peaks],
            COLUMNS.sample_index: [p.index for p in result.peaks],
            COLUMNS.width: pd.array([p.width for p in result.peaks], dtype="Int64"),
            COLUMNS.fitted: fitted,
            COLUMNS.residual: fit_residuals(result.peaks, result.fit),
        }
    )


def samples_dataframe(result: AnalysisResult) -> pd.DataFrame:
    """Tabulate the parsed sweep as voltage and current columns."""
    return samples_to_frame(result.samples)
