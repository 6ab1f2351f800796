"""Physical constants and conversions for derived excitation values."""

from __future__ import annotations

ELEMENTARY_CHARGE_C: float = 1.602e-19
BOLTZMANN_J_PER_K: float = 1.3806e-23


def energy_gap_joules(excitation_potential_v: float) -> float:
    """Convert an excitation potential to an energy gap.

    Args:
        excitation_potential_v (float): First excitation potential (V).

    Returns:
        float: Energy gap ``ΔE = e ΔU`` in joules.
    """
    return float(excitation_potential_v) * ELEMENTARY_CHARGE_C


def temperature_equivalent_kelvin(energy_j: float) -> float:
    """Return the temperature whose ``k T`` equals ``energy_j`` (K)."""
    return float(energy_j) / BOLTZMANN_J_PER_K
