"""Pytest configuration for repository-relative imports and synthetic sweeps."""

import os
import sys

import matplotlib

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")

import numpy as np
import pytest


def make_sweep_text(centers, step=0.5, u_max=45.0, sigma=1.0, baseline=0.2):
    """Franck-Hertz-like sweep: Gaussian maxima of growing height on a ramp."""
    u = np.arange(0.0, u_max + step / 2, step)
    current = baseline * u
    for k, c in enumerate(centers):
        current = current + 10.0 * (k + 1) * np.exp(-((u - c) ** 2) / (2 * sigma**2))
    lines = ["| UG2K/V | I/nA |", "| ---- | ---- |"]
    lines += [f"| {a:.1f} | {b:.6f} |" for a, b in zip(u, current)]
    return "\n".join(lines) + "\n"


@pytest.fixture()
def sweep_text():
    """Six maxima at 10, 15, ..., 35 V."""
    return make_sweep_text([10.0, 15.0, 20.0, 25.0, 30.0, 35.0])


@pytest.fixture()
def two_peak_sweep_text():
    return make_sweep_text([10.0, 15.0], u_max=25.0)
