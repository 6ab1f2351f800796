"""
Render the I-U sweep and the rank fit with matplotlib.

Functions receive precomputed chart data and perform no analysis.
"""

from __future__ import annotations

import os
from typing import Dict, List

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from .reporting import build_chart_dataset
from .schema import AnalysisResult

FIGURE_DPI = 300
FIGSIZE_WIDE = (11.0, 4.4)
CURVE_COLOR = "#4bc0c0"
PEAK_COLOR = "#ff6384"
FIT_COLOR = "#36a2eb"


def setup_plot_style() -> None:
    plt.rcParams.update(
        {
            "font.family": "serif",
            "font.size": 12,
            "axes.labelsize": 12,
            "xtick.labelsize": 11,
            "ytick.labelsize": 11,
            "legend.fontsize": 11,
            "savefig.dpi": FIGURE_DPI,
        }
    )


def _clean_axis(ax) -> None:
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(True, axis="y", alpha=0.2, linestyle=":", linewidth=0.7)


def _xy(points: List[Dict[str, float]]):
    return [p["x"] for p in points], [p["y"] for p in points]


def plot_analysis(result: AnalysisResult, savepath: str | None = None) -> Figure:
    """Draw the two-panel analysis figure.

    Args:
        result (AnalysisResult): Completed pipeline run.
        savepath (str, optional): PNG path. When omitted the figure is only
            returned.

    Returns:
        matplotlib.figure.Figure: Left panel I(U) with detected peaks; right
        panel peak voltage against rank with the fitted line.
    """
    data = build_chart_dataset(result)
    setup_plot_style()
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=FIGSIZE_WIDE, constrained_layout=True)

    ux, iy = _xy(data["curve"])
    ax1.plot(ux, iy, color=CURVE_COLOR, marker="o", markersize=3, linewidth=1.5,
             label=r"$I$-$U_{G2K}$ curve")
    px, py = _xy(data["peaks"])
    ax1.plot(px, py, linestyle="none", marker="o", markersize=7, color=PEAK_COLOR,
             label="Peaks")
    ax1.set_xlabel(r"$U_{G2K}$ / V")
    ax1.set_ylabel(r"$I$ / nA")
    ax1.legend(frameon=False)
    _clean_axis(ax1)

    ranks = list(range(1, len(result.peaks) + 1))
    ax2.plot(ranks, [p.voltage for p in result.peaks], linestyle="none", marker="o",
             markersize=7, color=PEAK_COLOR, label="Peak voltage")
    fx, fy = _xy(data["fit_line"])
    ax2.plot(fx, fy, color=FIT_COLOR, linestyle="--", linewidth=2.0,
             label=rf"Fit: $\Delta U$ = {result.fit.slope:.2f} V")
    ax2.set_xlabel(r"Peak rank $n$")
    ax2.set_ylabel(r"$U_{G2K}$ / V")
    ax2.xaxis.set_major_locator(MaxNLocator(integer=True))
    ax2.legend(frameon=False)
    _clean_axis(ax2)

    if savepath:
        directory = os.path.dirname(savepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(savepath, dpi=FIGURE_DPI, bbox_inches="tight")
    return fig
