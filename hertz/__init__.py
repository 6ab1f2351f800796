"""
A Python package for analyzing Franck-Hertz experiment sweeps.

Estimates the first excitation potential from the spacing of collector-current
maxima and propagates the fit scatter into its uncertainty.

Modules:
    - data_processing: Parses ``| U | I |`` measurement tables.
    - peak_detection: Sliding-window and smoothed-derivative peak finders.
    - stats: Rank regression and uncertainty estimation.
    - analysis: Runs the full pipeline and keeps the current result.
    - reporting: Chart datasets, summaries and derivation text.
    - plotting: Matplotlib figures built from the chart dataset.
"""

__version__ = "1.0.0"

from .analysis import CURRENT_RESULT, ResultSlot, analyze_file, analyze_sweep
from .data_processing import parse_measurement_table, samples_to_frame
from .errors import (
    AnalysisError,
    DegenerateUncertaintyError,
    EmptyInputError,
    InsufficientPeaksError,
    RunInProgressError,
)
from .peak_detection import DerivativePeakPolicy, WindowPeakPolicy, detect_peaks
from .reporting import build_chart_dataset, build_derivation, build_summary
from .schema import AnalysisResult, FitResult, Peak, Sample, Uncertainty
from .stats import estimate_uncertainty, linear_fit

__all__ = [
    # Pipeline
    "analyze_sweep",
    "analyze_file",
    "ResultSlot",
    "CURRENT_RESULT",
    # Stages
    "parse_measurement_table",
    "samples_to_frame",
    "detect_peaks",
    "WindowPeakPolicy",
    "DerivativePeakPolicy",
    "linear_fit",
    "estimate_uncertainty",
    # Reporting
    "build_chart_dataset",
    "build_summary",
    "build_derivation",
    # Types
    "Sample",
    "Peak",
    "FitResult",
    "Uncertainty",
    "AnalysisResult",
    # Errors
    "AnalysisError",
    "EmptyInputError",
    "InsufficientPeaksError",
    "DegenerateUncertaintyError",
    "RunInProgressError",
]
