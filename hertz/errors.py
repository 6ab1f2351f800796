"""Exception taxonomy for a single sweep analysis run.

Every analysis failure is terminal for the run that raised it: no partial
result is produced and nothing is retried automatically.
"""

from __future__ import annotations


class AnalysisError(ValueError):
    """Base class for data problems that stop a pipeline run."""


class EmptyInputError(AnalysisError):
    """Raised when no line of the input matches a ``| U | I |`` table row."""

    def __init__(self, message: str = "No valid measurement rows found in input."):
        super().__init__(message)


class InsufficientPeaksError(AnalysisError):
    """Raised when fewer than two peaks are available for the linear fit."""

    def __init__(self, peak_count: int, required: int = 2):
        self.peak_count = int(peak_count)
        self.required = int(required)
        super().__init__(
            f"At least {self.required} peaks are required for fitting; "
            f"found {self.peak_count}."
        )


class DegenerateUncertaintyError(AnalysisError):
    """Raised when the fit leaves zero residual degrees of freedom (n == 2)."""

    def __init__(self, peak_count: int):
        self.peak_count = int(peak_count)
        super().__init__(
            f"Uncertainty is undefined for {self.peak_count} peaks: "
            "n - 2 residual degrees of freedom must be positive."
        )


class RunInProgressError(RuntimeError):
    """Raised when a new run is submitted while another is still executing."""
