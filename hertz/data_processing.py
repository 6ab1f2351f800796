"""
Parses Franck-Hertz measurement tables into ordered sample sequences.
"""

# Input is a markdown-style table such as
#
#   | UG2K/V | I/nA |
#   | ---- | ---- |
#   | 1.0 | 0.0 |
#
# Only rows whose first two cells are plain non-negative decimals are kept;
# headers, separators and malformed rows are skipped without error.

import logging
import re

import numpy as np
import pandas as pd

from .errors import EmptyInputError
from .schema import ResultColumns, Sample

logger = logging.getLogger(__name__)

_NUMBER = r"(\d+(?:\.\d*)?|\.\d+)"
ROW_PATTERN = re.compile(r"^\s*\|\s*" + _NUMBER + r"\s*\|\s*" + _NUMBER + r"\s*\|")

COLUMNS = ResultColumns()


def parse_measurement_table(text):
    """Extract (voltage, current) samples from a table text blob.

    Args:
        text (str): Newline-delimited text. Each data row must start with
            ``| <number> | <number> |``; any further cells are ignored.

    Returns:
        list[Sample]: Samples in input line order. Repeated voltages are kept.

    Raises:
        EmptyInputError: If no line matches the row pattern.
    """
    samples = []
    skipped = 0
    for line in text.split("\n"):
        match = ROW_PATTERN.match(line)
        if match is None:
            if line.strip():
                skipped += 1
            continue
        samples.append(
            Sample(voltage=float(match.group(1)), current=float(match.group(2)))
        )

    if not samples:
        raise EmptyInputError()

    logger.debug("Parsed %d samples (%d non-data lines skipped)", len(samples), skipped)
    return samples


def samples_to_arrays(samples):
    """Split samples into ``(voltage, current)`` float arrays."""
    voltage = np.fromiter((s.voltage for s in samples), dtype=float, count=len(samples))
    current = np.fromiter((s.current for s in samples), dtype=float, count=len(samples))
    return voltage, current


def samples_to_frame(samples):
    """
    Tabulate samples as a DataFrame.

    Args:
        samples (Sequence[Sample]): Parsed samples.

    Returns:
        pd.DataFrame: Columns ``Voltage (V)`` and ``Current (nA)`` in input order.
    """
    voltage, current = samples_to_arrays(samples)
    return pd.DataFrame({COLUMNS.voltage: voltage, COLUMNS.current: current})


def load_measurement_text(filepath):
    """
    Read a measurement file as UTF-8 text.

    Args:
        filepath (str): Path to the uploaded table.

    Returns:
        str: File contents, ready for :func:`parse_measurement_table`.
    """
    with open(filepath, encoding="utf-8") as fh:
        return fh.read()
