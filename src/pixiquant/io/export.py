"""CSV export of intensity records via pandas."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

import pandas as pd

from pixiquant.core.models import OUTPUT_COLUMNS, IntensityRecord


def records_to_frame(records: Iterable[IntensityRecord]) -> pd.DataFrame:
    """Build a DataFrame with one row per record and the output columns."""
    rows = [r.to_row() for r in records]
    return pd.DataFrame(rows, columns=list(OUTPUT_COLUMNS))


def write_csv(records: Iterable[IntensityRecord], path: Path) -> pd.DataFrame:
    """Write records to a comma-separated file.

    The layout follows R's ``write.table(col.names = NA)``: a leading
    row-name column numbered from 1 under an empty header, with strings
    double-quoted.

    Returns:
        The DataFrame that was written.
    """
    df = records_to_frame(records)
    out = df.copy()
    out.index = [str(i) for i in range(1, len(out) + 1)]
    out.to_csv(
        Path(path),
        index=True,
        index_label="",
        quoting=csv.QUOTE_NONNUMERIC,
        doublequote=True,
    )
    return df
