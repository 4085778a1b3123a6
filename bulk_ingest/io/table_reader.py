"""Spreadsheet and CSV reader producing raw row lists.

The first row of the file is returned as-is (no header inference): callers
decide what to do with it. Blank cells come back as None.
"""

import os
from typing import Any, List

import numpy as np
import pandas as pd

# Maps file extension -> reader kind
SUPPORTED_EXTENSIONS = {
    ".xlsx": "excel",
    ".xlsm": "excel",
    ".csv": "csv",
}


def _clean_cell(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float):
        if np.isnan(value):
            return None
        # pandas turns int columns with gaps into float64
        if value.is_integer():
            return int(value)
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def read_table(path: str) -> List[List[Any]]:
    """Read the first worksheet (or the CSV) at path into a list of rows."""
    ext = os.path.splitext(path)[1].lower()
    kind = SUPPORTED_EXTENSIONS.get(ext)
    if kind is None:
        raise ValueError(
            f"Unsupported file type '{ext}'. "
            f"Supported: {sorted(SUPPORTED_EXTENSIONS)}"
        )

    if kind == "excel":
        df = pd.read_excel(path, sheet_name=0, header=None, engine="openpyxl")
    else:
        df = pd.read_csv(
            path,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
        )

    return [
        [_clean_cell(value) for value in values]
        for values in df.itertuples(index=False, name=None)
    ]
