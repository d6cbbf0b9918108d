from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd


logger = logging.getLogger(__name__)

RawGrid = List[List[object]]
Workbook = Dict[str, RawGrid]


class WorkbookReadError(Exception):
    """The uploaded file could not be opened as a spreadsheet."""


def frame_to_grid(df: pd.DataFrame) -> RawGrid:
    """Row-major cell values with NaN/NaT replaced by None.

    Leading all-blank rows and columns are dropped so that index 0 is the
    first row and column of the sheet's used range.
    """
    if df.empty:
        return []
    present = df.notna()
    used_rows = present.any(axis=1).to_numpy()
    used_cols = present.any(axis=0).to_numpy()
    if not used_rows.any():
        return []
    df = df.iloc[int(used_rows.argmax()):, int(used_cols.argmax()):]
    obj = df.astype(object)
    obj = obj.where(pd.notna(obj), None)
    return obj.values.tolist()


def read_workbook(source: Union[bytes, bytearray, str, Path]) -> Workbook:
    """Decode every sheet of a workbook into raw grids keyed by exact sheet name."""
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise WorkbookReadError("empty file")
        handle = io.BytesIO(bytes(source))
    else:
        handle = source
    try:
        sheets = pd.read_excel(handle, sheet_name=None, header=None)
    except Exception as exc:
        raise WorkbookReadError(f"could not read workbook: {exc}") from exc
    workbook = {str(name): frame_to_grid(df) for name, df in sheets.items()}
    logger.info("read workbook with %d sheet(s)", len(workbook))
    return workbook
