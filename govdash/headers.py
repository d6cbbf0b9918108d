from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from govdash.cells import cell_text


Row = Sequence[object]
RawGrid = Sequence[Row]
LabelSpec = Union[str, Sequence[str]]

DEFAULT_SCAN_LIMIT = 20


def cell_at(row: Row, idx: int) -> object:
    """Return the raw cell at ``idx``; negative or out-of-range indexes read as blank."""
    if idx < 0 or idx >= len(row):
        return None
    return row[idx]


def row_texts(row: Row) -> List[str]:
    return [cell_text(v) for v in row]


def find_header_row(grid: RawGrid, keywords: Iterable[str], scan_limit: int = DEFAULT_SCAN_LIMIT) -> int:
    """Index of the first row (within ``scan_limit``) whose joined text contains every keyword, else -1."""
    wanted = list(keywords)
    for idx in range(min(scan_limit, len(grid))):
        joined = " ".join(row_texts(grid[idx]))
        if all(k in joined for k in wanted):
            return idx
    return -1


def find_cell(grid: RawGrid, label: str, scan_limit: Optional[int] = None) -> Optional[Tuple[int, int]]:
    """Locate the first cell whose trimmed text equals ``label`` (row-major scan)."""
    limit = len(grid) if scan_limit is None else min(scan_limit, len(grid))
    for r in range(limit):
        for c, value in enumerate(grid[r]):
            if cell_text(value) == label:
                return r, c
    return None


def find_label_row(grid: RawGrid, fragment: str, start: int = 0, col: int = 0) -> int:
    """Last row at or after ``start`` whose ``col`` text contains ``fragment``, else -1."""
    found = -1
    for idx in range(max(start, 0), len(grid)):
        if fragment in cell_text(cell_at(grid[idx], col)):
            found = idx
    return found


def resolve_columns(header_row: Row, field_to_label: Mapping[str, LabelSpec]) -> Dict[str, int]:
    """Map each field to the column whose trimmed header equals one of its labels (-1 if absent)."""
    header = row_texts(header_row)
    out: Dict[str, int] = {}
    for field, labels in field_to_label.items():
        options = [labels] if isinstance(labels, str) else list(labels)
        out[field] = -1
        for label in options:
            if label in header:
                out[field] = header.index(label)
                break
    return out
