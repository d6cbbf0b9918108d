"""Core (UI-agnostic) data-governance dashboard logic.

This package contains:
- workbook decoding (XLSX -> raw grids)
- cell normalization, header discovery and column mapping
- one extractor per worksheet, folded into a DashboardRecord
- persistence of the latest snapshot
"""

from govdash.models import DashboardRecord, default_record, record_from_dict, record_to_dict
from govdash.parser import parse_excel_bytes, parse_excel_file, parse_workbook
from govdash.store import SnapshotStore, StoreError
from govdash.workbook import WorkbookReadError

__all__ = [
    "DashboardRecord",
    "SnapshotStore",
    "StoreError",
    "WorkbookReadError",
    "default_record",
    "parse_excel_bytes",
    "parse_excel_file",
    "parse_workbook",
    "record_from_dict",
    "record_to_dict",
]
