from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Union

from govdash.headers import DEFAULT_SCAN_LIMIT, RawGrid
from govdash.models import DashboardRecord, default_record
from govdash.sections import (
    extract_app_stats,
    extract_business_data,
    extract_feedback,
    extract_history_new_volume,
    extract_main_data,
    extract_nodes,
    extract_quality,
    extract_scenarios,
    extract_total_volume,
    extract_users,
)
from govdash.workbook import read_workbook


logger = logging.getLogger(__name__)

Extractor = Callable[..., DashboardRecord]

EXTRACTORS: List[Extractor] = [
    extract_total_volume,
    extract_history_new_volume,
    extract_main_data,
    extract_business_data,
    extract_nodes,
    extract_feedback,
    extract_quality,
    extract_users,
    extract_app_stats,
    extract_scenarios,
]


def parse_workbook(
    workbook: Mapping[str, RawGrid],
    *,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
    extractors: Optional[List[Extractor]] = None,
) -> DashboardRecord:
    """Fold every section extractor over a fresh default record.

    Extractors are independent; one that raises is logged and skipped so the
    remaining sections still come through.
    """
    record = default_record()
    for extractor in extractors or EXTRACTORS:
        try:
            record = extractor(workbook, record, scan_limit=scan_limit)
        except Exception:
            logger.exception("%s failed; section left at defaults", extractor.__name__)
    return record


def parse_excel_bytes(data: bytes, *, scan_limit: int = DEFAULT_SCAN_LIMIT) -> DashboardRecord:
    """Parse an uploaded workbook; raises ``WorkbookReadError`` only if the file cannot be read."""
    return parse_workbook(read_workbook(data), scan_limit=scan_limit)


def parse_excel_file(path: Union[str, Path], *, scan_limit: int = DEFAULT_SCAN_LIMIT) -> DashboardRecord:
    return parse_workbook(read_workbook(Path(path)), scan_limit=scan_limit)
