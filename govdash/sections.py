from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from govdash.cells import cell_text, format_grouped, format_wan, normalize_number, normalize_to_unit, round_half_up
from govdash.headers import RawGrid, cell_at, find_cell, find_header_row, find_label_row, resolve_columns
from govdash.models import (
    AppStats,
    DashboardRecord,
    DataListItem,
    FeedbackItem,
    NodeProgress,
    QualityMetric,
    ScenarioItem,
    UserStats,
)


logger = logging.getLogger(__name__)

TOTAL_VOLUME_SHEET = "深圳分公司数据湖数据总量（自动计算）"
HISTORY_NEW_SHEET = "深圳分公司历史与新增数据量情况（董家勇更新）"
MAIN_DATA_SHEET = "深圳分公司主数据入湖数量情况(董家勇更新）"
BUSINESS_DATA_SHEET = "深圳分公司业务数据入湖数量情况（董家勇更新）"
NODES_SHEET = "源头采集“六个节点”执行情况（唐漓更新）"
FEEDBACK_SHEET = "问题反馈情况（闭环管理+数据湖）（张俊芳提供闭环）"
QUALITY_SHEET = "深圳分公司质量情况（张俊芳更新）"
USERS_SHEET = "数据湖用户情况（董家勇）"
APP_STATS_SHEET = "数据应用情况（董家勇更新）"
SCENARIOS_SHEET = "场景推动情况（黄凌宇更新）"

TOTAL_MARKER = "确认总量"
VOLUME_TOTAL_COLUMN = "数据总量"
VOLUME_HEADER_SCAN = 10
HISTORY_ROW_LABELS = ("历史数量", "历史数据")
NEW_ROW_LABEL = "新增数据"

# sheet header -> dashboard list label
MAIN_DATA_COLUMNS: Dict[str, str] = {
    "井": "井主数据",
    "样品": "样品主数据",
    "地质油藏": "地质油藏主数据",
    "物探工区": "物探工区主数据",
    "设备设施": "设备设施主数据",
    "生产管理": "生产管理主数据",
    "其他": "其他主数据",
}
BUSINESS_DATA_COLUMNS: Dict[str, str] = {
    "勘探": "勘探业务数据",
    "储量": "储量业务数据",
    "开发": "开发业务数据",
    "生产": "生产业务数据",
    "工程建设": "工程建设业务数据",
    "钻完井": "钻完井业务数据",
}

NODE_NAMES = (
    "勘探井位批准",
    "储量评估审查",
    "基本设计审查",
    "机械完工检查",
    "项目投产检查",
    "维修改造审查",
)
NODES_IN_PROGRESS_LABEL = "进行中数量"
NODES_COMPLETED_LABEL = "已完成数量"

FEEDBACK_DATA_LAKE = ("数据湖", "#67e8f9")
FEEDBACK_CLOSED_LOOP = ("闭环管理", "#2563eb")

QUALITY_COLUMNS: Dict[str, str] = {
    "month": "月度",
    "exploration": "勘探",
    "reserves": "储量",
    "development": "开发",
    "production": "生产",
    "engineering": "工程",
    "drilling": "钻完井",
    "average_score": "总平均分",
}
QUALITY_SCORE_FIELDS = [f for f in QUALITY_COLUMNS if f != "month"]

USER_COLUMNS = {"total": "用户总数", "active": "活跃用户数"}
APP_STATS_COLUMNS = {
    "interface_count": "接口数量",
    "system_calls": "调用系统次数",
    "pushed_volume": "推送数据数量",
}
SCENARIO_COLUMNS = {"category": "专业", "unfinished": "未完成", "finished": "已完成"}
SCENARIO_TOTAL_LABEL = "总计"


def _sheet(workbook: Mapping[str, RawGrid], name: str) -> Optional[RawGrid]:
    grid = workbook.get(name)
    if grid is None:
        logger.info("sheet %r not found; keeping defaults", name)
    return grid


def _header(grid: RawGrid, keywords: List[str], sheet: str, scan_limit: int, need_value_row: bool = False) -> int:
    idx = find_header_row(grid, keywords, scan_limit=scan_limit)
    if idx == -1:
        logger.info("no header row with %s in %r; keeping defaults", keywords, sheet)
        return -1
    if need_value_row and idx + 1 >= len(grid):
        logger.info("header row in %r has no value row; keeping defaults", sheet)
        return -1
    return idx


def _missing(columns: Dict[str, int], required: List[str], sheet: str) -> bool:
    missing = [f for f in required if columns.get(f, -1) == -1]
    if missing:
        logger.info("columns %s missing in %r; keeping defaults", missing, sheet)
    return bool(missing)


# ---------------- Extractors ----------------
def extract_total_volume(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, TOTAL_VOLUME_SHEET)
    if grid is None:
        return record
    # value sits directly below the marker; first marker with a numeric value wins
    for r, row in enumerate(grid[:-1]):
        for c, value in enumerate(row):
            if cell_text(value) != TOTAL_MARKER:
                continue
            total = normalize_to_unit(cell_at(grid[r + 1], c), default=None)
            if total is not None:
                return replace(record, volume=replace(record.volume, total=total))
    logger.info("no usable %r value in %r", TOTAL_MARKER, TOTAL_VOLUME_SHEET)
    return record


def extract_history_new_volume(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, HISTORY_NEW_SHEET)
    if grid is None:
        return record
    hit = find_cell(grid, VOLUME_TOTAL_COLUMN, scan_limit=VOLUME_HEADER_SCAN)
    if hit is None:
        logger.info("no %r column in %r; keeping defaults", VOLUME_TOTAL_COLUMN, HISTORY_NEW_SHEET)
        return record
    header_idx, total_col = hit
    volume = record.volume
    for row in grid[header_idx + 1 :]:
        label = cell_text(cell_at(row, 0))
        value = normalize_to_unit(cell_at(row, total_col), default=None)
        if value is None:
            continue
        if label in HISTORY_ROW_LABELS:
            volume = replace(volume, history=value)
        if label == NEW_ROW_LABEL:
            volume = replace(volume, new=value)
    return replace(record, volume=volume)


def _fill_data_list(
    grid: RawGrid,
    header_idx: int,
    items: Tuple[DataListItem, ...],
    columns: Dict[str, str],
    fmt: Callable[[float], str],
) -> Tuple[DataListItem, ...]:
    """Overwrite ``value`` of items whose header column exists in the row below the header."""
    label_to_key = {label: key for key, label in columns.items()}
    resolved = resolve_columns(grid[header_idx], {key: key for key in columns})
    value_row = grid[header_idx + 1]
    out: List[DataListItem] = []
    for item in items:
        key = label_to_key.get(item.label)
        col = resolved.get(key, -1) if key is not None else -1
        num = normalize_number(cell_at(value_row, col), default=None) if col != -1 else None
        out.append(item if num is None else replace(item, value=fmt(num)))
    return tuple(out)


def extract_main_data(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, MAIN_DATA_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, ["井", "样品"], MAIN_DATA_SHEET, scan_limit, need_value_row=True)
    if header_idx == -1:
        return record
    items = _fill_data_list(grid, header_idx, record.main_data_list, MAIN_DATA_COLUMNS, format_grouped)
    return replace(record, main_data_list=items)


def extract_business_data(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, BUSINESS_DATA_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, ["勘探", "开发"], BUSINESS_DATA_SHEET, scan_limit, need_value_row=True)
    if header_idx == -1:
        return record
    items = _fill_data_list(grid, header_idx, record.business_data_list, BUSINESS_DATA_COLUMNS, format_wan)
    return replace(record, business_data_list=items)


def extract_nodes(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, NODES_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, list(NODE_NAMES[:2]), NODES_SHEET, scan_limit)
    if header_idx == -1:
        return record
    in_progress_idx = find_label_row(grid, NODES_IN_PROGRESS_LABEL, start=header_idx + 1)
    completed_idx = find_label_row(grid, NODES_COMPLETED_LABEL, start=header_idx + 1)
    if in_progress_idx == -1 or completed_idx == -1:
        logger.info("node count rows missing in %r; keeping defaults", NODES_SHEET)
        return record
    columns = resolve_columns(grid[header_idx], {name: name for name in NODE_NAMES})
    in_progress_row, completed_row = grid[in_progress_idx], grid[completed_idx]
    nodes = tuple(
        NodeProgress(
            name=name,
            in_progress=normalize_number(cell_at(in_progress_row, columns[name])),
            completed=normalize_number(cell_at(completed_row, columns[name])),
        )
        for name in NODE_NAMES
    )
    return replace(record, nodes=nodes)


def extract_feedback(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, FEEDBACK_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, ["问题来源", "问题数"], FEEDBACK_SHEET, scan_limit)
    if header_idx == -1:
        return record
    columns = resolve_columns(grid[header_idx], {"source": "问题来源", "count": "问题数"})
    if _missing(columns, ["source", "count"], FEEDBACK_SHEET):
        return record
    lake_name, lake_color = FEEDBACK_DATA_LAKE
    loop_name, loop_color = FEEDBACK_CLOSED_LOOP
    lake_value = loop_value = 0.0
    for row in grid[header_idx + 1 :]:
        source = cell_text(cell_at(row, columns["source"]))
        if loop_name in source:
            loop_value = normalize_number(cell_at(row, columns["count"]))
        if lake_name in source:
            lake_value = normalize_number(cell_at(row, columns["count"]))
    feedback = (
        FeedbackItem(name=lake_name, value=lake_value, color=lake_color),
        FeedbackItem(name=loop_name, value=loop_value, color=loop_color),
    )
    return replace(record, feedback=feedback)


def extract_quality(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, QUALITY_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, ["月度", "勘探", "总平均分"], QUALITY_SHEET, scan_limit)
    if header_idx == -1:
        return record
    columns = resolve_columns(grid[header_idx], QUALITY_COLUMNS)
    if _missing(columns, ["month"], QUALITY_SHEET):
        return record
    rows: List[QualityMetric] = []
    for row in grid[header_idx + 1 :]:
        month = cell_text(cell_at(row, columns["month"]))
        if not month:
            continue
        scores = {f: round_half_up(normalize_number(cell_at(row, columns[f])), 2) for f in QUALITY_SCORE_FIELDS}
        rows.append(QualityMetric(month=month, **scores))
    return replace(record, quality=tuple(rows))


def extract_users(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, USERS_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, list(USER_COLUMNS.values()), USERS_SHEET, scan_limit, need_value_row=True)
    if header_idx == -1:
        return record
    columns = resolve_columns(grid[header_idx], USER_COLUMNS)
    if _missing(columns, ["total", "active"], USERS_SHEET):
        return record
    value_row = grid[header_idx + 1]
    total = normalize_number(cell_at(value_row, columns["total"]))
    active = normalize_number(cell_at(value_row, columns["active"]))
    percentage = round_half_up(active / total * 100, 2) if total > 0 else 0.0
    users = UserStats(active=active, total=total, percentage=percentage, is_empty=False)
    return replace(record, users=users)


def extract_app_stats(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, APP_STATS_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, list(APP_STATS_COLUMNS.values()), APP_STATS_SHEET, scan_limit, need_value_row=True)
    if header_idx == -1:
        return record
    columns = resolve_columns(grid[header_idx], APP_STATS_COLUMNS)
    value_row = grid[header_idx + 1]
    values = {f: normalize_number(cell_at(value_row, col)) if col != -1 else 0.0 for f, col in columns.items()}
    return replace(record, app_stats=AppStats(is_empty=False, **values))


def extract_scenarios(workbook: Mapping[str, RawGrid], record: DashboardRecord, scan_limit: int = 20) -> DashboardRecord:
    grid = _sheet(workbook, SCENARIOS_SHEET)
    if grid is None:
        return record
    header_idx = _header(grid, list(SCENARIO_COLUMNS.values()), SCENARIOS_SHEET, scan_limit)
    if header_idx == -1:
        return record
    columns = resolve_columns(grid[header_idx], SCENARIO_COLUMNS)
    if _missing(columns, list(SCENARIO_COLUMNS), SCENARIOS_SHEET):
        return record
    scenarios: List[ScenarioItem] = []
    for row in grid[header_idx + 1 :]:
        category = cell_text(cell_at(row, columns["category"]))
        # grand total is recomputed by the presentation layer
        if not category or category == SCENARIO_TOTAL_LABEL:
            continue
        scenarios.append(
            ScenarioItem(
                category=category,
                unfinished=normalize_number(cell_at(row, columns["unfinished"])),
                finished=normalize_number(cell_at(row, columns["finished"])),
            )
        )
    return replace(record, scenarios=tuple(scenarios))
