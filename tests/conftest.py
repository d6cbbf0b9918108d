"""
Pytest configuration and shared fixtures.
"""
import os
import sys

import pytest
from openpyxl import Workbook

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from govdash import sections  # noqa: E402


def full_workbook():
    """A grid workbook covering all ten sheets, shaped like the real uploads."""
    return {
        sections.TOTAL_VOLUME_SHEET: [
            ["深圳分公司数据湖数据总量"],
            [None],
            [None, None, "确认总量", "备注"],
            [None, None, 12345678, "自动计算"],
        ],
        sections.HISTORY_NEW_SHEET: [
            ["历史与新增数据量情况"],
            ["类别", "结构化", "非结构化", "数据总量"],
            ["历史数量", 100, 200, 5000000],
            ["新增数据", 10, 20, 250000],
        ],
        sections.MAIN_DATA_SHEET: [
            ["主数据入湖数量"],
            ["井", "样品", "地质油藏", "物探工区", "设备设施", "生产管理", "其他"],
            [1234567, 890, 12, 3456, 78, 9, 0],
        ],
        sections.BUSINESS_DATA_SHEET: [
            ["业务数据入湖数量"],
            ["勘探", "储量", "开发", "生产", "工程建设", "钻完井"],
            [1234567, 20000, 5000, 0, 99999, 123],
        ],
        sections.NODES_SHEET: [
            ["六个节点执行情况"],
            ["节点", "勘探井位批准", "储量评估审查", "基本设计审查", "机械完工检查", "项目投产检查", "维修改造审查"],
            ["进行中数量（个）", 3, 2, 1, 0, 4, 5],
            ["已完成数量（个）", 10, 8, 6, 4, 2, 1],
        ],
        sections.FEEDBACK_SHEET: [
            ["问题反馈情况"],
            ["序号", "问题来源", "问题数"],
            [1, "闭环管理平台", 42],
            [2, "数据湖平台", 17],
        ],
        sections.QUALITY_SHEET: [
            ["质量情况"],
            ["月度", "勘探", "储量", "开发", "生产", "工程", "钻完井", "总平均分"],
            ["2024-01", 95.123, 90, 88.5, 91, 87, 93, 90.777],
            [None, None, None, None, None, None, None, None],
            ["2024-02", 96, 91, 89, 92, 88, 94, 91.666],
        ],
        sections.USERS_SHEET: [
            ["数据湖用户情况"],
            ["用户总数", "活跃用户数"],
            [100, 25],
        ],
        sections.APP_STATS_SHEET: [
            ["接口数量", "调用系统次数", "推送数据数量"],
            ["12,345", "1,000,000", 5678],
        ],
        sections.SCENARIOS_SHEET: [
            ["场景推动情况"],
            ["专业", "未完成", "已完成"],
            ["勘探", 5, 3],
            ["开发", 2, 7],
            ["总计", 99, 99],
        ],
    }


def write_xlsx(path, workbook):
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in workbook.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    wb.save(path)


@pytest.fixture
def workbook():
    return full_workbook()


@pytest.fixture
def xlsx_path(tmp_path):
    path = tmp_path / "dashboard.xlsx"
    write_xlsx(str(path), full_workbook())
    return path
