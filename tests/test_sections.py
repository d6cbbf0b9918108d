from govdash import sections
from govdash.models import DEFAULT_FEEDBACK, DashboardRecord, default_record
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


def _only(sheet, rows):
    return {sheet: rows}


def test_total_volume_from_marker_cell():
    wb = _only(
        sections.TOTAL_VOLUME_SHEET,
        [["标题"], [None], [None], [None, None, "确认总量"], [None, None, 12345678]],
    )
    record = extract_total_volume(wb, default_record())
    assert record.volume.total == 1234.57
    assert record.volume.new == "???"
    assert record.volume.history == "???"


def test_total_volume_skips_marker_without_numeric_value():
    wb = _only(
        sections.TOTAL_VOLUME_SHEET,
        [["确认总量", None], ["待确认", None], [None, "确认总量"], [None, 20000]],
    )
    assert extract_total_volume(wb, default_record()).volume.total == 2.0


def test_total_volume_marker_on_last_row_keeps_default():
    wb = _only(sections.TOTAL_VOLUME_SHEET, [["x"], ["确认总量"]])
    assert extract_total_volume(wb, default_record()).volume.total == "???"


def test_history_and_new_volume():
    wb = _only(
        sections.HISTORY_NEW_SHEET,
        [
            ["banner"],
            ["类别", "数据总量"],
            ["历史数据", "5,000,000"],
            ["新增数据", 123456],
            ["其他", 999999],
        ],
    )
    volume = extract_history_new_volume(wb, default_record()).volume
    assert volume.history == 500.0
    assert volume.new == 12.35
    assert volume.total == "???"


def test_history_new_header_must_be_within_first_ten_rows():
    rows = [["x"]] * 10 + [["类别", "数据总量"], ["历史数量", 10000]]
    wb = _only(sections.HISTORY_NEW_SHEET, rows)
    assert extract_history_new_volume(wb, default_record()).volume.history == "???"


def test_main_data_grouped_thousands_and_missing_columns():
    wb = _only(
        sections.MAIN_DATA_SHEET,
        [["井", "样品", "设备设施"], [1234567, "n/a", 0]],
    )
    items = {i.label: i.value for i in extract_main_data(wb, default_record()).main_data_list}
    assert items["井主数据"] == "1,234,567"
    assert items["样品主数据"] == "???"
    assert items["设备设施主数据"] == "0"
    assert items["其他主数据"] == "???"
    assert len(items) == 7


def test_main_data_labels_and_order_never_change(workbook):
    before = [i.label for i in default_record().main_data_list]
    after = [i.label for i in extract_main_data(workbook, default_record()).main_data_list]
    assert before == after


def test_business_data_in_wan(workbook):
    items = extract_business_data(workbook, default_record()).business_data_list
    values = {i.label: i.value for i in items}
    assert values["勘探业务数据"] == "123.46万"
    assert values["储量业务数据"] == "2.00万"
    assert values["生产业务数据"] == "0.00万"
    assert all(i.is_highlight for i in items)


def test_business_data_header_without_value_row_keeps_default():
    wb = _only(sections.BUSINESS_DATA_SHEET, [["勘探", "开发"]])
    assert extract_business_data(wb, default_record()) == default_record()


def test_nodes(workbook):
    nodes = extract_nodes(workbook, default_record()).nodes
    assert [n.name for n in nodes] == list(sections.NODE_NAMES)
    assert (nodes[0].in_progress, nodes[0].completed) == (3, 10)
    assert (nodes[5].in_progress, nodes[5].completed) == (5, 1)


def test_nodes_missing_column_defaults_to_zero():
    wb = _only(
        sections.NODES_SHEET,
        [
            ["节点", "勘探井位批准", "储量评估审查"],
            ["进行中数量", 1, 2],
            ["已完成数量", 3, 4],
        ],
    )
    nodes = extract_nodes(wb, default_record()).nodes
    assert len(nodes) == 6
    assert (nodes[1].in_progress, nodes[1].completed) == (2, 4)
    assert all(n.in_progress == 0 and n.completed == 0 for n in nodes[2:])


def test_nodes_without_count_rows_keeps_default():
    wb = _only(sections.NODES_SHEET, [["勘探井位批准", "储量评估审查"], ["进行中数量", 1, 2]])
    assert extract_nodes(wb, default_record()).nodes == ()


def test_feedback(workbook):
    feedback = extract_feedback(workbook, default_record()).feedback
    assert [(f.name, f.value, f.color) for f in feedback] == [
        ("数据湖", 17, "#67e8f9"),
        ("闭环管理", 42, "#2563eb"),
    ]
    assert all(f.is_placeholder is None for f in feedback)


def test_feedback_missing_count_column_keeps_placeholders():
    wb = _only(sections.FEEDBACK_SHEET, [["问题来源", "问题数量"], ["数据湖", 3]])
    assert extract_feedback(wb, default_record()).feedback == DEFAULT_FEEDBACK


def test_quality_keeps_order_and_skips_blank_months(workbook):
    quality = extract_quality(workbook, default_record()).quality
    assert [q.month for q in quality] == ["2024-01", "2024-02"]
    assert quality[0].exploration == 95.12
    assert quality[0].average_score == 90.78
    assert quality[1].drilling == 94


def test_quality_unparseable_scores_are_zero():
    wb = _only(
        sections.QUALITY_SHEET,
        [["月度", "勘探", "总平均分"], ["1月", "—", None]],
    )
    (row,) = extract_quality(wb, default_record()).quality
    assert row.month == "1月"
    assert row.exploration == 0
    assert row.reserves == 0
    assert row.average_score == 0


def test_users(workbook):
    users = extract_users(workbook, default_record()).users
    assert (users.total, users.active, users.percentage, users.is_empty) == (100, 25, 25.0, False)


def test_users_zero_total_guard():
    wb = _only(sections.USERS_SHEET, [["用户总数", "活跃用户数"], [0, 5]])
    users = extract_users(wb, default_record()).users
    assert users.percentage == 0
    assert users.is_empty is False


def test_users_rounds_percentage():
    wb = _only(sections.USERS_SHEET, [["用户总数", "活跃用户数"], [3, 1]])
    assert extract_users(wb, default_record()).users.percentage == 33.33


def test_app_stats_strip_commas(workbook):
    stats = extract_app_stats(workbook, default_record()).app_stats
    assert stats.interface_count == 12345
    assert stats.system_calls == 1000000
    assert stats.pushed_volume == 5678
    assert stats.is_empty is False


def test_scenarios_skip_total_and_blank():
    wb = _only(
        sections.SCENARIOS_SHEET,
        [
            ["专业", "未完成", "已完成"],
            ["勘探", 5, 3],
            ["总计", 99, 99],
            [None, 1, 1],
            ["undefined", 1, 1],
            ["开发", "2", None],
        ],
    )
    scenarios = extract_scenarios(wb, default_record()).scenarios
    assert [(s.category, s.unfinished, s.finished) for s in scenarios] == [("勘探", 5, 3), ("开发", 2, 0)]


def test_scenario_concrete_case():
    wb = _only(sections.SCENARIOS_SHEET, [["专业", "未完成", "已完成"], ["勘探", 5, 3], ["总计", 99, 99]])
    (only,) = extract_scenarios(wb, default_record()).scenarios
    assert (only.category, only.unfinished, only.finished) == ("勘探", 5, 3)


def test_every_extractor_leaves_defaults_when_sheet_missing():
    extractors = [
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
    for extractor in extractors:
        assert extractor({"Sheet1": [["井", "样品"], [1, 2]]}, default_record()) == DashboardRecord()


def test_every_extractor_leaves_defaults_when_header_missing(workbook):
    blank = {name: [["无关内容"], [1, 2, 3]] for name in workbook}
    record = default_record()
    for extractor in (
        extract_main_data,
        extract_business_data,
        extract_nodes,
        extract_feedback,
        extract_quality,
        extract_users,
        extract_app_stats,
        extract_scenarios,
        extract_history_new_volume,
        extract_total_volume,
    ):
        record = extractor(blank, record)
    assert record == default_record()
