from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


PLACEHOLDER = "???"
VOLUME_UNIT = "万"

Number = Union[float, str]


@dataclass(frozen=True)
class VolumeStats:
    total: Number = PLACEHOLDER
    new: Number = PLACEHOLDER
    history: Number = PLACEHOLDER
    unit: str = VOLUME_UNIT


@dataclass(frozen=True)
class NodeProgress:
    name: str
    in_progress: float = 0.0
    completed: float = 0.0


@dataclass(frozen=True)
class FeedbackItem:
    name: str
    value: float
    color: str
    is_placeholder: Optional[bool] = None
    display_value: Optional[str] = None


@dataclass(frozen=True)
class QualityMetric:
    month: str
    exploration: float = 0.0
    reserves: float = 0.0
    development: float = 0.0
    production: float = 0.0
    engineering: float = 0.0
    drilling: float = 0.0
    average_score: float = 0.0


@dataclass(frozen=True)
class DataListItem:
    label: str
    value: str = PLACEHOLDER
    is_highlight: Optional[bool] = None


@dataclass(frozen=True)
class UserStats:
    active: float = 0.0
    total: float = 0.0
    percentage: float = 0.0
    is_empty: bool = True


@dataclass(frozen=True)
class AppStats:
    system_calls: float = 0.0
    interface_count: float = 0.0
    pushed_volume: float = 0.0
    is_empty: bool = True


@dataclass(frozen=True)
class ScenarioItem:
    category: str
    unfinished: float = 0.0
    finished: float = 0.0


MAIN_DATA_LABELS: Tuple[str, ...] = (
    "井主数据",
    "样品主数据",
    "地质油藏主数据",
    "物探工区主数据",
    "设备设施主数据",
    "生产管理主数据",
    "其他主数据",
)

BUSINESS_DATA_LABELS: Tuple[str, ...] = (
    "勘探业务数据",
    "储量业务数据",
    "开发业务数据",
    "生产业务数据",
    "工程建设业务数据",
    "钻完井业务数据",
)

DEFAULT_FEEDBACK: Tuple[FeedbackItem, ...] = (
    FeedbackItem(name="数据湖", value=50.0, color="#e2e8f0", is_placeholder=True, display_value=PLACEHOLDER),
    FeedbackItem(name="闭环管理", value=50.0, color="#cbd5e1", is_placeholder=True, display_value=PLACEHOLDER),
)


@dataclass(frozen=True)
class DashboardRecord:
    """Everything the dashboard renders; every field always has a renderable default."""

    volume: VolumeStats = field(default_factory=VolumeStats)
    nodes: Tuple[NodeProgress, ...] = ()
    feedback: Tuple[FeedbackItem, ...] = DEFAULT_FEEDBACK
    quality: Tuple[QualityMetric, ...] = ()
    main_data_list: Tuple[DataListItem, ...] = tuple(DataListItem(label=label) for label in MAIN_DATA_LABELS)
    business_data_list: Tuple[DataListItem, ...] = tuple(
        DataListItem(label=label, is_highlight=True) for label in BUSINESS_DATA_LABELS
    )
    users: UserStats = field(default_factory=UserStats)
    app_stats: AppStats = field(default_factory=AppStats)
    scenarios: Tuple[ScenarioItem, ...] = ()


def default_record() -> DashboardRecord:
    return DashboardRecord()


# ---------------- JSON shape ----------------
def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def record_to_dict(record: DashboardRecord) -> Dict[str, Any]:
    """Serialize to the camelCase mapping the front end consumes."""
    return {
        "volume": {
            "total": record.volume.total,
            "new": record.volume.new,
            "history": record.volume.history,
            "unit": record.volume.unit,
        },
        "nodes": [{"name": n.name, "inProgress": n.in_progress, "completed": n.completed} for n in record.nodes],
        "feedback": [
            _drop_none(
                {
                    "name": f.name,
                    "value": f.value,
                    "color": f.color,
                    "isPlaceholder": f.is_placeholder,
                    "displayValue": f.display_value,
                }
            )
            for f in record.feedback
        ],
        "quality": [
            {
                "month": q.month,
                "exploration": q.exploration,
                "reserves": q.reserves,
                "development": q.development,
                "production": q.production,
                "engineering": q.engineering,
                "drilling": q.drilling,
                "averageScore": q.average_score,
            }
            for q in record.quality
        ],
        "mainDataList": [_drop_none({"label": i.label, "value": i.value, "isHighlight": i.is_highlight}) for i in record.main_data_list],
        "businessDataList": [
            _drop_none({"label": i.label, "value": i.value, "isHighlight": i.is_highlight}) for i in record.business_data_list
        ],
        "users": {
            "active": record.users.active,
            "total": record.users.total,
            "percentage": record.users.percentage,
            "isEmpty": record.users.is_empty,
        },
        "appStats": {
            "systemCalls": record.app_stats.system_calls,
            "interfaceCount": record.app_stats.interface_count,
            "pushedVolume": record.app_stats.pushed_volume,
            "isEmpty": record.app_stats.is_empty,
        },
        "scenarios": [{"category": s.category, "unfinished": s.unfinished, "finished": s.finished} for s in record.scenarios],
    }


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {type(value).__name__}")
    return float(value)


def _number_or_text(value: Any, key: str) -> Number:
    if isinstance(value, str):
        return value
    return _number(value, key)


def _text(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _opt_bool(value: Any) -> Optional[bool]:
    return None if value is None else bool(value)


def _items(raw: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = raw[key]
    if not isinstance(value, list) or not all(isinstance(v, Mapping) for v in value):
        raise ValueError(f"{key} must be a list of objects")
    return value


def record_from_dict(raw: Mapping[str, Any]) -> DashboardRecord:
    """Rebuild a record from :func:`record_to_dict` output.

    Raises ``ValueError`` (or ``KeyError``/``TypeError``) when the mapping does
    not have the expected shape.
    """
    if not isinstance(raw, Mapping):
        raise ValueError("record must be an object")
    vol = raw["volume"]
    users = raw["users"]
    app = raw["appStats"]
    return DashboardRecord(
        volume=VolumeStats(
            total=_number_or_text(vol["total"], "volume.total"),
            new=_number_or_text(vol["new"], "volume.new"),
            history=_number_or_text(vol["history"], "volume.history"),
            unit=_text(vol.get("unit", VOLUME_UNIT), "volume.unit"),
        ),
        nodes=tuple(
            NodeProgress(
                name=_text(n["name"], "nodes.name"),
                in_progress=_number(n["inProgress"], "nodes.inProgress"),
                completed=_number(n["completed"], "nodes.completed"),
            )
            for n in _items(raw, "nodes")
        ),
        feedback=tuple(
            FeedbackItem(
                name=_text(f["name"], "feedback.name"),
                value=_number(f["value"], "feedback.value"),
                color=_text(f["color"], "feedback.color"),
                is_placeholder=_opt_bool(f.get("isPlaceholder")),
                display_value=f.get("displayValue"),
            )
            for f in _items(raw, "feedback")
        ),
        quality=tuple(
            QualityMetric(
                month=_text(q["month"], "quality.month"),
                exploration=_number(q["exploration"], "quality.exploration"),
                reserves=_number(q["reserves"], "quality.reserves"),
                development=_number(q["development"], "quality.development"),
                production=_number(q["production"], "quality.production"),
                engineering=_number(q["engineering"], "quality.engineering"),
                drilling=_number(q["drilling"], "quality.drilling"),
                average_score=_number(q["averageScore"], "quality.averageScore"),
            )
            for q in _items(raw, "quality")
        ),
        main_data_list=tuple(
            DataListItem(
                label=_text(i["label"], "mainDataList.label"),
                value=_text(i["value"], "mainDataList.value"),
                is_highlight=_opt_bool(i.get("isHighlight")),
            )
            for i in _items(raw, "mainDataList")
        ),
        business_data_list=tuple(
            DataListItem(
                label=_text(i["label"], "businessDataList.label"),
                value=_text(i["value"], "businessDataList.value"),
                is_highlight=_opt_bool(i.get("isHighlight")),
            )
            for i in _items(raw, "businessDataList")
        ),
        users=UserStats(
            active=_number(users["active"], "users.active"),
            total=_number(users["total"], "users.total"),
            percentage=_number(users["percentage"], "users.percentage"),
            is_empty=bool(users.get("isEmpty", False)),
        ),
        app_stats=AppStats(
            system_calls=_number(app["systemCalls"], "appStats.systemCalls"),
            interface_count=_number(app["interfaceCount"], "appStats.interfaceCount"),
            pushed_volume=_number(app["pushedVolume"], "appStats.pushedVolume"),
            is_empty=bool(app.get("isEmpty", False)),
        ),
        scenarios=tuple(
            ScenarioItem(
                category=_text(s["category"], "scenarios.category"),
                unfinished=_number(s["unfinished"], "scenarios.unfinished"),
                finished=_number(s["finished"], "scenarios.finished"),
            )
            for s in _items(raw, "scenarios")
        ),
    )
