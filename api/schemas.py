from __future__ import annotations

from typing import Callable, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from govdash.models import default_record, record_to_dict


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VolumeModel(CamelModel):
    total: Union[float, str] = "???"
    new: Union[float, str] = "???"
    history: Union[float, str] = "???"
    unit: str = "万"


class NodeProgressModel(CamelModel):
    name: str
    in_progress: float = 0.0
    completed: float = 0.0


class FeedbackModel(CamelModel):
    name: str
    value: float
    color: str
    is_placeholder: Optional[bool] = None
    display_value: Optional[str] = None


class QualityMetricModel(CamelModel):
    month: str
    exploration: float = 0.0
    reserves: float = 0.0
    development: float = 0.0
    production: float = 0.0
    engineering: float = 0.0
    drilling: float = 0.0
    average_score: float = 0.0


class DataListItemModel(CamelModel):
    label: str
    value: str = "???"
    is_highlight: Optional[bool] = None


class UserStatsModel(CamelModel):
    active: float = 0.0
    total: float = 0.0
    percentage: float = 0.0
    is_empty: bool = True


class AppStatsModel(CamelModel):
    system_calls: float = 0.0
    interface_count: float = 0.0
    pushed_volume: float = 0.0
    is_empty: bool = True


class ScenarioModel(CamelModel):
    category: str
    unfinished: float = 0.0
    finished: float = 0.0


def _record_defaults(key: str, model: Type[CamelModel]) -> Callable[[], list]:
    def factory() -> list:
        return [model.model_validate(item) for item in record_to_dict(default_record())[key]]

    return factory


class DashboardRecordModel(CamelModel):
    volume: VolumeModel = Field(default_factory=VolumeModel)
    nodes: List[NodeProgressModel] = Field(default_factory=list)
    feedback: List[FeedbackModel] = Field(default_factory=_record_defaults("feedback", FeedbackModel))
    quality: List[QualityMetricModel] = Field(default_factory=list)
    main_data_list: List[DataListItemModel] = Field(default_factory=_record_defaults("mainDataList", DataListItemModel))
    business_data_list: List[DataListItemModel] = Field(
        default_factory=_record_defaults("businessDataList", DataListItemModel)
    )
    users: UserStatsModel = Field(default_factory=UserStatsModel)
    app_stats: AppStatsModel = Field(default_factory=AppStatsModel)
    scenarios: List[ScenarioModel] = Field(default_factory=list)


class SaveDataRequest(BaseModel):
    data: DashboardRecordModel


class SaveDataResponse(BaseModel):
    success: bool
    message: str


class ParseResponse(BaseModel):
    data: DashboardRecordModel


class UploadResponse(BaseModel):
    data: DashboardRecordModel
    saved: bool
    error: Optional[str] = None


class LatestDataResponse(BaseModel):
    status: str
    data: Optional[DashboardRecordModel] = None
