"""Versioned persisted state for planlog."""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

from planlog.models.activity import Activity
from planlog.models.block import Block
from planlog.models.checklist import ChecklistBlock
from planlog.models.constants import DEFAULT_START_HOUR, SCHEMA_VERSION
from planlog.models.indicator import IndicatorEvent
from planlog.models.memo import MemoBlock
from planlog.models.segment import FineBounds


class Theme(str, Enum):
    """UI theme enumeration."""
    LIGHT = "light"
    DARK = "dark"


class PersistedState(BaseModel):
    """Everything the planner saves between sessions (schema version 2)."""

    version: int = Field(SCHEMA_VERSION, description="Payload format version")
    schema_version: int = Field(SCHEMA_VERSION, alias="schemaVersion", description="Schema version")
    activities: List[Activity] = Field(default_factory=list, description="Known activities")
    blocks_by_date: Dict[str, List[Block]] = Field(
        default_factory=dict, alias="blocksByDate", description="execute/overlay blocks keyed by date"
    )
    week_plans: Dict[str, List[Block]] = Field(
        default_factory=dict, alias="weekPlans", description="plan/planOverlay blocks keyed by week"
    )
    checklist_blocks_by_date: Dict[str, List[ChecklistBlock]] = Field(
        default_factory=dict, alias="checklistBlocksByDate", description="Checklist blocks keyed by date"
    )
    indicators_by_date: Dict[str, List[IndicatorEvent]] = Field(
        default_factory=dict, alias="indicatorsByDate", description="Indicators keyed by date"
    )
    memos_by_date: Dict[str, List[MemoBlock]] = Field(
        default_factory=dict, alias="memosByDate", description="Hour memos keyed by date"
    )
    fine_bounds: Dict[str, FineBounds] = Field(
        default_factory=dict, alias="fineBounds", description="Fine bounds keyed by segment signature"
    )
    start_hour: int = Field(DEFAULT_START_HOUR, alias="startHour", ge=0, le=23, description="First hour-row")
    theme: Theme = Field(Theme.LIGHT, description="UI theme")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True

    def to_payload(self) -> dict:
        """JSON-ready payload using the persisted (camelCase) key names."""
        return self.model_dump(mode="json", by_alias=True)
