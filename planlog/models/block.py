"""Block data model for planlog.

A Block is a stored time range ``[start_min, end_min)`` on one date, tagged with an
activity and a layer. Blocks are the source of truth for occupancy; everything the
grid shows is derived from them.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from planlog.models.constants import MINUTES_PER_DAY


class Layer(str, Enum):
    """Layer enumeration."""
    EXECUTE = "execute"
    OVERLAY = "overlay"
    PLAN = "plan"
    PLAN_OVERLAY = "planOverlay"


# Layers stored per date vs. per week
DAY_LAYERS = (Layer.EXECUTE, Layer.OVERLAY)
PLAN_LAYERS = (Layer.PLAN, Layer.PLAN_OVERLAY)

# Primary slot -> secondary slot for the two-slot painting rule
SECONDARY_LAYER = {
    Layer.EXECUTE: Layer.OVERLAY,
    Layer.PLAN: Layer.PLAN_OVERLAY,
}


def is_plan_layer(layer) -> bool:
    """Whether a layer is stored in the week plan rather than the day."""
    return Layer(layer) in PLAN_LAYERS


class BlockSource(str, Enum):
    """How a block was created."""
    DRAG = "drag"
    SELECT = "select"
    MANUAL = "manual"
    WEEK_PLAN = "week_plan"
    IMPORT = "import"
    VOICE = "voice"
    FIXED_SCHEDULE = "fixed_schedule"
    TEMPLATE_APPLY = "template_apply"


class Block(BaseModel):
    """Block represents one activity occupying a time range on one layer."""

    id: str = Field(..., description="Unique block identifier")
    date_iso: str = Field(..., alias="dateISO", description="Date (YYYY-MM-DD) the block belongs to")
    start_min: int = Field(..., alias="startMin", description="Start minute since 00:00 (inclusive)")
    end_min: int = Field(..., alias="endMin", description="End minute since 00:00 (exclusive)")
    activity_id: str = Field(..., alias="activityId", description="Referenced activity (may dangle)")
    layer: Layer = Field(..., description="Layer the block is painted on")
    source: BlockSource = Field(BlockSource.DRAG, description="How the block was created")
    title: Optional[str] = Field(None, description="Optional label for range drafts")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True

    @field_validator("start_min")
    @classmethod
    def _start_in_day(cls, v: int) -> int:
        if v < 0 or v >= MINUTES_PER_DAY:
            raise ValueError("start_min must be within [0, 1440)")
        return v

    @field_validator("end_min")
    @classmethod
    def _end_in_day(cls, v: int) -> int:
        if v <= 0 or v > MINUTES_PER_DAY:
            raise ValueError("end_min must be within (0, 1440]")
        return v

    @model_validator(mode="after")
    def _non_empty(self) -> "Block":
        if self.end_min <= self.start_min:
            raise ValueError("end_min must be greater than start_min")
        return self

    @property
    def duration_min(self) -> int:
        return self.end_min - self.start_min

    def intersects(self, start_min: int, end_min: int) -> bool:
        """Whether the block shares at least one minute with ``[start_min, end_min)``."""
        return start_min < self.end_min and end_min > self.start_min
