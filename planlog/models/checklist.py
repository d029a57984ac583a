"""Checklist block data model for planlog."""

from typing import List, Optional

from pydantic import BaseModel, Field

from planlog.models.block import Layer


class ChecklistItem(BaseModel):
    """A single checkable line inside a checklist block."""

    id: str = Field(..., description="Unique item identifier")
    text: str = Field("", description="Item text")
    done: bool = Field(False, description="Whether the item is checked")


class ChecklistBlock(BaseModel):
    """A short checklist attached to a sub-range of a day.

    Checklist blocks are independent of Blocks: they may overlap blocks and each other freely.
    """

    id: str = Field(..., description="Unique checklist block identifier")
    date_iso: str = Field(..., alias="dateISO", description="Date (YYYY-MM-DD)")
    start_min: int = Field(..., alias="startMin", description="Start minute since 00:00")
    end_min: int = Field(..., alias="endMin", description="End minute since 00:00 (exclusive)")
    layer: Layer = Field(Layer.EXECUTE, description="Layer the checklist annotates")
    activity_id: Optional[str] = Field(None, alias="activityId", description="Activity under the checklist")
    items: List[ChecklistItem] = Field(default_factory=list, description="Checklist items")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True

    def covers(self, minute: int) -> bool:
        return self.start_min <= minute < self.end_min
