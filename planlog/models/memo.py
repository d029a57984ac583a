"""Memo data model for planlog."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from planlog.models.block import DAY_LAYERS, Layer


class MemoBlock(BaseModel):
    """A free-text note anchored to one hour-row of a day layer.

    Execute memos are tied to the activity they describe and an execute hour holds at most
    two per activity (slots 0 and 1). Overlay memos belong to the hour as a whole, one each.
    """

    id: str = Field(..., description="Unique memo identifier")
    date_iso: str = Field(..., alias="dateISO", description="Date (YYYY-MM-DD)")
    layer: Layer = Field(Layer.EXECUTE, description="Day layer the memo annotates")
    hour: int = Field(..., ge=0, le=23, description="Hour the memo is anchored to")
    activity_id: Optional[str] = Field(None, alias="activityId", description="Activity the memo is about")
    slot: int = Field(0, ge=0, le=1, description="Memo slot within the hour")
    text: str = Field("", description="Memo text")
    updated_at: datetime = Field(default_factory=datetime.utcnow, alias="updatedAt", description="Last edit")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True

    @field_validator("layer")
    @classmethod
    def _day_layer_only(cls, v):
        if Layer(v) not in DAY_LAYERS:
            raise ValueError("memos annotate execute or overlay only")
        return v

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()
