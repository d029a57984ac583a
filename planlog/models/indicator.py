"""Indicator event data model for planlog."""

from typing import Optional

from pydantic import BaseModel, Field


class IndicatorEvent(BaseModel):
    """A time-stamped label pinned to a point on the day line (e.g. "woke up")."""

    id: str = Field(..., description="Unique indicator identifier")
    date_iso: str = Field(..., alias="dateISO", description="Date (YYYY-MM-DD)")
    at_min: int = Field(..., alias="atMin", ge=0, le=24 * 60, description="Minute since 00:00")
    label: str = Field(..., description="Short label")
    time_text: Optional[str] = Field(None, alias="timeText", description="Display time text (HH:MM)")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
