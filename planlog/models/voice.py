"""Confirmed voice/parser intake model for planlog."""

from pydantic import BaseModel, Field


class VoiceConfirmation(BaseModel):
    """A fully confirmed ``{date, start, end, activity}`` tuple from an external parser.

    Disambiguation happens before this boundary; partial input never reaches the core.
    """

    date_iso: str = Field(..., alias="dateISO", description="Target date (YYYY-MM-DD)")
    start_min: int = Field(..., alias="startMin", description="Start minute since 00:00")
    end_min: int = Field(..., alias="endMin", description="End minute since 00:00")
    activity_name: str = Field(..., alias="activityName", min_length=1, description="Activity name as spoken")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
