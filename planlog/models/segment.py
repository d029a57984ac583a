"""Render-side models: segments, segment signatures and fine bounds."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

from planlog.models.constants import CELL_MINUTES


@dataclass(frozen=True)
class Segment:
    """A maximal run of one activity within one hour-row of one layer.

    ``row`` is the offset from the configured start hour; ``start_col``/``end_col`` are
    inclusive 10-minute columns (0..5). ``round_start``/``round_end`` say whether the
    left/right edge should be drawn rounded (False means the neighbouring cell, wrapping
    across the hour boundary, continues the same activity on the same layer).
    """

    row: int
    start_col: int
    end_col: int
    layer: str
    activity_id: str
    round_start: bool = True
    round_end: bool = True

    @property
    def coarse_start_minute(self) -> int:
        return self.start_col * CELL_MINUTES

    @property
    def coarse_end_minute(self) -> int:
        return (self.end_col + 1) * CELL_MINUTES

    def contains_col(self, col: int) -> bool:
        return self.start_col <= col <= self.end_col


@dataclass(frozen=True)
class SegmentSignature:
    """Identity of a segment for fine-bound lookups."""

    date_iso: str
    hour: int
    layer: str
    activity_id: str
    start_col: int
    end_col: int

    def key(self) -> str:
        return f"{self.date_iso}|{self.hour}|{self.layer}|{self.activity_id}|{self.start_col}-{self.end_col}"


class FineBounds(BaseModel):
    """Minute-precision override of a segment's coarse window (minutes within the hour)."""

    start_minute: int = Field(..., alias="startMinute", ge=0, le=60, description="Start minute within the hour")
    end_minute: int = Field(..., alias="endMinute", ge=0, le=60, description="End minute within the hour")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
