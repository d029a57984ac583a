"""Activity data model for planlog."""

from pydantic import BaseModel, Field


class Activity(BaseModel):
    """An activity that blocks paint onto the day line."""

    id: str = Field(..., description="Unique activity identifier")
    name: str = Field(..., description="Display name")
    color: str = Field("#888888", description="Display color (hex)")
    is_system: bool = Field(False, alias="isSystem", description="Whether this is a built-in activity")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
