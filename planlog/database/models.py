"""SQLAlchemy database models for planlog."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, JSON, String

from planlog.database.database import Base
from planlog.models.constants import DEFAULT_STATE_KEY, SCHEMA_VERSION


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlannerStateDB(Base):
    """Database row holding one saved planner state payload."""

    __tablename__ = "planner_states"

    # Primary key (state key; single-user installs use "default")
    id = Column(String, primary_key=True, default=DEFAULT_STATE_KEY)

    schema_version = Column(Integer, nullable=False, default=SCHEMA_VERSION)

    # camelCase JSON of PersistedState (or a legacy v1 payload awaiting migration)
    payload = Column(JSON, nullable=False, default=dict)

    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<PlannerStateDB id={self.id} schema_version={self.schema_version}>"
