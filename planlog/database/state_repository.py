"""Repository for saved planner state."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from planlog.database.migration import load_state
from planlog.database.models import PlannerStateDB
from planlog.models.constants import DEFAULT_STATE_KEY, SCHEMA_VERSION
from planlog.models.state import PersistedState

logger = logging.getLogger(__name__)


class PlannerStateRepository:
    """Repository for PersistedState database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, state_key: str) -> Optional[PlannerStateDB]:
        return self.db.query(PlannerStateDB).filter(PlannerStateDB.id == state_key).first()

    def exists(self, state_key: str = DEFAULT_STATE_KEY) -> bool:
        return self._get_row(state_key) is not None

    def load(self, state_key: str = DEFAULT_STATE_KEY) -> PersistedState:
        """Load saved state; missing, unreadable or legacy rows never raise.

        A legacy row that migrates successfully is written back in the current schema.
        """
        try:
            row = self._get_row(state_key)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Failed to read planner state {state_key}, starting empty: {type(e).__name__}: {str(e)}")
            return PersistedState()
        if row is None:
            return PersistedState()

        state = load_state(row.payload)
        if row.schema_version != SCHEMA_VERSION and (state.blocks_by_date or state.week_plans or state.activities):
            logger.info(f"Rewriting migrated state {state_key} at schema version {SCHEMA_VERSION}")
            self.save(state, state_key)
        return state

    def save(self, state: PersistedState, state_key: str = DEFAULT_STATE_KEY) -> PersistedState:
        """Insert or replace the saved state."""
        try:
            row = self._get_row(state_key)
            if row is None:
                row = PlannerStateDB(id=state_key)
                self.db.add(row)
            row.schema_version = state.schema_version
            row.payload = state.to_payload()
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Saved planner state {state_key}")
            return state
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save planner state {state_key}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, state_key: str = DEFAULT_STATE_KEY) -> bool:
        try:
            row = self._get_row(state_key)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted planner state {state_key}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete planner state {state_key}: {type(e).__name__}: {str(e)}")
            raise

    def save_legacy(self, payload: dict, state_key: str = DEFAULT_STATE_KEY) -> None:
        """Store a raw legacy (schema version 1) payload, as an import would find it."""
        try:
            row = self._get_row(state_key) or PlannerStateDB(id=state_key)
            row.schema_version = 1
            row.payload = payload
            self.db.add(row)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to store legacy state {state_key}: {type(e).__name__}: {str(e)}")
            raise
