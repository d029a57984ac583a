"""Intake of confirmed voice/parser tuples."""

import logging
import uuid
from typing import Optional

from planlog.models.activity import Activity
from planlog.models.block import Block, BlockSource, Layer
from planlog.models.constants import VOICE_ACTIVITY_COLORS
from planlog.models.voice import VoiceConfirmation
from planlog.engine.block_store import BlockStore
from planlog.engine.painting import commit_range

logger = logging.getLogger(__name__)


def resolve_activity(store: BlockStore, name: str) -> Activity:
    """Find an activity by name or create one with the next palette color."""
    existing = store.find_activity_by_name(name)
    if existing is not None:
        return existing

    color = VOICE_ACTIVITY_COLORS[len(store.activities) % len(VOICE_ACTIVITY_COLORS)]
    activity = Activity(id=f"voice_{uuid.uuid4()}", name=name.strip(), color=color)
    store.add_activity(activity)
    logger.info(f"Created activity {activity.id} ({activity.name}) from voice intake")
    return activity


def apply_voice_confirmation(store: BlockStore, confirmation: VoiceConfirmation, layer=Layer.PLAN) -> Optional[Block]:
    """Write a confirmed ``{date, start, end, activity}`` tuple as one range block.

    The block goes through the same range commit as a manual range drag and is tagged with
    source ``voice``.
    """
    activity = resolve_activity(store, confirmation.activity_name)
    return commit_range(
        store,
        confirmation.date_iso,
        layer,
        confirmation.start_min,
        confirmation.end_min,
        activity.id,
        source=BlockSource.VOICE,
    )
