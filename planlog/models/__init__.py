"""Data models for planlog."""

from planlog.models.activity import Activity
from planlog.models.block import Block, BlockSource, Layer, DAY_LAYERS, PLAN_LAYERS
from planlog.models.checklist import ChecklistBlock, ChecklistItem
from planlog.models.indicator import IndicatorEvent
from planlog.models.memo import MemoBlock
from planlog.models.segment import Segment, SegmentSignature, FineBounds
from planlog.models.tool import Tool, DayMode, ToolResolutionError, resolve_tool
from planlog.models.voice import VoiceConfirmation
from planlog.models.state import PersistedState, Theme

__all__ = [
    "Activity",
    "Block",
    "BlockSource",
    "Layer",
    "DAY_LAYERS",
    "PLAN_LAYERS",
    "ChecklistBlock",
    "ChecklistItem",
    "IndicatorEvent",
    "MemoBlock",
    "Segment",
    "SegmentSignature",
    "FineBounds",
    "Tool",
    "DayMode",
    "ToolResolutionError",
    "resolve_tool",
    "VoiceConfirmation",
    "PersistedState",
    "Theme",
]
