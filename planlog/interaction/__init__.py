"""Pointer interaction layer for planlog."""

from planlog.interaction.events import PointerEvent
from planlog.interaction.gestures import GestureController
from planlog.interaction.layer_intent import LayerIntent, choose_layer, intent_from_position
from planlog.interaction.long_press import LongPressCapture, LongPressDiscriminator
from planlog.interaction.resize import ResizeController
from planlog.interaction.session import PlannerSession
from planlog.interaction.state import FinePending, GesturePhase, GestureState
from planlog.interaction.timers import AsyncioTimerScheduler, TimerScheduler

__all__ = [
    "PointerEvent",
    "GestureController",
    "LayerIntent",
    "choose_layer",
    "intent_from_position",
    "LongPressCapture",
    "LongPressDiscriminator",
    "ResizeController",
    "PlannerSession",
    "FinePending",
    "GesturePhase",
    "GestureState",
    "AsyncioTimerScheduler",
    "TimerScheduler",
]
