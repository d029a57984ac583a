"""Long-press discriminator.

A cancellable timer started on pointer down. It fires after LONG_PRESS_MS unless the pointer
moves beyond the squared-distance threshold or the gesture controller cancels it because a
drag reached another cell.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from planlog.models.constants import LONG_PRESS_MOVE_THRESHOLD_SQ, LONG_PRESS_MS
from planlog.interaction.layer_intent import LayerIntent
from planlog.interaction.timers import TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LongPressCapture:
    """What the press looked like when it started."""

    pointer_id: int
    cell_id: str
    x: float
    y: float
    intent: Optional[LayerIntent] = None
    relative_y: Optional[float] = None
    cell_height: Optional[float] = None


class LongPressDiscriminator:
    """Races a hold timer against movement for one pointer."""

    def __init__(
        self,
        scheduler: TimerScheduler,
        on_fire: Callable[[LongPressCapture], None],
        delay_ms: int = LONG_PRESS_MS,
        threshold_sq: float = LONG_PRESS_MOVE_THRESHOLD_SQ,
    ):
        self.scheduler = scheduler
        self.on_fire = on_fire
        self.delay_ms = delay_ms
        self.threshold_sq = threshold_sq
        self.capture: Optional[LongPressCapture] = None
        self._handle: Optional[TimerHandle] = None

    @property
    def active(self) -> bool:
        return self.capture is not None

    def start(self, capture: LongPressCapture) -> None:
        self.cancel()
        self.capture = capture
        self._handle = self.scheduler.call_later(self.delay_ms / 1000.0, self._fire)
        logger.debug(f"Long-press armed for pointer {capture.pointer_id} at {capture.cell_id}")

    def observe_move(self, pointer_id: int, x: float, y: float) -> bool:
        """Feed a move; cancels once the pointer strays past the threshold.

        Returns:
            True if this move cancelled the pending long-press
        """
        capture = self.capture
        if capture is None or capture.pointer_id != pointer_id:
            return False
        dx, dy = x - capture.x, y - capture.y
        if dx * dx + dy * dy > self.threshold_sq:
            self.cancel("moved")
            return True
        return False

    def cancel(self, reason: str = "") -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self.capture is not None and reason:
            logger.debug(f"Long-press cancelled ({reason})")
        self.capture = None

    def _fire(self) -> None:
        capture = self.capture
        self._handle = None
        self.capture = None
        if capture is None:
            return
        logger.debug(f"Long-press fired for pointer {capture.pointer_id} at {capture.cell_id}")
        self.on_fire(capture)
