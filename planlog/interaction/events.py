"""Pointer event model consumed by the gesture controller."""

from dataclasses import dataclass
from typing import Optional

PRIMARY_BUTTON = 1

HANDLE_START = "start"
HANDLE_END = "end"


@dataclass(frozen=True)
class PointerEvent:
    """One pointer event, already hit-tested by the host surface.

    ``cell_id`` is the grid cell under the pointer (None outside the grid). ``relative_y`` and
    ``cell_height`` locate the pointer inside that cell; ``overlay_hit`` is set when the press
    landed on the cell's explicit overlay hit region. For resize handles, ``handle`` names the
    side and ``minute`` is the (unsnapped) minute within the hour under the pointer.
    """

    pointer_id: int
    x: float = 0.0
    y: float = 0.0
    buttons: int = PRIMARY_BUTTON
    cell_id: Optional[str] = None
    relative_y: Optional[float] = None
    cell_height: Optional[float] = None
    overlay_hit: bool = False
    minute: Optional[float] = None
    handle: Optional[str] = None

    @property
    def primary_pressed(self) -> bool:
        return bool(self.buttons & PRIMARY_BUTTON)
