"""Execute-vs-overlay intent for presses inside a cell.

The bottom strip of a cell (between 18 and 32 px, 40 % of the cell height) is the overlay
target; everything above it is execute.
"""

from enum import Enum
from typing import Optional

from planlog.models.block import Layer
from planlog.models.constants import OVERLAY_STRIP_MAX_PX, OVERLAY_STRIP_MIN_PX, OVERLAY_STRIP_RATIO


class LayerIntent(str, Enum):
    """Layer a press inside a cell is aimed at."""
    EXECUTE = "execute"
    OVERLAY = "overlay"


def overlay_strip_height(cell_height: float) -> float:
    return max(OVERLAY_STRIP_MIN_PX, min(OVERLAY_STRIP_MAX_PX, cell_height * OVERLAY_STRIP_RATIO))


def intent_from_position(relative_y: float, cell_height: float) -> LayerIntent:
    """Pure geometric heuristic: presses in the bottom strip target the overlay."""
    if relative_y >= cell_height - overlay_strip_height(cell_height):
        return LayerIntent.OVERLAY
    return LayerIntent.EXECUTE


def choose_layer(
    has_execute: bool,
    has_overlay: bool,
    explicit: Optional[LayerIntent] = None,
    relative_y: Optional[float] = None,
    cell_height: Optional[float] = None,
) -> Layer:
    """Pick the layer a long-press refers to.

    With both layers occupied, an explicit intent wins, then the geometric heuristic when the
    press geometry is known, else execute. With only an overlay, the overlay. Otherwise execute.
    """
    if has_execute and has_overlay:
        if explicit is not None:
            return Layer(LayerIntent(explicit).value)
        if relative_y is not None and cell_height:
            return Layer(intent_from_position(relative_y, cell_height).value)
        return Layer.EXECUTE
    if has_overlay:
        return Layer.OVERLAY
    return Layer.EXECUTE
