"""Tool vocabulary for planlog.

There is exactly one tool type. Legacy and alternate spellings are resolved once, at the
boundary, through ``TOOL_ALIASES``.
"""

from enum import Enum
from typing import Dict, Union


class Tool(str, Enum):
    """Interaction tool enumeration."""
    PAINT = "paint"
    ERASE = "erase"
    NEW_RANGE = "new_range"
    PLAN_RANGE = "plan_range"
    SELECT = "select"
    INDICATOR = "indicator"
    MEMO = "memo"


class DayMode(str, Enum):
    """Which pair of layers day-view tools write to."""
    EXECUTE = "execute"
    PLAN = "plan"


class ToolResolutionError(ValueError):
    """Raised when a tool name does not resolve to a known tool."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name!r}")
        self.name = name


# Lower-cased alias -> canonical tool
TOOL_ALIASES: Dict[str, Tool] = {
    "paint": Tool.PAINT,
    "execute": Tool.PAINT,
    "erase": Tool.ERASE,
    "new_range": Tool.NEW_RANGE,
    "new": Tool.NEW_RANGE,
    "new_event": Tool.NEW_RANGE,
    "plan_range": Tool.PLAN_RANGE,
    "plan": Tool.PLAN_RANGE,
    "select": Tool.SELECT,
    "indicator": Tool.INDICATOR,
    "memo": Tool.MEMO,
}


def resolve_tool(value: Union[Tool, str]) -> Tool:
    """Resolve a tool or tool alias to the canonical ``Tool``.

    Raises:
        ToolResolutionError: if the name is not a known tool or alias
    """
    if isinstance(value, Tool):
        return value
    key = (value or "").strip().lower()
    try:
        return TOOL_ALIASES[key]
    except KeyError:
        raise ToolResolutionError(value) from None
