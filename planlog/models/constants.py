"""Constants for planlog.

This module centralizes all magic numbers and default values used throughout the application.
"""

import os


# Day grid geometry
CELL_MINUTES = 10
CELLS_PER_HOUR = 6
HOURS_PER_DAY = 24
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * 60
CELLS_PER_DAY = HOURS_PER_DAY * CELLS_PER_HOUR
LAST_COL = CELLS_PER_HOUR - 1

# Minimum spans when correcting inverted ranges
MIN_COARSE_SPAN_MIN = CELL_MINUTES
MIN_FINE_SPAN_MIN = 1

# Gesture timing
LONG_PRESS_MS = 450
FINE_ADJUST_HOLD_MS = 450
LONG_PRESS_MOVE_THRESHOLD_SQ = 36  # 6px

# Layer-intent heuristic (overlay strip at the bottom of a cell)
OVERLAY_STRIP_MIN_PX = 18
OVERLAY_STRIP_MAX_PX = 32
OVERLAY_STRIP_RATIO = 0.4

# Checklist blocks
DEFAULT_CHECKLIST_SPAN_MIN = 10

# Persistence
SCHEMA_VERSION = 2
DEFAULT_STATE_KEY = "default"

# Voice intake: colors assigned to activities created from a confirmed phrase
VOICE_ACTIVITY_COLORS = [
    "#FB7185",
    "#F97316",
    "#FBBF24",
    "#22C55E",
    "#10B981",
    "#06B6D4",
    "#3B82F6",
    "#8B5CF6",
    "#6B7280",
]
DEFAULT_ACTIVITY_COLOR = "#888888"

# Environment-tunable defaults
HISTORY_LIMIT = int(os.getenv("PLANLOG_HISTORY_LIMIT", "50"))
DEFAULT_START_HOUR = int(os.getenv("PLANLOG_START_HOUR", "6")) % HOURS_PER_DAY
