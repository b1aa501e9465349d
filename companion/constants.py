"""
Application Constants
=====================

Display layout and text constants shared by the presentation layer.

Usage:
    from companion.constants import DisplayLayout, Messages
"""

# =============================================================================
# Display Layout (pixels)
# =============================================================================


class DisplayLayout:
    """Cursor positions on the 128x64 OLED."""

    POINTS_CURSOR = (0, 0)
    MESSAGE_CURSOR = (0, 2)
    STATUS_CURSOR = (0, 0)
    # Below the points line so both stay readable
    IMAGE_MISSING_CURSOR = (0, 16)
    LINE_HEIGHT = 10
    # Default Pillow bitmap font is 6 px wide per glyph
    CHARS_PER_LINE = 21


# =============================================================================
# User-facing Text
# =============================================================================


class Messages:
    """Strings shown on the display."""

    PLANTING = "Planting Seed..."
    LEDGER_SYNC = "Logging Blockchain data..."
    AI_WARMUP = "Heating up AI..."
    IMAGE_LOAD_ERROR = "Image Load Error!"
    IMAGE_MISSING = "Image Missing!"
    WATERED = "You watered the plant!"
    STAGE_CHANGED = "Plant is now a {name}!"
    POINTS = "Pts: {points}"
    STORY_PLACEHOLDER = "Story for {name}"


# =============================================================================
# Ledger Operations
# =============================================================================

LEDGER_QUERY_GET_POINTS = "get_points"
LEDGER_OPERATION_WATER = "water_plant"
