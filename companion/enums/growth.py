"""
Growth-related Enumerations
============================

Enums for stage transitions, display frames and the watering attempt
lifecycle.
"""

from enum import Enum


class OutcomeKind(str, Enum):
    """Result of applying a fresh point count to the growth state."""

    ADVANCED = "advanced"
    UNCHANGED = "unchanged"

    def __str__(self):
        return self.value


class FrameKind(str, Enum):
    """What a display frame renders."""

    MESSAGE = "message"  # cleared screen with wrapped text
    PLANT = "plant"  # stage bitmap with the points overlay
    STATUS = "status"  # boot progress line

    def __str__(self):
        return self.value


class AttemptPhase(str, Enum):
    """Phases of one watering attempt.

    - IDLE: ready for the next button press
    - SUBMITTING: watering transaction is being sent to the ledger
    - RESYNCING: points are being re-read from the ledger
    - PRESENTING: the display sequence for the result is running
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    RESYNCING = "resyncing"
    PRESENTING = "presenting"

    def __str__(self):
        return self.value


class AttemptResult(str, Enum):
    """Audit outcome of a finished watering attempt."""

    SUCCESS = "success"
    SUBMIT_FAILED = "submit_failed"
    RESYNC_FAILED = "resync_failed"
    PRESENT_FAILED = "present_failed"

    def __str__(self):
        return self.value
