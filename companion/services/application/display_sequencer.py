"""
Display Sequencer
=================
Runs ordered lists of display frames, one at a time.

A frame is shown by drawing it on the :class:`DisplaySurface`, flushing, and
holding for ``hold_ms`` before the next frame starts. A frame with
``hold_ms == 0`` is a resting frame: it stays up until the next sequence.

:class:`FrameBuilder` composes the sequences the device uses:

* stage change  -> announcement, story, plant (3 frames)
* no change     -> plant refresh (1 frame)
* boot          -> story of the current stage, plant
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from companion.constants import DisplayLayout, Messages
from companion.domain.growth_state import GrowthOutcome, GrowthState
from companion.domain.stages import StageTable
from companion.enums.growth import FrameKind

if TYPE_CHECKING:
    from companion.hardware.display.base import DisplaySurface
    from companion.services.ai.story_provider import StoryProvider
    from companion.services.application.image_cache import ImageCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayFrame:
    """One atomic unit of display output."""

    primary_text: str
    image: Any = None
    hold_ms: int = 0
    kind: FrameKind = FrameKind.MESSAGE
    image_missing: bool = False

    def __post_init__(self):
        if self.hold_ms < 0:
            raise ValueError("hold_ms must be >= 0")


class DisplaySequencer:
    """
    Presents frames strictly in order on a single surface.

    The sequencer keeps the loaded frames and a cursor. :meth:`advance` shows
    the frame under the cursor and moves it on; :meth:`run` loads a sequence
    and advances through it. One re-entrant lock guards the frame list and
    cursor, so two sequences never interleave. Reading :attr:`is_busy` or
    :attr:`current_frame` from another thread waits until the running
    sequence has finished.
    """

    def __init__(self, surface: "DisplaySurface", sleep: Callable[[float], None] = time.sleep):
        self.surface = surface
        self._sleep = sleep
        self._lock = threading.RLock()
        self._frames: list[DisplayFrame] = []
        self._cursor = 0
        self.last_frame: DisplayFrame | None = None

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._cursor < len(self._frames)

    @property
    def current_frame(self) -> DisplayFrame | None:
        with self._lock:
            if self._cursor < len(self._frames):
                return self._frames[self._cursor]
            return None

    def load(self, frames: Sequence[DisplayFrame]) -> None:
        with self._lock:
            if self.is_busy:
                raise RuntimeError("A display sequence is still running")
            self._frames = list(frames)
            self._cursor = 0

    def advance(self) -> bool:
        """Show the next frame and hold it; returns ``False`` when the sequence is done."""
        with self._lock:
            frame = self.current_frame
            if frame is None:
                return False
            try:
                self._show(frame)
                if frame.hold_ms:
                    self._sleep(frame.hold_ms / 1000)
            finally:
                self._cursor += 1
            return self.is_busy

    def run(self, frames: Sequence[DisplayFrame]) -> None:
        """Show every frame in order; returns after the last frame is issued."""
        with self._lock:
            self.load(frames)
            try:
                while self.advance():
                    pass
            finally:
                # An aborted sequence must not block the next one
                self._frames, self._cursor = [], 0

    # -- rendering ----------------------------------------------------------

    def _show(self, frame: DisplayFrame) -> None:
        surface = self.surface
        if frame.kind is FrameKind.PLANT:
            if frame.image is not None:
                surface.draw_bitmap(frame.image)
                surface.set_cursor(*DisplayLayout.POINTS_CURSOR)
                surface.draw_text(frame.primary_text)
            else:
                surface.clear()
                surface.set_cursor(*DisplayLayout.POINTS_CURSOR)
                surface.draw_text(frame.primary_text)
                if frame.image_missing:
                    surface.set_cursor(*DisplayLayout.IMAGE_MISSING_CURSOR)
                    surface.draw_text(Messages.IMAGE_MISSING)
        elif frame.kind is FrameKind.STATUS:
            surface.clear()
            surface.set_cursor(*DisplayLayout.STATUS_CURSOR)
            surface.draw_text(frame.primary_text)
        else:
            surface.clear()
            surface.set_cursor(*DisplayLayout.MESSAGE_CURSOR)
            surface.draw_text(frame.primary_text)
        surface.update()
        self.last_frame = frame
        logger.debug("Frame shown (%s, %sms): %s", frame.kind, frame.hold_ms, frame.primary_text)


class FrameBuilder:
    """Composes frame sequences from the stage table, images and stories."""

    def __init__(
        self,
        stage_table: StageTable,
        image_cache: "ImageCache",
        story_provider: "StoryProvider",
        message_hold_ms: int = 5000,
        confirmation_hold_ms: int = 2000,
    ):
        self.stage_table = stage_table
        self.image_cache = image_cache
        self.story_provider = story_provider
        self.message_hold_ms = message_hold_ms
        self.confirmation_hold_ms = confirmation_hold_ms

    def plant(self, stage_id: int, points: int) -> DisplayFrame:
        """Resting frame: stage bitmap with the points overlay."""
        bitmap = self.image_cache.bitmap_for(stage_id)
        if bitmap is None:
            logger.error("Bitmap for stage %s not found.", stage_id)
        return DisplayFrame(
            primary_text=Messages.POINTS.format(points=points),
            image=bitmap,
            hold_ms=0,
            kind=FrameKind.PLANT,
            image_missing=bitmap is None,
        )

    def resting(self, state: GrowthState) -> DisplayFrame:
        return self.plant(state.current_stage_id, state.points)

    def message(self, text: str, hold_ms: int | None = None) -> DisplayFrame:
        return DisplayFrame(primary_text=text, hold_ms=self.message_hold_ms if hold_ms is None else hold_ms)

    def status(self, text: str) -> DisplayFrame:
        return DisplayFrame(primary_text=text, hold_ms=0, kind=FrameKind.STATUS)

    def transition(self, outcome: GrowthOutcome) -> list[DisplayFrame]:
        if not outcome.changed:
            return [self.plant(outcome.to_stage_id, outcome.points)]
        stage = self.stage_table.get(outcome.to_stage_id)
        return [
            self.message(Messages.STAGE_CHANGED.format(name=stage.name)),
            self.message(self.story_provider.story_for(stage)),
            self.plant(stage.id, outcome.points),
        ]

    def intro(self, state: GrowthState) -> list[DisplayFrame]:
        stage = self.stage_table.get(state.current_stage_id)
        return [self.message(self.story_provider.story_for(stage)), self.resting(state)]

    def confirmation(self) -> DisplayFrame:
        return self.message(Messages.WATERED, hold_ms=self.confirmation_hold_ms)
