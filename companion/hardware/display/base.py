"""
Display surface interface and the in-memory Pillow framebuffer.

The presentation layer only talks to a :class:`DisplaySurface`; which concrete
surface backs it (real SSD1306 or the framebuffer) is decided at startup.
"""

from __future__ import annotations

import logging
import textwrap
from abc import ABC, abstractmethod

from PIL import Image, ImageDraw, ImageFont

from companion.constants import DisplayLayout

logger = logging.getLogger(__name__)


class DisplaySurface(ABC):
    """
    Stateful sink for display operations.

    Methods:
        clear(): Blank the pending buffer.
        set_cursor(x, y): Move the text cursor (pixels).
        draw_text(text): Draw wrapped text at the cursor.
        draw_bitmap(bitmap): Replace the buffer with a 1-bit image.
        update(): Push the buffer to the panel.
    """

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def set_cursor(self, x: int, y: int) -> None: ...

    @abstractmethod
    def draw_text(self, text: str) -> None: ...

    @abstractmethod
    def draw_bitmap(self, bitmap: Image.Image) -> None: ...

    @abstractmethod
    def update(self) -> None: ...

    def close(self) -> None:
        """Release hardware resources, if any."""


class FrameBufferSurface(DisplaySurface):
    """
    Pillow-backed 1-bit canvas.

    Used directly when no panel is attached (development, tests) and as the
    drawing layer of :class:`SSD1306Surface`. Every call is recorded in
    ``operations`` and every flush stores the text drawn since the last
    clear in ``flushed``.
    """

    def __init__(self, width: int = 128, height: int = 64):
        self.width = width
        self.height = height
        self.image = Image.new("1", (width, height))
        self._draw = ImageDraw.Draw(self.image)
        self._font = ImageFont.load_default()
        self._cursor = (0, 0)
        self._pending_text: list[str] = []
        self.operations: list[tuple] = []
        self.flushed: list[list[str]] = []

    def clear(self) -> None:
        self.image.paste(0, (0, 0, self.width, self.height))
        self._pending_text = []
        self.operations.append(("clear",))

    def set_cursor(self, x: int, y: int) -> None:
        self._cursor = (x, y)
        self.operations.append(("cursor", x, y))

    def draw_text(self, text: str) -> None:
        x, y = self._cursor
        lines = textwrap.wrap(text, DisplayLayout.CHARS_PER_LINE) or [""]
        for line in lines:
            # Background box so text over a bitmap stays legible
            self._draw.rectangle((x, y, self.width - 1, y + DisplayLayout.LINE_HEIGHT - 1), fill=0)
            self._draw.text((x, y), line, font=self._font, fill=255)
            y += DisplayLayout.LINE_HEIGHT
        self._cursor = (x, y)
        self._pending_text.append(text)
        self.operations.append(("text", text))

    def draw_bitmap(self, bitmap: Image.Image) -> None:
        if bitmap.size != (self.width, self.height) or bitmap.mode != "1":
            bitmap = bitmap.convert("1").resize((self.width, self.height))
        self.image.paste(bitmap, (0, 0))
        self._pending_text = []
        self.operations.append(("bitmap", bitmap.size))

    def update(self) -> None:
        self.flushed.append(list(self._pending_text))
        self.operations.append(("update",))
        logger.debug("Display flush: %s", " | ".join(self._pending_text) or "<image>")
