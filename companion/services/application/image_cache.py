"""
Image Cache
===========
Decodes every stage image into a display-ready 1-bit bitmap once at startup.

A stage whose asset cannot be decoded is recorded in :attr:`ImageCache.failures`
and renders with the "Image Missing!" placeholder; the other stages are
unaffected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from PIL import Image, ImageOps, UnidentifiedImageError

from companion.domain.exceptions import AssetDecodeFailed
from companion.domain.stages import Stage

logger = logging.getLogger(__name__)


def decode_bitmap(path: str, size: tuple[int, int] = (128, 64), dither: bool = True) -> Image.Image:
    """Open ``path`` and fit it to ``size`` as a 1-bit image."""
    try:
        with Image.open(path) as img:
            img.load()
            grey = img.convert("L")
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise AssetDecodeFailed(f"Cannot decode image {path}: {exc}", detail={"path": path}) from exc

    fitted = ImageOps.pad(grey, size, color=0)
    dither_mode = Image.Dither.FLOYDSTEINBERG if dither else Image.Dither.NONE
    return fitted.convert("1", dither=dither_mode)


class ImageCache:
    """Stage id -> decoded bitmap."""

    def __init__(self, size: tuple[int, int] = (128, 64), dither: bool = True):
        self.size = size
        self.dither = dither
        self._bitmaps: dict[int, Image.Image] = {}
        self.failures: dict[int, AssetDecodeFailed] = {}

    def preload(self, stages: Iterable[Stage]) -> int:
        """Decode every stage's image; returns how many loaded."""
        for stage in stages:
            try:
                self._bitmaps[stage.id] = decode_bitmap(stage.image, self.size, self.dither)
            except AssetDecodeFailed as exc:
                exc.stage_id = stage.id
                self.failures[stage.id] = exc
                self._bitmaps.pop(stage.id, None)
                logger.error("Error loading image %s for stage %s: %s", stage.image, stage.name, exc)
            else:
                self.failures.pop(stage.id, None)
        logger.info("Preloaded %d images (%d failed)", len(self._bitmaps), len(self.failures))
        return len(self._bitmaps)

    def bitmap_for(self, stage_id: int) -> Image.Image | None:
        return self._bitmaps.get(stage_id)

    def __contains__(self, stage_id: object) -> bool:
        return stage_id in self._bitmaps

    def __len__(self) -> int:
        return len(self._bitmaps)
