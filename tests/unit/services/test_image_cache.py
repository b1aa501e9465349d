"""Tests for bitmap preloading."""

from pathlib import Path

import pytest

from companion.domain.exceptions import AssetDecodeFailed
from companion.domain.stages import StageTable
from companion.services.application.image_cache import ImageCache, decode_bitmap


def test_preload_decodes_every_stage(stage_table):
    cache = ImageCache()
    assert cache.preload(stage_table) == 4
    bitmap = cache.bitmap_for(3)
    assert bitmap.mode == "1"
    assert bitmap.size == (128, 64)
    assert not cache.failures


def test_missing_asset_is_recorded_per_stage(asset_dir: Path):
    (asset_dir / "resized_plant2.png").unlink()
    cache = ImageCache()

    assert cache.preload(StageTable.default(asset_dir)) == 3
    assert cache.bitmap_for(2) is None
    assert 2 not in cache
    assert 1 in cache and 3 in cache and 4 in cache
    assert isinstance(cache.failures[2], AssetDecodeFailed)
    assert cache.failures[2].stage_id == 2


def test_corrupt_asset_is_not_fatal(asset_dir: Path):
    (asset_dir / "resized_plant4.png").write_bytes(b"not a png")
    cache = ImageCache()
    cache.preload(StageTable.default(asset_dir))
    assert cache.bitmap_for(4) is None
    assert set(cache.failures) == {4}


def test_decode_bitmap_raises_for_missing_file(tmp_path):
    with pytest.raises(AssetDecodeFailed):
        decode_bitmap(str(tmp_path / "nope.png"))


def test_decode_bitmap_fits_requested_size(stage_table):
    bitmap = decode_bitmap(stage_table.get(1).image, size=(64, 32), dither=False)
    assert bitmap.size == (64, 32)
