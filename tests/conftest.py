"""
Shared test fixtures for the Growth Companion test suite.

Provides:
- Stage table backed by freshly generated PNG assets
- Fake ledger and fake LLM backend (no network)
- Framebuffer display surface and a recording no-op sleep
- A fully wired container with a synchronous watering dispatcher

Usage:
    def test_example(container, fake_ledger):
        fake_ledger.readings.append(PlantReading(points=30, stage="young_plant"))
        container.coordinator.press()
"""

from __future__ import annotations

import json
import logging
from collections import deque
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from companion.config import CompanionConfig
from companion.domain.exceptions import RemoteUnavailable
from companion.domain.stages import DEFAULT_STAGES, StageTable
from companion.hardware.display.base import FrameBufferSurface
from companion.schemas.ledger import PlantReading
from companion.services.ai.llm_backends import LLMBackend, LLMResponse
from companion.services.ai.story_provider import StoryProvider
from companion.services.container import build_container

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("companion").setLevel(logging.WARNING)

STORIES = [
    "A seed doth slumber, dreaming of the sun.",
    "Lo, a sprout breaks forth to greet the morn.",
    "The young plant stretches, bold and green.",
    "Behold the mature plant, crowned in leafy glory.",
]


# ========================== Fakes ==========================================


class FakeLedger:
    """In-memory ledger: queued readings, scripted failures, call log."""

    def __init__(self, readings=None):
        self.readings: deque = deque(readings or [])
        self.fail_submit = False
        self.fail_query = False
        self.submissions = 0
        self.queries = 0
        self.on_submit = None

    def get_points(self, address: str) -> PlantReading:
        self.queries += 1
        if self.fail_query:
            raise RemoteUnavailable("query down")
        if not self.readings:
            raise RemoteUnavailable("no reading queued")
        return self.readings.popleft()

    def water_plant(self) -> None:
        self.submissions += 1
        if self.on_submit is not None:
            self.on_submit()
        if self.fail_submit:
            raise RemoteUnavailable("submit down")


class FakeBackend(LLMBackend):
    """LLM backend returning a canned reply (or raising)."""

    def __init__(self, reply: str | None = None, error: Exception | None = None):
        self.reply = reply if reply is not None else json.dumps({"stories": STORIES})
        self.error = error
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def is_available(self) -> bool:
        return True

    def initialize(self) -> bool:
        return True

    def generate(self, system_prompt, user_prompt, *, max_tokens=512, temperature=0.3, json_mode=False):
        self.calls.append(
            {"system_prompt": system_prompt, "temperature": temperature, "json_mode": json_mode}
        )
        if self.error is not None:
            raise self.error
        return LLMResponse(text=self.reply, model="fake")


class RecordingSleep:
    """Stands in for ``time.sleep``; records requested holds in seconds."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# ========================== Fixtures =======================================


@pytest.fixture()
def asset_dir(tmp_path: Path) -> Path:
    """Directory with one small PNG per default stage."""
    for stage_id, _name, _points, filename in DEFAULT_STAGES:
        img = Image.new("L", (64, 64), 0)
        ImageDraw.Draw(img).ellipse((8, 8, 8 + stage_id * 10, 56), fill=255)
        img.save(tmp_path / filename)
    return tmp_path


@pytest.fixture()
def stage_table(asset_dir: Path) -> StageTable:
    return StageTable.default(asset_dir)


@pytest.fixture()
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def backend_factory():
    """Build a :class:`FakeBackend` with a custom reply or error."""
    return FakeBackend


@pytest.fixture()
def surface() -> FrameBufferSurface:
    return FrameBufferSurface()


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def config(asset_dir: Path, tmp_path: Path) -> CompanionConfig:
    return CompanionConfig(
        asset_dir=str(asset_dir),
        audit_log_path=str(tmp_path / "logs" / "audit.log"),
        message_hold_ms=5000,
        confirmation_hold_ms=2000,
    )


@pytest.fixture()
def container(config, fake_ledger, surface, fake_backend, sleep):
    """Fully wired device with fakes and synchronous watering attempts."""
    built = build_container(
        config,
        ledger=fake_ledger,
        surface=surface,
        story_provider=StoryProvider(fake_backend),
        with_button=False,
        sleep=sleep,
        dispatch=lambda fn: fn(),
    )
    yield built
    built.shutdown()
