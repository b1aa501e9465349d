"""Tests for the watering attempt lifecycle and its admission guard."""

import json
import threading
from unittest.mock import MagicMock

import pytest

from companion.domain.exceptions import RemoteUnavailable
from companion.domain.growth_state import GrowthState
from companion.enums.growth import AttemptPhase
from companion.schemas.ledger import PlantReading
from companion.services.application.watering_coordinator import WateringCoordinator


@pytest.fixture()
def booted(container, fake_ledger):
    fake_ledger.readings.append(PlantReading(points=24, stage="Sprout"))
    container.boot()
    return container


def test_successful_attempt_applies_reading_and_presents(booted, fake_ledger, surface):
    fake_ledger.readings.append(PlantReading(points=26, stage="young_plant"))

    assert booted.coordinator.press() is True

    assert fake_ledger.submissions == 1
    assert booted.machine.state == GrowthState(current_stage_id=3, points=26)
    assert booted.coordinator.phase is AttemptPhase.IDLE
    assert surface.flushed[-5:] == [
        ["Plant is now a Young Plant!"],
        ["The young plant stretches, bold and green."],
        ["Pts: 26"],
        ["You watered the plant!"],
        ["Pts: 26"],
    ]


def test_press_while_busy_is_ignored(booted, fake_ledger):
    fake_ledger.readings.append(PlantReading(points=25, stage="Young Plant"))
    nested = []
    fake_ledger.on_submit = lambda: nested.append(booted.coordinator.press())

    assert booted.coordinator.press() is True

    assert nested == [False]
    assert fake_ledger.submissions == 1
    assert booted.coordinator.ignored_presses == 1
    assert booted.coordinator.is_idle


def test_busy_press_does_not_touch_state(booted, fake_ledger):
    before = booted.machine.state
    seen = {}

    def press_during_presentation(frames):
        seen["phase"] = booted.coordinator.phase
        seen["accepted"] = booted.coordinator.press()
        seen["submissions"] = fake_ledger.submissions
        return original(frames)

    original = booted.sequencer.run
    booted.sequencer.run = press_during_presentation
    fake_ledger.readings.append(PlantReading(points=30, stage="Young Plant"))

    booted.coordinator.press()

    assert seen["phase"] is AttemptPhase.PRESENTING
    assert seen["accepted"] is False
    assert seen["submissions"] == 1
    assert before != booted.machine.state  # only the admitted attempt changed it


def test_submit_failure_leaves_state_and_display(booted, fake_ledger, surface):
    fake_ledger.fail_submit = True
    before_state = booted.machine.state
    before_flushes = len(surface.flushed)

    booted.coordinator.press()

    assert booted.machine.state == before_state
    assert len(surface.flushed) == before_flushes
    assert fake_ledger.queries == 1  # only the boot reading
    assert booted.coordinator.is_idle


def test_resync_failure_keeps_last_known_good_state(booted, fake_ledger, surface):
    fake_ledger.fail_query = True
    before_flushes = len(surface.flushed)

    booted.coordinator.press()

    assert booted.machine.state == GrowthState(current_stage_id=2, points=24)
    assert len(surface.flushed) == before_flushes
    assert booted.coordinator.is_idle


def test_display_error_still_releases_guard(booted, fake_ledger):
    fake_ledger.readings.append(PlantReading(points=26, stage="Young Plant"))
    booted.sequencer.run = MagicMock(side_effect=OSError("i2c"))

    booted.coordinator.press()

    assert booted.coordinator.is_idle
    assert booted.machine.state.points == 26


def test_attempts_are_audited(booted, fake_ledger, config):
    fake_ledger.readings.append(PlantReading(points=26, stage="Young Plant"))
    booted.coordinator.press()
    fake_ledger.fail_submit = True
    booted.coordinator.press()
    for handler in booted.audit_logger.logger.handlers:
        handler.flush()

    with open(config.audit_log_path, encoding="utf-8") as fh:
        records = [json.loads(line.split(" | ", 2)[2]) for line in fh if line.strip()]
    assert [r["outcome"] for r in records] == ["success", "submit_failed"]
    assert records[0]["meta"]["to_stage"] == 3


def test_unchanged_attempt_refreshes_points(booted, fake_ledger, surface):
    fake_ledger.readings.append(PlantReading(points=24, stage="Sprout"))
    booted.coordinator.press()
    assert surface.flushed[-3:] == [["Pts: 24"], ["You watered the plant!"], ["Pts: 24"]]


def test_executor_dispatch_serializes_attempts():
    release = threading.Event()
    ledger = MagicMock()
    ledger.water_plant.side_effect = lambda: release.wait(timeout=5)
    plant_sync = MagicMock()
    plant_sync.fetch_reading.side_effect = RemoteUnavailable("stop here")
    coordinator = WateringCoordinator(ledger, plant_sync, MagicMock(), MagicMock(), MagicMock())

    try:
        assert coordinator.press() is True
        assert coordinator.press() is False
        release.set()
    finally:
        coordinator.shutdown(wait=True)
    assert coordinator.is_idle
    assert ledger.water_plant.call_count == 1
