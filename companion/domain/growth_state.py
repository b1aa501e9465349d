"""
Growth State Machine
====================
Owns the device's single live :class:`GrowthState` (current stage and point
count). The state is only ever written through :meth:`initialize` (boot,
from a fresh ledger reading) and :meth:`apply` (after each watering resync).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from companion.domain.exceptions import UnknownStageName
from companion.domain.stages import Stage, StageTable
from companion.enums.growth import OutcomeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrowthState:
    """Snapshot of the plant: current stage id and ledger points."""

    current_stage_id: int
    points: int


@dataclass(frozen=True)
class GrowthOutcome:
    """What :meth:`GrowthStateMachine.apply` observed."""

    kind: OutcomeKind
    from_stage_id: int
    to_stage_id: int
    points: int

    @property
    def changed(self) -> bool:
        return self.kind is OutcomeKind.ADVANCED

    @classmethod
    def advanced(cls, from_stage_id: int, to_stage_id: int, points: int) -> "GrowthOutcome":
        return cls(OutcomeKind.ADVANCED, from_stage_id, to_stage_id, points)

    @classmethod
    def unchanged(cls, stage_id: int, points: int) -> "GrowthOutcome":
        return cls(OutcomeKind.UNCHANGED, stage_id, stage_id, points)


class GrowthStateMachine:
    """
    Resolves point counts to stages and reports transitions.

    A stage decrease (e.g. the ledger was reset) is reported as an ordinary
    ``ADVANCED`` outcome; nothing here assumes points only grow.
    """

    def __init__(self, stage_table: StageTable):
        self.stage_table = stage_table
        self._lock = threading.Lock()
        lowest = stage_table.lowest
        self._stage_id = lowest.id
        self._points = 0

    @property
    def state(self) -> GrowthState:
        with self._lock:
            return GrowthState(current_stage_id=self._stage_id, points=self._points)

    @property
    def current_stage(self) -> Stage:
        return self.stage_table.get(self.state.current_stage_id)

    def initialize(self, points: int, stage: str | int) -> GrowthState:
        """
        Seed the state from a freshly fetched ledger reading.

        ``stage`` may be a ledger stage name or a stage id. An unknown stage
        falls back to the lowest stage with zero points. No narration runs.
        """
        points = max(0, int(points))
        try:
            if isinstance(stage, str):
                stage_id = self.stage_table.id_for_name(stage)
            else:
                stage_id = self.stage_table.get(int(stage)).id
        except UnknownStageName as exc:
            logger.warning("%s; falling back to stage %s", exc, self.stage_table.lowest.name)
            stage_id, points = self.stage_table.lowest.id, 0

        with self._lock:
            self._stage_id = stage_id
            self._points = points
        logger.info("Growth state initialized: stage=%s points=%s", stage_id, points)
        return GrowthState(current_stage_id=stage_id, points=points)

    def apply(self, points: int) -> GrowthOutcome:
        """Recompute the stage for a fresh point count and report the transition."""
        points = max(0, int(points))
        new_stage = self.stage_table.resolve(points)
        with self._lock:
            previous = self._stage_id
            self._points = points
            self._stage_id = new_stage.id

        if new_stage.id != previous:
            logger.info("Stage changed %s -> %s (points=%s)", previous, new_stage.id, points)
            return GrowthOutcome.advanced(previous, new_stage.id, points)
        logger.debug("Stage unchanged at %s (points=%s)", previous, points)
        return GrowthOutcome.unchanged(previous, points)
