"""
Plant Sync
==========
Reads the plant's points and stage from the ledger.

Two entry points with different failure policies:

* :meth:`PlantSync.boot_reading` never raises. An unreachable ledger or an
  unknown stage name gives the safe default (zero points, lowest stage).
* :meth:`PlantSync.fetch_reading` raises :class:`RemoteUnavailable`, so the
  watering coordinator can leave the last known-good state untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from companion.domain.exceptions import RemoteUnavailable, UnknownStageName
from companion.domain.stages import StageTable
from companion.schemas.ledger import PlantReading

logger = logging.getLogger(__name__)


class Ledger(Protocol):
    def get_points(self, address: str) -> PlantReading: ...

    def water_plant(self) -> None: ...


@dataclass(frozen=True)
class ResolvedReading:
    """A ledger reading with the stage name mapped onto the stage table."""

    points: int
    stage_id: int
    stage_name: str
    fallback: bool = False


class PlantSync:
    """Maps ledger readings onto the stage table."""

    def __init__(self, ledger: Ledger, address: str, stage_table: StageTable):
        self.ledger = ledger
        self.address = address
        self.stage_table = stage_table

    def fetch_reading(self) -> ResolvedReading:
        """Query the ledger; raises :class:`RemoteUnavailable` on failure."""
        try:
            reading = self.ledger.get_points(self.address)
        except RemoteUnavailable:
            raise
        except Exception as exc:
            raise RemoteUnavailable(f"Ledger query failed: {exc}") from exc
        return self._resolve(reading)

    def boot_reading(self) -> ResolvedReading:
        """Query the ledger at startup, falling back to the lowest stage on any error."""
        try:
            return self.fetch_reading()
        except RemoteUnavailable as exc:
            logger.error("Error fetching plant data: %s", exc)
            return self._fallback()

    def _resolve(self, reading: PlantReading) -> ResolvedReading:
        try:
            stage_id = self.stage_table.id_for_name(reading.stage)
        except UnknownStageName as exc:
            logger.warning("%s; using %s with 0 points", exc, self.stage_table.lowest.name)
            return self._fallback()
        return ResolvedReading(points=reading.points, stage_id=stage_id, stage_name=reading.stage)

    def _fallback(self) -> ResolvedReading:
        lowest = self.stage_table.lowest
        return ResolvedReading(points=0, stage_id=lowest.id, stage_name=lowest.name, fallback=True)
