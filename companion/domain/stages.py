"""
Stage Table
===========
Static, ordered definition of the plant's growth stages and the point
threshold each one needs.

Usage
-----
::

    table = StageTable.default(asset_dir="assets")
    table.resolve(26).name        # "Young Plant"
    table.id_for_name("Young_Plant")  # 3
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from companion.domain.exceptions import ConfigurationError, UnknownStageName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """One discrete growth phase."""

    id: int
    name: str
    required_points: int
    image: str
    story: str = ""


DEFAULT_STAGES: tuple[tuple[int, str, int, str], ...] = (
    (1, "Seed", 0, "resized_plant1.png"),
    (2, "Sprout", 10, "resized_plant2.png"),
    (3, "Young Plant", 25, "resized_plant3.png"),
    (4, "Mature Plant", 50, "resized_plant4.png"),
)


def normalize_stage_name(name: str) -> str:
    """Fold a stage name for comparison: case-insensitive, underscores as spaces."""
    return " ".join(name.replace("_", " ").split()).lower()


class StageTable:
    """
    Immutable, id-ordered collection of :class:`Stage` objects.

    Invariants checked on construction:
    - ids are 1..N without gaps
    - ``required_points`` never decreases with id
    - stage 1 needs zero points, so every count resolves to some stage
    """

    def __init__(self, stages: Iterable[Stage]):
        ordered = tuple(sorted(stages, key=lambda s: s.id))
        self._validate(ordered)
        self._stages = ordered
        self._by_id = {stage.id: stage for stage in ordered}
        self._by_name = {normalize_stage_name(stage.name): stage.id for stage in ordered}

    @staticmethod
    def _validate(stages: tuple[Stage, ...]) -> None:
        if not stages:
            raise ConfigurationError("Stage table must contain at least one stage")
        expected_ids = list(range(1, len(stages) + 1))
        if [s.id for s in stages] != expected_ids:
            raise ConfigurationError(
                "Stage ids must be consecutive starting at 1",
                detail={"ids": [s.id for s in stages]},
            )
        if stages[0].required_points != 0:
            raise ConfigurationError("Stage 1 must require 0 points")
        for previous, current in zip(stages, stages[1:]):
            if current.required_points < previous.required_points:
                raise ConfigurationError(
                    "Stage thresholds must be non-decreasing",
                    detail={"stage": current.id, "required_points": current.required_points},
                )

    @classmethod
    def default(cls, asset_dir: str | Path = "") -> "StageTable":
        """Build the four-stage table of the reference device."""
        base = Path(asset_dir) if asset_dir else None
        return cls(
            Stage(
                id=stage_id,
                name=name,
                required_points=required,
                image=str(base / image) if base else image,
            )
            for stage_id, name, required, image in DEFAULT_STAGES
        )

    # -- lookups -------------------------------------------------------------

    @property
    def lowest(self) -> Stage:
        return self._stages[0]

    def get(self, stage_id: int) -> Stage:
        try:
            return self._by_id[stage_id]
        except KeyError:
            raise UnknownStageName(stage_id) from None

    def resolve(self, points: int) -> Stage:
        """Return the stage with the largest threshold not exceeding ``points``."""
        for stage in reversed(self._stages):
            if points >= stage.required_points:
                return stage
        return self.lowest

    def id_for_name(self, name: str) -> int:
        """Map a ledger stage name to its id, raising :class:`UnknownStageName`."""
        if not isinstance(name, str):
            raise UnknownStageName(name)
        try:
            return self._by_name[normalize_stage_name(name)]
        except KeyError:
            raise UnknownStageName(name) from None

    def names(self) -> list[str]:
        return [stage.name for stage in self._stages]

    def __iter__(self) -> Iterator[Stage]:
        return iter(self._stages)

    def __len__(self) -> int:
        return len(self._stages)

    def __repr__(self) -> str:
        return f"StageTable({', '.join(f'{s.id}:{s.name}@{s.required_points}' for s in self._stages)})"
