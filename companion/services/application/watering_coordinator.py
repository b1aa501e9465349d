"""
Watering Coordinator
====================
Runs one watering attempt end to end and keeps attempts from overlapping.

Attempt lifecycle::

    IDLE --press--> SUBMITTING --ok--> RESYNCING --ok--> PRESENTING --done--> IDLE
                         |                  |
                         +--fail--> IDLE    +--fail--> IDLE

A press while any attempt is outside ``IDLE`` is ignored. Submit and resync
failures leave the growth state and the display exactly as they were.

Button callbacks arrive on the GPIO event thread; :meth:`press` only flips the
phase and hands the attempt to a single worker, so the growth state and the
display are only ever touched from that worker.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from companion.domain.exceptions import RemoteUnavailable
from companion.enums.growth import AttemptPhase, AttemptResult

if TYPE_CHECKING:
    from companion.domain.growth_state import GrowthOutcome, GrowthStateMachine
    from companion.services.application.display_sequencer import DisplaySequencer, FrameBuilder
    from companion.services.application.plant_sync import Ledger, PlantSync
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], object]


class WateringCoordinator:
    """
    Orchestrates submit -> resync -> present for each button press.

    Parameters
    ----------
    ledger:
        Remote ledger used for the watering transaction.
    plant_sync:
        Re-reads points after a successful submit.
    machine:
        The growth state machine (only mutated here after boot).
    sequencer / frames:
        Display sequencer and the builder for its frames.
    audit_logger:
        Optional :class:`AuditLogger` receiving one record per attempt.
    dispatch:
        Runs an attempt. Defaults to a single-worker executor; tests pass a
        synchronous callable.
    """

    def __init__(
        self,
        ledger: "Ledger",
        plant_sync: "PlantSync",
        machine: "GrowthStateMachine",
        sequencer: "DisplaySequencer",
        frames: "FrameBuilder",
        audit_logger: "AuditLogger" | None = None,
        dispatch: Dispatcher | None = None,
    ):
        self.ledger = ledger
        self.plant_sync = plant_sync
        self.machine = machine
        self.sequencer = sequencer
        self.frames = frames
        self.audit_logger = audit_logger
        self._lock = threading.Lock()
        self._phase = AttemptPhase.IDLE
        self._executor: ThreadPoolExecutor | None = None
        if dispatch is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="watering")
            dispatch = self._executor.submit
        self._dispatch = dispatch
        self.attempts = 0
        self.ignored_presses = 0

    # -- state ----------------------------------------------------------------

    @property
    def phase(self) -> AttemptPhase:
        with self._lock:
            return self._phase

    @property
    def is_idle(self) -> bool:
        return self.phase is AttemptPhase.IDLE

    def _set_phase(self, phase: AttemptPhase) -> None:
        with self._lock:
            self._phase = phase
        logger.debug("Watering attempt phase -> %s", phase)

    # -- public API -----------------------------------------------------------

    def press(self) -> bool:
        """Handle a button press; returns ``True`` if an attempt was started."""
        with self._lock:
            if self._phase is not AttemptPhase.IDLE:
                self.ignored_presses += 1
                logger.info("Render in progress, ignoring button press (phase=%s)", self._phase)
                return False
            self._phase = AttemptPhase.SUBMITTING
            self.attempts += 1

        logger.info("Water button pressed")
        try:
            self._dispatch(self._run_attempt)
        except Exception:
            logger.exception("Could not start watering attempt")
            self._set_phase(AttemptPhase.IDLE)
            return False
        return True

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    # -- attempt --------------------------------------------------------------

    def _run_attempt(self) -> None:
        result = AttemptResult.SUCCESS
        outcome: "GrowthOutcome" | None = None
        try:
            try:
                self.ledger.water_plant()
            except Exception as exc:
                result = AttemptResult.SUBMIT_FAILED
                logger.error("Error during watering process: %s", exc)
                return
            logger.info("Plant watered successfully")

            self._set_phase(AttemptPhase.RESYNCING)
            try:
                reading = self.plant_sync.fetch_reading()
            except RemoteUnavailable as exc:
                result = AttemptResult.RESYNC_FAILED
                logger.error("Error fetching plant data after watering: %s", exc)
                return

            self._set_phase(AttemptPhase.PRESENTING)
            outcome = self.machine.apply(reading.points)
            logger.info("Updated Points: %s, Updated State: %s", outcome.points, outcome.to_stage_id)
            try:
                self.sequencer.run(self.frames.transition(outcome))
                self.sequencer.run([self.frames.confirmation(), self.frames.resting(self.machine.state)])
            except Exception as exc:
                result = AttemptResult.PRESENT_FAILED
                logger.error("Error presenting watering result: %s", exc, exc_info=True)
        finally:
            self._set_phase(AttemptPhase.IDLE)
            self._audit(result, outcome)

    def _audit(self, result: AttemptResult, outcome: "GrowthOutcome" | None) -> None:
        if self.audit_logger is None:
            return
        metadata = {}
        if outcome is not None:
            metadata = {
                "points": outcome.points,
                "from_stage": outcome.from_stage_id,
                "to_stage": outcome.to_stage_id,
                "transition": str(outcome.kind),
            }
        try:
            self.audit_logger.log_event(
                actor="water_button",
                action="water_plant",
                resource=self.plant_sync.address,
                outcome=str(result),
                **metadata,
            )
        except Exception:
            logger.debug("Audit write failed for watering attempt", exc_info=True)
