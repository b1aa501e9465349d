"""
Service container
=================
Builds every collaborator once for the process lifetime and runs the boot
sequence:

1. boot status frames on the display
2. initial ledger reading
3. story batch
4. image preload
5. growth state initialized, intro sequence shown
6. water button armed

The button is only armed after every earlier step has finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from companion.config import CompanionConfig
from companion.constants import Messages
from companion.domain.growth_state import GrowthState, GrowthStateMachine
from companion.domain.stages import StageTable
from companion.hardware.display import DisplaySurface, create_surface
from companion.hardware.input import WaterButton
from companion.integrations.ledger_client import LedgerClient
from companion.services.ai.llm_backends import create_backend
from companion.services.ai.story_provider import StoryProvider
from companion.services.application.display_sequencer import DisplaySequencer, FrameBuilder
from companion.services.application.image_cache import ImageCache
from companion.services.application.plant_sync import Ledger, PlantSync
from companion.services.application.watering_coordinator import WateringCoordinator
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class CompanionContainer:
    """Holds the long-lived collaborators of the device."""

    config: CompanionConfig
    stage_table: StageTable
    ledger: Ledger
    surface: DisplaySurface
    story_provider: StoryProvider
    image_cache: ImageCache
    machine: GrowthStateMachine
    plant_sync: PlantSync
    sequencer: DisplaySequencer
    frames: FrameBuilder
    coordinator: WateringCoordinator
    button: WaterButton | None = None
    audit_logger: AuditLogger | None = None

    def boot(self) -> GrowthState:
        """Run the startup sequence and arm the button; returns the initial state."""
        self.sequencer.run([self.frames.status(Messages.PLANTING)])

        self.sequencer.run([self.frames.status(Messages.LEDGER_SYNC)])
        reading = self.plant_sync.boot_reading()

        self.sequencer.run([self.frames.status(Messages.AI_WARMUP)])
        self.story_provider.populate(self.stage_table)

        logger.info("Preloading images...")
        loaded = self.image_cache.preload(self.stage_table)
        if loaded < len(self.stage_table):
            self.sequencer.run([self.frames.status(Messages.IMAGE_LOAD_ERROR)])
        else:
            logger.info("Images preloaded successfully")

        state = self.machine.initialize(reading.points, reading.stage_id)
        self.sequencer.run(self.frames.intro(state))

        if self.button is not None:
            self.button.arm(self.coordinator.press)
        logger.info("Setup complete")
        return state

    def shutdown(self) -> None:
        if self.button is not None:
            self.button.cleanup()
        self.coordinator.shutdown(wait=True)
        self.surface.close()
        close = getattr(self.ledger, "close", None)
        if callable(close):
            close()
        if self.audit_logger is not None:
            self.audit_logger.close()
        logger.info("Companion shut down")


def build_container(
    config: CompanionConfig,
    *,
    ledger: Ledger | None = None,
    surface: DisplaySurface | None = None,
    story_provider: StoryProvider | None = None,
    button: WaterButton | None = None,
    with_button: bool = True,
    audit: bool = True,
    sleep=None,
    dispatch=None,
) -> CompanionContainer:
    """Wire the device from ``config``; keyword overrides replace real collaborators."""
    stage_table = StageTable.default(config.asset_dir)

    if ledger is None:
        ledger = LedgerClient(
            config.ledger_node_url,
            signer=config.ledger_address,
            blockchain_iid=config.ledger_blockchain_iid,
            timeout=config.ledger_timeout_seconds,
        )
    if surface is None:
        surface = create_surface(config.display_width, config.display_height, config.display_address)
    if story_provider is None:
        backend = None
        if config.enable_ai_stories:
            backend = create_backend(
                "openai",
                api_key=config.ai_api_key,
                model=config.ai_model,
                base_url=config.ai_base_url or None,
                timeout=config.ai_timeout_seconds,
            )
        story_provider = StoryProvider(backend)
    if button is None and with_button:
        button = WaterButton(config.button_pin, bounce_ms=config.button_bounce_ms)

    audit_logger = AuditLogger(config.audit_log_path, config.log_level) if audit else None

    image_cache = ImageCache(size=(config.display_width, config.display_height))
    machine = GrowthStateMachine(stage_table)
    plant_sync = PlantSync(ledger, config.ledger_address, stage_table)
    sequencer = DisplaySequencer(surface) if sleep is None else DisplaySequencer(surface, sleep=sleep)
    frames = FrameBuilder(
        stage_table,
        image_cache,
        story_provider,
        message_hold_ms=config.message_hold_ms,
        confirmation_hold_ms=config.confirmation_hold_ms,
    )
    coordinator = WateringCoordinator(
        ledger,
        plant_sync,
        machine,
        sequencer,
        frames,
        audit_logger=audit_logger,
        dispatch=dispatch,
    )

    return CompanionContainer(
        config=config,
        stage_table=stage_table,
        ledger=ledger,
        surface=surface,
        story_provider=story_provider,
        image_cache=image_cache,
        machine=machine,
        plant_sync=plant_sync,
        sequencer=sequencer,
        frames=frames,
        coordinator=coordinator,
        button=button,
        audit_logger=audit_logger,
    )
