from companion.services.application.display_sequencer import DisplayFrame, DisplaySequencer, FrameBuilder
from companion.services.application.image_cache import ImageCache
from companion.services.application.plant_sync import PlantSync, ResolvedReading
from companion.services.application.watering_coordinator import WateringCoordinator

__all__ = [
    "DisplayFrame",
    "DisplaySequencer",
    "FrameBuilder",
    "ImageCache",
    "PlantSync",
    "ResolvedReading",
    "WateringCoordinator",
]
