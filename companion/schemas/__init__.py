from companion.schemas.ledger import PlantReading, StoryBatch, WaterOperation

__all__ = ["PlantReading", "StoryBatch", "WaterOperation"]
