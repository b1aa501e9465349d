from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class PlantReading(BaseModel):
    """Result of the ledger ``get_points`` query."""

    points: int = Field(ge=0)
    stage: str

    @model_validator(mode="before")
    @classmethod
    def _unwrap_single_row(cls, data: Any) -> Any:
        # Queries may come back as a one-row list
        if isinstance(data, list):
            if len(data) != 1:
                raise ValueError(f"expected a single plant row, got {len(data)}")
            return data[0]
        return data


class WaterOperation(BaseModel):
    """Body posted to the ledger relay for a watering transaction."""

    name: str
    args: list[Any] = Field(default_factory=list)
    signer: str


class StoryBatch(BaseModel):
    """JSON shape requested from the story generator."""

    stories: list[str]

    @field_validator("stories")
    @classmethod
    def _no_blank_lines(cls, value: list[str]) -> list[str]:
        cleaned = [line.strip() for line in value]
        if any(not line for line in cleaned):
            raise ValueError("story lines must not be blank")
        return cleaned
