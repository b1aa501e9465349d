"""
Story Provider
==============
Supplies one short narrative line per growth stage.

Stories are generated in a single batched call at startup. The batch is
all-or-nothing: if the call fails, or the reply cannot be parsed, or it does
not hold exactly one line per stage, every stage gets its deterministic
placeholder instead. AI lines and placeholders are never mixed, so a story can
never end up paired with the wrong stage.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import ValidationError

from companion.constants import Messages
from companion.domain.exceptions import GenerationFailed
from companion.domain.stages import Stage
from companion.schemas.ledger import StoryBatch

if TYPE_CHECKING:
    from companion.services.ai.llm_backends import LLMBackend

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


_STORY_SYSTEM_PROMPT = """\
Act as a professional short story teller that speaks like Shakespeare, create \
creative and interesting short stories of a plant growing from {stage_path} \
in {count} short sentences.

Here are the rules:
- The stories should be creative and interesting.
- Keep each line within 12 words.
- Make sure there are only {count} stories, one per stage, in order.
- No pre-amble.
- The response should be in JSON only.
- This is the data structure of the response:
interface JSONResponse {{
  stories: string[];
}}"""


def placeholder_story(stage: Stage) -> str:
    return Messages.STORY_PLACEHOLDER.format(name=stage.name)


def build_story_prompt(stages: list[Stage]) -> str:
    names = [stage.name for stage in stages]
    if len(names) > 1:
        stage_path = ", ".join(names[:-1]) + f" then into {names[-1]}"
    else:
        stage_path = names[0] if names else "seed"
    return _STORY_SYSTEM_PROMPT.format(stage_path=stage_path, count=len(names))


def parse_story_batch(text: str, expected: int) -> list[str]:
    """Parse a generator reply into exactly ``expected`` lines or raise :class:`GenerationFailed`."""
    # Fence markers may share a line with the JSON
    cleaned = _FENCE.sub("", text).strip()

    try:
        batch = StoryBatch.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise GenerationFailed("Story reply was not a valid stories object", detail={"reply": text[:200]}) from exc

    if len(batch.stories) != expected:
        raise GenerationFailed(
            f"Expected {expected} stories, got {len(batch.stories)}",
            detail={"expected": expected, "received": len(batch.stories)},
        )
    return batch.stories


class StoryProvider:
    """
    Holds the story line for each stage.

    Parameters
    ----------
    backend:
        An initialised :class:`LLMBackend`, or ``None`` to always use
        placeholders.
    temperature:
        Sampling temperature for the batch call.
    max_tokens:
        Token budget for the whole batch.
    """

    def __init__(self, backend: "LLMBackend" | None = None, temperature: float = 0.9, max_tokens: int = 400):
        self._backend = backend
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._stories: dict[int, str] = {}
        self.source = "placeholder"

    @property
    def is_available(self) -> bool:
        return self._backend is not None and self._backend.is_available

    def populate(self, stages: Iterable[Stage]) -> dict[int, str]:
        """Fill every stage's story; never raises."""
        ordered = sorted(stages, key=lambda s: s.id)
        try:
            lines = self._generate(ordered)
        except GenerationFailed as exc:
            logger.warning("Using placeholder stories: %s", exc)
            self._stories = {stage.id: placeholder_story(stage) for stage in ordered}
            self.source = "placeholder"
        else:
            self._stories = {stage.id: line for stage, line in zip(ordered, lines)}
            self.source = "llm"
            logger.info("AI-generated stories: %s", lines)
        return dict(self._stories)

    def story_for(self, stage: Stage) -> str:
        return self._stories.get(stage.id) or placeholder_story(stage)

    def _generate(self, stages: list[Stage]) -> list[str]:
        if not self.is_available:
            raise GenerationFailed("No story backend available")

        logger.info("Fetching AI-generated stories for %d stages...", len(stages))
        try:
            response = self._backend.generate(  # type: ignore[union-attr]
                system_prompt=build_story_prompt(stages),
                user_prompt="",
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                json_mode=True,
            )
        except Exception as exc:
            raise GenerationFailed(f"Story backend error: {exc}") from exc
        logger.debug("Story reply: %s", response.text)
        return parse_story_batch(response.text, len(stages))
