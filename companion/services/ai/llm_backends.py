"""
Story generation backends
=========================
The device asks a chat model for a handful of short story lines once at boot.
:class:`OpenAIBackend` talks to any OpenAI-compatible Chat Completions
endpoint; by default the Chasm orchestrator, which needs no API key.

``openai`` is imported on :meth:`OpenAIBackend.initialize`, so a device
without the SDK still boots (with placeholder stories).

Example::

    backend = create_backend("openai", base_url="https://orchestrator.chasm.net/v1")
    if backend is not None:
        reply = backend.generate("You are a bard.", "", json_mode=True)
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemma2-9b-it"


@dataclass
class LLMResponse:
    """Text returned by a backend plus bookkeeping."""

    text: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0
    raw: Any = None


class LLMBackend(ABC):
    """A chat model that can answer one prompt at a time."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """``True`` once :meth:`initialize` has succeeded."""

    @abstractmethod
    def initialize(self) -> bool: ...

    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 512,
        temperature: float = 0.3,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Run one completion.

        Parameters
        ----------
        system_prompt:
            Instructions for the model.
        user_prompt:
            Optional user turn; skipped when empty.
        max_tokens / temperature:
            Sampling limits.
        json_mode:
            Request a JSON object reply.
        """


class OpenAIBackend(LLMBackend):
    """
    OpenAI-compatible Chat Completions backend.

    Parameters
    ----------
    api_key:
        May be empty when ``base_url`` is an endpoint without auth.
    model:
        Model id sent with every request.
    base_url:
        Endpoint root (``.../v1``); ``None`` means api.openai.com.
    timeout:
        Seconds before a request is abandoned. Retries are disabled so the
        caller sees the failure within this bound.
    """

    def __init__(self, api_key: str = "", model: str = DEFAULT_MODEL, base_url: str | None = None, timeout: int = 30):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._timeout = timeout
        self._client: Any = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        if not (self._api_key or self._base_url):
            logger.warning("Story backend needs an API key or a custom endpoint")
            return False
        try:
            import openai
        except ImportError:
            logger.error("Story backend unavailable: the 'openai' package is not installed")
            return False

        options: dict[str, Any] = {"api_key": self._api_key, "timeout": self._timeout, "max_retries": 0}
        if self._base_url:
            options["base_url"] = self._base_url
        try:
            self._client = openai.OpenAI(**options)
        except Exception as exc:
            logger.error("Story backend init failed: %s", exc)
            return False
        logger.info("Story backend ready (model=%s, endpoint=%s)", self._model, self._base_url or "default")
        return True

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 512,
        temperature: float = 0.3,
        json_mode: bool = False,
    ) -> LLMResponse:
        if self._client is None:
            raise RuntimeError("OpenAI backend not initialised")

        messages = [{"role": "system", "content": system_prompt}]
        if user_prompt:
            messages.append({"role": "user", "content": user_prompt})
        request: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        started = time.perf_counter()
        completion = self._client.chat.completions.create(**request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        usage = getattr(completion, "usage", None)
        return LLMResponse(
            text=completion.choices[0].message.content or "",
            model=getattr(completion, "model", self._model),
            usage=(
                {
                    "prompt_tokens": usage.prompt_tokens,
                    "completion_tokens": usage.completion_tokens,
                    "total_tokens": usage.total_tokens,
                }
                if usage
                else {}
            ),
            latency_ms=elapsed_ms,
            raw=completion,
        )


def create_backend(
    provider: str,
    *,
    api_key: str = "",
    model: str = "",
    base_url: str | None = None,
    timeout: int = 30,
) -> LLMBackend | None:
    """Return an initialised backend for ``provider`` ("openai" or "none"), or ``None``."""
    provider = provider.strip().lower()
    if provider in ("", "none"):
        logger.info("Story generation disabled")
        return None
    if provider != "openai":
        logger.error("Unknown story backend '%s'", provider)
        return None

    backend = OpenAIBackend(api_key=api_key, model=model or DEFAULT_MODEL, base_url=base_url, timeout=timeout)
    if backend.initialize():
        return backend
    logger.warning("Story backend '%s' did not initialise; placeholder stories will be used", provider)
    return None
