"""Tests for the OpenAI-compatible story backend (client mocked)."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from companion.services.ai.llm_backends import OpenAIBackend, create_backend


def _completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=20, total_tokens=30),
        model="gemma2-9b-it",
    )


def test_none_provider_disables_generation():
    assert create_backend("none") is None
    assert create_backend("mystery") is None


def test_keyless_custom_endpoint_initialises():
    with patch("openai.OpenAI") as client_cls:
        backend = create_backend("openai", base_url="https://orchestrator.chasm.net/v1", timeout=30)
    assert backend is not None and backend.is_available
    kwargs = client_cls.call_args.kwargs
    assert kwargs["base_url"] == "https://orchestrator.chasm.net/v1"
    assert kwargs["timeout"] == 30


def test_no_key_and_no_endpoint_is_unavailable():
    backend = OpenAIBackend(api_key="", base_url=None)
    assert backend.initialize() is False
    assert not backend.is_available


def test_generate_sends_system_prompt_in_json_mode():
    backend = OpenAIBackend(base_url="http://llm.local/v1")
    backend._client = MagicMock()
    backend._client.chat.completions.create.return_value = _completion('{"stories": []}')

    response = backend.generate("Be a bard.", "", temperature=0.9, json_mode=True)

    kwargs = backend._client.chat.completions.create.call_args.kwargs
    assert kwargs["messages"] == [{"role": "system", "content": "Be a bard."}]
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["stream"] is False
    assert response.text == '{"stories": []}'
    assert response.usage["total_tokens"] == 30


def test_generate_before_initialise_raises():
    with pytest.raises(RuntimeError):
        OpenAIBackend(base_url="http://llm.local/v1").generate("x", "y")
