"""Tests for environment-driven configuration."""

import pytest

from companion.config import DEFAULT_LEDGER_ADDRESS, CompanionConfig
from companion.domain.exceptions import ConfigurationError


def test_defaults(monkeypatch):
    for name in ("COMPANION_MESSAGE_HOLD_MS", "COMPANION_LEDGER_URL", "COMPANION_DISPLAY_ADDRESS"):
        monkeypatch.delenv(name, raising=False)
    config = CompanionConfig()
    assert config.message_hold_ms == 5000
    assert config.confirmation_hold_ms == 2000
    assert config.ledger_node_url == "http://localhost:7740"
    assert config.ledger_address == DEFAULT_LEDGER_ADDRESS
    assert config.display_address == 0x3C


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("COMPANION_DISPLAY_ADDRESS", "0x3D")
    monkeypatch.setenv("COMPANION_BUTTON_PIN", "17")
    monkeypatch.setenv("COMPANION_ENABLE_AI_STORIES", "off")
    config = CompanionConfig()
    assert config.display_address == 0x3D
    assert config.button_pin == 17
    assert config.enable_ai_stories is False


def test_invalid_integer_names_variable(monkeypatch):
    monkeypatch.setenv("COMPANION_LEDGER_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="COMPANION_LEDGER_TIMEOUT"):
        CompanionConfig()


def test_negative_hold_rejected():
    with pytest.raises(ConfigurationError):
        CompanionConfig(message_hold_ms=-1)


def test_zero_timeout_rejected():
    with pytest.raises(ConfigurationError):
        CompanionConfig(ledger_timeout_seconds=0)
