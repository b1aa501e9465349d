"""
Configuration for the Growth Companion device
==============================================
Runtime settings loaded from environment variables. Defaults match the
reference hardware (SSD1306 128x64 on I2C 0x3C, button on BCM pin 2) and a
local Postchain node.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from companion.domain.exceptions import ConfigurationError

DEFAULT_LEDGER_ADDRESS = "031b84c5567b126440995d3ed5aaba0565d71e1834604819ff9c17f5e9d5dd078f"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        # base 0 accepts "0x3C" style values for bus addresses
        return int(value, 0)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


@dataclass
class CompanionConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("COMPANION_ENV", "development"))
    DEBUG: bool = field(default_factory=lambda: _env_bool("COMPANION_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("COMPANION_LOG_LEVEL", "INFO"))
    audit_log_path: str = field(default_factory=lambda: os.getenv("COMPANION_AUDIT_LOG_PATH", "logs/audit.log"))

    # Remote ledger (Postchain node)
    ledger_node_url: str = field(default_factory=lambda: os.getenv("COMPANION_LEDGER_URL", "http://localhost:7740"))
    ledger_blockchain_iid: int = field(default_factory=lambda: _env_int("COMPANION_LEDGER_IID", 0))
    ledger_address: str = field(
        default_factory=lambda: os.getenv("COMPANION_LEDGER_ADDRESS", DEFAULT_LEDGER_ADDRESS)
    )
    ledger_timeout_seconds: int = field(default_factory=lambda: _env_int("COMPANION_LEDGER_TIMEOUT", 10))

    # Story generation (any OpenAI-compatible endpoint)
    enable_ai_stories: bool = field(default_factory=lambda: _env_bool("COMPANION_ENABLE_AI_STORIES", True))
    ai_base_url: str = field(
        default_factory=lambda: os.getenv("COMPANION_AI_BASE_URL", "https://orchestrator.chasm.net/v1")
    )
    ai_api_key: str = field(default_factory=lambda: os.getenv("COMPANION_AI_API_KEY", ""))
    ai_model: str = field(default_factory=lambda: os.getenv("COMPANION_AI_MODEL", "gemma2-9b-it"))
    ai_timeout_seconds: int = field(default_factory=lambda: _env_int("COMPANION_AI_TIMEOUT", 30))

    # Hardware
    asset_dir: str = field(default_factory=lambda: os.getenv("COMPANION_ASSET_DIR", "assets"))
    display_address: int = field(default_factory=lambda: _env_int("COMPANION_DISPLAY_ADDRESS", 0x3C))
    display_width: int = field(default_factory=lambda: _env_int("COMPANION_DISPLAY_WIDTH", 128))
    display_height: int = field(default_factory=lambda: _env_int("COMPANION_DISPLAY_HEIGHT", 64))
    button_pin: int = field(default_factory=lambda: _env_int("COMPANION_BUTTON_PIN", 2))
    button_bounce_ms: int = field(default_factory=lambda: _env_int("COMPANION_BUTTON_BOUNCE_MS", 150))

    # Display timing (milliseconds)
    message_hold_ms: int = field(default_factory=lambda: _env_int("COMPANION_MESSAGE_HOLD_MS", 5000))
    confirmation_hold_ms: int = field(default_factory=lambda: _env_int("COMPANION_CONFIRMATION_HOLD_MS", 2000))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.message_hold_ms < 0 or self.confirmation_hold_ms < 0:
            raise ConfigurationError(
                "Display hold durations must be >= 0",
                detail={
                    "message_hold_ms": self.message_hold_ms,
                    "confirmation_hold_ms": self.confirmation_hold_ms,
                },
            )
        if self.ledger_timeout_seconds <= 0 or self.ai_timeout_seconds <= 0:
            raise ConfigurationError("Remote call timeouts must be positive")
        if self.display_width <= 0 or self.display_height <= 0:
            raise ConfigurationError("Display dimensions must be positive")


@lru_cache(maxsize=1)
def load_config() -> CompanionConfig:
    """Return the process-wide configuration, read once from the environment."""
    return CompanionConfig()
