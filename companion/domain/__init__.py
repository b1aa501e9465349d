from companion.domain.exceptions import (
    AssetDecodeFailed,
    CompanionError,
    ConfigurationError,
    DeviceError,
    GenerationFailed,
    RemoteUnavailable,
    UnknownStageName,
)
from companion.domain.growth_state import GrowthOutcome, GrowthState, GrowthStateMachine
from companion.domain.stages import Stage, StageTable

__all__ = [
    "AssetDecodeFailed",
    "CompanionError",
    "ConfigurationError",
    "DeviceError",
    "GenerationFailed",
    "GrowthOutcome",
    "GrowthState",
    "GrowthStateMachine",
    "RemoteUnavailable",
    "Stage",
    "StageTable",
    "UnknownStageName",
]
