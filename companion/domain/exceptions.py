"""Centralized exception hierarchy for the Growth Companion.

Every error the device can hit inherits from :class:`CompanionError`. None of
them is fatal: each one is absorbed at a well-defined seam with a safe
default so the device stays operable.

Hierarchy
---------
::

    CompanionError (base)
    ├── RemoteUnavailable     (ledger query / submit failed)
    ├── GenerationFailed      (AI story call failed or returned bad data)
    ├── AssetDecodeFailed     (one stage image could not be decoded)
    ├── UnknownStageName      (ledger reported a stage not in the table)
    ├── DeviceError           (display / GPIO communication)
    └── ConfigurationError    (missing / invalid config)
"""

from __future__ import annotations


class CompanionError(Exception):
    """Base exception for all Growth Companion errors.

    Parameters
    ----------
    message:
        Human-readable description, logged on the device.
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


class RemoteUnavailable(CompanionError):
    """Ledger query or transaction submission failed (network, timeout, bad payload)."""


class GenerationFailed(CompanionError):
    """Story generation failed, or returned malformed / wrong-count data."""


class AssetDecodeFailed(CompanionError):
    """A stage image asset could not be decoded into a display bitmap."""

    def __init__(self, message: str = "", *, stage_id: int | None = None, detail: dict | None = None) -> None:
        super().__init__(message, detail=detail)
        self.stage_id = stage_id


class UnknownStageName(CompanionError):
    """The ledger reported a stage name (or id) the stage table does not know."""

    def __init__(self, name: object, *, detail: dict | None = None) -> None:
        super().__init__(f"Stage name {name!r} not found in stage table", detail=detail)
        self.name = name


class DeviceError(CompanionError):
    """Hardware communication failure (display bus, GPIO)."""


class ConfigurationError(CompanionError):
    """Missing or invalid configuration (stage table, environment values)."""
