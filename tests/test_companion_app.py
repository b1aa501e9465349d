"""Tests for the command-line entry point."""

from unittest.mock import MagicMock, patch

import companion_app
from companion.config import CompanionConfig


def _run(argv, container, config=None):
    config = config or CompanionConfig(DEBUG=False, log_level="INFO")
    with patch.object(companion_app, "build_container", return_value=container) as build, patch.object(
        companion_app, "load_config", return_value=config
    ):
        code = companion_app.main(argv)
    return code, build


def test_water_once_boots_presses_and_shuts_down():
    container = MagicMock()
    code, build = _run(["--water-once"], container)

    assert code == 0
    assert build.call_args.kwargs["with_button"] is False
    container.boot.assert_called_once_with()
    container.coordinator.press.assert_called_once_with()
    container.shutdown.assert_called_once_with()


def test_no_ai_builds_with_a_copy_and_leaves_cached_config_alone():
    cached = CompanionConfig(DEBUG=False, log_level="INFO", enable_ai_stories=True)
    _, build = _run(["--no-ai", "--water-once"], MagicMock(), config=cached)

    used = build.call_args.args[0]
    assert used.enable_ai_stories is False
    assert used is not cached
    assert cached.enable_ai_stories is True


def test_boot_error_returns_nonzero_and_still_shuts_down():
    container = MagicMock()
    container.boot.side_effect = RuntimeError("display gone")
    code, _ = _run(["--water-once"], container)
    assert code == 1
    container.shutdown.assert_called_once_with()
