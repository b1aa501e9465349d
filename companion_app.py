"""Entry point for the Growth Companion device.

Boots the device (ledger reading, stories, images, intro sequence), arms the
water button and then idles until interrupted. Configuration comes from
``COMPANION_*`` environment variables; the flags below override a few of them
for bench testing.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import signal
import threading

from companion.config import load_config
from companion.services.container import build_container


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Growth Companion device controller")
    parser.add_argument("--no-ai", action="store_true", help="Skip story generation and use placeholder stories")
    parser.add_argument("--no-button", action="store_true", help="Do not arm the GPIO water button")
    parser.add_argument(
        "--water-once",
        action="store_true",
        help="Run a single watering attempt after boot, then exit (no button needed)",
    )
    parser.add_argument("--log-level", default=None, help="Override COMPANION_LOG_LEVEL")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config()
    if args.no_ai:
        # load_config() is shared process-wide; keep the cached copy intact
        config = dataclasses.replace(config, enable_ai_stories=False)

    # Configure logging early so other modules pick it up
    level_name = "DEBUG" if config.DEBUG else (args.log_level or config.log_level)
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.info("Board is ready")

    container = build_container(config, with_button=not (args.no_button or args.water_once))
    stop = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    try:
        container.boot()
        if args.water_once:
            container.coordinator.press()
        else:
            while not stop.wait(timeout=1.0):
                pass
        return 0
    except KeyboardInterrupt:
        logging.info("Stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Error during board setup: %s", exc)
        return 1
    finally:
        container.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
