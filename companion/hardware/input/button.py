# Description: GPIO push button for the watering action on Raspberry Pi.
#
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class WaterButton:
    """
    Reports debounced presses of a push button on a Raspberry Pi GPIO pin.

    Attributes:
        pin (int): BCM pin the button is wired to.
        bounce_ms (int): Debounce interval handed to the GPIO edge detector.
        pull_up (bool): Use the internal pull-up (button to ground) instead of
            the pull-down (button to 3V3).

    Methods:
        arm(callback): Start delivering presses to ``callback``.
        disarm(): Stop delivering presses.
        cleanup(): Releases the GPIO pin resources.
    """

    def __init__(self, pin: int, bounce_ms: int = 150, pull_up: bool = False):
        self.pin = pin
        self.bounce_ms = bounce_ms
        self.pull_up = pull_up
        self._armed = False
        self.GPIO = self._setup_gpio()
        if self.GPIO:
            self.GPIO.setmode(self.GPIO.BCM)
            pull = self.GPIO.PUD_UP if pull_up else self.GPIO.PUD_DOWN
            self.GPIO.setup(self.pin, self.GPIO.IN, pull_up_down=pull)
            logger.info("GPIO pin %s set as INPUT (pull %s)", self.pin, "up" if pull_up else "down")
        else:
            logger.warning("GPIO is not available. Water button on pin %s will not fire.", self.pin)

    def _setup_gpio(self):
        """Imports and sets up GPIO only if running on Raspberry Pi."""
        try:
            import RPi.GPIO as GPIO  # type: ignore

            return GPIO
        except (ImportError, RuntimeError):
            logger.error("GPIO not available. Running in non-Raspberry Pi environment.")
            return None

    @property
    def armed(self) -> bool:
        return self._armed

    def arm(self, callback: Callable[[], object]) -> None:
        """Deliver each press to ``callback`` (called from the GPIO event thread)."""
        if self._armed:
            return
        if self.GPIO:
            edge = self.GPIO.FALLING if self.pull_up else self.GPIO.RISING
            try:
                self.GPIO.add_event_detect(
                    self.pin,
                    edge,
                    callback=lambda _channel: callback(),
                    bouncetime=self.bounce_ms,
                )
            except RuntimeError as e:
                logger.error("Failed to arm button on pin %s: %s", self.pin, e)
                return
        self._armed = True
        logger.info("Water button armed on pin %s (debounce %sms)", self.pin, self.bounce_ms)

    def disarm(self) -> None:
        if not self._armed:
            return
        if self.GPIO:
            try:
                self.GPIO.remove_event_detect(self.pin)
            except RuntimeError as e:
                logger.error("Failed to disarm button on pin %s: %s", self.pin, e)
        self._armed = False

    def cleanup(self):
        """Releases the GPIO pin resources."""
        self.disarm()
        if self.GPIO:
            try:
                self.GPIO.cleanup(self.pin)
                logger.info("Cleaned up GPIO pin %s for water button", self.pin)
            except Exception as e:
                logger.error("Error cleaning up GPIO pin %s: %s", self.pin, e)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.cleanup()
