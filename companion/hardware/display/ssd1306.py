"""
Internal driver for the SSD1306 OLED over I2C.
This module should only be used through :func:`create_surface`, not directly
by application code.
"""

import logging

from companion.domain.exceptions import DeviceError

from .base import DisplaySurface, FrameBufferSurface

logger = logging.getLogger(__name__)

try:
    import adafruit_ssd1306
    import board
    import busio

    IS_PI = True
except (ImportError, NotImplementedError, RuntimeError):
    logger.warning("Raspberry Pi display libraries not available. Using framebuffer display.")
    IS_PI = False


class SSD1306Surface(FrameBufferSurface):
    """
    Draws on a Pillow canvas and pushes it to the panel on :meth:`update`.

    Args:
        width (int): Panel width in pixels.
        height (int): Panel height in pixels.
        address (int): I2C address of the panel.
    """

    def __init__(self, width: int = 128, height: int = 64, address: int = 0x3C):
        super().__init__(width, height)
        self.address = address
        try:
            i2c = busio.I2C(board.SCL, board.SDA)
            self.oled = adafruit_ssd1306.SSD1306_I2C(width, height, i2c, addr=address)
            self.oled.fill(0)
            self.oled.show()
        except Exception as e:
            raise DeviceError(f"SSD1306 init failed at 0x{address:02X}: {e}") from e
        logger.info("SSD1306 %sx%s initialized at I2C 0x%02X", width, height, address)

    def update(self) -> None:
        super().update()
        try:
            self.oled.image(self.image)
            self.oled.show()
        except Exception as e:
            logger.error("Error pushing frame to SSD1306: %s", e)

    def close(self) -> None:
        try:
            self.oled.fill(0)
            self.oled.show()
        except Exception as e:
            logger.error("Error blanking SSD1306: %s", e)


def create_surface(width: int = 128, height: int = 64, address: int = 0x3C) -> DisplaySurface:
    """Return the real panel when running on a Pi, the framebuffer otherwise."""
    if IS_PI:
        try:
            return SSD1306Surface(width, height, address)
        except DeviceError as e:
            logger.error("%s; falling back to framebuffer display", e)
    return FrameBufferSurface(width, height)
