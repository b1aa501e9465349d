from companion.hardware.display.base import DisplaySurface, FrameBufferSurface
from companion.hardware.display.ssd1306 import create_surface

__all__ = ["DisplaySurface", "FrameBufferSurface", "create_surface"]
