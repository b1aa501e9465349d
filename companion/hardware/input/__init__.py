from companion.hardware.input.button import WaterButton

__all__ = ["WaterButton"]
