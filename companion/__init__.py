"""
Growth Companion
================
Drives a small plant companion device: points from a remote ledger are mapped
onto growth stages and rendered on an OLED, and a physical button waters the
plant.
"""

__version__ = "1.0.0"
