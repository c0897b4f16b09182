"""
autopoweroff - battery-aware shutdown watchdog for PiSugar powered boards.
"""

__version__ = "0.1.0"
