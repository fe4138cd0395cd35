"""
F1 Flag Relay

A Python application that turns F1 game telemetry into a single flag
signal for external indicator hardware (flag lights, wheel LEDs, ...).
"""

__version__ = "0.1.0"
__author__ = "F1 Flag Relay Team"

# Global debug flag - set to True for verbose output
DEBUG = False
