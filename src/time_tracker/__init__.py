"""Time Tracker - command-line time tracking."""

__version__ = "0.1.0"
