"""Tubecast - turn a video playlist into a podcast feed."""

__version__ = "0.1.0"
