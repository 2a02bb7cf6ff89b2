"""Pixel Empires: empire progression engine and game service."""

__version__ = "0.1.0"
