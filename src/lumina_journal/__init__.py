"""Lumina: personal reading journal."""

__version__ = "0.1.0"
