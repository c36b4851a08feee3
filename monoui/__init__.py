"""Monochrome menu engine driven by form definition strings, and a two-wheel drive controller."""

__version__ = "0.1.0"
__all__ = ["defs", "parse", "ui", "motor"]