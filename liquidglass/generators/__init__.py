"""LiquidGlass Generators: batch displacement map rendering."""

from .map_set import MapSetGenerator

__all__ = ["MapSetGenerator"]
