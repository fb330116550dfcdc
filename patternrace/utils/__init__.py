"""Utility helpers shared across patternrace modules."""

from .seed_manager import SeedManager

__all__ = ["SeedManager"]
