"""Data providers package."""

from .mock import synthetic_performance
from .twelvedata import TwelveDataProvider

__all__ = ["TwelveDataProvider", "synthetic_performance"]
