"""Application services."""

from .advice_service import AdviceService
from .performance_service import AssetEvaluation, PerformanceService

__all__ = ["AdviceService", "AssetEvaluation", "PerformanceService"]
