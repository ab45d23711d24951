"""Concurrent analysis aggregation for LitLens."""

from .state import AnalysisSnapshot, AnalysisSourceState, ProviderResult, SourceStatus
from .registry import ProviderRegistry, ProviderSpec
from .coordinator import AnalysisCoordinator
from .lazy_trigger import LazyTabTrigger

__all__ = [
    'AnalysisCoordinator',
    'AnalysisSnapshot',
    'AnalysisSourceState',
    'LazyTabTrigger',
    'ProviderRegistry',
    'ProviderResult',
    'ProviderSpec',
    'SourceStatus',
]
