"""LitLens - concurrent multi-source literary analysis."""

__version__ = "1.0.0"

from .analysis import (
    AnalysisCoordinator,
    AnalysisSnapshot,
    AnalysisSourceState,
    LazyTabTrigger,
    ProviderRegistry,
    ProviderResult,
    ProviderSpec,
    SourceStatus,
)
from .charts import InteractionTooltipModel, Viewport
from .providers import build_default_registry

__all__ = [
    '__version__',
    'AnalysisCoordinator',
    'AnalysisSnapshot',
    'AnalysisSourceState',
    'InteractionTooltipModel',
    'LazyTabTrigger',
    'ProviderRegistry',
    'ProviderResult',
    'ProviderSpec',
    'SourceStatus',
    'Viewport',
    'build_default_registry',
]
