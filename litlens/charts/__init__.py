"""Chart geometry and interaction state."""

from .mapper import (
    AxisTick,
    ChartGeometry,
    ChartPoint,
    Viewport,
    map_power_balance,
    map_readability,
    map_series,
    power_balance_x_labels,
    readability_x_labels,
)
from .tooltip import InteractionTooltipModel, Tooltip, humanize_identifier

__all__ = [
    'AxisTick',
    'ChartGeometry',
    'ChartPoint',
    'InteractionTooltipModel',
    'Tooltip',
    'Viewport',
    'humanize_identifier',
    'map_power_balance',
    'map_readability',
    'map_series',
    'power_balance_x_labels',
    'readability_x_labels',
]
