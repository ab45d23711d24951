"""Terminal rendering of analysis results."""

from .panels import ascii_chart, render_snapshot, render_source_panel, render_tooltip, source_body

__all__ = [
    'ascii_chart',
    'render_snapshot',
    'render_source_panel',
    'render_tooltip',
    'source_body',
]
