"""Hover state mapping a plotted point back to its source datum."""

import re
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Callable, Optional, Tuple

from ..analysis.models import DialogueTurn, ReadabilityPoint
from .mapper import ChartGeometry


_CASE_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])')


def humanize_identifier(identifier: str) -> str:
    """
    Turn a camelCase identifier into a display label.

    >>> humanize_identifier("weaponizedPoliteness")
    'Weaponized Politeness'
    """
    words = _CASE_BOUNDARY.sub(' ', identifier).split()
    return ' '.join(word[:1].upper() + word[1:] for word in words)


@dataclass(frozen=True)
class Tooltip:
    """Detail shown for the hovered point."""

    index: int
    x: float
    y: float
    title: str
    lines: Tuple[Tuple[str, str], ...]
    tactic_label: Optional[str] = None


def _yes_no(flag: bool) -> str:
    return 'Yes' if flag else 'No'


@singledispatch
def describe_datum(datum: Any) -> Tuple[str, Tuple[Tuple[str, str], ...], Optional[str]]:
    """Title, detail lines and optional tactic label for a datum."""
    return str(datum), (), None


@describe_datum.register
def _(datum: DialogueTurn):
    metrics = datum.metrics
    lines = (
        ('Power Score', str(datum.power_score)),
        ('Question', _yes_no(metrics.is_question)),
        ('Word Count', str(metrics.word_count)),
        ('Interruptions', str(metrics.interruption_count)),
        ('Hedge/Intensifier Ratio', f"{metrics.hedge_to_intensifier_ratio:.2f}"),
        ('Topic Changed', _yes_no(metrics.topic_changed)),
    )
    tactic = humanize_identifier(datum.detected_tactic.value) if datum.detected_tactic else None
    return datum.speaker_name, lines, tactic


@describe_datum.register
def _(datum: ReadabilityPoint):
    return f"Paragraph {datum.paragraph_index + 1}", (('Score', f"{datum.score:.1f}"),), None


class InteractionTooltipModel:
    """
    At most one tooltip at a time for a chart.

    Hovering a point replaces whatever was shown; leaving clears it. There is
    no timed dismissal.
    """

    def __init__(
        self,
        geometry: ChartGeometry,
        on_change: Optional[Callable[[Optional[Tooltip]], None]] = None
    ):
        self.geometry = geometry
        self.on_change = on_change
        self._tooltip: Optional[Tooltip] = None

    @property
    def tooltip(self) -> Optional[Tooltip]:
        return self._tooltip

    @property
    def hovered_index(self) -> Optional[int]:
        return self._tooltip.index if self._tooltip else None

    def on_hover(self, point_index: int) -> Tooltip:
        """Show the tooltip for a point, replacing any current one."""
        if not 0 <= point_index < len(self.geometry.points):
            raise IndexError(
                f"Point index {point_index} out of range for {len(self.geometry.points)} points"
            )

        point = self.geometry.points[point_index]
        title, lines, tactic_label = describe_datum(point.datum)
        self._set(Tooltip(
            index=point.index,
            x=point.x,
            y=point.y,
            title=title,
            lines=lines,
            tactic_label=tactic_label
        ))
        return self._tooltip

    def on_pointer_move(self, pixel_x: float) -> Optional[Tooltip]:
        """Hover the point nearest a pointer x position; clear when off the plot."""
        index = self.geometry.nearest_index(pixel_x)
        if index is None:
            self.on_leave()
            return None
        if index == self.hovered_index:
            return self._tooltip
        return self.on_hover(index)

    def on_leave(self) -> None:
        """Clear the tooltip."""
        if self._tooltip is not None:
            self._set(None)

    def _set(self, tooltip: Optional[Tooltip]) -> None:
        self._tooltip = tooltip
        if self.on_change:
            self.on_change(tooltip)
