"""Map bounded numeric series to 2-D plot coordinates and axis ticks.

Everything here is a pure function of its arguments: the same series,
domain and viewport always produce the same geometry.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Tuple

from ..analysis.models import DialogueTurn, ReadabilityPoint
from ..config.constants import (
    DEFAULT_CHART_WIDTH,
    DEFAULT_CHART_HEIGHT,
    DEFAULT_CHART_PADDING,
    POWER_SCORE_MIN,
    POWER_SCORE_MAX,
    READABILITY_MIN,
    READABILITY_MAX,
    READABILITY_TICK_COUNT,
    MAX_SPEAKER_LABEL_CHARS,
    MAX_UNTHINNED_LABELS,
)


@dataclass(frozen=True)
class Viewport:
    """Fixed drawing area; padding applies on every side."""

    width: float = DEFAULT_CHART_WIDTH
    height: float = DEFAULT_CHART_HEIGHT
    padding: float = DEFAULT_CHART_PADDING

    def __post_init__(self):
        if self.width <= 2 * self.padding or self.height <= 2 * self.padding:
            raise ValueError(
                f"Viewport {self.width}x{self.height} leaves no room inside padding {self.padding}"
            )

    @property
    def plot_width(self) -> float:
        return self.width - 2 * self.padding

    @property
    def plot_height(self) -> float:
        return self.height - 2 * self.padding


@dataclass(frozen=True)
class ChartPoint:
    """A plotted point and the datum it came from."""

    x: float
    y: float
    value: float
    index: int
    datum: Any = field(compare=False)


@dataclass(frozen=True)
class AxisTick:
    """Axis tick; baseline ticks get a solid guide line, others dashed."""

    position: float
    value: float
    label: str
    is_baseline: bool = False


@dataclass(frozen=True)
class ChartGeometry:
    """Renderable geometry for one series."""

    points: Tuple[ChartPoint, ...]
    ticks: Tuple[AxisTick, ...]
    domain: Tuple[float, float]
    baseline_value: float
    baseline_y: float
    viewport: Viewport

    @property
    def draws_line(self) -> bool:
        """A connecting line needs at least two points."""
        return len(self.points) > 1

    def svg_path(self) -> str:
        """SVG path data for the connecting line, or '' when there is none."""
        if not self.draws_line:
            return ""
        return "M " + " L ".join(f"{p.x:g},{p.y:g}" for p in self.points)

    def nearest_index(self, pixel_x: float) -> Optional[int]:
        """
        Index of the point nearest a horizontal pointer position.

        Returns None when the pointer is outside the plotted range.
        """
        count = len(self.points)
        if count == 0:
            return None
        if count == 1:
            # A lone point owns the whole plot area and nothing outside it.
            low = self.viewport.padding
            if low <= pixel_x <= low + self.viewport.plot_width:
                return 0
            return None
        fraction = (pixel_x - self.viewport.padding) / self.viewport.plot_width
        index = math.floor(fraction * (count - 1) + 0.5)
        if 0 <= index < count:
            return index
        return None


def _format_tick(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _baseline(domain_min: float, domain_max: float) -> float:
    if domain_min <= 0 <= domain_max:
        return 0.0
    return (domain_min + domain_max) / 2


def _value_to_y(value: float, domain_min: float, domain_max: float, viewport: Viewport) -> float:
    fraction = (value - domain_min) / (domain_max - domain_min)
    return viewport.height - viewport.padding - fraction * viewport.plot_height


def _index_to_x(index: int, count: int, viewport: Viewport) -> float:
    return viewport.padding + (index / max(count - 1, 1)) * viewport.plot_width


def _tick_values(
    domain_min: float,
    domain_max: float,
    tick_step: Optional[float],
    tick_count: Optional[int]
) -> list:
    if tick_count is not None:
        if tick_count < 1:
            raise ValueError("tick_count must be at least 1")
        span = domain_max - domain_min
        return [domain_min + (i / tick_count) * span for i in range(tick_count + 1)]

    step = tick_step if tick_step is not None else 1
    if step <= 0:
        raise ValueError("tick_step must be positive")
    steps = int(math.floor((domain_max - domain_min) / step + 1e-9))
    return [domain_min + i * step for i in range(steps + 1)]


def map_series(
    series: Sequence[Any],
    domain_min: float,
    domain_max: float,
    viewport: Viewport = Viewport(),
    *,
    value_of: Optional[Callable[[Any], float]] = None,
    tick_step: Optional[float] = None,
    tick_count: Optional[int] = None,
    tick_format: Callable[[float], str] = _format_tick
) -> ChartGeometry:
    """
    Translate a series into pixel coordinates plus y-axis ticks.

    Index i of N maps linearly across the plot width (a single point sits at
    the left edge); values are clamped into the domain and mapped with y
    inverted, since pixel y grows downward.

    Args:
        series: Data points in x order
        domain_min: Lowest value on the y axis
        domain_max: Highest value on the y axis
        viewport: Drawing area
        value_of: Extracts the plotted number from a datum (default: the datum itself)
        tick_step: One tick per step across the domain (default 1)
        tick_count: Number of evenly spaced intervals instead of a step
        tick_format: Label formatter for tick values

    Returns:
        ChartGeometry for the series

    Raises:
        ValueError: If the domain is empty or inverted
    """
    if domain_max <= domain_min:
        raise ValueError(f"Empty chart domain [{domain_min}, {domain_max}]")

    extract = value_of or float
    count = len(series)

    points = []
    for index, datum in enumerate(series):
        value = _clamp(float(extract(datum)), domain_min, domain_max)
        points.append(ChartPoint(
            x=_index_to_x(index, count, viewport),
            y=_value_to_y(value, domain_min, domain_max, viewport),
            value=value,
            index=index,
            datum=datum
        ))

    baseline = _baseline(domain_min, domain_max)
    ticks = tuple(
        AxisTick(
            position=_value_to_y(value, domain_min, domain_max, viewport),
            value=value,
            label=tick_format(value),
            is_baseline=math.isclose(value, baseline, abs_tol=1e-9)
        )
        for value in _tick_values(domain_min, domain_max, tick_step, tick_count)
    )

    return ChartGeometry(
        points=tuple(points),
        ticks=ticks,
        domain=(domain_min, domain_max),
        baseline_value=baseline,
        baseline_y=_value_to_y(baseline, domain_min, domain_max, viewport),
        viewport=viewport
    )


def map_power_balance(turns: Sequence[DialogueTurn], viewport: Viewport = Viewport()) -> ChartGeometry:
    """Power scores on a fixed [-5, 5] domain with one tick per unit."""
    return map_series(
        turns,
        POWER_SCORE_MIN,
        POWER_SCORE_MAX,
        viewport,
        value_of=lambda turn: turn.power_score,
        tick_step=1
    )


def readability_domain(points: Sequence[ReadabilityPoint]) -> Tuple[float, float]:
    """Domain covering at least 0..100, widened to fit outlying scores."""
    scores = [p.score for p in points]
    return (
        min([READABILITY_MIN, *scores]),
        max([READABILITY_MAX, *scores])
    )


def map_readability(
    points: Sequence[ReadabilityPoint],
    viewport: Viewport = Viewport(),
    tick_count: int = READABILITY_TICK_COUNT
) -> ChartGeometry:
    """Readability progression with a coarse fixed number of ticks."""
    domain_min, domain_max = readability_domain(points)
    return map_series(
        points,
        domain_min,
        domain_max,
        viewport,
        value_of=lambda point: point.score,
        tick_count=tick_count,
        tick_format=lambda value: f"{value:.0f}"
    )


def power_balance_x_labels(geometry: ChartGeometry) -> Tuple[AxisTick, ...]:
    """Speaker labels per turn; long exchanges drop the ordinal on odd turns."""
    count = len(geometry.points)
    labels = []
    for point in geometry.points:
        label = point.datum.speaker_name[:MAX_SPEAKER_LABEL_CHARS]
        if not (count > MAX_UNTHINNED_LABELS and point.index % 2 != 0):
            label += f" ({point.index + 1})"
        labels.append(AxisTick(position=point.x, value=point.index, label=label))
    return tuple(labels)


def readability_x_labels(geometry: ChartGeometry) -> Tuple[AxisTick, ...]:
    """1-based paragraph labels, thinned to about ten for long texts."""
    count = len(geometry.points)
    if count <= 1:
        return ()

    stride = max(count // MAX_UNTHINNED_LABELS, 1)
    labels = []
    for point in geometry.points:
        keep = (
            count <= MAX_UNTHINNED_LABELS
            or point.index % stride == 0
            or point.index in (0, count - 1)
        )
        if keep:
            labels.append(AxisTick(position=point.x, value=point.index, label=str(point.index + 1)))
    return tuple(labels)
