"""Rich renderables for analysis results."""
from typing import Callable, Dict, List, Optional, Sequence

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..analysis.models import group_devices_by_category
from ..analysis.registry import ProviderRegistry, ProviderSpec
from ..analysis.state import AnalysisSnapshot, AnalysisSourceState, SourceStatus
from ..charts.mapper import (
    AxisTick,
    ChartGeometry,
    Viewport,
    map_power_balance,
    map_readability,
    power_balance_x_labels,
    readability_x_labels,
)
from ..charts.tooltip import Tooltip, humanize_identifier
from ..config.constants import (
    COLOR_PALETTE,
    LITERARY_DEVICES,
    READABILITY,
    POWER_BALANCE,
    EMPTY_MESSAGES,
)


CHART_ROWS = 11
CHART_COLUMNS = 60

STATUS_STYLES = {
    SourceStatus.IDLE: "dim",
    SourceStatus.LOADING: "cyan",
    SourceStatus.SUCCESS: "green",
    SourceStatus.ERROR: "red",
}


def ascii_chart(
    geometry: ChartGeometry,
    x_labels: Sequence[AxisTick] = (),
    rows: int = CHART_ROWS,
    columns: int = CHART_COLUMNS
) -> str:
    """
    Draw chart geometry on a character grid.

    Pixel coordinates are scaled onto rows x columns; tick rows get a dashed
    guide (solid for the baseline) and each point is drawn as '●'.
    """
    viewport = geometry.viewport

    def to_column(x: float) -> int:
        return round((x - viewport.padding) / viewport.plot_width * (columns - 1))

    def to_row(y: float) -> int:
        return round((y - viewport.padding) / viewport.plot_height * (rows - 1))

    grid = [[' '] * columns for _ in range(rows)]
    row_labels: Dict[int, str] = {}
    for tick in geometry.ticks:
        row = to_row(tick.position)
        row_labels.setdefault(row, tick.label)
        fill = '─' if tick.is_baseline else '┈'
        for column in range(columns):
            if grid[row][column] == ' ' or tick.is_baseline:
                grid[row][column] = fill

    for point in geometry.points:
        grid[to_row(point.y)][to_column(point.x)] = '●'

    label_width = max((len(label) for label in row_labels.values()), default=0)
    lines = [
        f"{row_labels.get(row, ''):>{label_width}} │{''.join(cells)}"
        for row, cells in enumerate(grid)
    ]

    if x_labels:
        axis = [' '] * (columns + max(len(t.label) for t in x_labels))
        cursor = 0
        for tick in x_labels:
            start = max(to_column(tick.position), cursor)
            if start + len(tick.label) > len(axis):
                continue
            axis[start:start + len(tick.label)] = tick.label
            cursor = start + len(tick.label) + 1
        lines.append(' ' * (label_width + 2) + ''.join(axis).rstrip())

    return '\n'.join(lines)


def _palette_body(payload: Sequence, viewport: Viewport) -> RenderableType:
    table = Table(show_header=True)
    table.add_column("Swatch")
    table.add_column("Name", style="cyan")
    table.add_column("Hex")
    table.add_column("Prominence", justify="right")
    table.add_column("Role")

    for swatch in payload:
        table.add_row(
            f"[on {swatch.hex}]      [/]",
            swatch.name,
            swatch.hex,
            f"{swatch.prominence_percent:.1f}%",
            swatch.role
        )
    return table


def _devices_body(payload: Sequence, viewport: Viewport) -> RenderableType:
    table = Table(show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Device", style="yellow")
    table.add_column("Snippet")
    table.add_column("Explanation", style="dim")

    for category, devices in group_devices_by_category(payload).items():
        for i, device in enumerate(devices):
            table.add_row(
                category if i == 0 else "",
                device.device_type.value,
                Text(f"\"{device.text_snippet}\""),
                device.explanation
            )
        table.add_section()
    return table


def _readability_body(payload: Sequence, viewport: Viewport) -> RenderableType:
    geometry = map_readability(payload, viewport)
    chart = ascii_chart(geometry, readability_x_labels(geometry))
    scores = [point.score for point in payload]
    summary = f"Average: {sum(scores) / len(scores):.1f}  Min: {min(scores):.1f}  Max: {max(scores):.1f}"
    return Group(Text(chart), Text(summary, style="dim"))


def _power_balance_body(payload: Sequence, viewport: Viewport) -> RenderableType:
    geometry = map_power_balance(payload, viewport)
    chart = ascii_chart(geometry, power_balance_x_labels(geometry))

    table = Table(show_header=True)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Speaker")
    table.add_column("Score", justify="right")
    table.add_column("Tactic", style="yellow")

    for i, turn in enumerate(payload, 1):
        table.add_row(
            str(i),
            turn.speaker_name,
            f"{turn.power_score:+d}" if turn.power_score else "0",
            humanize_identifier(turn.detected_tactic.value) if turn.detected_tactic else ""
        )
    return Group(Text(chart), table)


BODY_RENDERERS: Dict[str, Callable[[Sequence, Viewport], RenderableType]] = {
    COLOR_PALETTE: _palette_body,
    LITERARY_DEVICES: _devices_body,
    READABILITY: _readability_body,
    POWER_BALANCE: _power_balance_body,
}


def source_body(spec: ProviderSpec, state: AnalysisSourceState, viewport: Viewport = Viewport()) -> RenderableType:
    """Panel body for one source in its current state."""
    if state.status is SourceStatus.IDLE:
        return Text("Not started", style="dim")
    if state.status is SourceStatus.LOADING:
        return Text(f"Loading {spec.title}...", style="cyan")
    if state.status is SourceStatus.ERROR:
        return Text(f"Error: {state.error_message}", style="red")

    if state.is_empty:
        return Text(EMPTY_MESSAGES.get(spec.provider_id, "No results."), style="yellow")

    renderer = BODY_RENDERERS.get(spec.provider_id)
    if renderer is None:
        return Text(f"{len(state.payload)} results")
    return renderer(state.payload, viewport)


def render_source_panel(
    spec: ProviderSpec,
    state: AnalysisSourceState,
    viewport: Viewport = Viewport()
) -> Panel:
    """Bordered panel titled by provider, colored by status."""
    return Panel(
        source_body(spec, state, viewport),
        title=spec.title,
        subtitle=state.status.display_name,
        border_style=STATUS_STYLES[state.status]
    )


def render_snapshot(
    registry: ProviderRegistry,
    snapshot: AnalysisSnapshot,
    provider_ids: Optional[List[str]] = None,
    viewport: Viewport = Viewport()
) -> Group:
    """Panels for every source in the snapshot, in registry order."""
    wanted = provider_ids if provider_ids is not None else registry.ids()
    return Group(*[
        render_source_panel(spec, snapshot[spec.provider_id], viewport)
        for spec in registry
        if spec.provider_id in wanted and spec.provider_id in snapshot
    ])


def render_tooltip(tooltip: Tooltip) -> Panel:
    """Tooltip detail lines as a compact panel."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="cyan")
    grid.add_column()
    for label, value in tooltip.lines:
        grid.add_row(label, value)

    body: RenderableType = grid
    if tooltip.tactic_label:
        body = Group(grid, Text(f"Tactic: {tooltip.tactic_label}", style="bold yellow"))

    return Panel(body, title=tooltip.title, border_style="blue", expand=False)
