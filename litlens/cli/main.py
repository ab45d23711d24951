"""Main CLI entry point using Typer."""
import sys
import asyncio
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.status import Status
from rich.table import Table

from .. import __version__
from ..analysis import AnalysisCoordinator, AnalysisSnapshot, ProviderRegistry, SourceStatus
from ..config import Settings, get_settings
from ..errors import LitLensError
from ..display import render_snapshot
from ..charts import Viewport
from ..providers import build_default_registry
from ..utils.logging import setup_logging, get_logger


app = typer.Typer(
    name="litlens",
    help="LitLens - concurrent literary analysis of a text",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger("cli")


def _read_text(path: str) -> str:
    """Read input text from a file, or stdin when path is '-'."""
    if path == '-':
        return sys.stdin.read()

    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return file_path.read_text(encoding='utf-8')


def _status_line(registry: ProviderRegistry, snapshot: AnalysisSnapshot) -> str:
    loading = [
        registry.get(pid).title
        for pid, status in snapshot.statuses().items()
        if status is SourceStatus.LOADING
    ]
    if not loading:
        return "[cyan]Analyzing...[/cyan]"
    return f"[cyan]Analyzing... waiting on {', '.join(loading)}[/cyan]"


async def _run_coordinator(
    registry: ProviderRegistry,
    settings: Settings,
    text: str,
    tab: str,
    status: Status
) -> AnalysisSnapshot:
    coordinator = AnalysisCoordinator.from_settings(registry, settings)
    coordinator.set_text(text)
    unsubscribe = coordinator.subscribe(
        lambda snapshot: status.update(_status_line(registry, snapshot))
    )
    try:
        coordinator.set_focused_tab(tab)
        return await coordinator.wait()
    finally:
        unsubscribe()
        await coordinator.aclose()


async def _analyze(
    settings: Settings,
    text: str,
    tab: str,
    use_llm: bool
) -> Tuple[ProviderRegistry, AnalysisSnapshot]:
    with console.status("[cyan]Analyzing...[/cyan]") as status:
        if use_llm:
            from ..api import OpenRouterClient

            async with OpenRouterClient(settings=settings) as client:
                registry = build_default_registry(settings, client=client)
                snapshot = await _run_coordinator(registry, settings, text, tab, status)
        else:
            registry = build_default_registry(settings)
            snapshot = await _run_coordinator(registry, settings, text, tab, status)
    return registry, snapshot


@app.command(help="Analyze a text file ('-' reads stdin)")
def analyze(
    path: str = typer.Argument(..., help="Text file to analyze, or '-' for stdin"),
    tab: Optional[str] = typer.Option(
        None,
        "--tab", "-t",
        help="Result tab to open (overview runs every provider)"
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a provider call is failed"
    ),
    llm_devices: bool = typer.Option(
        False,
        "--llm-devices",
        help="Detect literary devices with the configured OpenRouter model"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log debug output to stderr"
    )
):
    """Run the analysis providers over a text and print one panel per source."""
    try:
        settings = get_settings()
        setup_logging(
            level="DEBUG" if verbose else settings.log_level,
            console_output=verbose
        )

        if timeout is not None:
            if timeout <= 0:
                console.print("[red]--timeout must be positive[/red]")
                raise typer.Exit(1)
            settings = settings.model_copy(update={'provider_timeout': timeout})

        use_llm = llm_devices and settings.has_llm
        if llm_devices and not use_llm:
            console.print("[yellow]OPENROUTER_API_KEY not set, using rule-based device detection[/yellow]")

        text = _read_text(path)
        tab = tab or settings.overview_tab
        logger.info(f"Analyzing {path} ({len(text.split())} words), tab={tab}")

        registry, snapshot = asyncio.run(_analyze(settings, text, tab, use_llm))

        provider_ids = None
        if tab != settings.overview_tab:
            provider_ids = [registry.tabs()[tab]]

        viewport = Viewport(settings.chart_width, settings.chart_height, settings.chart_padding)
        console.print(render_snapshot(registry, snapshot, provider_ids, viewport))

        failed = [pid for pid, status in snapshot.statuses().items() if status is SourceStatus.ERROR]
        if failed:
            console.print(f"[dim]{len(failed)} source(s) failed: {', '.join(failed)}[/dim]")

    except typer.Exit:
        raise
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)
    except (FileNotFoundError, LitLensError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command(help="List registered analysis providers")
def providers():
    """Show every provider with the result tab that displays it."""
    settings = get_settings()
    registry = build_default_registry(settings)

    table = Table(title="Analysis Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Title")
    table.add_column("Tab")
    table.add_column("Payload")

    for spec in registry:
        table.add_row(spec.provider_id, spec.title, spec.tab_id or "—", spec.payload_type.__name__)

    console.print(table)
    console.print(f"[dim]Tab '{settings.overview_tab}' runs every provider[/dim]")


@app.command(help="Show version information")
def version():
    """Show version information."""
    console.print(f"[cyan]LitLens v{__version__}[/cyan]")
    console.print("[dim]Concurrent literary analysis[/dim]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
