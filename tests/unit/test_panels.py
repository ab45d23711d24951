"""Tests for rich result panels."""
import io

import pytest
from rich.console import Console

from litlens.analysis import AnalysisCoordinator, AnalysisSourceState, ProviderRegistry
from litlens.analysis.models import ColorSwatch, DeviceType, DialogueTurn, LiteraryDevice, ReadabilityPoint, Tactic
from litlens.charts import InteractionTooltipModel, map_power_balance
from litlens.config.constants import COLOR_PALETTE, LITERARY_DEVICES, READABILITY, POWER_BALANCE
from litlens.display import ascii_chart, render_snapshot, render_source_panel, render_tooltip


def render(renderable) -> str:
    output = io.StringIO()
    Console(file=output, width=120).print(renderable)
    return output.getvalue()


SWATCHES = [
    ColorSwatch(hex="#FF0000", name="red", prominence=0.4),
    ColorSwatch(hex="#0000FF", name="blue", prominence=0.2),
    ColorSwatch(hex="#008000", name="green", prominence=0.2),
    ColorSwatch(hex="#FFD700", name="gold", prominence=0.1),
    ColorSwatch(hex="#008080", name="teal", prominence=0.1),
]


class TestSnapshotScenario:
    """Mixed outcomes render side by side, each in its own state."""

    @pytest.mark.asyncio
    async def test_success_error_and_empty(self, controlled):
        palette = controlled(COLOR_PALETTE, tab_id="palette")
        devices = controlled(LITERARY_DEVICES, tab_id="devices")
        readability = controlled(READABILITY, tab_id="readability")
        registry = ProviderRegistry([palette.spec(), devices.spec(), readability.spec()])
        coordinator = AnalysisCoordinator(registry)

        coordinator.start(text="Some prose.")
        for provider in (palette, devices, readability):
            await provider.wait_for_calls(1)
        palette.succeed(SWATCHES)
        devices.fail("rate limited")
        readability.succeed([])
        snapshot = await coordinator.wait()

        palette_text = render(render_source_panel(registry.get(COLOR_PALETTE), snapshot[COLOR_PALETTE]))
        devices_text = render(render_source_panel(registry.get(LITERARY_DEVICES), snapshot[LITERARY_DEVICES]))
        readability_text = render(render_source_panel(registry.get(READABILITY), snapshot[READABILITY]))

        for swatch in SWATCHES:
            assert swatch.name in palette_text
            assert swatch.hex in palette_text
        assert "40.0%" in palette_text

        assert "Error: rate limited" in devices_text

        assert "Not enough text to generate a readability chart." in readability_text
        assert "Error" not in readability_text

        everything = render(render_snapshot(registry, snapshot))
        assert everything.index("red") < everything.index("rate limited") < everything.index("Not enough text")


class TestSourcePanels:

    @pytest.fixture
    def specs(self, clean_env):
        from litlens.config import Settings
        from litlens.providers import build_default_registry

        return build_default_registry(Settings())

    def test_idle_and_loading(self, specs):
        spec = specs.get(READABILITY)

        assert "Not started" in render(render_source_panel(spec, AnalysisSourceState.idle(READABILITY)))
        assert "Loading Readability..." in render(render_source_panel(spec, AnalysisSourceState.loading(READABILITY)))

    @pytest.mark.parametrize("provider_id,message", [
        (COLOR_PALETTE, "No color palette data available."),
        (LITERARY_DEVICES, "No literary devices found in the text."),
        (POWER_BALANCE, "No dialogue data to display power balance."),
    ])
    def test_empty_messages(self, specs, provider_id, message):
        state = AnalysisSourceState.succeeded(provider_id, [])

        assert message in render(render_source_panel(specs.get(provider_id), state))

    def test_devices_grouped_by_category(self, specs):
        state = AnalysisSourceState.succeeded(LITERARY_DEVICES, [
            LiteraryDevice(device_type=DeviceType.ALLITERATION, text_snippet="Peter Piper picked", position=0),
            LiteraryDevice(device_type=DeviceType.SIMILE, text_snippet="like a [rose]", position=30),
        ])

        text = render(render_source_panel(specs.get(LITERARY_DEVICES), state))

        assert text.index("Comparison") < text.index("Sound & Rhythm")
        assert "like a [rose]" in text

    def test_readability_chart(self, specs):
        state = AnalysisSourceState.succeeded(READABILITY, [
            ReadabilityPoint(paragraph_index=0, score=80.0),
            ReadabilityPoint(paragraph_index=1, score=40.0),
        ])

        text = render(render_source_panel(specs.get(READABILITY), state))

        assert text.count("●") == 2
        assert "Average: 60.0" in text

    def test_power_balance_chart_and_table(self, specs):
        state = AnalysisSourceState.succeeded(POWER_BALANCE, [
            DialogueTurn(speaker_name="Victoria", power_score=3, detected_tactic=Tactic.WEAPONIZED_POLITENESS),
            DialogueTurn(speaker_name="Henry", power_score=-2),
        ])

        text = render(render_source_panel(specs.get(POWER_BALANCE), state))

        assert "Dialogue Power Dynamics" in text
        assert "Victoria (1)" in text
        assert "Weaponized Politeness" in text
        assert "+3" in text


class TestAsciiChart:

    def test_grid_layout(self):
        turns = [
            DialogueTurn(speaker_name="Alice", power_score=2),
            DialogueTurn(speaker_name="Bob", power_score=-1),
            DialogueTurn(speaker_name="Alice", power_score=3),
        ]
        lines = ascii_chart(map_power_balance(turns)).split("\n")

        assert len(lines) == 11
        assert lines[0].startswith(" 5 │")
        assert lines[3].startswith(" 2 │")
        assert "●" in lines[3]
        assert "─" * 10 in lines[5]
        assert sum(line.count("●") for line in lines) == 3


class TestTooltipPanel:

    def test_render_tooltip(self):
        turns = [
            DialogueTurn(speaker_name="Victoria", power_score=3, detected_tactic=Tactic.EXCHANGE_TERMINATION),
        ]
        tooltip = InteractionTooltipModel(map_power_balance(turns)).on_hover(0)

        text = render(render_tooltip(tooltip))

        assert "Victoria" in text
        assert "Power Score" in text
        assert "Tactic: Exchange Termination" in text
