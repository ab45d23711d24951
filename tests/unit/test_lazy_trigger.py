"""Tests for tab-focus driven analysis."""
import pytest

from litlens.analysis import AnalysisCoordinator, SourceStatus
from litlens.errors import UnknownProviderError, UnknownTabError


class TestLazyTabTrigger:
    """Focusing a tab starts only what that tab needs."""

    @pytest.mark.asyncio
    async def test_focusing_tab_starts_only_its_provider(self, registry, providers):
        coordinator = AnalysisCoordinator(registry)
        coordinator.set_text("text")

        tasks = coordinator.set_focused_tab("devices")

        assert len(tasks) == 1
        assert coordinator.snapshot.statuses() == {
            "palette-src": SourceStatus.IDLE,
            "devices-src": SourceStatus.LOADING,
            "readability-src": SourceStatus.IDLE,
        }
        assert coordinator.tab_trigger.active_tab == "devices"

        await providers[1].wait_for_calls(1)
        providers[1].succeed([])
        await coordinator.wait()

    @pytest.mark.asyncio
    async def test_overview_fans_out(self, registry, providers):
        coordinator = AnalysisCoordinator(registry)
        coordinator.set_text("text")

        tasks = coordinator.set_focused_tab("overview")

        assert len(tasks) == 3
        for provider in providers:
            await provider.wait_for_calls(1)
            provider.succeed([])
        await coordinator.wait()

    @pytest.mark.asyncio
    async def test_refocus_while_loading_does_not_duplicate(self, registry, providers):
        coordinator = AnalysisCoordinator(registry)
        coordinator.set_text("text")

        coordinator.set_focused_tab("palette")
        coordinator.set_focused_tab("devices")
        coordinator.set_focused_tab("palette")

        assert coordinator.set_focused_tab("palette") == []
        await providers[0].wait_for_calls(1)
        providers[0].succeed(["red"])
        await providers[1].wait_for_calls(1)
        providers[1].succeed([])
        await coordinator.wait()

        assert len(providers[0].calls) == 1

    @pytest.mark.asyncio
    async def test_error_is_not_retried_on_refocus(self, registry, providers):
        coordinator = AnalysisCoordinator(registry)
        coordinator.set_text("text")

        coordinator.set_focused_tab("devices")
        await providers[1].wait_for_calls(1)
        providers[1].fail("rate limited")
        await coordinator.wait()

        assert coordinator.set_focused_tab("devices") == []
        assert coordinator.snapshot["devices-src"].status is SourceStatus.ERROR
        assert len(providers[1].calls) == 1

    @pytest.mark.asyncio
    async def test_error_retried_on_refocus_when_enabled(self, registry, providers):
        coordinator = AnalysisCoordinator(registry, retry_errors_on_focus=True)
        coordinator.set_text("text")

        coordinator.set_focused_tab("devices")
        await providers[1].wait_for_calls(1)
        providers[1].fail("rate limited")
        await coordinator.wait()

        tasks = coordinator.set_focused_tab("devices")

        assert len(tasks) == 1
        await providers[1].wait_for_calls(2)
        providers[1].succeed(["simile"])
        snapshot = await coordinator.wait()
        assert snapshot["devices-src"].payload == ("simile",)

    @pytest.mark.asyncio
    async def test_explicit_retry(self, registry, providers):
        coordinator = AnalysisCoordinator(registry)
        coordinator.set_text("text")
        trigger = coordinator.tab_trigger

        assert trigger.retry("devices-src") == []

        coordinator.set_focused_tab("devices")
        await providers[1].wait_for_calls(1)
        providers[1].fail("rate limited")
        await coordinator.wait()

        assert len(trigger.retry("devices-src")) == 1
        await providers[1].wait_for_calls(2)
        providers[1].succeed([])
        await coordinator.wait()

        with pytest.raises(UnknownProviderError):
            trigger.retry("nope")

    def test_focus_without_text_does_nothing(self, registry, providers):
        coordinator = AnalysisCoordinator(registry)

        assert coordinator.set_focused_tab("palette") == []
        assert coordinator.tab_trigger.active_tab == "palette"
        assert providers[0].calls == []

    def test_unknown_tab(self, registry):
        coordinator = AnalysisCoordinator(registry)

        with pytest.raises(UnknownTabError, match="settings"):
            coordinator.set_focused_tab("settings")

    def test_custom_overview_tab(self, registry):
        coordinator = AnalysisCoordinator(registry, overview_tab="summary")

        assert coordinator.set_focused_tab("summary") == []
        with pytest.raises(UnknownTabError):
            coordinator.set_focused_tab("overview")

    @pytest.mark.asyncio
    async def test_tab_registered_after_construction(self, registry, controlled):
        coordinator = AnalysisCoordinator(registry)
        coordinator.set_text("text")
        late = controlled("late-src", tab_id="late")
        registry.register(late.spec())

        tasks = coordinator.set_focused_tab("late")

        assert len(tasks) == 1
        await late.wait_for_calls(1)
        late.succeed([])
        snapshot = await coordinator.wait()
        assert snapshot["late-src"].status is SourceStatus.SUCCESS
