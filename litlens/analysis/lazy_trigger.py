"""Start analysis sources when the result tab showing them becomes visible."""

import asyncio
from typing import TYPE_CHECKING, List, Optional

from ..config.constants import OVERVIEW_TAB
from ..errors import UnknownTabError
from ..utils.logging import get_logger
from .state import SourceStatus

if TYPE_CHECKING:
    from .coordinator import AnalysisCoordinator


logger = get_logger("analysis.lazy_trigger")


class LazyTabTrigger:
    """
    Focus policy for result tabs.

    The overview tab shows every provider's summary, so focusing it fans out
    to all sources that are IDLE or ERROR. Any other tab starts only its own
    provider, and only while that provider is IDLE. Errored sources stay
    errored on refocus unless ``retry_errors_on_focus`` is set; ``retry()``
    is the explicit way back.
    """

    def __init__(
        self,
        coordinator: 'AnalysisCoordinator',
        overview_tab: str = OVERVIEW_TAB,
        retry_errors_on_focus: bool = False
    ):
        """
        Args:
            coordinator: Coordinator to start sources on
            overview_tab: Tab id that fans out to every provider
            retry_errors_on_focus: Restart ERROR sources when their tab is focused
        """
        self.coordinator = coordinator
        self.overview_tab = overview_tab
        self.retry_errors_on_focus = retry_errors_on_focus
        self.active_tab: Optional[str] = None

    def on_focus_change(self, tab_id: str) -> List[asyncio.Task]:
        """
        Record the newly visible tab and start whatever it needs.

        Returns:
            Tasks started or already in flight for the tab's providers

        Raises:
            UnknownTabError: If tab_id is neither the overview nor a provider tab
        """
        tabs = self.coordinator.registry.tabs()
        if tab_id != self.overview_tab and tab_id not in tabs:
            raise UnknownTabError(tab_id)

        self.active_tab = tab_id

        if self.coordinator.text is None:
            logger.debug(f"Focus on {tab_id} with no input text, nothing to start")
            return []

        if tab_id == self.overview_tab:
            return self.coordinator.start()

        provider_id = tabs[tab_id]
        status = self.coordinator.snapshot[provider_id].status

        if status is SourceStatus.IDLE:
            logger.info(f"Tab {tab_id} focused, starting {provider_id}")
            return self.coordinator.start(provider_id)

        if status is SourceStatus.ERROR and self.retry_errors_on_focus:
            logger.info(f"Tab {tab_id} focused, retrying errored {provider_id}")
            return self.coordinator.start(provider_id)

        return []

    def retry(self, provider_id: str) -> List[asyncio.Task]:
        """Explicit user retry: restart an errored source, otherwise do nothing."""
        self.coordinator.registry.get(provider_id)
        status = self.coordinator.snapshot[provider_id].status
        if status is not SourceStatus.ERROR:
            return []
        logger.info(f"Retrying {provider_id} on request")
        return self.coordinator.start(provider_id)
