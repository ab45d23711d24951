"""Main analysis coordinator."""

import asyncio
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Set

from ..config import Settings
from ..config.constants import OVERVIEW_TAB
from ..errors import NoInputTextError, ProviderTimeoutError
from ..utils.logging import get_logger
from .lazy_trigger import LazyTabTrigger
from .registry import ProviderRegistry, ProviderSpec
from .state import AnalysisSnapshot, AnalysisSourceState, ProviderResult, SourceStatus


logger = get_logger("analysis.coordinator")

Subscriber = Callable[[AnalysisSnapshot], None]


def _error_message(exc: BaseException) -> str:
    """Normalize an exception into the same message shape as a provider failure."""
    return str(exc) or type(exc).__name__


class AnalysisCoordinator:
    """
    Fans one input text out to every registered provider and tracks each
    provider's state independently.

    The coordinator is the only writer of source state. Consumers read
    ``snapshot`` or subscribe to receive a fresh snapshot on every
    transition. All calls run as tasks on the current event loop; nothing
    blocks while a provider is working.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        provider_timeout: Optional[float] = None,
        overview_tab: str = OVERVIEW_TAB,
        retry_errors_on_focus: bool = False
    ):
        """
        Initialize analysis coordinator.

        Args:
            registry: Providers to fan out to
            provider_timeout: Seconds before a call is failed (None = no timeout)
            overview_tab: Tab id whose focus fans out to every provider
            retry_errors_on_focus: Whether refocusing a tab retries an errored source
        """
        self.registry = registry
        self.provider_timeout = provider_timeout

        self._text: Optional[str] = None
        self._generation = 0
        self._states: Dict[str, AnalysisSourceState] = self._fresh_states()
        self._tasks: Dict[str, asyncio.Task] = {}
        self._pending: Set[asyncio.Task] = set()
        self._closing: Set[asyncio.Task] = set()
        self._subscribers: List[Subscriber] = []

        self.tab_trigger = LazyTabTrigger(
            self,
            overview_tab=overview_tab,
            retry_errors_on_focus=retry_errors_on_focus
        )

    @classmethod
    def from_settings(cls, registry: ProviderRegistry, settings: Settings) -> 'AnalysisCoordinator':
        """Build a coordinator configured from settings."""
        return cls(
            registry,
            provider_timeout=settings.provider_timeout,
            overview_tab=settings.overview_tab,
            retry_errors_on_focus=settings.retry_errors_on_focus
        )

    # ------------------------------------------------------------------
    # Read side

    @property
    def text(self) -> Optional[str]:
        return self._text

    @property
    def generation(self) -> int:
        """Incremented every time the input text changes."""
        return self._generation

    @property
    def snapshot(self) -> AnalysisSnapshot:
        self._sync_states()
        return AnalysisSnapshot(self._text, self._states, self._generation)

    @property
    def in_flight(self) -> List[str]:
        """Provider ids currently loading for the current text."""
        return [pid for pid, state in self._states.items() if state.status is SourceStatus.LOADING]

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback receiving the full snapshot on every transition.

        Returns:
            Function that removes the subscription (safe to call twice)
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Write side

    def set_text(self, text: str) -> None:
        """
        Switch to a new input text.

        Every source is reset to IDLE. Calls still running for the previous
        text are left to finish, but their results are discarded.
        """
        if text == self._text:
            return

        self._text = text
        self._generation += 1
        self._states = self._fresh_states()
        self._tasks = {}

        logger.info(f"Input text changed (generation {self._generation}, {len(text.split())} words)")
        self._notify()

    def start(self, provider_id: Optional[str] = None, *, text: Optional[str] = None) -> List[asyncio.Task]:
        """
        Start analysis for one provider, or fan out to all of them.

        Sources already LOADING are not restarted; their in-flight task is
        returned instead. Sources in SUCCESS are left alone until the text
        changes. IDLE and ERROR sources are (re)started.

        Args:
            provider_id: Provider to start (None = every registered provider)
            text: New input text; switches text first if it differs

        Returns:
            Tasks for the requested providers that are now in flight

        Raises:
            NoInputTextError: If no text has been set
            UnknownProviderError: If provider_id is not registered
            RuntimeError: If called outside a running event loop
        """
        if text is not None:
            self.set_text(text)
        if self._text is None:
            raise NoInputTextError("No input text to analyze. Call set_text() first.")

        if provider_id is None:
            specs = list(self.registry)
        else:
            specs = [self.registry.get(provider_id)]

        loop = asyncio.get_running_loop()
        self._sync_states()
        tasks = []
        for spec in specs:
            status = self._states[spec.provider_id].status
            existing = self._tasks.get(spec.provider_id)

            if status is SourceStatus.LOADING and existing is not None and not existing.done():
                logger.debug(f"{spec.provider_id} already loading, not duplicating call")
                tasks.append(existing)
                continue

            if status is SourceStatus.SUCCESS:
                continue

            tasks.append(self._launch(loop, spec))

        return tasks

    async def wait(self) -> AnalysisSnapshot:
        """Wait for every in-flight call (superseded ones included) to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return self.snapshot

    async def analyze(self, text: str) -> AnalysisSnapshot:
        """Fan out to every provider for text and wait for all of them."""
        self.start(text=text)
        return await self.wait()

    def set_focused_tab(self, tab_id: str) -> List[asyncio.Task]:
        """Tell the lazy trigger which result tab is now visible."""
        return self.tab_trigger.on_focus_change(tab_id)

    async def aclose(self) -> None:
        """
        Cancel every outstanding call (used on shutdown).

        Sources that were still loading go back to IDLE so a later start or
        tab focus runs them again.
        """
        pending = list(self._pending)
        self._closing.update(pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for pid in [pid for pid, state in self._states.items() if state.status is SourceStatus.LOADING]:
            self._tasks.pop(pid, None)
            self._transition(AnalysisSourceState.idle(pid))

    # ------------------------------------------------------------------
    # Internals

    def _fresh_states(self) -> Dict[str, AnalysisSourceState]:
        return {pid: AnalysisSourceState.idle(pid) for pid in self.registry.ids()}

    def _sync_states(self) -> None:
        # Providers registered after construction start out IDLE.
        for pid in self.registry.ids():
            if pid not in self._states:
                self._states[pid] = AnalysisSourceState.idle(pid)

    def _launch(self, loop: asyncio.AbstractEventLoop, spec: ProviderSpec) -> asyncio.Task:
        task = loop.create_task(
            self._run(spec, self._text, self._generation),
            name=f"litlens:{spec.provider_id}:{self._generation}"
        )
        self._tasks[spec.provider_id] = task
        self._pending.add(task)
        task.add_done_callback(partial(self._task_done, spec.provider_id, self._generation))

        self._transition(AnalysisSourceState.loading(spec.provider_id))
        return task

    async def _call(self, spec: ProviderSpec, text: str) -> ProviderResult[Any]:
        if self.provider_timeout is None:
            return await spec.analyze(text)
        try:
            return await asyncio.wait_for(spec.analyze(text), self.provider_timeout)
        except asyncio.TimeoutError:
            raise ProviderTimeoutError(spec.provider_id, self.provider_timeout) from None

    async def _run(self, spec: ProviderSpec, text: str, generation: int) -> None:
        pid = spec.provider_id
        try:
            result = await self._call(spec, text)
        except Exception as e:
            logger.warning(f"{pid} raised {type(e).__name__}: {e}", exc_info=True)
            new_state = AnalysisSourceState.failed(pid, _error_message(e))
        else:
            new_state = self._state_from_result(pid, result)

        self._settle(generation, new_state, asyncio.current_task())

    def _task_done(self, pid: str, generation: int, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task in self._closing:
            self._closing.discard(task)
            return
        if task.cancelled():
            # Cancelled from outside the coordinator, or the provider let a
            # CancelledError escape. Either way the call is over.
            logger.warning(f"{pid} call was cancelled")
            self._settle(generation, AnalysisSourceState.failed(pid, "Analysis was cancelled"), task)

    def _state_from_result(self, pid: str, result: Any) -> AnalysisSourceState:
        if not isinstance(result, ProviderResult):
            return AnalysisSourceState.failed(
                pid, f"Provider returned {type(result).__name__} instead of a result"
            )
        if not result.success:
            return AnalysisSourceState.failed(pid, result.error)

        data = result.data if result.data is not None else []
        if not isinstance(data, (list, tuple)):
            return AnalysisSourceState.failed(
                pid, f"Provider returned a {type(data).__name__} payload instead of a sequence"
            )
        return AnalysisSourceState.succeeded(pid, data)

    def _settle(self, generation: int, state: AnalysisSourceState, task: Optional[asyncio.Task]) -> None:
        if generation != self._generation:
            logger.debug(
                f"Discarding stale {state.provider_id} result "
                f"(issued for generation {generation}, current {self._generation})"
            )
            return

        if task is not None and self._tasks.get(state.provider_id) is not task:
            return

        self._tasks.pop(state.provider_id, None)
        self._transition(state)

    def _transition(self, state: AnalysisSourceState) -> None:
        previous = self._states[state.provider_id].status
        self._states[state.provider_id] = state

        if state.status is SourceStatus.ERROR:
            logger.info(f"{state.provider_id}: {previous.value} -> error ({state.error_message})")
        elif state.status is SourceStatus.SUCCESS:
            logger.info(f"{state.provider_id}: {previous.value} -> success ({len(state.payload)} items)")
        else:
            logger.info(f"{state.provider_id}: {previous.value} -> {state.status.value}")

        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed while handling a snapshot")
