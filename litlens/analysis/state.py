"""Per-provider analysis state and provider result types."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Generic, Iterator, Mapping, Optional, Sequence, Tuple, TypeVar


T = TypeVar('T')


class SourceStatus(str, Enum):
    """Lifecycle of one analysis source."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def display_name(self) -> str:
        """Human-readable status name."""
        return self.value.upper()


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Tagged outcome of a provider call: either data or an error message."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("A failed result must carry an error message")

    @classmethod
    def ok(cls, data: T) -> 'ProviderResult[T]':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> 'ProviderResult[T]':
        return cls(success=False, error=error)


@dataclass(frozen=True)
class AnalysisSourceState:
    """
    State of one provider for the current input text.

    Payload is present only on SUCCESS and error_message only on ERROR.
    Records are immutable; the coordinator replaces them on each transition.
    """

    provider_id: str
    status: SourceStatus = SourceStatus.IDLE
    payload: Optional[Tuple[Any, ...]] = None
    error_message: Optional[str] = None

    def __post_init__(self):
        has_payload = self.payload is not None
        has_error = self.error_message is not None
        if has_payload != (self.status is SourceStatus.SUCCESS):
            raise ValueError(
                f"{self.provider_id}: payload must be present iff status is SUCCESS "
                f"(status={self.status.value})"
            )
        if has_error != (self.status is SourceStatus.ERROR):
            raise ValueError(
                f"{self.provider_id}: error_message must be present iff status is ERROR "
                f"(status={self.status.value})"
            )

    @classmethod
    def idle(cls, provider_id: str) -> 'AnalysisSourceState':
        return cls(provider_id)

    @classmethod
    def loading(cls, provider_id: str) -> 'AnalysisSourceState':
        return cls(provider_id, SourceStatus.LOADING)

    @classmethod
    def succeeded(cls, provider_id: str, payload: Sequence[Any]) -> 'AnalysisSourceState':
        return cls(provider_id, SourceStatus.SUCCESS, payload=tuple(payload))

    @classmethod
    def failed(cls, provider_id: str, message: str) -> 'AnalysisSourceState':
        return cls(provider_id, SourceStatus.ERROR, error_message=message)

    @property
    def is_settled(self) -> bool:
        return self.status in (SourceStatus.SUCCESS, SourceStatus.ERROR)

    @property
    def is_empty(self) -> bool:
        """Successful but with nothing to show (distinct from an error)."""
        return self.status is SourceStatus.SUCCESS and len(self.payload) == 0


class AnalysisSnapshot(Mapping[str, AnalysisSourceState]):
    """Read-only view of every source state for one input text."""

    def __init__(self, text: Optional[str], states: Dict[str, AnalysisSourceState], generation: int = 0):
        self._text = text
        self._states = MappingProxyType(dict(states))
        self._generation = generation

    @property
    def text(self) -> Optional[str]:
        return self._text

    @property
    def generation(self) -> int:
        return self._generation

    def __getitem__(self, provider_id: str) -> AnalysisSourceState:
        return self._states[provider_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def statuses(self) -> Dict[str, SourceStatus]:
        """Status per provider id."""
        return {pid: state.status for pid, state in self._states.items()}

    @property
    def all_settled(self) -> bool:
        return all(state.is_settled for state in self._states.values())

    def __repr__(self) -> str:
        statuses = ', '.join(f"{pid}={s.value}" for pid, s in self.statuses().items())
        return f"AnalysisSnapshot(generation={self._generation}, {statuses})"
