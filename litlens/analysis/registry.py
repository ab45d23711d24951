"""Registry mapping provider identifiers to their call and payload type."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

from ..errors import UnknownProviderError
from .state import ProviderResult


AnalyzeFn = Callable[[str], Awaitable[ProviderResult[Any]]]


@dataclass(frozen=True)
class ProviderSpec:
    """Everything the coordinator needs to know about one provider."""

    provider_id: str
    title: str
    payload_type: type
    analyze: AnalyzeFn
    tab_id: Optional[str] = None


class ProviderRegistry:
    """Ordered collection of provider specs; registration order is display order."""

    def __init__(self, specs: Optional[List[ProviderSpec]] = None):
        self._specs: Dict[str, ProviderSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ProviderSpec) -> None:
        """Add a provider. Ids and tab ids must be unique."""
        if spec.provider_id in self._specs:
            raise ValueError(f"Provider already registered: {spec.provider_id}")
        if spec.tab_id is not None and self.for_tab(spec.tab_id) is not None:
            raise ValueError(f"Tab already bound to a provider: {spec.tab_id}")
        self._specs[spec.provider_id] = spec

    def get(self, provider_id: str) -> ProviderSpec:
        try:
            return self._specs[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id) from None

    def ids(self) -> List[str]:
        return list(self._specs)

    def for_tab(self, tab_id: str) -> Optional[ProviderSpec]:
        """Provider backing a result tab, if any."""
        for spec in self._specs.values():
            if spec.tab_id == tab_id:
                return spec
        return None

    def tabs(self) -> Dict[str, str]:
        """Mapping of tab id to provider id."""
        return {
            spec.tab_id: spec.provider_id
            for spec in self._specs.values()
            if spec.tab_id is not None
        }

    def __iter__(self) -> Iterator[ProviderSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._specs
