"""Exception types for LitLens."""


class LitLensError(Exception):
    """Base class for all LitLens errors."""


class UnknownProviderError(LitLensError, KeyError):
    """Raised when a provider id is not registered."""

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        super().__init__(f"Unknown analysis provider: {provider_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownTabError(LitLensError, KeyError):
    """Raised when a result tab has no backing provider."""

    def __init__(self, tab_id: str):
        self.tab_id = tab_id
        super().__init__(f"Unknown result tab: {tab_id}")

    def __str__(self) -> str:
        return self.args[0]


class NoInputTextError(LitLensError, RuntimeError):
    """Raised when analysis is started before any text was set."""


class ProviderTimeoutError(LitLensError, TimeoutError):
    """A provider call did not settle within the configured timeout."""

    def __init__(self, provider_id: str, timeout: float):
        self.provider_id = provider_id
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s")
