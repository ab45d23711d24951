"""Pytest configuration and fixtures."""
import os
import shutil
import asyncio
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator, List, Optional

import pytest
from dotenv import load_dotenv

from litlens.analysis import ProviderRegistry, ProviderResult, ProviderSpec

# Load .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


class ControlledProvider:
    """
    Provider whose calls settle only when a test resolves them.

    Every call to ``analyze`` parks on its own future; ``futures[i]`` belongs
    to the i-th call.
    """

    def __init__(self, provider_id: str, tab_id: Optional[str] = None):
        self.provider_id = provider_id
        self.tab_id = tab_id
        self.calls: List[str] = []
        self.futures: List[asyncio.Future] = []

    async def analyze(self, text: str) -> Any:
        self.calls.append(text)
        future = asyncio.get_running_loop().create_future()
        self.futures.append(future)
        return await future

    def spec(self) -> ProviderSpec:
        return ProviderSpec(
            provider_id=self.provider_id,
            title=self.provider_id.title(),
            payload_type=object,
            analyze=self.analyze,
            tab_id=self.tab_id
        )

    async def wait_for_calls(self, count: int = 1) -> None:
        """Yield to the loop until at least count calls have started."""
        for _ in range(100):
            if len(self.futures) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"{self.provider_id}: expected {count} calls, saw {len(self.futures)}")

    def succeed(self, data: Any, call: int = -1) -> None:
        self.futures[call].set_result(ProviderResult.ok(data))

    def fail(self, error: str, call: int = -1) -> None:
        self.futures[call].set_result(ProviderResult.fail(error))

    def raise_(self, exc: BaseException, call: int = -1) -> None:
        self.futures[call].set_exception(exc)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def mock_api_key(monkeypatch):
    """Set a mock API key for testing."""
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test-key-123456789")
    return "sk-or-test-key-123456789"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove LitLens and OpenRouter variables so Settings sees only defaults."""
    for key in list(os.environ):
        if key.upper().startswith("LITLENS_") or key.upper() == "OPENROUTER_API_KEY":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def controlled() -> Callable[..., ControlledProvider]:
    """Factory for ControlledProvider instances."""
    return ControlledProvider


@pytest.fixture
def providers() -> List[ControlledProvider]:
    """Three controllable providers, each bound to its own tab."""
    return [
        ControlledProvider("palette-src", tab_id="palette"),
        ControlledProvider("devices-src", tab_id="devices"),
        ControlledProvider("readability-src", tab_id="readability"),
    ]


@pytest.fixture
def registry(providers) -> ProviderRegistry:
    """Registry over the controllable providers."""
    return ProviderRegistry([p.spec() for p in providers])
