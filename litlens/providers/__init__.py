"""Built-in analysis providers."""

from typing import Optional

from ..analysis.registry import ProviderRegistry
from ..config import Settings, get_settings
from ..config.constants import PROVIDER_TABS
from ..utils.logging import get_logger
from .base import BaseProvider
from .devices import LiteraryDeviceProvider, LLMDeviceProvider
from .palette import ColorPaletteProvider
from .power_balance import PowerBalanceProvider
from .readability import ReadabilityProvider


logger = get_logger("providers")


def build_default_registry(settings: Optional[Settings] = None, client=None) -> ProviderRegistry:
    """
    Registry with the four built-in providers, each bound to its result tab.

    Args:
        settings: Settings to configure providers (defaults to get_settings())
        client: Optional OpenRouterClient; when given, literary devices are
            detected by the configured model instead of local rules

    Returns:
        ProviderRegistry in display order
    """
    settings = settings or get_settings()

    if client is not None:
        logger.info(f"Using LLM device detection with model {settings.device_model}")
        devices: BaseProvider = LLMDeviceProvider(client, model=settings.device_model)
    else:
        devices = LiteraryDeviceProvider()

    providers = [
        ColorPaletteProvider(),
        devices,
        ReadabilityProvider(paragraphs_per_point=settings.readability_paragraphs_per_point),
        PowerBalanceProvider(),
    ]

    registry = ProviderRegistry()
    for provider in providers:
        registry.register(provider.as_spec(tab_id=PROVIDER_TABS[provider.provider_id]))
    return registry


__all__ = [
    'BaseProvider',
    'ColorPaletteProvider',
    'LiteraryDeviceProvider',
    'LLMDeviceProvider',
    'PowerBalanceProvider',
    'ReadabilityProvider',
    'build_default_registry',
]
