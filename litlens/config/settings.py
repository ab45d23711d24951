"""Configuration management using Pydantic."""
from pathlib import Path
from typing import Optional
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from .constants import (
    OPENROUTER_BASE_URL,
    DEFAULT_DEVICE_MODEL,
    OVERVIEW_TAB,
    DEFAULT_CHART_WIDTH,
    DEFAULT_CHART_HEIGHT,
    DEFAULT_CHART_PADDING,
    DEFAULT_PARAGRAPHS_PER_POINT,
)


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_prefix="LITLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )

    # Coordinator behaviour
    provider_timeout: Optional[float] = Field(
        default=None,
        description="Seconds before a provider call is failed (None = wait forever)"
    )
    overview_tab: str = Field(
        default=OVERVIEW_TAB,
        description="Tab id that eagerly fans out to every provider"
    )
    retry_errors_on_focus: bool = Field(
        default=False,
        description="Restart errored sources when their tab is refocused"
    )

    # Provider parameters
    readability_paragraphs_per_point: int = Field(
        default=DEFAULT_PARAGRAPHS_PER_POINT,
        description="Paragraphs aggregated into one readability point"
    )

    # Chart viewport
    chart_width: int = Field(default=DEFAULT_CHART_WIDTH, description="Chart width in pixels")
    chart_height: int = Field(default=DEFAULT_CHART_HEIGHT, description="Chart height in pixels")
    chart_padding: int = Field(default=DEFAULT_CHART_PADDING, description="Chart padding in pixels")

    # LLM-backed device detection (optional)
    openrouter_api_key: Optional[str] = Field(
        default=None,
        description="OpenRouter API key (must start with 'sk-or-')",
        validation_alias="OPENROUTER_API_KEY"
    )
    openrouter_base_url: str = Field(
        default=OPENROUTER_BASE_URL,
        description="OpenRouter API base URL"
    )
    device_model: str = Field(
        default=DEFAULT_DEVICE_MODEL,
        description="Model used for LLM literary device detection"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('openrouter_api_key')
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate that API key has correct format."""
        if v is not None and not v.startswith('sk-or-'):
            raise ValueError("OpenRouter API key must start with 'sk-or-'")
        return v

    @field_validator('provider_timeout')
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Timeouts must be positive."""
        if v is not None and v <= 0:
            raise ValueError("provider_timeout must be positive")
        return v

    @field_validator('readability_paragraphs_per_point', 'chart_width', 'chart_height')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name."""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(valid_levels))}")
        return v.upper()

    @property
    def has_llm(self) -> bool:
        """Whether an API key is configured for LLM-backed providers."""
        return bool(self.openrouter_api_key)

    def load_config_file(self, config_path: Path) -> None:
        """Load additional settings from a YAML config file."""
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

            # Update settings with config file data
            for key, value in config_data.items():
                if hasattr(self, key):
                    setattr(self, key, value)

    def save_config_file(self, config_path: Path) -> None:
        """Save current settings to a YAML config file."""
        config_data = {
            'provider_timeout': self.provider_timeout,
            'overview_tab': self.overview_tab,
            'retry_errors_on_focus': self.retry_errors_on_focus,
            'readability_paragraphs_per_point': self.readability_paragraphs_per_point,
            'chart_width': self.chart_width,
            'chart_height': self.chart_height,
            'chart_padding': self.chart_padding,
            'device_model': self.device_model,
            'log_level': self.log_level
        }

        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    # Load user config if it exists
    user_config = Path.home() / '.litlens' / 'config.yaml'
    if user_config.exists():
        settings.load_config_file(user_config)

    # Load project config if it exists
    project_config = Path('config.yaml')
    if project_config.exists():
        settings.load_config_file(project_config)

    return settings
