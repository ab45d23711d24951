"""OpenRouter chat completions client."""
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import Settings, get_settings
from ..utils.logging import get_logger


logger = get_logger("api.openrouter")


class OpenRouterClient:
    """Minimal OpenRouter client for single-shot chat completions."""

    def __init__(self, api_key: Optional[str] = None, settings: Optional[Settings] = None):
        """
        Initialize OpenRouter client.

        Args:
            api_key: Optional API key (uses settings/environment if not provided)
            settings: Optional settings (defaults to get_settings())

        Raises:
            ValueError: If no key is configured or it is not an OpenRouter key
        """
        self.settings = settings or get_settings()
        if api_key:
            self.api_key = Settings.validate_api_key(api_key)
        elif self.settings.has_llm:
            self.api_key = self.settings.openrouter_api_key
        else:
            raise ValueError(
                "OpenRouter API key not found. "
                "Set OPENROUTER_API_KEY to enable LLM literary device detection."
            )
        self.base_url = self.settings.openrouter_base_url
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def ensure_session(self):
        """Ensure aiohttp session is created."""
        if not self._session:
            self._session = aiohttp.ClientSession(
                headers=self._get_headers(),
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    connect=30,
                    sock_read=120
                )
            )

    async def close(self):
        """Close the client session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": "https://github.com/litlens",
            "X-Title": "LitLens"
        }

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Send a non-streaming chat completion request.

        Returns:
            The raw response JSON

        Raises:
            aiohttp.ClientError: On transport or HTTP errors
        """
        await self.ensure_session()

        request_data = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            request_data["max_tokens"] = max_tokens

        logger.debug(f"POST /chat/completions model={model} messages={len(messages)}")
        async with self._session.post(
            f"{self.base_url}/chat/completions",
            json=request_data
        ) as response:
            response.raise_for_status()
            data = await response.json()

        usage = data.get('usage') or {}
        if usage:
            logger.debug(
                f"Usage for {model}: prompt={usage.get('prompt_tokens')}, "
                f"completion={usage.get('completion_tokens')}"
            )
        return data

    async def completion(
        self,
        model: str,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> str:
        """
        Simple completion interface.

        Args:
            model: Model ID to use
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional API parameters

        Returns:
            Generated text content
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        data = await self.chat(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )

        choices = data.get('choices') or []
        if not choices:
            raise ValueError(f"No choices in response from {model}")
        return choices[0].get('message', {}).get('content') or ''
