"""Tests for the OpenRouter client."""
import pytest
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp

from litlens.api import OpenRouterClient
from litlens.config import Settings


class TestApiKeyResolution:
    """The client takes an explicit key or falls back to settings."""

    def test_explicit_key_wins(self, clean_env):
        client = OpenRouterClient(api_key="sk-or-explicit", settings=Settings(openrouter_api_key="sk-or-configured"))

        assert client.api_key == "sk-or-explicit"

    def test_key_from_settings(self, clean_env):
        client = OpenRouterClient(settings=Settings(openrouter_api_key="sk-or-configured"))

        assert client.api_key == "sk-or-configured"

    def test_key_from_environment(self, clean_env, mock_api_key):
        assert OpenRouterClient(settings=Settings()).api_key == mock_api_key

    def test_missing_key(self, clean_env):
        with pytest.raises(ValueError, match="not found"):
            OpenRouterClient(settings=Settings())

    def test_wrong_prefix(self, clean_env):
        with pytest.raises(ValueError, match="must start with 'sk-or-'"):
            OpenRouterClient(api_key="sk-abc", settings=Settings())


class TestOpenRouterClient:
    """Tests for OpenRouterClient."""

    @pytest.fixture
    def client(self, clean_env):
        settings = Settings(openrouter_api_key="sk-or-test-key")
        return OpenRouterClient(settings=settings)

    def test_headers(self, client):
        headers = client._get_headers()

        assert headers["Authorization"] == "Bearer sk-or-test-key"
        assert headers["X-Title"] == "LitLens"

    def test_missing_key_rejected(self, clean_env):
        with pytest.raises(ValueError):
            OpenRouterClient(settings=Settings())

    @pytest.mark.asyncio
    async def test_context_manager_manages_session(self, client):
        async with client as opened:
            assert isinstance(opened._session, aiohttp.ClientSession)
        assert client._session is None

    @pytest.mark.asyncio
    async def test_close_no_session(self, client):
        await client.close()

    @pytest.mark.asyncio
    async def test_completion_builds_messages(self, client):
        with patch.object(client, 'chat', new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = {
                "choices": [{"message": {"content": "Response"}}],
                "usage": {"prompt_tokens": 10, "completion_tokens": 20}
            }

            response = await client.completion(
                model="test/model",
                prompt="Find devices",
                system_prompt="You are a scholar",
                temperature=0.3
            )

        assert response == "Response"
        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "test/model"
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"] == [
            {"role": "system", "content": "You are a scholar"},
            {"role": "user", "content": "Find devices"},
        ]

    @pytest.mark.asyncio
    async def test_completion_without_choices(self, client):
        with patch.object(client, 'chat', new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = {"choices": []}

            with pytest.raises(ValueError, match="No choices"):
                await client.completion(model="m", prompt="p")

    @pytest.mark.asyncio
    async def test_chat_posts_request(self, client):
        response = MagicMock()
        response.raise_for_status = Mock()
        response.json = AsyncMock(return_value={"choices": [], "usage": {"prompt_tokens": 1}})

        session = MagicMock()
        session.post.return_value.__aenter__.return_value = response
        client._session = session

        data = await client.chat(model="m", messages=[{"role": "user", "content": "hi"}], max_tokens=50)

        assert data["usage"] == {"prompt_tokens": 1}
        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "https://openrouter.ai/api/v1/chat/completions"
        assert payload["model"] == "m"
        assert payload["max_tokens"] == 50
        response.raise_for_status.assert_called_once()
