"""
Tests unitaires pour l'adapter OpenAI-compatible et ses presets.
"""
import httpx
import pytest

from modelrelay.config.credentials import StaticCredentialResolver
from modelrelay.core.constants import AZURE_BASE_URL, DEEPINFRA_BASE_URL
from modelrelay.core.exceptions import ConfigurationMissing, UpstreamStatus
from modelrelay.providers.openai import OpenAICompatibleClient, create_custom_client, create_deepinfra_client


class TestConstruction:
    """Tests de construction et de résolution de configuration."""

    def test_requires_some_configuration(self):
        with pytest.raises(ConfigurationMissing):
            OpenAICompatibleClient()

    def test_api_key_from_resolver(self):
        credentials = StaticCredentialResolver({"azure": {"api_key": "az-key"}})
        client = OpenAICompatibleClient(credentials=credentials)
        assert client.config.base_url == AZURE_BASE_URL
        assert client.config.headers["Authorization"] == "Bearer az-key"

    def test_endpoints_derived_from_base_url(self):
        client = OpenAICompatibleClient(base_url="https://api.example.test/v1/")
        assert client.config.chat_endpoint == "https://api.example.test/v1/chat/completions"
        assert client.config.image_endpoint == "https://api.example.test/v1/images/generations"
        assert client.config.models_endpoint == "https://api.example.test/v1/models"
        assert "Authorization" not in client.config.headers

    def test_capabilities_bound(self):
        client = OpenAICompatibleClient(base_url="https://api.example.test/v1")
        assert client.chat.completions.create == client.create_chat_completion
        assert client.models.list == client.list_models
        assert client.images.generate == client.generate_image

    def test_custom_preset_reads_resolver(self):
        credentials = StaticCredentialResolver({"custom": {"base_url": "http://localhost:11434/v1", "api_key": "ollama"}})
        client = create_custom_client(credentials)
        assert client.name == "custom"
        assert client.config.chat_endpoint == "http://localhost:11434/v1/chat/completions"
        assert client.config.headers["Authorization"] == "Bearer ollama"

    def test_custom_preset_without_values_fails(self):
        with pytest.raises(ConfigurationMissing):
            create_custom_client()

    def test_deepinfra_preset(self):
        client = create_deepinfra_client()
        assert client.name == "deepinfra"
        assert client.config.base_url == DEEPINFRA_BASE_URL
        assert client.config.default_chat_model == "deepseek-ai/DeepSeek-V3-0324"

    @pytest.mark.asyncio
    async def test_proxies_route_model_listing(self, make_http_client, recording_handler):
        """Avec des proxies, le catalogue passe par le proxy et jamais en direct."""
        handler = recording_handler({
            "https://proxy.test/": httpx.Response(200, json={"data": [{"id": "m1"}]}),
        })
        client = OpenAICompatibleClient(
            base_url="https://api.example.test/v1",
            proxies=["https://proxy.test/?url="],
            http_client=make_http_client(handler),
        )
        assert await client.list_models() == [{"id": "m1"}]
        assert len(handler.requests) == 1
        request = handler.requests[0]
        assert request.url.host == "proxy.test"
        assert request.url.params["url"] == "https://api.example.test/v1/models"


class TestOperations:
    """Tests des opérations chat / models / images."""

    @pytest.mark.asyncio
    async def test_chat_completion(self, make_http_client, recording_handler, sample_messages):
        handler = recording_handler(default=httpx.Response(200, json={"choices": [{"message": {"content": "salut"}}]}))
        client = OpenAICompatibleClient(
            base_url="https://api.example.test/v1",
            api_key="k",
            default_model="m-default",
            http_client=make_http_client(handler),
        )

        result = await client.chat.completions.create({"messages": sample_messages})

        assert result["choices"][0]["message"]["content"] == "salut"
        assert handler.json_bodies()[0]["model"] == "m-default"
        assert handler.requests[0].headers["Authorization"] == "Bearer k"

    @pytest.mark.asyncio
    async def test_models_cached_after_success(self, make_http_client, recording_handler):
        handler = recording_handler(default=httpx.Response(200, json={"data": [{"id": "m1"}, {"id": "m2"}]}))
        client = OpenAICompatibleClient(base_url="https://api.example.test/v1", http_client=make_http_client(handler))

        first = await client.models.list()
        second = await client.models.list()

        assert [m["id"] for m in first] == ["m1", "m2"]
        assert second is first
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_models_failure_not_cached(self, make_http_client, recording_handler):
        handler = recording_handler({
            "https://api.example.test/v1/models": [
                httpx.Response(503),
                httpx.Response(200, json={"data": [{"id": "m1"}]}),
            ],
        })
        client = OpenAICompatibleClient(base_url="https://api.example.test/v1", http_client=make_http_client(handler))

        with pytest.raises(UpstreamStatus):
            await client.models.list()
        assert await client.models.list() == [{"id": "m1"}]

    @pytest.mark.asyncio
    async def test_async_with_closes_owned_client(self):
        async with OpenAICompatibleClient(base_url="https://api.example.test/v1") as client:
            http = client.transport.http_client
        assert http.is_closed
