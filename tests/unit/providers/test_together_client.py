"""
Tests unitaires pour l'adapter Together.

Le catalogue authentifié fournit les séquences d'arrêt injectées dans les
requêtes chat.
"""
import httpx
import pytest

from modelrelay.config.credentials import StaticCredentialResolver
from modelrelay.core.exceptions import CredentialRequired, UpstreamStatus
from modelrelay.providers.together import TOGETHER_ALIASES, TogetherClient

MODELS_URL = "https://api.together.xyz/v1/models"
CHAT_URL = "https://api.together.xyz/v1/chat/completions"
IMAGES_URL = "https://api.together.xyz/v1/images/generations"
LLAMA = "meta-llama/Llama-3.3-70B-Instruct-Turbo"

CATALOG = [
    {
        "id": LLAMA,
        "type": "chat",
        "context_length": 131072,
        "config": {"stop": ["<|eot_id|>", "<|eom_id|>"], "chat_template": "{{ messages }}"},
    },
    {"id": "black-forest-labs/FLUX.1.1-pro", "type": "image"},
]


def make_client(handler, make_http_client, **options):
    options.setdefault("api_key", "tg-key")
    return TogetherClient(http_client=make_http_client(handler), **options)


class TestConstruction:
    """Tests de construction."""

    def test_missing_key_raises_credential_required(self):
        with pytest.raises(CredentialRequired) as exc_info:
            TogetherClient()
        assert exc_info.value.provider == "together"
        assert exc_info.value.code == "credential_required"

    def test_key_from_resolver(self):
        client = TogetherClient(credentials=StaticCredentialResolver({"together": {"api_key": "from-env"}}))
        assert client.config.headers["Authorization"] == "Bearer from-env"

    def test_aliases_merged(self):
        client = TogetherClient(api_key="k", model_aliases={"mine": "org/model"})
        assert client.transport.aliases.resolve("mine") == "org/model"
        assert client.transport.aliases.resolve("llama-4-maverick") == TOGETHER_ALIASES["llama-4-maverick"]


class TestCatalog:
    """Tests du chargement du catalogue."""

    @pytest.mark.asyncio
    async def test_load_models_builds_configs(self, make_http_client, recording_handler):
        handler = recording_handler({MODELS_URL: httpx.Response(200, json=CATALOG)})
        client = make_client(handler, make_http_client)

        models = await client.models.list()

        assert [m["id"] for m in models] == [LLAMA, "black-forest-labs/FLUX.1.1-pro"]
        config = client.get_model_config(LLAMA)
        assert config.stop == ["<|eot_id|>", "<|eom_id|>"]
        assert config.chat_template == "{{ messages }}"
        assert config.context_length == 131072
        assert client.get_model_config("unknown").stop == []
        assert handler.requests[0].headers["Authorization"] == "Bearer tg-key"

    @pytest.mark.asyncio
    async def test_catalog_wrapped_in_data(self, make_http_client, recording_handler):
        handler = recording_handler({MODELS_URL: httpx.Response(200, json={"data": CATALOG})})
        client = make_client(handler, make_http_client)

        assert len(await client.models.list()) == 2

    @pytest.mark.asyncio
    async def test_catalog_loaded_once(self, make_http_client, recording_handler):
        handler = recording_handler({
            MODELS_URL: httpx.Response(200, json=CATALOG),
            CHAT_URL: httpx.Response(200, json={"choices": []}),
        })
        client = make_client(handler, make_http_client)

        await client.chat.completions.create({"model": LLAMA, "messages": []})
        await client.chat.completions.create({"model": LLAMA, "messages": []})

        assert [str(r.url) for r in handler.requests].count(MODELS_URL) == 1

    @pytest.mark.asyncio
    async def test_list_models_raises_on_failure(self, make_http_client, recording_handler):
        handler = recording_handler({MODELS_URL: httpx.Response(401, json={"error": "bad key"})})
        client = make_client(handler, make_http_client)

        with pytest.raises(UpstreamStatus):
            await client.models.list()


class TestChat:
    """Tests du chat Together."""

    @pytest.mark.asyncio
    async def test_stop_injected_from_catalog(self, make_http_client, recording_handler, sample_messages):
        handler = recording_handler({
            MODELS_URL: httpx.Response(200, json=CATALOG),
            CHAT_URL: httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]}),
        })
        client = make_client(handler, make_http_client)

        await client.chat.completions.create({"model": LLAMA, "messages": sample_messages})

        body = handler.json_bodies()[-1]
        assert body["stop"] == ["<|eot_id|>", "<|eom_id|>"]
        assert body["model"] == LLAMA
        assert handler.requests[-1].headers["Authorization"] == "Bearer tg-key"

    @pytest.mark.asyncio
    async def test_caller_stop_preserved(self, make_http_client, recording_handler):
        handler = recording_handler({
            MODELS_URL: httpx.Response(200, json=CATALOG),
            CHAT_URL: httpx.Response(200, json={}),
        })
        client = make_client(handler, make_http_client)

        await client.chat.completions.create({"model": LLAMA, "messages": [], "stop": ["FIN"]})

        assert handler.json_bodies()[-1]["stop"] == ["FIN"]

    @pytest.mark.asyncio
    async def test_alias_pool_resolved_to_member(self, make_http_client, recording_handler, seeded_rng):
        handler = recording_handler({
            MODELS_URL: httpx.Response(200, json=CATALOG),
            CHAT_URL: httpx.Response(200, json={}),
        })
        client = make_client(handler, make_http_client, rng=seeded_rng)

        await client.chat.completions.create({"model": "llama-3.3-70b", "messages": []})

        assert handler.json_bodies()[-1]["model"] in TOGETHER_ALIASES["llama-3.3-70b"]

    @pytest.mark.asyncio
    async def test_catalog_failure_does_not_block_chat(self, make_http_client, recording_handler, caplog):
        handler = recording_handler({
            MODELS_URL: httpx.Response(500),
            CHAT_URL: httpx.Response(200, json={"choices": []}),
        })
        client = make_client(handler, make_http_client)

        result = await client.chat.completions.create({"model": LLAMA, "messages": []})

        assert result == {"choices": []}
        assert "stop" not in handler.json_bodies()[-1]
        assert "Échec de chargement des modèles Together" in caplog.text


class TestImages:
    """Tests de génération d'images."""

    @pytest.mark.asyncio
    async def test_image_param_renamed(self, make_http_client, recording_handler):
        handler = recording_handler({
            MODELS_URL: httpx.Response(200, json=CATALOG),
            IMAGES_URL: httpx.Response(200, json={"data": [{"url": "https://cdn.together.test/1.png"}]}),
        })
        client = make_client(handler, make_http_client)

        result = await client.images.generate({"prompt": "phare", "image": "https://in.test/src.png"})

        body = handler.json_bodies()[-1]
        assert body == {
            "prompt": "phare",
            "image_url": "https://in.test/src.png",
            "model": "black-forest-labs/FLUX.1.1-pro",
        }
        assert result["data"][0]["url"] == "https://cdn.together.test/1.png"
        assert handler.requests[-1].headers["Authorization"] == "Bearer tg-key"
