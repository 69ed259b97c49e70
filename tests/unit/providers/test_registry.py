"""
Tests unitaires pour le registre des providers.
"""
import pytest

from modelrelay.config.credentials import StaticCredentialResolver
from modelrelay.config.settings import Settings
from modelrelay.core.exceptions import ConfigurationMissing, CredentialRequired
from modelrelay.providers import (
    HuggingFaceClient,
    OpenAICompatibleClient,
    PollinationsClient,
    PuterClient,
    TogetherClient,
)
from modelrelay.providers.registry import available_providers, create_client


class TestRegistry:
    """Tests de la résolution nom -> adapter."""

    def test_available_providers(self):
        assert available_providers() == [
            "azure", "custom", "deepinfra", "huggingface", "pollinations", "puter", "together",
        ]

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationMissing) as exc_info:
            create_client("nope")
        assert "pollinations" in exc_info.value.message

    @pytest.mark.parametrize("name,expected_type", [
        ("pollinations", PollinationsClient),
        ("deepinfra", OpenAICompatibleClient),
        ("puter", PuterClient),
    ])
    def test_keyless_providers(self, name, expected_type):
        assert isinstance(create_client(name), expected_type)

    def test_name_case_insensitive(self):
        credentials = StaticCredentialResolver({"together": {"api_key": "k"}})
        assert isinstance(create_client("Together", credentials=credentials), TogetherClient)

    def test_credentials_forwarded(self):
        credentials = StaticCredentialResolver({"huggingface": {"api_key": "hf"}})
        client = create_client("huggingface", credentials=credentials)
        assert isinstance(client, HuggingFaceClient)
        assert client.config.headers["Authorization"] == "Bearer hf"

    def test_missing_credentials_raise(self):
        with pytest.raises(CredentialRequired):
            create_client("huggingface")


class TestSettingsMerge:
    """Tests de fusion des options du config.toml."""

    def test_settings_options_applied(self, test_config):
        client = create_client("custom", settings=Settings.from_config(test_config))

        assert client.name == "custom"
        assert client.config.chat_endpoint == "http://localhost:9999/v1/chat/completions"
        assert client.config.headers["Authorization"] == "Bearer test-key"
        assert client.config.default_chat_model == "test-model"
        assert client.config.timeout == 30.0
        assert client.transport.aliases.resolve("fast") in ("small-a", "small-b")

    def test_explicit_options_win(self, test_config):
        client = create_client("custom", settings=Settings.from_config(test_config), default_model="override")
        assert client.config.default_chat_model == "override"

    def test_unsupported_settings_options_dropped(self, test_config):
        """Together n'accepte pas `proxies`: l'option est ignorée."""
        test_config["providers"]["together"]["proxies"] = ["https://p.test/?"]
        client = create_client("together", settings=Settings.from_config(test_config))
        assert client.config.headers["X-Team"] == "qa"
        assert client.config.headers["Authorization"] == "Bearer together-key"

    def test_puter_receives_only_known_options(self):
        settings = Settings.from_config({"providers": {"puter": {"default_model": "claude", "api_key": "x"}}})
        client = create_client("puter", settings=settings)
        assert client.default_model == "claude"
