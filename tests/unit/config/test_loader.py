"""
Tests unitaires pour le chargement du config.toml.
"""
import pytest

from modelrelay.config import loader
from modelrelay.config.loader import get_config, load_config, reload_config
from modelrelay.core.exceptions import ConfigurationMissing

CONFIG_TOML = """
default_provider = "together"
timeout = 45

[providers.together]
api_key = "${TOGETHER_TEST_KEY}"
headers = { "X-Team" = "qa" }

[providers.custom]
base_url = "${UNSET_TEST_BASE}"
"""


@pytest.fixture(autouse=True)
def clear_cache():
    loader._clear_config_cache()
    yield
    loader._clear_config_cache()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests du chargement TOML."""

    def test_env_vars_expanded(self, config_file, monkeypatch):
        monkeypatch.setenv("TOGETHER_TEST_KEY", "secret")
        config = load_config(str(config_file))
        assert config["providers"]["together"]["api_key"] == "secret"
        assert config["providers"]["together"]["headers"] == {"X-Team": "qa"}

    def test_unknown_env_var_left_as_is(self, config_file, monkeypatch):
        monkeypatch.delenv("UNSET_TEST_BASE", raising=False)
        config = load_config(str(config_file))
        assert config["providers"]["custom"]["base_url"] == "${UNSET_TEST_BASE}"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationMissing) as exc_info:
            load_config(str(tmp_path / "absent.toml"))
        assert exc_info.value.details == {"key": "config_path"}

    def test_env_path_used_by_default(self, config_file, monkeypatch):
        monkeypatch.setenv("MODELRELAY_CONFIG", str(config_file))
        assert get_config()["default_provider"] == "together"

    def test_cache_and_reload(self, config_file):
        first = load_config(str(config_file))
        config_file.write_text('default_provider = "puter"\n', encoding="utf-8")

        assert load_config(str(config_file)) is first
        assert reload_config(str(config_file))["default_provider"] == "puter"
