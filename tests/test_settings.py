"""Tests for settings loading from dotenv files and the environment."""

import pytest

from vaultwarden_panel.settings import DEFAULT_PREFIX, DEFAULT_TIMEOUT, Settings, load_settings


@pytest.fixture()
def env_file(tmp_path):
    path = tmp_path / "panel.env"
    path.write_text(
        "VW_PANEL_API=https://vault.example.com/\n"
        "VW_PANEL_TOKEN=file-token\n"
        "VW_PANEL_TIMEOUT=5\n"
    )
    return path


class TestLoadSettings:
    def test_defaults(self):
        s = load_settings(environ={})
        assert s == Settings()
        assert s.prefix == DEFAULT_PREFIX == "/plugins/vw"
        assert s.timeout == DEFAULT_TIMEOUT
        assert not s.has_api_url and not s.has_auth

    def test_from_file(self, env_file):
        s = load_settings(env_file, environ={})
        assert s.api_url == "https://vault.example.com"
        assert s.token == "file-token"
        assert s.timeout == 5.0

    def test_environment_wins(self, env_file):
        s = load_settings(env_file, environ={"VW_PANEL_TOKEN": "env-token", "VW_PANEL_PREFIX": "custom/"})
        assert s.token == "env-token"
        assert s.api_url == "https://vault.example.com"
        assert s.prefix == "/custom"

    def test_empty_environment_value_ignored(self, env_file):
        s = load_settings(env_file, environ={"VW_PANEL_TOKEN": ""})
        assert s.token == "file-token"

    def test_root_prefix(self):
        assert load_settings(environ={"VW_PANEL_PREFIX": "/"}).prefix == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Settings file not found"):
            load_settings(tmp_path / "nope.env", environ={})

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_bad_timeout(self, raw):
        with pytest.raises(ValueError, match="VW_PANEL_TIMEOUT"):
            load_settings(environ={"VW_PANEL_TIMEOUT": raw})


class TestSettings:
    def test_auth_headers(self):
        assert Settings(token="abc").auth_headers() == {"Authorization": "Bearer abc"}
        assert Settings().auth_headers() == {}

    def test_flags(self):
        s = Settings(api_url="http://x", token="t")
        assert s.has_api_url and s.has_auth
