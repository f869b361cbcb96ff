"""
Tests for settings loading.
"""
import pytest

from cumuli.exceptions import ConfigurationError
from cumuli.settings import Settings, load_settings


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings(environ={})

        assert settings.page_size == 50
        assert settings.failure_policy == "abort"
        assert settings.cache_ttl == 60
        assert settings.client_id == ""

    def test_reads_environment(self):
        settings = load_settings(environ={
            "CUMULI_CLIENT_ID": "abc",
            "CUMULI_PAGE_SIZE": "25",
            "CUMULI_FAILURE_POLICY": "Exclude",
            "CUMULI_FETCH_TIMEOUT": "2.5",
            "CUMULI_DEBUG": "yes",
        })

        assert settings.client_id == "abc"
        assert settings.page_size == 25
        assert settings.failure_policy == "exclude"
        assert settings.fetch_timeout == 2.5
        assert settings.debug is True

    def test_legacy_client_id(self):
        assert load_settings(environ={"SC_CLIENT_ID": "legacy"}).client_id == "legacy"

    def test_invalid_integer(self):
        with pytest.raises(ConfigurationError):
            load_settings(environ={"CUMULI_PAGE_SIZE": "many"})

    def test_invalid_policy(self):
        with pytest.raises(ConfigurationError):
            Settings(failure_policy="retry")

    def test_invalid_page_size(self):
        with pytest.raises(ConfigurationError):
            Settings(page_size=0)

    def test_env_file(self, temp_dir, monkeypatch):
        monkeypatch.delenv("CUMULI_PORT", raising=False)
        env_file = temp_dir / ".env"
        env_file.write_text("CUMULI_PORT=9999\n")

        assert load_settings(str(env_file)).port == 9999
        monkeypatch.delenv("CUMULI_PORT", raising=False)
