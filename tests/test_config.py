"""
Tests for configuration loading.
"""

import pytest

from gophersearch.config import (
    DEFAULT_BASE_URL,
    ClientConfig,
    logging_from_env,
)
from gophersearch.errors import ConfigError


class TestFromEnv:
    """Test ClientConfig.from_env."""

    def test_defaults(self):
        config = ClientConfig.from_env({"GOPHER_API": "key"})
        assert config.api_key == "key"
        assert config.base_url == DEFAULT_BASE_URL
        assert config.max_results == 15
        assert config.request_timeout == 30.0
        assert config.poll_attempts == 30
        assert config.poll_interval == 2.0
        assert config.unrecognized_limit is None

    def test_missing_credential(self):
        with pytest.raises(ConfigError, match="GOPHER_API"):
            ClientConfig.from_env({})

    def test_reads_all_variables(self):
        config = ClientConfig.from_env({
            "GOPHER_API": "key",
            "MAX_RESULTS": "50",
            "GOPHER_BASE_URL": "http://localhost:8080/api/v1/",
            "GOPHER_TIMEOUT": "5",
            "GOPHER_POLL_ATTEMPTS": "10",
            "GOPHER_POLL_INTERVAL": "0.5",
            "LOG_LEVEL": "debug",
            "LOG_DIR": "/tmp/gopher-logs",
        })
        assert config.max_results == 50
        assert config.base_url == "http://localhost:8080/api/v1"
        assert config.request_timeout == 5.0
        assert config.poll_attempts == 10
        assert config.poll_interval == 0.5
        assert config.log_level == "DEBUG"
        assert config.log_dir == "/tmp/gopher-logs"

    @pytest.mark.parametrize("raw", ["abc", "", "0", "-3", "1.5", "1001", "5000"])
    def test_bad_max_results_falls_back(self, raw):
        config = ClientConfig.from_env({"GOPHER_API": "key", "MAX_RESULTS": raw})
        assert config.max_results == 15

    def test_bad_poll_settings_fall_back(self):
        config = ClientConfig.from_env({
            "GOPHER_API": "key",
            "GOPHER_POLL_ATTEMPTS": "zero",
            "GOPHER_POLL_INTERVAL": "-1",
            "GOPHER_TIMEOUT": "0",
        })
        assert config.poll_attempts == 30
        assert config.poll_interval == 2.0
        assert config.request_timeout == 30.0

    def test_overrides_win(self):
        config = ClientConfig.from_env({"GOPHER_API": "key", "MAX_RESULTS": "50"}, max_results=5)
        assert config.max_results == 5

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("GOPHER_API", "from-env")
        monkeypatch.setenv("MAX_RESULTS", "7")
        config = ClientConfig.from_env()
        assert config.api_key == "from-env"
        assert config.max_results == 7


class TestClientConfig:
    """Test direct construction."""

    def test_api_key_hidden_from_repr(self):
        assert "secret" not in repr(ClientConfig(api_key="secret"))

    @pytest.mark.parametrize("field,value", [
        ("max_results", 0),
        ("max_results", 1001),
        ("request_timeout", 0),
        ("poll_attempts", 0),
        ("poll_interval", -1),
        ("unrecognized_limit", 0),
    ])
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ConfigError):
            ClientConfig(api_key="key", **{field: value})

    def test_with_overrides_revalidates(self):
        config = ClientConfig(api_key="key")
        assert config.with_overrides(poll_attempts=3).poll_attempts == 3
        with pytest.raises(ConfigError):
            config.with_overrides(poll_attempts=0)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            ClientConfig(api_key="")


def test_logging_from_env():
    assert logging_from_env({}) == ("INFO", None)
    assert logging_from_env({"LOG_LEVEL": "warning", "LOG_DIR": "logs"}) == ("WARNING", "logs")
    assert logging_from_env({"LOG_LEVEL": "loud"}) == ("INFO", None)


def test_max_results_upper_bound_accepted():
    config = ClientConfig.from_env({"GOPHER_API": "key", "MAX_RESULTS": "1000"})
    assert config.max_results == 1000
