import logging
import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cineconcerts.config import EnvConfigProvider, load_settings
from cineconcerts.logging_config import HealthCheckFilter, get_logging_config

ENV_VARS = [
    "HOST",
    "PORT",
    "MCP_PATH",
    "MCP_JSON_RESPONSE",
    "CORS_ORIGINS",
    "LOG_LEVEL",
    "MAX_SESSIONS",
    "SESSION_TTL",
    "SWEEP_INTERVAL",
    "RATE_LIMIT_REQUESTS",
    "RATE_LIMIT_WINDOW",
    "ALGOLIA_APP_ID",
    "ALGOLIA_API_KEY",
    "ALGOLIA_INDEX",
    "NOMINATIM_URL",
    "GEOCODER_USER_AGENT",
    "HTTP_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def settings():
    return load_settings(EnvConfigProvider(load_env_file=False))


def test_defaults(clean_env):
    config = settings()

    assert config.server.host == "127.0.0.1"
    assert config.server.port == 8421
    assert config.server.mcp_path == "/"
    assert config.server.json_response is False
    assert config.server.cors_origins == ["*"]
    assert config.session.max_sessions == 100
    assert config.session.session_ttl == 1800
    assert config.session.sweep_interval == 300
    assert config.rate_limit.max_requests == 60
    assert config.rate_limit.window_seconds == 60
    assert config.search.index_name == "knack_events"
    assert not config.search.is_configured
    assert config.geocode.url == "https://nominatim.openstreetmap.org/search"


def test_overrides(clean_env):
    clean_env.setenv("PORT", "9000")
    clean_env.setenv("MCP_PATH", "/mcp")
    clean_env.setenv("MCP_JSON_RESPONSE", "true")
    clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("MAX_SESSIONS", "2")
    clean_env.setenv("SESSION_TTL", "90")
    clean_env.setenv("RATE_LIMIT_REQUESTS", "10")
    clean_env.setenv("ALGOLIA_APP_ID", "APP")
    clean_env.setenv("ALGOLIA_API_KEY", "KEY")
    clean_env.setenv("HTTP_TIMEOUT", "2.5")

    config = settings()

    assert config.server.port == 9000
    assert config.server.mcp_path == "/mcp"
    assert config.server.json_response is True
    assert config.server.cors_origins == ["https://a.example", "https://b.example"]
    assert config.server.log_level == "DEBUG"
    assert config.session.max_sessions == 2
    assert config.session.session_ttl == 90
    assert config.rate_limit.max_requests == 10
    assert config.search.is_configured
    assert config.search.timeout == 2.5
    assert config.geocode.timeout == 2.5


def test_blank_value_uses_default(clean_env):
    clean_env.setenv("MAX_SESSIONS", "  ")

    assert settings().session.max_sessions == 100


def test_invalid_integer_names_variable(clean_env):
    clean_env.setenv("MAX_SESSIONS", "lots")

    with pytest.raises(ValueError, match="MAX_SESSIONS"):
        settings()


@pytest.mark.parametrize(
    "name,value",
    [("MAX_SESSIONS", "0"), ("SESSION_TTL", "-1"), ("SWEEP_INTERVAL", "0")],
)
def test_rejects_out_of_range_session_settings(clean_env, name, value):
    clean_env.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        settings()


class TestHealthCheckFilter:
    def make_record(self, name, message):
        return logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)

    def test_drops_health_access_logs(self):
        record = self.make_record("uvicorn.access", '127.0.0.1 - "GET /health HTTP/1.1" 200')

        assert HealthCheckFilter().filter(record) is False

    def test_keeps_other_access_logs(self):
        record = self.make_record("uvicorn.access", '127.0.0.1 - "POST / HTTP/1.1" 200')

        assert HealthCheckFilter().filter(record) is True

    def test_drops_health_with_query_string(self):
        record = self.make_record("uvicorn.access", '127.0.0.1 - "GET /health?probe=1 HTTP/1.1" 200')

        assert HealthCheckFilter().filter(record) is False

    def test_keeps_paths_that_only_share_a_prefix(self):
        record = self.make_record("uvicorn.access", '127.0.0.1 - "GET /healthcheck-report HTTP/1.1" 200')

        assert HealthCheckFilter().filter(record) is True

    def test_custom_health_path(self):
        health_filter = HealthCheckFilter(path="/status")

        assert health_filter.filter(
            self.make_record("uvicorn.access", '127.0.0.1 - "GET /status HTTP/1.1" 200')
        ) is False
        assert health_filter.filter(
            self.make_record("uvicorn.access", '127.0.0.1 - "GET /health HTTP/1.1" 200')
        ) is True

    def test_keeps_application_logs(self):
        record = self.make_record("cineconcerts.main", "GET /health configured")

        assert HealthCheckFilter().filter(record) is True


def test_logging_config_levels():
    config = get_logging_config("debug")

    assert config["loggers"]["cineconcerts"]["level"] == "DEBUG"
    assert config["loggers"]["mcp"]["level"] == "WARNING"
    assert config["handlers"]["access"]["filters"] == ["health_check_filter"]
    assert config["filters"]["health_check_filter"]["path"] == "/health"


def test_logging_config_builds_filter_for_path():
    config = get_logging_config("info", health_path="/status")

    assert config["filters"]["health_check_filter"]["path"] == "/status"
