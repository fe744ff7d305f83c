"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from dotenv import load_dotenv


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8421
    mcp_path: str = "/"
    json_response: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


@dataclass
class SessionConfig:
    """Session registry configuration."""
    max_sessions: int = 100
    session_ttl: float = 30 * 60
    sweep_interval: float = 5 * 60


@dataclass
class RateLimitConfig:
    """Per-client rate limit for the RPC endpoint."""
    max_requests: int = 60
    window_seconds: float = 60


@dataclass
class SearchConfig:
    """Algolia search index configuration."""
    app_id: Optional[str] = None
    api_key: Optional[str] = None
    index_name: str = "knack_events"
    timeout: float = 10

    @property
    def is_configured(self) -> bool:
        """Check if credentials are present."""
        return bool(self.app_id and self.api_key)


@dataclass
class GeocodeConfig:
    """Nominatim geocoder configuration."""
    url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "CineConcerts-MCP/1.0 (events@cineconcerts.com)"
    timeout: float = 10


@dataclass
class Settings:
    """All configuration sections for one application instance."""
    server: ServerConfig = field(default_factory=ServerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    geocode: GeocodeConfig = field(default_factory=GeocodeConfig)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_server_config(self) -> ServerConfig:
        """Get HTTP server configuration."""
        ...

    def get_session_config(self) -> SessionConfig:
        """Get session registry configuration."""
        ...

    def get_rate_limit_config(self) -> RateLimitConfig:
        """Get rate limit configuration."""
        ...

    def get_search_config(self) -> SearchConfig:
        """Get search provider configuration."""
        ...

    def get_geocode_config(self) -> GeocodeConfig:
        """Get geocoder configuration."""
        ...


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class EnvConfigProvider:
    """Environment-based configuration provider.

    Values are read from the process environment, after loading a ``.env``
    file from the working directory if one exists. Variables already set in
    the environment win over the file.
    """

    def __init__(self, load_env_file: bool = True):
        if load_env_file:
            load_dotenv()

    def get_server_config(self) -> ServerConfig:
        """Get HTTP server configuration from environment variables."""
        return ServerConfig(
            host=os.getenv("HOST", "127.0.0.1"),
            port=_env_int("PORT", 8421),
            mcp_path=os.getenv("MCP_PATH", "/"),
            json_response=_env_bool("MCP_JSON_RESPONSE", False),
            cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_session_config(self) -> SessionConfig:
        """Get session registry configuration from environment variables."""
        config = SessionConfig(
            max_sessions=_env_int("MAX_SESSIONS", 100),
            session_ttl=_env_float("SESSION_TTL", 30 * 60),
            sweep_interval=_env_float("SWEEP_INTERVAL", 5 * 60),
        )
        if config.max_sessions < 1:
            raise ValueError("MAX_SESSIONS must be at least 1")
        if config.session_ttl <= 0 or config.sweep_interval <= 0:
            raise ValueError("SESSION_TTL and SWEEP_INTERVAL must be positive")
        return config

    def get_rate_limit_config(self) -> RateLimitConfig:
        """Get rate limit configuration from environment variables."""
        return RateLimitConfig(
            max_requests=_env_int("RATE_LIMIT_REQUESTS", 60),
            window_seconds=_env_float("RATE_LIMIT_WINDOW", 60),
        )

    def get_search_config(self) -> SearchConfig:
        """Get Algolia configuration from environment variables."""
        return SearchConfig(
            app_id=os.getenv("ALGOLIA_APP_ID"),
            api_key=os.getenv("ALGOLIA_API_KEY"),
            index_name=os.getenv("ALGOLIA_INDEX", "knack_events"),
            timeout=_env_float("HTTP_TIMEOUT", 10),
        )

    def get_geocode_config(self) -> GeocodeConfig:
        """Get geocoder configuration from environment variables."""
        return GeocodeConfig(
            url=os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search"),
            user_agent=os.getenv(
                "GEOCODER_USER_AGENT", "CineConcerts-MCP/1.0 (events@cineconcerts.com)"
            ),
            timeout=_env_float("HTTP_TIMEOUT", 10),
        )


def load_settings(provider: Optional[ConfigProvider] = None) -> Settings:
    """Collect every configuration section from a provider."""
    provider = provider or EnvConfigProvider()
    return Settings(
        server=provider.get_server_config(),
        session=provider.get_session_config(),
        rate_limit=provider.get_rate_limit_config(),
        search=provider.get_search_config(),
        geocode=provider.get_geocode_config(),
    )
