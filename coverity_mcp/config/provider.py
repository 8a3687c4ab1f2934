"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol

NOT_CONFIGURED = "(not configured)"
DEFAULT_COVERITY_PORT = 8443
DEFAULT_TRIAGE_STORE = "Default Triage Store"

REQUIRED_ENV_VARS = ("COVERITY_HOST", "COVERITY_USER", "COVERITY_AUTH_KEY")


class ConfigurationError(ValueError):
    """Raised when a required configuration value is missing or invalid."""


@dataclass(frozen=True)
class CoverityConfig:
    """Coverity Connect connection configuration."""
    host: str
    port: int
    ssl: bool
    user: str
    auth_key: str
    project: Optional[str] = None
    triage_store: str = DEFAULT_TRIAGE_STORE

    @property
    def base_url(self) -> str:
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class ServerConfig:
    """MCP server (transport) configuration."""
    transport: str
    host: str
    port: int
    log_level: str
    debug: bool


@dataclass(frozen=True)
class ConnectionStatus:
    """Read-only view of the connection settings, safe to expose to clients."""
    host: str
    port: int
    ssl: bool
    user: str
    configured: bool

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "ssl": self.ssl,
            "user": self.user,
            "configured": self.configured,
        }


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_coverity_config(self) -> CoverityConfig:
        """Get Coverity Connect configuration."""
        ...

    def get_server_config(self) -> ServerConfig:
        """Get MCP server configuration."""
        ...

    def get_connection_status(self) -> ConnectionStatus:
        """Get a non-secret description of the connection settings."""
        ...


def _parse_port(raw: str, name: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _parse_ssl(raw: str) -> bool:
    return raw.lower() != "false"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_coverity_config(self) -> CoverityConfig:
        """
        Get Coverity configuration from environment variables.

        Raises:
            ConfigurationError: If any required variable is missing
        """
        missing: List[str] = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}. "
                f"Set COVERITY_HOST, COVERITY_USER and COVERITY_AUTH_KEY "
                f"(a .env file in the working directory is also read)."
            )

        return CoverityConfig(
            host=os.environ["COVERITY_HOST"],
            port=_parse_port(
                os.getenv("COVERITY_PORT", str(DEFAULT_COVERITY_PORT)), "COVERITY_PORT"
            ),
            ssl=_parse_ssl(os.getenv("COVERITY_SSL", "true")),
            user=os.environ["COVERITY_USER"],
            auth_key=os.environ["COVERITY_AUTH_KEY"],
            project=os.getenv("COVERITY_PROJECT") or None,
            triage_store=os.getenv("COVERITY_TRIAGE_STORE") or DEFAULT_TRIAGE_STORE,
        )

    def get_server_config(self) -> ServerConfig:
        """Get MCP server configuration from environment variables."""
        debug = os.getenv("COVERITY_DEBUG") == "1"
        transport = os.getenv("TRANSPORT", "stdio").lower()
        if transport not in ("stdio", "http"):
            raise ConfigurationError(f"TRANSPORT must be 'stdio' or 'http', got {transport!r}")

        return ServerConfig(
            transport=transport,
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=_parse_port(os.getenv("PORT", "3000"), "PORT"),
            log_level="DEBUG" if debug else os.getenv("LOG_LEVEL", "INFO").upper(),
            debug=debug,
        )

    def get_connection_status(self) -> ConnectionStatus:
        """Describe the connection settings without raising on missing values."""
        port_raw = os.getenv("COVERITY_PORT", str(DEFAULT_COVERITY_PORT))
        try:
            port = int(port_raw)
        except ValueError:
            port = DEFAULT_COVERITY_PORT

        return ConnectionStatus(
            host=os.getenv("COVERITY_HOST") or NOT_CONFIGURED,
            port=port,
            ssl=_parse_ssl(os.getenv("COVERITY_SSL", "true")),
            user=os.getenv("COVERITY_USER") or NOT_CONFIGURED,
            configured=all(os.getenv(name) for name in REQUIRED_ENV_VARS),
        )
