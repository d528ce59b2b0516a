"""Environment-based configuration for the awareness exporter."""

import logging

import httpx
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO}
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Exporter configuration.

    All settings can be overridden via environment variables with
    ES_AWARENESS_ prefix. For example:
        ES_AWARENESS_ES_ADDRESS=http://es-prod:9200
        ES_AWARENESS_QUERY_INTERVAL=30
    """

    # Metrics endpoint
    listen_address: str = ":9709"

    # Cluster queries
    es_address: str = "http://localhost:9200"
    query_interval: float = Field(default=15.0, gt=0)
    query_timeout: float = Field(default=15.0, gt=0)
    query_retries: int = Field(default=3, ge=0)

    log_level: str = "info"

    model_config = {"env_prefix": "ES_AWARENESS_"}

    @field_validator("es_address")
    @classmethod
    def _valid_es_address(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid Elasticsearch address {value!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(
                f"invalid Elasticsearch address {value!r}, expected http(s)://host:port"
            )
        if url.port is not None and not 0 < url.port < 65536:
            raise ValueError(f"invalid port in Elasticsearch address {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        # Unknown levels fall back to info
        value = value.lower()
        return value if value in LOG_LEVELS else "info"


def parse_listen_address(address: str) -> tuple[str, int]:
    """
    Split a "host:port" listen address.

    An empty host (":9709") binds all interfaces.

    Raises:
        ValueError: If the port is missing or not a valid port number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"Invalid listen address {address!r}, expected host:port")
    return host.strip("[]") or "0.0.0.0", int(port)


def configure_logging(level: str) -> None:
    """Set up root logging at the given level name ("debug" or "info")."""
    logging.basicConfig(level=LOG_LEVELS.get(level, logging.INFO), format=LOG_FORMAT)
