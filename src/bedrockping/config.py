"""Configuration loading for the bedrockping command."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from bedrockping.client import DEFAULT_TIMEOUT
from bedrockping.status import DEFAULT_PORT

CONFIG_DIR = Path.home() / ".config" / "bedrockping"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass(frozen=True)
class ServerConfig:
    """A named Bedrock server."""

    name: str
    host: str
    port: int = DEFAULT_PORT

    @property
    def address(self) -> str:
        """The host:port form accepted by fetch_pong."""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    default_server: str | None
    timeout: float
    servers: dict[str, ServerConfig]


def load_config(path: Path = CONFIG_FILE) -> AppConfig:
    """Load and parse the configuration file.

    Returns an empty configuration if no config file exists.

    Raises:
        ValueError: If the file is not valid TOML or the timeout is not positive.
    """
    if not path.exists():
        return _default_config()

    with path.open("rb") as f:
        raw = tomllib.load(f)

    defaults = raw.get("defaults", {})

    servers: dict[str, ServerConfig] = {}
    for key, val in raw.get("servers", {}).items():
        servers[key] = ServerConfig(
            name=val.get("name", key),
            host=val["host"],
            port=val.get("port", DEFAULT_PORT),
        )

    timeout = float(defaults.get("timeout", DEFAULT_TIMEOUT))
    if timeout <= 0:
        msg = f"[defaults] timeout must be positive, got {timeout} in {path}"
        raise ValueError(msg)

    return AppConfig(
        default_server=defaults.get("server"),
        timeout=timeout,
        servers=servers,
    )


def _default_config() -> AppConfig:
    """Return the configuration used when no file exists."""
    return AppConfig(default_server=None, timeout=DEFAULT_TIMEOUT, servers={})
