"""
Configuration Manager
---------------------
Loads client settings from YAML with environment variable overrides.

Rules:
- Credentials never in the config file
- Credentials come from the environment only
- Environment overrides file values (CHALLONGE_<SECTION>_<KEY>)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import os

import yaml

from core.errors import ConfigurationError

from .logging import get_logger

ENV_PREFIX = "CHALLONGE"
USERNAME_ENV = "CHALLONGE_USERNAME"
API_KEY_ENV = "CHALLONGE_API_KEY"
DEFAULT_CONFIG_PATH = "challonge.yaml"
DEFAULT_BASE_URL = "https://api.challonge.com/v1"


class ConfigManager:
    """
    Settings read from a YAML file.

    Keys use dot notation ('client.timeout_seconds'); a matching
    CHALLONGE_CLIENT_TIMEOUT_SECONDS variable takes precedence over the file.
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self._config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._logger = get_logger("infra.config")

        self._load_config()

    def _load_config(self) -> None:
        if not self._config_path.exists():
            self._logger.debug(f"No config file at {self._config_path}, using defaults")
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self._config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {self._config_path}")

        self._config = data
        self._logger.info(f"Loaded config from {self._config_path}")

    @staticmethod
    def env_key(key: str) -> str:
        """Environment variable overriding `key`."""
        return f"{ENV_PREFIX}_{key.upper().replace('.', '_')}"

    def get(self, key: str, default: Any = None) -> Any:
        """Value for a dotted key; environment values are returned as strings."""
        override = os.getenv(self.env_key(key))
        if override is not None:
            return override

        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Override a value in memory; the file is left untouched."""
        *parents, leaf = key.split(".")
        node = self._config
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Copy of a top-level mapping, empty if absent."""
        value = self._config.get(section)
        return dict(value) if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Re-read the file, discarding values set at runtime."""
        self._load_config()


@dataclass
class Credentials:
    """Challonge account name and API key."""
    username: str
    api_key: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, api_key='***')"

    @classmethod
    def from_env(cls) -> "Credentials":
        """Load credentials from CHALLONGE_USERNAME / CHALLONGE_API_KEY."""
        username = os.getenv(USERNAME_ENV)
        api_key = os.getenv(API_KEY_ENV)

        missing = [name for name, value in ((USERNAME_ENV, username), (API_KEY_ENV, api_key)) if not value]
        if missing:
            raise ConfigurationError(f"Missing credentials: {', '.join(missing)}")

        return cls(username=username, api_key=api_key)


@dataclass
class ClientSettings:
    """Transport settings for the API client."""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0
    max_retries: int = 1
    rate_limit_requests: int = 60
    rate_limit_burst: int = 10
    user_agent: str = "challonge-client/1.0"

    @classmethod
    def from_config(cls, config: ConfigManager) -> "ClientSettings":
        """Read the `client` section, applying environment overrides."""
        defaults = cls()
        try:
            return cls(
                base_url=str(config.get("client.base_url", defaults.base_url)),
                timeout_seconds=float(config.get("client.timeout_seconds", defaults.timeout_seconds)),
                max_retries=int(config.get("client.max_retries", defaults.max_retries)),
                rate_limit_requests=int(config.get("client.rate_limit_requests", defaults.rate_limit_requests)),
                rate_limit_burst=int(config.get("client.rate_limit_burst", defaults.rate_limit_burst)),
                user_agent=str(config.get("client.user_agent", defaults.user_agent)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid client setting: {e}") from e


def load_settings(config_path: Optional[str] = None) -> ClientSettings:
    """Load ClientSettings from a YAML file (if present) and the environment."""
    return ClientSettings.from_config(ConfigManager(config_path or DEFAULT_CONFIG_PATH))
