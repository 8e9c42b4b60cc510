# Infrastructure module - Logging and configuration
# Credentials from the environment, settings from YAML

from .config import ConfigManager, ClientSettings, Credentials, load_settings
from .logging import (
    get_logger, configure_logging, reset_logging, RequestContext,
    get_request_id, generate_request_id,
)

__all__ = [
    # Config
    "ConfigManager",
    "ClientSettings",
    "Credentials",
    "load_settings",
    # Logging
    "get_logger",
    "configure_logging",
    "reset_logging",
    "RequestContext",
    "get_request_id",
    "generate_request_id",
]
