"""
Napkin Bridge Runtime Configuration

Runtime defaults and configuration merging logic.
Combines defaults, YAML config, and environment variables into a GatewayConfig.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Any

from napkin_bridge.configs.constants import (
    DEFAULT_APP_ORIGIN,
    DEFAULT_HOST,
    DEFAULT_PORT,
    TIMEOUTS,
    get_timeout,
)
from napkin_bridge.configs.yaml_config import load_yaml_config
from napkin_bridge.exceptions import ConfigurationError

# --- Default Runtime Configuration ---

DEFAULT_CONFIG = {
    "host": DEFAULT_HOST,
    "port": DEFAULT_PORT,
    "request_timeout": TIMEOUTS["request"],
    "keepalive_interval": TIMEOUTS["keepalive"],
    "startup_timeout": TIMEOUTS["startup"],
    "app_origin": DEFAULT_APP_ORIGIN,
}

# Environment variable -> config key
ENV_OVERRIDES = {
    "NAPKIN_MCP_HOST": "host",
    "NAPKIN_MCP_PORT": "port",
    "NAPKIN_REQUEST_TIMEOUT": "request_timeout",
    "NAPKIN_KEEPALIVE_INTERVAL": "keepalive_interval",
    "NAPKIN_APP_ORIGIN": "app_origin",
}


@dataclass(frozen=True)
class GatewayConfig:
    """Settings for one gateway instance."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    request_timeout: float = TIMEOUTS["request"]
    keepalive_interval: float = TIMEOUTS["keepalive"]
    startup_timeout: float = TIMEOUTS["startup"]
    app_origin: str = DEFAULT_APP_ORIGIN

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ConfigurationError("port must be between 0 and 65535", {"port": self.port})
        for name in ("request_timeout", "keepalive_interval", "startup_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", {name: getattr(self, name)})

    @property
    def shutdown_timeout(self) -> float:
        """Upper bound on a graceful stop: in-flight tool calls may still be waiting."""
        return self.request_timeout + get_timeout("shutdown_grace")

    def with_overrides(self, **overrides: Any) -> "GatewayConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw YAML/env value to the type of the matching GatewayConfig field."""
    if key == "port":
        converter = int
    elif key in ("request_timeout", "keepalive_interval", "startup_timeout"):
        converter = float
    else:
        converter = str
    try:
        return converter(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {key}", {key: value}) from e


def get_full_config(**overrides: Any) -> dict:
    """
    Get full configuration merged from defaults, YAML, and environment.

    Priority (highest wins):
    1. Explicit overrides
    2. Environment variables
    3. gateway section of the YAML config file
    4. DEFAULT_CONFIG

    Returns:
        Merged configuration dictionary
    """
    config = dict(DEFAULT_CONFIG)

    yaml_config = load_yaml_config()
    gateway_section = yaml_config.get("gateway") or {}
    if isinstance(gateway_section, dict):
        for key, value in gateway_section.items():
            if key in config and value is not None:
                config[key] = _coerce(key, value)

    for env_var, key in ENV_OVERRIDES.items():
        if os.environ.get(env_var):
            config[key] = _coerce(key, os.environ[env_var])

    for key, value in overrides.items():
        if key not in config:
            raise ConfigurationError(f"Unknown config key: {key}")
        config[key] = _coerce(key, value)

    return config


def load_gateway_config(**overrides: Any) -> GatewayConfig:
    """Build a GatewayConfig from defaults, config.yaml, environment and overrides."""
    config = get_full_config(**overrides)
    known = {f.name for f in fields(GatewayConfig)}
    return GatewayConfig(**{k: v for k, v in config.items() if k in known})
