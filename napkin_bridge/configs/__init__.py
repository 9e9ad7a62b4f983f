"""
Napkin Bridge Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from napkin_bridge.configs.logging import get_logger, setup_logging

# Paths
from napkin_bridge.configs.paths import get_data_path, ensure_data_dir

# Constants
from napkin_bridge.configs.constants import (
    DEFAULT_PORT,
    PROTOCOL_VERSION,
    SERVER_NAME,
    TIMEOUTS,
    get_timeout,
)

# YAML config
from napkin_bridge.configs.yaml_config import (
    DEFAULT_CONFIG_YAML,
    get_config_path,
    load_yaml_config,
    save_yaml_config,
    create_default_config,
)

# Runtime
from napkin_bridge.configs.runtime import (
    DEFAULT_CONFIG,
    GatewayConfig,
    get_full_config,
    load_gateway_config,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Paths
    "get_data_path",
    "ensure_data_dir",
    # Constants
    "DEFAULT_PORT",
    "PROTOCOL_VERSION",
    "SERVER_NAME",
    "TIMEOUTS",
    "get_timeout",
    # YAML config
    "DEFAULT_CONFIG_YAML",
    "get_config_path",
    "load_yaml_config",
    "save_yaml_config",
    "create_default_config",
    # Runtime
    "DEFAULT_CONFIG",
    "GatewayConfig",
    "get_full_config",
    "load_gateway_config",
]
