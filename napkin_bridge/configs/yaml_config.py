"""
Napkin Bridge YAML Configuration

Loading, saving, and defaults for ~/.napkin/config.yaml.
"""

from pathlib import Path

import yaml

from napkin_bridge.configs.logging import get_logger
from napkin_bridge.configs.paths import ensure_data_dir, get_data_path

logger = get_logger("config")

# --- Default Config Template ---

DEFAULT_CONFIG_YAML = """\
# Napkin MCP Gateway Configuration
# Edit this file to customize the gateway.

gateway:
  # Loopback address the MCP endpoint listens on
  host: "127.0.0.1"

  # MCP endpoint port (http://127.0.0.1:<port>/mcp)
  port: 21420

  # Seconds to wait for the editor to answer a tool call
  request_timeout: 15

  # Seconds between SSE keep-alive pings on GET /mcp
  keepalive_interval: 15

  # Origin of the embedding application, allowed by CORS
  app_origin: "tauri://localhost"

# Enable debug logging
debug: false
"""


def get_config_path() -> Path:
    """Get the path to config.yaml."""
    return get_data_path() / "config.yaml"


def load_yaml_config() -> dict:
    """
    Load configuration from ~/.napkin/config.yaml.

    Returns:
        Configuration dictionary (empty if file doesn't exist or is unreadable)
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        loaded = yaml.safe_load(config_path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return {}

    if not isinstance(loaded, dict):
        return {}
    return loaded


def save_yaml_config(config: dict) -> bool:
    """
    Save configuration to ~/.napkin/config.yaml.

    Args:
        config: Configuration dictionary to save

    Returns:
        True if successful
    """
    config_path = get_config_path()
    ensure_data_dir()

    try:
        content = yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
        config_path.write_text(content)
        return True
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save config {config_path}: {e}")
        return False


def create_default_config() -> bool:
    """
    Create default config.yaml if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = get_config_path()
    if config_path.exists():
        return False

    ensure_data_dir()
    config_path.write_text(DEFAULT_CONFIG_YAML)
    return True
