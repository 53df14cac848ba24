"""
Configuration management for CloudBrowser MCP

Loads configuration from environment variables (optionally from a .env file)
with sensible defaults for the provisioning service, the browser session and
logging.
"""

import logging
import os
from pathlib import Path
from typing import TypedDict

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
# Try multiple paths for .env file
env_loaded = False
for env_path in [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent.parent / ".env",
    Path.home() / ".env",
]:
    if env_path.exists():
        logger.info(f"Loading environment from: {env_path}")
        load_dotenv(env_path)
        env_loaded = True
        break

if not env_loaded:
    logger.warning("No .env file found, using system environment variables only")


DEFAULT_API_BASE_URL = "http://localhost:8080"
DEFAULT_LOG_FILE = "logs/cloudbrowser-mcp.log"

# Credentials the provisioning service requires; the server refuses to start without them
REQUIRED_ENV_VARS = ("SESSION_ID", "API_KEY")


class CloudBrowserConfig(TypedDict):
    """Configuration for the remote browser session"""

    session_id: str
    api_key: str
    api_base_url: str
    reprovision_on_probe_failure: bool


class LoggingConfig(TypedDict):
    """Configuration for file logging"""

    log_file: str
    level: int


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _get_log_level_env(key: str, default: int) -> int:
    """Get a log level from its name (e.g. DEBUG) or number"""
    value = os.getenv(key)
    if not value:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


def _missing_credentials() -> list[str]:
    return [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]


def load_cloudbrowser_config() -> CloudBrowserConfig:
    """
    Load the remote browser configuration from environment variables.

    Returns:
        CloudBrowserConfig with all settings

    Raises:
        ValueError: If SESSION_ID or API_KEY is not set
    """
    missing = _missing_credentials()
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        raise ValueError(
            f"{', '.join(missing)} environment variable(s) required. "
            "Set them in the environment or in a .env file"
        )

    config: CloudBrowserConfig = {
        "session_id": os.environ["SESSION_ID"],
        "api_key": os.environ["API_KEY"],
        "api_base_url": os.getenv("CLOUDBROWSER_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        "reprovision_on_probe_failure": _get_bool_env(
            "CLOUDBROWSER_REPROVISION_ON_PROBE_FAILURE", True
        ),
    }

    logger.info(
        f"CloudBrowser configuration: api_base_url={config['api_base_url']}, "
        f"session_id={config['session_id']}, "
        f"reprovision_on_probe_failure={config['reprovision_on_probe_failure']}"
    )
    return config


def load_logging_config() -> LoggingConfig:
    """
    Load logging configuration from environment variables.

    Unlike load_cloudbrowser_config() this never fails, so logging can be set
    up before credentials are validated.
    """
    return {
        "log_file": os.getenv("CLOUDBROWSER_LOG_FILE", DEFAULT_LOG_FILE),
        "level": _get_log_level_env("CLOUDBROWSER_LOG_LEVEL", logging.INFO),
    }
