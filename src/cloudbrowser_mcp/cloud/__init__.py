"""
Cloud Browser Package

Configuration, remote session provisioning and the single shared browser
session used by all CloudBrowser tools.
"""

from .config import (
    CloudBrowserConfig,
    LoggingConfig,
    load_cloudbrowser_config,
    load_logging_config,
)
from .provisioner import SessionProvisioner
from .session_manager import BrowserSession, SessionManager

__all__ = [
    "CloudBrowserConfig",
    "LoggingConfig",
    "load_cloudbrowser_config",
    "load_logging_config",
    "SessionProvisioner",
    "BrowserSession",
    "SessionManager",
]
