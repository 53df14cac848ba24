"""
Logging configuration utilities for cloudbrowser-mcp

Provides file-only logging configuration to prevent MCP protocol corruption.
The MCP protocol uses stdout for JSON-RPC communication, so all logging must
go exclusively to files.
"""

import json
import logging
import tempfile
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any


def setup_file_logging(
    log_file: str | Path = "logs/cloudbrowser-mcp.log",
    level: int = logging.INFO,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Configure file-only logging for the application.

    NOTE: We log ONLY to file, NOT to stdout/stderr, because stdout is used
    for MCP protocol communication with the client (FastMCP uses stdio transport).
    Logging to stdout would corrupt the MCP protocol messages.

    If the log directory cannot be created (read-only install location, a file
    in the way, ...) the log file is placed in the system temp directory instead.

    Args:
        log_file: Path to the log file (relative or absolute)
        level: Logging level (default: logging.INFO)
        format_string: Custom format string (default: timestamp - name - level - message)

    Returns:
        The root logger instance
    """
    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    except (OSError, PermissionError):
        log_path = Path(tempfile.gettempdir()) / log_path.name
        handler = logging.FileHandler(log_path)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[handler],
        force=True,  # Override any existing configuration
    )

    logger = logging.getLogger()
    logger.info(f"Logging configured: file={log_path}, level={logging.getLevelName(level)}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_dict(
    logger: logging.Logger, message: str, data: dict[str, Any], level: int = logging.INFO
) -> None:
    """
    Log a dictionary with formatted key-value pairs.

    Args:
        logger: Logger instance
        message: Prefix message
        data: Dictionary to log
        level: Log level (default: INFO)
    """
    logger.log(level, message)
    for key, value in data.items():
        # Mask sensitive values
        if any(sensitive in key.lower() for sensitive in ["token", "password", "secret", "key"]):
            value = "***REDACTED***"
        logger.log(level, f"  {key}: {value}")


def _serialize_result(result: Any, max_length: int) -> str:
    try:
        text = json.dumps(result, default=_to_jsonable)
    except (TypeError, ValueError):
        text = str(result)
    if len(text) > max_length:
        text = f"{text[:max_length]}... ({len(text)} chars total)"
    return text


def _to_jsonable(value: Any) -> Any:
    # MCP content blocks are pydantic models
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", exclude_none=True)
    return str(value)


def log_tool_result(
    logger: logging.Logger | None = None, max_length: int = 2000
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that logs the result of an async MCP tool function.

    The result is logged as JSON (falling back to str()) under a
    ``TOOL_RESULT [<function name>]`` prefix. Exceptions propagate untouched.

    Args:
        logger: Logger to use (default: the decorated function's module logger)
        max_length: Maximum number of serialized characters to log
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        tool_logger = logger or logging.getLogger(func.__module__)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)
            tool_logger.info(
                f"TOOL_RESULT [{func.__name__}]: {_serialize_result(result, max_length)}"
            )
            return result

        return wrapper

    return decorator
