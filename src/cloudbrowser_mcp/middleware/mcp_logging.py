"""
MCP request/response logging middleware

Logs every client MCP request handled by the server with a ``CLIENT_MCP``
prefix so that client traffic can be filtered out of the log file easily:

    CLIENT_MCP → ...   request received
    CLIENT_MCP ← ...   response sent
    CLIENT_MCP ✗ ...   request failed
"""

import json
import time
from typing import Any

from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext

from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", exclude_none=True)
    return str(value)


class MCPLoggingMiddleware(Middleware):
    """FastMCP middleware that logs client requests, responses and timings."""

    def __init__(
        self,
        log_request_params: bool = True,
        log_response_data: bool = False,
        max_log_length: int = 5000,
    ) -> None:
        """
        Args:
            log_request_params: Log tool arguments
            log_response_data: Log tool/resource response payloads
            max_log_length: Truncate logged payloads after this many characters
        """
        self.log_request_params = log_request_params
        self.log_response_data = log_response_data
        self.max_log_length = max_log_length

    def _truncate_data(self, data: Any, max_length: int | None = None) -> str:
        """Serialize data to JSON (str() fallback) and truncate it for logging."""
        if max_length is None:
            max_length = self.max_log_length
        try:
            text = json.dumps(data, default=_to_jsonable)
        except (TypeError, ValueError):
            text = str(data)
        if len(text) > max_length:
            return f"{text[:max_length]}... ({len(text)} chars total)"
        return text

    def _log_arguments(self, tool_name: str, arguments: dict[str, Any] | None) -> None:
        if not arguments:
            logger.info(f"CLIENT_MCP   Tool '{tool_name}' arguments: (none)")
            return
        logger.info(f"CLIENT_MCP   Tool '{tool_name}' arguments: {self._truncate_data(arguments)}")

    def _log_result(self, tool_name: str, result: Any) -> None:
        # fastmcp ToolResult objects carry their payload in .content
        payload = result
        if not isinstance(result, dict) and hasattr(result, "content"):
            payload = result.content
        logger.info(f"CLIENT_MCP   Tool '{tool_name}' result: {self._truncate_data(payload)}")

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.time() - start_time) * 1000

    async def on_initialize(self, context: MiddlewareContext, call_next: CallNext) -> Any:
        params = getattr(context.message, "params", None)
        client_info = getattr(params, "clientInfo", None) if params else None
        client_name = getattr(client_info, "name", None) or "unknown"
        client_version = getattr(client_info, "version", None) or "unknown"
        protocol = (getattr(params, "protocolVersion", None) if params else None) or "unknown"

        logger.info(
            f"CLIENT_MCP → Initialize: {client_name} v{client_version} (protocol: {protocol})"
        )
        start_time = time.time()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(
                f"CLIENT_MCP ✗ Initialize error: ({self._elapsed_ms(start_time):.2f}ms) - "
                f"{type(e).__name__}: {e}"
            )
            raise
        logger.info(f"CLIENT_MCP ← Initialize complete ({self._elapsed_ms(start_time):.2f}ms)")
        return result

    async def on_call_tool(self, context: MiddlewareContext, call_next: CallNext) -> Any:
        tool_name = getattr(context.message, "name", "unknown")
        logger.info(f"CLIENT_MCP → Tool call: {tool_name}")
        if self.log_request_params:
            self._log_arguments(tool_name, getattr(context.message, "arguments", None))

        start_time = time.time()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(
                f"CLIENT_MCP ✗ Tool error: {tool_name} ({self._elapsed_ms(start_time):.2f}ms) - "
                f"{type(e).__name__}: {e}"
            )
            raise

        logger.info(f"CLIENT_MCP ← Tool result: {tool_name} ({self._elapsed_ms(start_time):.2f}ms)")
        if self.log_response_data:
            self._log_result(tool_name, result)
        return result

    async def on_read_resource(self, context: MiddlewareContext, call_next: CallNext) -> Any:
        uri = str(getattr(context.message, "uri", "unknown"))
        logger.info(f"CLIENT_MCP → Resource read: {uri}")

        start_time = time.time()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(
                f"CLIENT_MCP ✗ Resource error: {uri} ({self._elapsed_ms(start_time):.2f}ms) - "
                f"{type(e).__name__}: {e}"
            )
            raise

        logger.info(f"CLIENT_MCP ← Resource result: {uri} ({self._elapsed_ms(start_time):.2f}ms)")
        return result

    async def _log_listing(
        self, label: str, noun: str, context: MiddlewareContext, call_next: CallNext
    ) -> Any:
        logger.info(f"CLIENT_MCP → List {label}")
        start_time = time.time()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(
                f"CLIENT_MCP ✗ List {label} error: ({self._elapsed_ms(start_time):.2f}ms) - "
                f"{type(e).__name__}: {e}"
            )
            raise
        logger.info(
            f"CLIENT_MCP ← List {label} result: {len(result) if result else 0} {noun} "
            f"({self._elapsed_ms(start_time):.2f}ms)"
        )
        return result

    async def on_list_tools(self, context: MiddlewareContext, call_next: CallNext) -> Any:
        return await self._log_listing("tools", "tools", context, call_next)

    async def on_list_resources(self, context: MiddlewareContext, call_next: CallNext) -> Any:
        return await self._log_listing("resources", "resources", context, call_next)
