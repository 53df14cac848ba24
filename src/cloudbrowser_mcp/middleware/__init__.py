"""FastMCP middleware for the CloudBrowser MCP Server."""

from .mcp_logging import MCPLoggingMiddleware

__all__ = ["MCPLoggingMiddleware"]
