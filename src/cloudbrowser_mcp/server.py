"""
CloudBrowser MCP Server

Exposes a remote cloud browser to MCP clients through seven tools
(navigate, evaluate, get current URL, screenshot, click, fill, get text).

This server:
1. Provisions a remote browser from the cloud browser service on first use
2. Keeps a single shared browser session, probing it before every tool call
3. Stores screenshots in memory and publishes them as screenshot://<name> resources
"""

import base64
import logging
import sys
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import unquote

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.resources import FunctionResource
from fastmcp.tools import FunctionTool
from mcp.types import ImageContent, TextContent

from .catalog import SCREENSHOT_MIME_TYPE, ScreenshotCatalog, screenshot_uri
from .cloud import (
    SessionManager,
    SessionProvisioner,
    load_cloudbrowser_config,
    load_logging_config,
)
from .middleware import MCPLoggingMiddleware
from .tools import ToolDispatcher, get_tool, registry
from .utils.logging_config import get_logger, log_dict, log_tool_result, setup_file_logging

# Configure logging using centralized utility
_logging_config = load_logging_config()
setup_file_logging(log_file=_logging_config["log_file"], level=_logging_config["level"])
logger = get_logger(__name__)

# Log Python interpreter information at startup
logger.info(f"Python interpreter: {sys.executable}")
logger.info(f"Python version: {sys.version}")

# Global components
cloudbrowser_config = None
session_manager: SessionManager | None = None
dispatcher: ToolDispatcher | None = None
screenshot_catalog = ScreenshotCatalog()
_published_screenshot_uris: set[str] = set()


@asynccontextmanager
async def lifespan_context(server):
    """Lifespan context manager for startup and shutdown"""
    global cloudbrowser_config, session_manager, dispatcher

    logger.info("Starting CloudBrowser MCP server...")

    try:
        # Credentials are a startup precondition; fail before accepting requests
        cloudbrowser_config = load_cloudbrowser_config()
        log_dict(logger, "CloudBrowser configuration:", dict(cloudbrowser_config), level=logging.DEBUG)

        provisioner = SessionProvisioner(
            api_base_url=cloudbrowser_config["api_base_url"],
            api_key=cloudbrowser_config["api_key"],
            session_id=cloudbrowser_config["session_id"],
        )
        session_manager = SessionManager(
            provisioner,
            reprovision_on_probe_failure=cloudbrowser_config["reprovision_on_probe_failure"],
        )
        dispatcher = ToolDispatcher(session_manager, screenshot_catalog)

        logger.info("CloudBrowser MCP server started (browser session is created on first tool call)")

        yield

    except Exception as e:
        logger.error(f"Failed to start CloudBrowser MCP server: {e}", exc_info=True)
        raise

    finally:
        logger.info("Shutting down CloudBrowser MCP server...")
        try:
            if session_manager:
                await session_manager.close()
            logger.info("CloudBrowser MCP server shut down successfully")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)


# Initialize the MCP server
mcp = FastMCP(
    name="CloudBrowser MCP",
    instructions="""
    This server controls a remote cloud browser.

    Use cloudbrowser_navigate to open a page, then cloudbrowser_get_text,
    cloudbrowser_click, cloudbrowser_fill and cloudbrowser_evaluate to read
    and interact with it. All tools share one browser session, which is
    created on the first tool call.

    cloudbrowser_screenshot stores the image as a screenshot://<name>
    resource that can be listed and read later.
    """,
    lifespan=lifespan_context,
)

# Register MCP request/response logging middleware
# Logs all client MCP requests and responses with "CLIENT_MCP" prefix for easy filtering
mcp.add_middleware(
    MCPLoggingMiddleware(log_request_params=True, log_response_data=False, max_log_length=5000)
)


# =============================================================================
# TOOL PLUMBING
# =============================================================================


def _register_tool(name: str) -> Callable[[Callable[..., Any]], FunctionTool]:
    """
    Register a function as the MCP tool described by registry entry `name`.

    The advertised input schema is the registry's, verbatim.
    """
    descriptor = get_tool(name)
    if descriptor is None:
        raise ValueError(f"Tool '{name}' is not in the tool registry")

    def decorator(fn: Callable[..., Any]) -> FunctionTool:
        tool = FunctionTool.from_function(
            fn,
            name=descriptor.name,
            description=descriptor.description,
            output_schema=None,
        )
        tool = tool.model_copy(update={"parameters": descriptor.schema()})
        mcp.add_tool(tool)
        return tool

    return decorator


def _read_screenshot_bytes(uri: str) -> bytes:
    """Decoded PNG of the screenshot at `uri`; raises ResourceNotFoundError if absent"""
    return base64.b64decode(screenshot_catalog.read(uri))


def _screenshot_reader(uri: str) -> Callable[[], Awaitable[bytes]]:
    async def read_screenshot() -> bytes:
        return _read_screenshot_bytes(uri)

    return read_screenshot


def _publish_screenshot_resources() -> None:
    """
    Register a listable resource for every catalog entry not yet published.

    Entries are published one by one; a failure is logged and retried on the
    next call without holding back the remaining entries.
    """
    for entry in screenshot_catalog.list():
        uri = entry["uri"]
        if uri in _published_screenshot_uris:
            continue
        try:
            mcp.add_resource(
                FunctionResource.from_function(
                    fn=_screenshot_reader(uri),
                    uri=uri,
                    name=entry["name"],
                    mime_type=entry["mimeType"],
                )
            )
        except Exception as e:
            logger.error(f"Failed to publish resource {uri}: {e}", exc_info=True)
            continue
        _published_screenshot_uris.add(uri)
        logger.info(f"Published resource {uri}")


async def _notify_resources_changed(ctx: Context | None) -> None:
    _publish_screenshot_resources()
    if ctx is not None:
        await ctx.session.send_resource_list_changed()


async def _call_cloudbrowser_tool(
    tool_name: str, arguments: dict[str, Any], ctx: Context | None = None
) -> list[TextContent | ImageContent]:
    """
    Run a tool through the dispatcher.

    Args:
        tool_name: Registry name of the tool
        arguments: Tool arguments
        ctx: Request context, used to notify the client about new resources

    Returns:
        Content items of a successful result

    Raises:
        ToolError: With the envelope text when the tool reported an error,
            which MCP clients receive as a result with isError set
    """
    if not dispatcher:
        raise RuntimeError("Tool dispatcher not initialized")

    async def notify() -> None:
        await _notify_resources_changed(ctx)

    result = await dispatcher.dispatch(tool_name, arguments, notify_resources_changed=notify)
    if result.is_error:
        raise ToolError(result.text)
    return result.content


# =============================================================================
# NAVIGATION TOOLS
# =============================================================================


@_register_tool(registry.NAVIGATE)
@log_tool_result(logger)
async def cloudbrowser_navigate(ctx: Context, url: str) -> list[TextContent | ImageContent]:
    """Navigate the browser page to a URL."""
    return await _call_cloudbrowser_tool(registry.NAVIGATE, {"url": url}, ctx)


@_register_tool(registry.GET_CURRENT_URL)
@log_tool_result(logger)
async def cloudbrowser_get_current_url(ctx: Context) -> list[TextContent | ImageContent]:
    """Return the URL of the browser page."""
    return await _call_cloudbrowser_tool(registry.GET_CURRENT_URL, {}, ctx)


# =============================================================================
# CODE EXECUTION TOOLS
# =============================================================================


@_register_tool(registry.EVALUATE)
@log_tool_result(logger)
async def cloudbrowser_evaluate(ctx: Context, script: str) -> list[TextContent | ImageContent]:
    """Evaluate a JavaScript expression or function in the page."""
    return await _call_cloudbrowser_tool(registry.EVALUATE, {"script": script}, ctx)


# =============================================================================
# SCREENSHOT TOOLS
# =============================================================================


@_register_tool(registry.SCREENSHOT)
@log_tool_result(logger)
async def cloudbrowser_screenshot(
    ctx: Context, name: str = registry.DEFAULT_SCREENSHOT_NAME
) -> list[TextContent | ImageContent]:
    """Capture the visible viewport and store it as screenshot://<name>."""
    return await _call_cloudbrowser_tool(registry.SCREENSHOT, {"name": name}, ctx)


# =============================================================================
# INTERACTION TOOLS
# =============================================================================


@_register_tool(registry.CLICK)
@log_tool_result(logger)
async def cloudbrowser_click(ctx: Context, selector: str) -> list[TextContent | ImageContent]:
    """Click the element matching a CSS selector."""
    return await _call_cloudbrowser_tool(registry.CLICK, {"selector": selector}, ctx)


@_register_tool(registry.FILL)
@log_tool_result(logger)
async def cloudbrowser_fill(
    ctx: Context, selector: str, value: str
) -> list[TextContent | ImageContent]:
    """Wait for an input field and type a value into it."""
    return await _call_cloudbrowser_tool(
        registry.FILL, {"selector": selector, "value": value}, ctx
    )


# =============================================================================
# EXTRACTION TOOLS
# =============================================================================


@_register_tool(registry.GET_TEXT)
@log_tool_result(logger)
async def cloudbrowser_get_text(ctx: Context) -> list[TextContent | ImageContent]:
    """Return the visible text of the page without inline CSS noise."""
    return await _call_cloudbrowser_tool(registry.GET_TEXT, {}, ctx)


# =============================================================================
# RESOURCES
# =============================================================================


@mcp.resource("screenshot://{name}", mime_type=SCREENSHOT_MIME_TYPE)
async def get_screenshot(name: str) -> bytes:
    """Get a stored screenshot as PNG"""
    # Template matching may hand over the name still percent-encoded
    return _read_screenshot_bytes(screenshot_uri(unquote(name)))


@mcp.resource("cloudbrowser://status")
async def get_cloudbrowser_status() -> str:
    """Get the current browser session status"""
    if session_manager is None:
        return "CloudBrowser MCP is not initialized"
    state = "connected" if session_manager.session else "not connected"
    return f"CloudBrowser MCP is running (session: {state}, screenshots: {len(screenshot_catalog)})"


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Run the MCP server"""
    logger.info("Initializing CloudBrowser MCP Server...")
    mcp.run()


if __name__ == "__main__":
    main()
