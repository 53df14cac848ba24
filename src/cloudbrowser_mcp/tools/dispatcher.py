"""
Tool dispatcher

Maps tool names to browser actions on the shared session and turns every
outcome into a uniform ToolResultEnvelope. dispatch() never raises: tool
handlers raise ToolExecutionError with a caller-facing message, and one
adapter in dispatch() converts any failure into an error envelope.
"""

import base64
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from mcp.types import ImageContent, TextContent
from playwright.async_api import Page

from ..catalog import SCREENSHOT_MIME_TYPE, ScreenshotCatalog
from ..cloud.session_manager import SessionManager
from ..exceptions import ToolExecutionError, UnknownToolError
from ..utils.logging_config import get_logger
from . import registry
from .text_filter import clean_page_text

logger = get_logger(__name__)

ResourcesChangedCallback = Callable[[], Awaitable[None]]
ToolHandler = Callable[[Page, dict[str, Any], ResourcesChangedCallback | None], Awaitable["ToolResultEnvelope"]]


@dataclass
class ToolResultEnvelope:
    """Envelope returned for every tool call"""

    content: list[TextContent | ImageContent] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> "ToolResultEnvelope":
        return cls(content=[TextContent(type="text", text=text)], is_error=is_error)

    @classmethod
    def error(cls, text: str) -> "ToolResultEnvelope":
        return cls.from_text(text, is_error=True)

    @property
    def text(self) -> str:
        """Text of all text items, joined by newlines"""
        return "\n".join(item.text for item in self.content if isinstance(item, TextContent))


class ToolDispatcher:
    """Runs tool calls against the session held by a SessionManager"""

    def __init__(self, session_manager: SessionManager, catalog: ScreenshotCatalog) -> None:
        self.session_manager = session_manager
        self.catalog = catalog
        self._handlers: dict[str, ToolHandler] = {
            registry.NAVIGATE: self._navigate,
            registry.EVALUATE: self._evaluate,
            registry.GET_CURRENT_URL: self._get_current_url,
            registry.SCREENSHOT: self._screenshot,
            registry.CLICK: self._click,
            registry.FILL: self._fill,
            registry.GET_TEXT: self._get_text,
        }

    async def dispatch(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        notify_resources_changed: ResourcesChangedCallback | None = None,
    ) -> ToolResultEnvelope:
        """
        Execute a tool call.

        Args:
            name: Tool name (see registry.TOOLS)
            arguments: Tool arguments, passed through without validation
            notify_resources_changed: Awaited after a screenshot was stored

        Returns:
            ToolResultEnvelope; is_error is set instead of raising on any failure
        """
        arguments = arguments or {}
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)

            session = await self.session_manager.ensure()
            return await handler(session.page, arguments, notify_resources_changed)

        except (ToolExecutionError, UnknownToolError) as e:
            logger.warning(f"Tool {name} failed: {e}")
            return ToolResultEnvelope.error(str(e))
        except Exception as e:
            # Provisioning and liveness failures end up here as well
            logger.error(f"Failed to handle tool call {name}: {e}", exc_info=True)
            return ToolResultEnvelope.error(f"Failed to handle tool call: {e}")

    async def _navigate(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        url = arguments.get("url")
        try:
            await page.goto(url)
        except Exception as e:
            raise ToolExecutionError(f"Failed to navigate to {url}: {e}") from e
        return ToolResultEnvelope.from_text(f"Navigated to {url}")

    async def _evaluate(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        script = arguments.get("script")
        try:
            result = await page.evaluate(script)
        except Exception as e:
            raise ToolExecutionError(f"Failed to evaluate script: {script}: {e}") from e
        return ToolResultEnvelope.from_text(f"Evaluated script: {json.dumps(result, default=str)}")

    async def _get_current_url(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        return ToolResultEnvelope.from_text(f"Current URL: {page.url}")

    async def _screenshot(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        name = arguments.get("name") or registry.DEFAULT_SCREENSHOT_NAME
        data = await page.screenshot(full_page=False, type="png")
        if not data:
            raise ToolExecutionError("Screenshot failed")

        blob = base64.b64encode(data).decode("ascii")
        self.catalog.put(name, blob)
        logger.info(f"Stored screenshot '{name}' ({len(data)} bytes)")

        if notify is not None:
            try:
                await notify()
            except Exception as e:
                logger.warning(f"Failed to send resource list change notification: {e}")

        return ToolResultEnvelope(
            content=[
                TextContent(type="text", text=f"Screenshot taken: {name}"),
                ImageContent(type="image", data=blob, mimeType=SCREENSHOT_MIME_TYPE),
            ]
        )

    async def _click(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        selector = arguments.get("selector")
        try:
            await page.click(selector)
        except Exception as e:
            raise ToolExecutionError(f"Failed to click {selector}: {e}") from e
        return ToolResultEnvelope.from_text(f"Clicked: {selector}")

    async def _fill(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        selector = arguments.get("selector")
        value = arguments.get("value")
        try:
            await page.wait_for_selector(selector)
            await page.type(selector, value)
        except Exception as e:
            raise ToolExecutionError(f"Failed to fill {selector}: {e}") from e
        return ToolResultEnvelope.from_text(f"Filled {selector} with: {value}")

    async def _get_text(
        self, page: Page, arguments: dict[str, Any], notify: ResourcesChangedCallback | None
    ) -> ToolResultEnvelope:
        try:
            body_text = await page.evaluate("() => document.body.innerText")
        except Exception as e:
            raise ToolExecutionError(f"Failed to extract content: {e}") from e
        return ToolResultEnvelope.from_text(f"Extracted content:\n{clean_page_text(body_text or '')}")
