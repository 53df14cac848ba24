"""
Browser session manager

Holds the single remote browser session shared by every tool call. The
session is created lazily on first use and checked with a cheap liveness
probe on every later use.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..exceptions import SessionLivenessError
from ..utils.logging_config import get_logger
from .provisioner import SessionProvisioner

logger = get_logger(__name__)

SESSION_NAME = "default"

# Trivial read-only expression used to check that the page is still reachable
LIVENESS_PROBE = "() => document.title"


@dataclass
class BrowserSession:
    """A connected remote browser and the page all tools act on"""

    browser: Browser
    page: Page


class SessionManager:
    """
    Owns the zero-or-one remote browser session.

    The slot is only replaced after a complete provision/connect/page round
    trip, and all access goes through an asyncio.Lock so overlapping tool calls
    never provision twice.
    """

    def __init__(
        self,
        provisioner: SessionProvisioner,
        reprovision_on_probe_failure: bool = True,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        """
        Args:
            provisioner: Hands out the remote browser endpoint
            reprovision_on_probe_failure: Replace a session whose liveness probe
                fails instead of raising SessionLivenessError
            playwright_factory: Returns a Playwright context manager (async_playwright)
        """
        self.provisioner = provisioner
        self.reprovision_on_probe_failure = reprovision_on_probe_failure
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._session: BrowserSession | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> BrowserSession | None:
        """The currently held session, if any"""
        return self._session

    async def ensure(self) -> BrowserSession:
        """
        Return a usable session, creating one if needed.

        Raises:
            ProvisioningError: If a new remote browser could not be obtained
            SessionLivenessError: If the held session is dead and
                reprovision_on_probe_failure is disabled
        """
        async with self._lock:
            if self._session is None:
                self._session = await self._create_session()
                return self._session

            try:
                await self._session.page.evaluate(LIVENESS_PROBE)
            except Exception as e:
                if not self.reprovision_on_probe_failure:
                    logger.error(f"Liveness probe failed for session '{SESSION_NAME}': {e}")
                    raise SessionLivenessError(
                        f"Browser session '{SESSION_NAME}' is no longer reachable: {e}"
                    ) from e

                logger.warning(
                    f"Liveness probe failed for session '{SESSION_NAME}', re-provisioning: {e}"
                )
                await self._disconnect(self._session)
                self._session = None
                self._session = await self._create_session()

            return self._session

    async def close(self) -> None:
        """Disconnect from the remote browser and stop the Playwright driver"""
        async with self._lock:
            if self._session is not None:
                await self._disconnect(self._session)
                self._session = None

            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except Exception as e:
                    logger.error(f"Error stopping Playwright driver: {e}", exc_info=True)
                finally:
                    self._playwright = None

    async def _create_session(self) -> BrowserSession:
        logger.info(f"Creating browser session '{SESSION_NAME}'...")
        endpoint = await self.provisioner.start_session()

        playwright = await self._get_playwright()
        browser = await playwright.chromium.connect_over_cdp(endpoint)
        try:
            page = await self._select_page(browser)
        except Exception as e:
            logger.error(f"Failed to open a page on browser session '{SESSION_NAME}': {e}")
            await self._close_browser(browser)
            raise

        logger.info(f"Browser session '{SESSION_NAME}' connected (page: {page.url})")
        return BrowserSession(browser=browser, page=page)

    async def _get_playwright(self) -> Playwright:
        if self._playwright is None:
            logger.info("Starting Playwright driver")
            self._playwright = await self._playwright_factory().start()
        return self._playwright

    @staticmethod
    async def _select_page(browser: Browser) -> Page:
        """First page of the first context that has one, else a fresh page"""
        for context in browser.contexts:
            if context.pages:
                return context.pages[0]

        context = browser.contexts[0] if browser.contexts else await browser.new_context()
        return await context.new_page()

    @classmethod
    async def _disconnect(cls, session: BrowserSession) -> None:
        await cls._close_browser(session.browser)

    @staticmethod
    async def _close_browser(browser: Browser) -> None:
        # Closing a CDP-connected browser only drops our connection; the remote browser keeps running
        try:
            await browser.close()
        except Exception as e:
            logger.warning(f"Error disconnecting browser session '{SESSION_NAME}': {e}")
