"""
Pytest Configuration and Fixtures

This module provides shared fixtures for all tests.
"""

from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from cloudbrowser_mcp.catalog import ScreenshotCatalog
from cloudbrowser_mcp.tools.dispatcher import ToolDispatcher

# Smallest valid PNG header, enough to stand in for screenshot bytes
FAKE_PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def cloudbrowser_env(monkeypatch):
    """Set the credentials the server requires at startup."""
    monkeypatch.setenv("SESSION_ID", "test-session")
    monkeypatch.setenv("API_KEY", "test-api-key")
    monkeypatch.delenv("CLOUDBROWSER_API_BASE_URL", raising=False)
    monkeypatch.delenv("CLOUDBROWSER_REPROVISION_ON_PROBE_FAILURE", raising=False)


@pytest.fixture
def fake_png():
    """Bytes returned by mock_page.screenshot()"""
    return FAKE_PNG


@pytest.fixture
def mock_page():
    """
    Create a mock Playwright page for unit testing.

    Every browser action succeeds by default; tests override individual
    AsyncMocks with side effects to simulate failures.
    """
    page = MagicMock()
    page.url = "https://example.com/"
    page.goto = AsyncMock(return_value=None)
    page.evaluate = AsyncMock(return_value=None)
    page.screenshot = AsyncMock(return_value=FAKE_PNG)
    page.click = AsyncMock(return_value=None)
    page.wait_for_selector = AsyncMock(return_value=None)
    page.type = AsyncMock(return_value=None)
    return page


@pytest.fixture
def mock_session_manager(mock_page):
    """
    Create a mock session manager whose ensure() yields a session on mock_page.
    """
    session = Mock()
    session.page = mock_page

    manager = Mock()
    manager.session = session
    manager.ensure = AsyncMock(return_value=session)
    manager.close = AsyncMock()
    return manager


@pytest.fixture
def catalog():
    """Provide an empty screenshot catalog."""
    return ScreenshotCatalog()


@pytest.fixture
def dispatcher(mock_session_manager, catalog):
    """Provide a dispatcher wired to the mock session manager."""
    return ToolDispatcher(mock_session_manager, catalog)
