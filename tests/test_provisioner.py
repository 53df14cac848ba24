"""
Tests for the session provisioner

Runs against a local aiohttp test server standing in for the cloud browser
service.
"""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from cloudbrowser_mcp.cloud.provisioner import (
    START_SESSION_PATH,
    SessionProvisioner,
    _extract_browser_url,
)
from cloudbrowser_mcp.exceptions import ProvisioningError

BROWSER_URL = "ws://remote-browser.example/devtools/browser/abc123"


def _make_app(status=200, payload=None, text=None, requests=None):
    """Build a fake provisioning service that answers every start request the same way"""

    async def start_session(request):
        if requests is not None:
            requests.append(
                {
                    "method": request.method,
                    "query": dict(request.query),
                    "body": await request.text(),
                }
            )
        if text is not None:
            return web.Response(status=status, text=text)
        return web.json_response(payload, status=status)

    app = web.Application()
    app.router.add_post(START_SESSION_PATH, start_session)
    return app


def _base_url(server: TestServer) -> str:
    return str(server.make_url("")).rstrip("/")


class TestExtractBrowserUrl:
    def test_success(self):
        payload = {"code": 200, "data": {"browserUrl": BROWSER_URL}}

        assert _extract_browser_url(payload) == BROWSER_URL

    @pytest.mark.parametrize(
        "payload",
        [
            {"code": 500, "data": {"browserUrl": BROWSER_URL}, "message": "quota exceeded"},
            {"code": 200, "data": {}},
            {"code": 200, "data": {"browserUrl": ""}},
            {"code": 200},
            ["not", "an", "object"],
        ],
    )
    def test_rejected_payloads(self, payload):
        with pytest.raises(ProvisioningError, match="Failed to get browserUrl. Response:"):
            _extract_browser_url(payload)


class TestSessionProvisioner:
    """Tests for SessionProvisioner.start_session()."""

    def test_start_url(self):
        provisioner = SessionProvisioner("http://api.example/", "key", "sess")

        assert provisioner.start_url == "http://api.example/v2/cloudbrowser/api/session/start"

    @pytest.mark.asyncio
    async def test_start_session_success(self):
        requests = []
        app = _make_app(payload={"code": 200, "data": {"browserUrl": BROWSER_URL}}, requests=requests)

        async with TestServer(app) as server:
            provisioner = SessionProvisioner(_base_url(server), "secret-key", "session-42")
            endpoint = await provisioner.start_session()

        assert endpoint == BROWSER_URL
        assert len(requests) == 1
        assert requests[0]["method"] == "POST"
        assert requests[0]["query"] == {"apiKey": "secret-key", "sessionId": "session-42"}
        assert requests[0]["body"] == "{}"

    @pytest.mark.asyncio
    async def test_non_2xx_status_includes_body(self):
        app = _make_app(status=403, text="invalid api key")

        async with TestServer(app) as server:
            provisioner = SessionProvisioner(_base_url(server), "bad-key", "session-42")
            with pytest.raises(ProvisioningError) as exc_info:
                await provisioner.start_session()

        assert exc_info.value.message == "HTTP error! status: 403"
        assert exc_info.value.body == "invalid api key"
        assert "invalid api key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_application_error_code(self):
        app = _make_app(payload={"code": 401, "message": "session expired"})

        async with TestServer(app) as server:
            provisioner = SessionProvisioner(_base_url(server), "key", "session-42")
            with pytest.raises(ProvisioningError, match="session expired"):
                await provisioner.start_session()

    @pytest.mark.asyncio
    async def test_missing_browser_url(self):
        app = _make_app(payload={"code": 200, "data": {"status": "starting"}})

        async with TestServer(app) as server:
            provisioner = SessionProvisioner(_base_url(server), "key", "session-42")
            with pytest.raises(ProvisioningError, match="Failed to get browserUrl"):
                await provisioner.start_session()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        app = _make_app(text="<html>gateway</html>")

        async with TestServer(app) as server:
            provisioner = SessionProvisioner(_base_url(server), "key", "session-42")
            with pytest.raises(ProvisioningError, match="Invalid JSON"):
                await provisioner.start_session()

    @pytest.mark.asyncio
    async def test_unreachable_service(self):
        provisioner = SessionProvisioner("http://127.0.0.1:1", "key", "session-42")

        with pytest.raises(ProvisioningError, match="Failed to reach provisioning service"):
            await provisioner.start_session()

    @pytest.mark.asyncio
    async def test_api_key_not_logged(self, caplog):
        app = _make_app(payload={"code": 200, "data": {"browserUrl": BROWSER_URL}})

        with caplog.at_level("DEBUG", logger="cloudbrowser_mcp"):
            async with TestServer(app) as server:
                provisioner = SessionProvisioner(_base_url(server), "super-secret-key", "session-42")
                await provisioner.start_session()

        messages = [
            record.getMessage()
            for record in caplog.records
            if record.name.startswith("cloudbrowser_mcp")
        ]
        assert messages
        assert not any("super-secret-key" in message for message in messages)
