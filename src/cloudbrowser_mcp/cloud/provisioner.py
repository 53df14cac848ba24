"""
Remote session provisioner

Asks the cloud browser service to start (or resume) a browser session and
returns the CDP WebSocket endpoint of that browser.
"""

import json
from typing import Any

import aiohttp

from ..exceptions import ProvisioningError
from ..types import ProvisioningResponse
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

START_SESSION_PATH = "/v2/cloudbrowser/api/session/start"


def _extract_browser_url(payload: ProvisioningResponse | Any) -> str:
    """Return data.browserUrl from a session start response or raise ProvisioningError."""
    if isinstance(payload, dict) and payload.get("code") == 200:
        data = payload.get("data")
        if isinstance(data, dict):
            browser_url = data.get("browserUrl")
            if isinstance(browser_url, str) and browser_url:
                return browser_url

    raise ProvisioningError(f"Failed to get browserUrl. Response: {json.dumps(payload, default=str)}")


class SessionProvisioner:
    """Single-shot client for the session start endpoint (no retry, no caching)"""

    def __init__(self, api_base_url: str, api_key: str, session_id: str) -> None:
        """
        Args:
            api_base_url: Base URL of the provisioning service
            api_key: API credential, sent as the apiKey query parameter
            session_id: Session identifier, sent as the sessionId query parameter
        """
        self.api_base_url = api_base_url.rstrip("/")
        self.session_id = session_id
        self._api_key = api_key

    @property
    def start_url(self) -> str:
        return f"{self.api_base_url}{START_SESSION_PATH}"

    async def start_session(self) -> str:
        """
        Request a remote browser for the configured session.

        Returns:
            The browser's connection endpoint (WebSocket URL)

        Raises:
            ProvisioningError: On transport failure, non-2xx status or a
                response without a browserUrl
        """
        params = {"apiKey": self._api_key, "sessionId": self.session_id}
        logger.info(f"Requesting remote browser: POST {self.start_url} (session: {self.session_id})")

        try:
            async with aiohttp.ClientSession() as http:
                async with http.post(
                    self.start_url,
                    params=params,
                    json={},
                    headers={"Content-Type": "application/json"},
                ) as response:
                    if not 200 <= response.status < 300:
                        body = await response.text()
                        logger.error(
                            f"Session start failed with HTTP {response.status}: {body[:500]}"
                        )
                        raise ProvisioningError(f"HTTP error! status: {response.status}", body=body)

                    payload: ProvisioningResponse = await response.json(content_type=None)

        except aiohttp.ClientError as e:
            logger.error(f"Error fetching browserUrl: {type(e).__name__}: {e}")
            raise ProvisioningError(f"Failed to reach provisioning service: {e}") from e
        except ValueError as e:
            logger.error(f"Error decoding session start response: {e}")
            raise ProvisioningError(f"Invalid JSON in session start response: {e}") from e

        try:
            browser_url = _extract_browser_url(payload)
        except ProvisioningError as e:
            logger.error(f"Error fetching browserUrl: {e}")
            raise

        logger.info(f"Remote browser ready for session '{self.session_id}'")
        return browser_url
