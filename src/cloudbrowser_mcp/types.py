"""
Type Definitions

Define TypedDict classes for the provisioning service payloads and the
screenshot resources published by the server.
"""

from typing import Any, TypedDict


class ProvisioningData(TypedDict, total=False):
    """Payload of a successful session start."""

    browserUrl: str


class ProvisioningResponse(TypedDict, total=False):
    """
    Response body of ``POST /v2/cloudbrowser/api/session/start``.

    Only ``code == 200`` with a non-empty ``data.browserUrl`` counts as success.
    """

    code: int
    data: ProvisioningData | None
    message: str | None


class ScreenshotResourceInfo(TypedDict):
    """Listing entry for a stored screenshot."""

    uri: str  # screenshot://<name>
    mimeType: str  # always image/png
    name: str  # "Screenshot: <name>"


class ToolInputSchema(TypedDict, total=False):
    """JSON Schema object describing a tool's arguments."""

    type: str
    properties: dict[str, Any]
    required: list[str]
