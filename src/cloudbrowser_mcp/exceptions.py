"""Custom exceptions for cloudbrowser-mcp."""

from fastmcp.exceptions import ResourceError


class CloudBrowserError(Exception):
    """Base exception for cloudbrowser-mcp."""

    pass


class ProvisioningError(CloudBrowserError):
    """The provisioning endpoint did not hand out a remote browser."""

    def __init__(self, message: str, body: str | None = None):
        self.message = message
        self.body = body
        super().__init__(f"{message}. Response body: {body}" if body else message)


class SessionLivenessError(CloudBrowserError):
    """The liveness probe against the held browser session failed."""

    pass


class ToolExecutionError(CloudBrowserError):
    """A browser action behind a tool failed."""

    pass


class UnknownToolError(CloudBrowserError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ResourceNotFoundError(ResourceError):
    """No screenshot resource exists for the requested URI."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Resource not found: {uri}")
