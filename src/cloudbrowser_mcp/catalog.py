"""
Screenshot catalog

In-memory store of named screenshots (base64 PNG), addressable as
``screenshot://<name>`` resources. Entries live for the lifetime of the
process; a screenshot stored under an existing name replaces it.

Names are percent-encoded in URIs (``my shot`` -> ``screenshot://my%20shot``)
so that every name yields a valid URI and decodes back to itself.
"""

from urllib.parse import quote, unquote

from .exceptions import ResourceNotFoundError
from .types import ScreenshotResourceInfo

SCREENSHOT_SCHEME = "screenshot"
SCREENSHOT_URI_PREFIX = f"{SCREENSHOT_SCHEME}://"
SCREENSHOT_MIME_TYPE = "image/png"


def screenshot_uri(name: str) -> str:
    return f"{SCREENSHOT_URI_PREFIX}{quote(name, safe='')}"


def parse_screenshot_uri(uri: str) -> str | None:
    """Return the screenshot name in a screenshot:// URI, or None for any other URI"""
    if not uri.startswith(SCREENSHOT_URI_PREFIX):
        return None
    return unquote(uri[len(SCREENSHOT_URI_PREFIX):])


class ScreenshotCatalog:
    """Mapping of screenshot name to base64-encoded PNG data"""

    def __init__(self) -> None:
        self._screenshots: dict[str, str] = {}

    def put(self, name: str, blob: str) -> bool:
        """
        Store a screenshot, replacing any previous one with the same name.

        Returns:
            True if the name was not in the catalog before
        """
        is_new = name not in self._screenshots
        self._screenshots[name] = blob
        return is_new

    def get(self, name: str) -> str | None:
        return self._screenshots.get(name)

    def names(self) -> list[str]:
        return list(self._screenshots)

    def list(self) -> list[ScreenshotResourceInfo]:
        """Resource listing entries, one per stored screenshot"""
        return [
            {
                "uri": screenshot_uri(name),
                "mimeType": SCREENSHOT_MIME_TYPE,
                "name": f"Screenshot: {name}",
            }
            for name in self._screenshots
        ]

    def read(self, uri: str) -> str:
        """
        Resolve a screenshot:// URI to its base64 data.

        Raises:
            ResourceNotFoundError: For a non-screenshot URI or an unknown name
        """
        name = parse_screenshot_uri(uri)
        blob = self._screenshots.get(name) if name is not None else None
        if blob is None:
            raise ResourceNotFoundError(uri)
        return blob

    def __len__(self) -> int:
        return len(self._screenshots)

    def __contains__(self, name: object) -> bool:
        return name in self._screenshots
