"""Allow running the server with ``python -m cloudbrowser_mcp``."""

from .server import main

main()
