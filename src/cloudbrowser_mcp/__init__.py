"""
CloudBrowser MCP

An MCP server that drives a remote cloud browser: navigation, script
evaluation, clicks, form filling, text extraction and screenshots published
as MCP resources.
"""

__version__ = "0.1.0"
