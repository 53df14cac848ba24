"""Tool registry, dispatcher and page text filtering."""

from .dispatcher import ToolDispatcher, ToolResultEnvelope
from .registry import TOOLS, ToolDescriptor, get_tool, tool_names
from .text_filter import NOISE_RULES, NoiseRule, clean_page_text

__all__ = [
    "ToolDispatcher",
    "ToolResultEnvelope",
    "TOOLS",
    "ToolDescriptor",
    "get_tool",
    "tool_names",
    "NOISE_RULES",
    "NoiseRule",
    "clean_page_text",
]
