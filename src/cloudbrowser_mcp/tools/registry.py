"""
Tool registry

Static descriptions of the tools this server exposes. Purely descriptive:
the behaviour lives in the dispatcher.
"""

import copy
from dataclasses import dataclass
from typing import Any

from ..types import ToolInputSchema

NAVIGATE = "cloudbrowser_navigate"
EVALUATE = "cloudbrowser_evaluate"
GET_CURRENT_URL = "cloudbrowser_get_current_url"
SCREENSHOT = "cloudbrowser_screenshot"
CLICK = "cloudbrowser_click"
FILL = "cloudbrowser_fill"
GET_TEXT = "cloudbrowser_get_text"

DEFAULT_SCREENSHOT_NAME = "screenshot"


@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description and JSON input schema of one tool"""

    name: str
    description: str
    input_schema: ToolInputSchema

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    def schema(self) -> ToolInputSchema:
        """Copy of the input schema, safe to hand to callers"""
        return copy.deepcopy(self.input_schema)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.schema()}


def _object_schema(properties: dict[str, Any], required: list[str]) -> ToolInputSchema:
    return {"type": "object", "properties": properties, "required": required}


TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name=NAVIGATE,
        description="Navigate to a URL",
        input_schema=_object_schema({"url": {"type": "string"}}, ["url"]),
    ),
    ToolDescriptor(
        name=EVALUATE,
        description="Evaluate JavaScript in the browser",
        input_schema=_object_schema({"script": {"type": "string"}}, ["script"]),
    ),
    ToolDescriptor(
        name=GET_CURRENT_URL,
        description="Retrieve the current URL of the browser page",
        input_schema=_object_schema({}, []),
    ),
    ToolDescriptor(
        name=SCREENSHOT,
        description=(
            "Takes a screenshot of the current page. Use this tool to learn where you are "
            "on the page when controlling the browser. Only use this tool when the other "
            "tools are not sufficient to get the information you need."
        ),
        input_schema=_object_schema(
            {
                "name": {
                    "type": "string",
                    "description": "Name of the screenshot",
                    "default": DEFAULT_SCREENSHOT_NAME,
                }
            },
            [],
        ),
    ),
    ToolDescriptor(
        name=CLICK,
        description="Click an element on the page",
        input_schema=_object_schema(
            {"selector": {"type": "string", "description": "CSS selector for element to click"}},
            ["selector"],
        ),
    ),
    ToolDescriptor(
        name=FILL,
        description="Fill out an input field",
        input_schema=_object_schema(
            {
                "selector": {"type": "string", "description": "CSS selector for input field"},
                "value": {"type": "string", "description": "Value to fill"},
            },
            ["selector", "value"],
        ),
    ),
    ToolDescriptor(
        name=GET_TEXT,
        description="Extract all text content from the current page",
        input_schema=_object_schema({}, []),
    ),
)

_TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}


def get_tool(name: str) -> ToolDescriptor | None:
    """Look up a tool descriptor by name"""
    return _TOOLS_BY_NAME.get(name)


def tool_names() -> list[str]:
    return [tool.name for tool in TOOLS]
