"""Tool registry: each tool is a record, not a handler.

The discovery manifest and the invocation route are both derived from
`TOOLS`, so the advertised set and the invocable set cannot drift apart.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from src.core.constants import SERVICE_MESSAGE
from src.core.errors import InvalidArguments, UnknownToolError


def _empty_schema() -> Dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    upstream_path: str
    # Generic message returned to the caller when the upstream call fails
    failure_message: str
    parameters: Dict[str, Any] = field(default_factory=_empty_schema)

    def descriptor(self) -> Dict[str, Any]:
        return {"description": self.description, "parameters": self.parameters}


TOOLS: Tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="listRepos",
        description="List the authenticated user's GitHub repositories",
        upstream_path="/user/repos",
        failure_message="Failed to fetch repositories",
    ),
    ToolDefinition(
        name="getUser",
        description="Get the authenticated user's GitHub profile information",
        upstream_path="/user",
        failure_message="Failed to fetch user",
    ),
)

_BY_NAME: Dict[str, ToolDefinition] = {t.name: t for t in TOOLS}


def get_tool(name: str) -> ToolDefinition:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownToolError(f"Unknown tool: {name}") from None


def tool_names() -> List[str]:
    return [t.name for t in TOOLS]


def build_manifest(tools: Optional[Tuple[ToolDefinition, ...]] = None) -> Dict[str, Any]:
    """Build the discovery payload naming the service and every tool it serves."""
    return {
        "message": SERVICE_MESSAGE,
        "tools": {t.name: t.descriptor() for t in (TOOLS if tools is None else tools)},
    }


def manifest_json(tools: Optional[Tuple[ToolDefinition, ...]] = None) -> str:
    return json.dumps(build_manifest(tools), separators=(",", ":"))


_JSON_TYPES = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "object": dict,
    "array": list,
}


def validate_arguments(tool: ToolDefinition, arguments: Any) -> Dict[str, Any]:
    """Check `arguments` against the tool's object schema.

    Required fields must be present and declared property types must match.
    Fields the schema does not declare are dropped.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise InvalidArguments("Arguments must be a JSON object")

    schema = tool.parameters
    properties: Dict[str, Any] = schema.get("properties") or {}
    missing = [name for name in schema.get("required") or [] if name not in arguments]
    if missing:
        raise InvalidArguments(f"Missing required arguments: {', '.join(missing)}")

    accepted: Dict[str, Any] = {}
    for name, prop in properties.items():
        if name not in arguments:
            continue
        value = arguments[name]
        expected = _JSON_TYPES.get((prop or {}).get("type", ""))
        # bool is an int subclass; reject it for numeric fields
        if expected is not None and (
            not isinstance(value, expected)
            or (isinstance(value, bool) and prop.get("type") in ("integer", "number"))
        ):
            raise InvalidArguments(f"Argument '{name}' must be of type {prop['type']}")
        accepted[name] = value
    return accepted
