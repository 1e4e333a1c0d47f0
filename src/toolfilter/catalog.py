"""Catalog loading from files and from live MCP tool listings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import yaml
from mcp import types

from .errors import InvalidInputError
from .models import MCPServer, MCPTool
from .registry import validate_servers


def load_catalog(path: Path) -> list[MCPServer]:
    """Load servers from a JSON or YAML file.

    The file holds either a list of servers or a mapping with a ``servers`` list.

    Raises:
        InvalidInputError: The file is unreadable or structurally malformed.
    """
    try:
        with open(path) as f:
            if path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise InvalidInputError(f"Cannot read catalog {path}: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("servers")
    if not isinstance(raw, list):
        raise InvalidInputError(f"Catalog {path} must contain a list of servers")

    return validate_servers(raw)


def server_from_mcp_tools(
    server_id: str,
    tools: list[types.Tool],
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> MCPServer:
    """Convert an MCP ``list_tools`` result into a catalog server.

    Raises:
        InvalidInputError: A tool has no description.
    """
    catalog_tools = []
    for tool in tools:
        if tool.description is None:
            raise InvalidInputError(f"Tool '{tool.name}' on server '{server_id}' has no description")
        catalog_tools.append(
            MCPTool(name=tool.name, description=tool.description, input_schema=tool.inputSchema)
        )
    return MCPServer(id=server_id, name=name or server_id, description=description, tools=catalog_tools)
