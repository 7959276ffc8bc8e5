"""Registry of every Bitbucket tool: its published schema and MCP registration."""

from __future__ import annotations

from typing import Dict, List

from mcp.server.fastmcp import FastMCP

from core.context import ToolContext
from core.models import ToolSpec
from tools import code_search, glob_files, list_projects, read_file, search_repositories

TOOL_MODULES = (
    list_projects,
    search_repositories,
    code_search,
    read_file,
    glob_files,
)

TOOL_SPECS: List[ToolSpec] = [m.SPEC for m in TOOL_MODULES]


def specs_by_name() -> Dict[str, ToolSpec]:
    return {spec.name: spec for spec in TOOL_SPECS}


def register_all(mcp: FastMCP, *, context: ToolContext) -> None:
    for module in TOOL_MODULES:
        module.register(mcp, context=context)
