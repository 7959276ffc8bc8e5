"""MCP tool that lists Bitbucket projects.

Registers the 'list_projects' tool: one page of projects from the server,
optionally narrowed client-side by a regex (or substring) over project
name, key and description.
"""

from __future__ import annotations

import re
from typing import Any, AsyncGenerator, Callable, Dict, List, Mapping, Optional

from mcp.server.fastmcp import FastMCP

from clients.bitbucket.client import API_PREFIX
from clients.bitbucket.inputs import check_page_alignment, normalize_limit, normalize_offset, optional_text
from core.context import ToolContext
from core.events import DoneEvent, ErrorEvent, ToolEvent, drive, guarded, progress
from core.models import ProjectSummary, ToolSpec

TOOL_NAME = "list_projects"
DEFAULT_LIMIT = 30

DESCRIPTION = """
List projects from Bitbucket.

WHEN TO USE THIS TOOL:
- When you need to find projects in Bitbucket
- When you need project metadata (key, name, description)
- Before searching repositories, to understand the project structure

PARAMETERS:
- pattern: Optional regex matched against project names, keys and descriptions
  (case-insensitive, falls back to substring match if the regex is invalid)
- limit: Maximum number of projects to return (default: 30, max: 100)
- offset: Number of results to skip (must be divisible by limit)

RESULT STRUCTURE:
- projects: key, name, description (may be null), isPublic, type
- totalCount: total number of projects reported by the server
- filteredCount: number of projects left after applying pattern
""".strip()

SPEC = ToolSpec(
    name=TOOL_NAME,
    description=DESCRIPTION,
    input_schema={
        "type": "object",
        "properties": {
            "pattern": {
                "type": "string",
                "description": "Optional regex pattern to match in project names, keys, or descriptions (case-insensitive)",
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of projects to return (default: 30, max: 100)",
                "minimum": 1,
                "maximum": 100,
            },
            "offset": {
                "type": "number",
                "description": "Number of results to skip for pagination (default: 0). Must be divisible by limit.",
                "minimum": 0,
            },
        },
        "required": [],
    },
)


def project_matcher(pattern: str) -> Callable[[Mapping[str, Any]], bool]:
    """Case-insensitive regex over name/key/description, substring if the regex is invalid."""
    try:
        regex = re.compile(pattern, re.IGNORECASE)

        def test(text: str) -> bool:
            return regex.search(text) is not None
    except re.error:
        needle = pattern.lower()

        def test(text: str) -> bool:
            return needle in text.lower()

    def matches(project: Mapping[str, Any]) -> bool:
        fields = (project.get("name"), project.get("key"), project.get("description"))
        return any(test(str(f)) for f in fields if f)

    return matches


async def _execute(
    *,
    pattern: Optional[str],
    limit: int,
    offset: int,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    limit_clean = normalize_limit(limit, default=DEFAULT_LIMIT)
    offset_clean = normalize_offset(offset)
    check_page_alignment(offset_clean, limit_clean)
    pattern_clean = optional_text(pattern)

    config = await context.resolve_config()

    suffix = f' matching "{pattern_clean}"' if pattern_clean else ""
    yield progress(f"Fetching projects{suffix}...")

    response = await context.request(
        f"{API_PREFIX}/projects",
        config=config,
        params={"limit": limit_clean, "start": offset_clean},
    )
    if not response.ok or not response.data:
        yield ErrorEvent(
            message=f"Failed to fetch projects: {response.status} {response.status_text or 'Unknown error'}"
        )
        return

    projects: List[Mapping[str, Any]] = list(response.data.get("values") or [])
    if pattern_clean:
        matches = project_matcher(pattern_clean)
        projects = [p for p in projects if matches(p)]

    results = [ProjectSummary.from_api(p).to_dict() for p in projects]
    result: Dict[str, Any] = {
        "projects": results,
        # Server-reported size describes the unfiltered page
        "totalCount": response.data.get("size") or len(results),
        "filteredCount": len(results),
    }
    yield DoneEvent(result=result)


def run(
    *,
    pattern: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    return guarded(
        _execute(pattern=pattern, limit=limit, offset=offset, context=context),
        error_prefix="Error fetching projects",
        token=context.token,
    )


def register(mcp: FastMCP, *, context: ToolContext) -> None:
    @mcp.tool(name=TOOL_NAME, description=DESCRIPTION)
    async def list_projects(
        pattern: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """List Bitbucket projects, optionally filtered by a regex pattern.

        Returns:
          {"projects": [...], "totalCount": int, "filteredCount": int}

        Raises:
          ToolExecutionError when validation or the Bitbucket request fails.
        """
        ctx = context.for_invocation()
        return await drive(
            run(pattern=pattern, limit=limit, offset=offset, context=ctx),
            token=ctx.token,
            tool_name=TOOL_NAME,
        )
