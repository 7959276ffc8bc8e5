"""MCP tool that searches Bitbucket repositories through the indexed search API.

Registers 'search_repositories'. The server's answer is returned as-is:
no client-side filtering, `totalCount` is the server count.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Dict

from mcp.server.fastmcp import FastMCP

from clients.bitbucket.inputs import normalize_limit, require_text
from clients.bitbucket.search import loggable_query, search_entity
from core.context import ToolContext
from core.events import DoneEvent, ToolEvent, drive, guarded, progress
from core.models import ToolSpec

logger = logging.getLogger(__name__)

TOOL_NAME = "search_repositories"
DEFAULT_LIMIT = 30

DESCRIPTION = """
Search for repositories across Bitbucket using keyword search.

Uses Bitbucket's indexed search to find repositories by name, slug, or
description and returns repository metadata including project information.

PARAMETERS:
- query: Keywords to match in repository name, slug, or description (required).
  Include a project name to narrow the search (e.g., "SOURCEGRAPH api").
- limit: Maximum number of results to return (default: 30, max: 100)

RESULT STRUCTURE:
- repositories: id, name, slug, description, public, archived, project,
  scmId, state, statusMessage, forkable
- totalCount: Total number of matching repositories found
""".strip()

SPEC = ToolSpec(
    name=TOOL_NAME,
    description=DESCRIPTION,
    input_schema={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Search query - keywords to match in repository name, slug, or description. Include project name to filter by project.",
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of results to return (default: 30)",
                "minimum": 1,
                "maximum": 100,
            },
        },
        "required": ["query"],
    },
)


async def _execute(*, query: str, limit: int, context: ToolContext) -> AsyncGenerator[ToolEvent, None]:
    query_clean = require_text(query, name="query")
    limit_clean = normalize_limit(limit, default=DEFAULT_LIMIT)

    logger.info(
        "Starting Bitbucket repository search: query=%r limit=%s",
        loggable_query(query_clean),
        limit_clean,
    )
    yield progress(f'Searching for repositories matching "{query_clean}"...')

    config = await context.resolve_config()
    section = await search_entity(
        context,
        config,
        query=query_clean,
        entity="repositories",
        limit=limit_clean,
        label="repository",
    )
    if section is None:
        yield DoneEvent(result={"repositories": [], "totalCount": 0})
        return

    repositories = list(section.get("values") or [])
    total = section.get("count", len(repositories))

    logger.info(
        "Bitbucket repository search completed: total=%s returned=%s",
        total,
        len(repositories),
    )
    yield DoneEvent(result={"repositories": repositories, "totalCount": total})


def run(*, query: str, limit: int = DEFAULT_LIMIT, context: ToolContext) -> AsyncGenerator[ToolEvent, None]:
    return guarded(
        _execute(query=query, limit=limit, context=context),
        error_prefix="Error searching Bitbucket repositories",
        token=context.token,
    )


def register(mcp: FastMCP, *, context: ToolContext) -> None:
    @mcp.tool(name=TOOL_NAME, description=DESCRIPTION)
    async def search_repositories(query: str, limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
        """Search repositories by keyword and return them with the server's total count."""
        ctx = context.for_invocation()
        return await drive(
            run(query=query, limit=limit, context=ctx),
            token=ctx.token,
            tool_name=TOOL_NAME,
        )
