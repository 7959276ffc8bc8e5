"""MCP tool that searches code through Bitbucket's indexed search API.

Registers 'code_search'. The search endpoint cannot scope code hits by
project, repository or path, so those filters run client-side and
`totalCount` reports the filtered number of files.
"""

from __future__ import annotations

import html
import logging
from typing import Any, AsyncGenerator, Dict, List, Mapping, Optional

from mcp.server.fastmcp import FastMCP

from clients.bitbucket.inputs import normalize_limit, optional_text, require_text
from clients.bitbucket.search import loggable_query, search_entity
from core.context import ToolContext
from core.events import DoneEvent, ToolEvent, drive, guarded, progress
from core.models import ToolSpec
from core.paths import glob_to_regex

logger = logging.getLogger(__name__)

TOOL_NAME = "code_search"
DEFAULT_LIMIT = 25

DESCRIPTION = """
Search for code across Bitbucket repositories using keyword search.

Uses Bitbucket's indexed code search to find matching files with context,
optionally narrowed by project, repository and file glob.

PARAMETERS:
- query: Keywords to find in code (required)
- project: Filter to a specific project key (optional)
- repository: Filter to a specific repository slug (optional)
- fileGlob: Filter to files matching a glob, e.g. "*.go", "src/**/*.ts" (optional)
- limit: Maximum number of file results to return (default: 25, max: 100)

RESULT STRUCTURE:
- files: file, repository (slug, name, project key), hitContexts (lists of
  {line, text}; HTML entities are decoded), hitCount
- totalCount: Number of files returned after filtering
""".strip()

SPEC = ToolSpec(
    name=TOOL_NAME,
    description=DESCRIPTION,
    input_schema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Search query - keywords to find in code"},
            "project": {"type": "string", "description": 'Filter to specific project key (e.g., "SOURCEGRAPH")'},
            "repository": {"type": "string", "description": 'Filter to specific repository slug (e.g., "jsonrpc2")'},
            "fileGlob": {
                "type": "string",
                "description": 'Filter to files matching glob pattern (e.g., "**/*.go", "src/**/*.ts")',
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of file results to return (default: 25)",
                "minimum": 1,
                "maximum": 100,
            },
        },
        "required": ["query"],
    },
)


def filter_hits(
    hits: List[Mapping[str, Any]],
    *,
    project: Optional[str] = None,
    repository: Optional[str] = None,
    file_glob: Optional[str] = None,
) -> List[Mapping[str, Any]]:
    """Apply project key, repository slug and file glob filters, in that order."""
    out = hits
    if project:
        out = [h for h in out if ((h.get("repository") or {}).get("project") or {}).get("key") == project]
    if repository:
        out = [h for h in out if (h.get("repository") or {}).get("slug") == repository]
    if file_glob:
        regex = glob_to_regex(file_glob)
        out = [h for h in out if regex.match(str(h.get("file") or ""))]
    return out


def decode_hit(hit: Mapping[str, Any]) -> Dict[str, Any]:
    # Hit text arrives HTML-encoded (e.g. '&#x2F;' for '/')
    contexts = [
        [{**line, "text": html.unescape(str(line.get("text", "")))} for line in chunk]
        for chunk in hit.get("hitContexts") or []
    ]
    return {**hit, "hitContexts": contexts}


async def _execute(
    *,
    query: str,
    project: Optional[str],
    repository: Optional[str],
    file_glob: Optional[str],
    limit: int,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    query_clean = require_text(query, name="query")
    limit_clean = normalize_limit(limit, default=DEFAULT_LIMIT)
    project_clean = optional_text(project)
    repository_clean = optional_text(repository)
    glob_clean = optional_text(file_glob)

    logger.info(
        "Starting Bitbucket code search: query=%r project=%s repository=%s file_glob=%s limit=%s",
        loggable_query(query_clean),
        project_clean,
        repository_clean,
        glob_clean,
        limit_clean,
    )
    yield progress(f'Searching for "{query_clean}" in code...')

    config = await context.resolve_config()
    section = await search_entity(
        context,
        config,
        query=query_clean,
        entity="code",
        limit=limit_clean,
        label="code",
    )
    if section is None:
        yield DoneEvent(result={"files": [], "totalCount": 0})
        return

    hits = list(section.get("values") or [])
    filtered = filter_hits(
        hits,
        project=project_clean,
        repository=repository_clean,
        file_glob=glob_clean,
    )
    files = [decode_hit(h) for h in filtered]

    logger.info(
        "Bitbucket code search completed: total=%s returned=%s",
        section.get("count"),
        len(files),
    )
    yield DoneEvent(result={"files": files, "totalCount": len(files)})


def run(
    *,
    query: str,
    project: Optional[str] = None,
    repository: Optional[str] = None,
    file_glob: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    return guarded(
        _execute(
            query=query,
            project=project,
            repository=repository,
            file_glob=file_glob,
            limit=limit,
            context=context,
        ),
        error_prefix="Error searching Bitbucket code",
        token=context.token,
    )


def register(mcp: FastMCP, *, context: ToolContext) -> None:
    @mcp.tool(name=TOOL_NAME, description=DESCRIPTION)
    async def code_search(
        query: str,
        project: Optional[str] = None,
        repository: Optional[str] = None,
        fileGlob: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> Dict[str, Any]:
        """Search code by keyword; filters by project, repository and file glob run client-side."""
        ctx = context.for_invocation()
        return await drive(
            run(
                query=query,
                project=project,
                repository=repository,
                file_glob=fileGlob,
                limit=limit,
                context=ctx,
            ),
            token=ctx.token,
            tool_name=TOOL_NAME,
        )
