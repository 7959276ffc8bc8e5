"""MCP tool that finds files in a Bitbucket repository by glob pattern.

Registers the 'bitbucket_glob' tool which walks the repository tree through
the browse API, matches every file path against the pattern, and returns a
page of matching file URIs.
"""

from __future__ import annotations

from typing import AsyncGenerator, List, Optional

from mcp.server.fastmcp import FastMCP

from clients.bitbucket.inputs import normalize_offset, require_text
from clients.bitbucket.tree import list_repository_files
from core.context import ToolContext
from core.errors import ValidationError
from core.events import DoneEvent, ToolEvent, drive, guarded, progress
from core.models import ToolSpec
from core.paths import compile_glob, file_uri

TOOL_NAME = "bitbucket_glob"
DEFAULT_LIMIT = 100

DESCRIPTION = """
Find files matching a glob pattern in a Bitbucket repository.

Fetches the file tree of the repository's default branch through Bitbucket's
browse API (without downloading the repository) and matches every file
path against the pattern.

PARAMETERS:
- project: The Bitbucket project key (required)
- repository: The repository slug (required)
- filePattern: Glob pattern to match files (e.g., "**/*.ts", "src/**/*.test.js")
- limit: Maximum number of results to return (default: 100)
- offset: Number of results to skip for pagination (default: 0)

PATTERN EXAMPLES:
- `**/*.js` - All JavaScript files in any directory
- `src/**/*.ts` - All TypeScript files under src
- `*.json` - JSON files in the repository root only
- `**/*.{js,ts}` - All JavaScript and TypeScript files
- `src/[a-z]*/*.ts` - TypeScript files in src subdirectories starting with a lowercase letter

Returns an ordered list of file URIs.
""".strip()

SPEC = ToolSpec(
    name=TOOL_NAME,
    description=DESCRIPTION,
    input_schema={
        "type": "object",
        "properties": {
            "project": {"type": "string", "description": "The Bitbucket project key"},
            "repository": {"type": "string", "description": "The repository slug"},
            "filePattern": {
                "type": "string",
                "description": 'Glob pattern to match files (e.g., "**/*.ts", "src/**/*.test.js")',
            },
            "limit": {"type": "number", "description": "Maximum number of results to return (default: 100)"},
            "offset": {"type": "number", "description": "Number of results to skip for pagination"},
        },
        "required": ["project", "repository", "filePattern"],
    },
)


def paginate(items: List[str], *, offset: int, limit: Optional[int]) -> List[str]:
    # A falsy limit means "everything after offset"
    if limit:
        return items[offset : offset + limit]
    return items[offset:]


async def _execute(
    *,
    project: str,
    repository: str,
    file_pattern: str,
    limit: Optional[int],
    offset: int,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    project_clean = require_text(project, name="project")
    repository_clean = require_text(repository, name="repository")
    pattern_clean = require_text(file_pattern, name="filePattern")
    offset_clean = normalize_offset(offset)
    limit_clean = int(limit) if limit else 0
    if limit_clean < 0:
        raise ValidationError("limit must be zero or positive")

    yield progress(f'Finding files matching "{pattern_clean}" in {project_clean}/{repository_clean}...')

    config = await context.resolve_config()
    all_files = await list_repository_files(
        context,
        config,
        project=project_clean,
        repository=repository_clean,
    )

    is_match = compile_glob(pattern_clean)
    matched = [p for p in all_files if is_match(p)]
    page = paginate(matched, offset=offset_clean, limit=limit_clean)

    yield DoneEvent(result=[file_uri(project_clean, repository_clean, p) for p in page])


def run(
    *,
    project: str,
    repository: str,
    file_pattern: str,
    limit: Optional[int] = DEFAULT_LIMIT,
    offset: int = 0,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    return guarded(
        _execute(
            project=project,
            repository=repository,
            file_pattern=file_pattern,
            limit=limit,
            offset=offset,
            context=context,
        ),
        error_prefix="Error matching files",
        token=context.token,
    )


def register(mcp: FastMCP, *, context: ToolContext) -> None:
    @mcp.tool(name=TOOL_NAME, description=DESCRIPTION)
    async def bitbucket_glob(
        project: str,
        repository: str,
        filePattern: str,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> List[str]:
        """Find files matching a glob pattern and return a page of file URIs."""
        ctx = context.for_invocation()
        return await drive(
            run(
                project=project,
                repository=repository,
                file_pattern=filePattern,
                limit=limit,
                offset=offset,
                context=ctx,
            ),
            token=ctx.token,
            tool_name=TOOL_NAME,
        )
