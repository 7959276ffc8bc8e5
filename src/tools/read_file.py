"""MCP tool that reads a text file from a Bitbucket repository.

Registers the 'bitbucket_read' tool which fetches the raw file from the
default branch and returns it with line numbers, optionally limited to a
1-indexed inclusive line range.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from mcp.server.fastmcp import FastMCP

from clients.bitbucket.client import repo_api_path
from clients.bitbucket.inputs import normalize_read_range, require_text
from core.context import ToolContext
from core.events import DoneEvent, ErrorEvent, ToolEvent, drive, guarded, progress
from core.models import ToolSpec
from core.paths import file_uri, to_repo_relative_path

TOOL_NAME = "bitbucket_read"

DESCRIPTION = """
Read file contents from a Bitbucket repository.

Fetches the raw content of a file from the repository's default branch and
returns it with line numbers for easy reference.

PARAMETERS:
- project: The Bitbucket project key (required)
- repository: The repository slug (required)
- path: The file path within the repository, or a file URI returned by
  another Bitbucket tool (required)
- read_range: Optional [startLine, endLine] (1-indexed, inclusive)

RESULT STRUCTURE:
- absolutePath: The file URI
- content: File content, each line prefixed with "<line number>: "
- contentURL: always null
""".strip()

SPEC = ToolSpec(
    name=TOOL_NAME,
    description=DESCRIPTION,
    input_schema={
        "type": "object",
        "properties": {
            "project": {"type": "string", "description": "The Bitbucket project key"},
            "repository": {"type": "string", "description": "The repository slug"},
            "path": {"type": "string", "description": "The file path within the repository"},
            "read_range": {
                "type": "array",
                "description": "Optional [startLine, endLine] to read only a portion of the file (1-indexed)",
                "items": {"type": "number"},
                "minItems": 2,
                "maxItems": 2,
            },
        },
        "required": ["project", "repository", "path"],
    },
)


def number_lines(content: str, read_range: Optional[Tuple[int, int]] = None) -> str:
    """Prefix each selected line with its 1-based number.

    The range is clamped to the file: start to at least 1, end to at most
    the number of lines.
    """
    lines: List[str] = content.split("\n")

    start, end = 1, len(lines)
    if read_range is not None:
        start = max(1, read_range[0])
        end = min(len(lines), read_range[1])

    return "\n".join(
        f"{start + idx}: {line}" for idx, line in enumerate(lines[start - 1 : end])
    )


async def _execute(
    *,
    project: str,
    repository: str,
    path: str,
    read_range: Optional[Sequence[int]],
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    project_clean = require_text(project, name="project")
    repository_clean = require_text(repository, name="repository")
    path_raw = require_text(path, name="path")
    range_clean = normalize_read_range(read_range)

    yield progress(f'Reading file "{path_raw}" from {project_clean}/{repository_clean}...')

    rel_path = to_repo_relative_path(path_raw, project=project_clean, repository=repository_clean)

    config = await context.resolve_config()
    response = await context.request(
        repo_api_path(project_clean, repository_clean, "raw", quote(rel_path, safe="/")),
        config=config,
        params={"at": "HEAD"},
    )
    if not response.ok:
        yield ErrorEvent(
            message=f"Failed to read file: {response.status} {response.status_text or 'Unknown error'}"
        )
        return

    yield DoneEvent(
        result={
            "absolutePath": file_uri(project_clean, repository_clean, rel_path),
            "content": number_lines(response.text or "", range_clean),
            "contentURL": None,
        }
    )


def run(
    *,
    project: str,
    repository: str,
    path: str,
    read_range: Optional[Sequence[int]] = None,
    context: ToolContext,
) -> AsyncGenerator[ToolEvent, None]:
    return guarded(
        _execute(
            project=project,
            repository=repository,
            path=path,
            read_range=read_range,
            context=context,
        ),
        error_prefix="Error reading file",
        token=context.token,
    )


def register(mcp: FastMCP, *, context: ToolContext) -> None:
    @mcp.tool(name=TOOL_NAME, description=DESCRIPTION)
    async def bitbucket_read(
        project: str,
        repository: str,
        path: str,
        read_range: Optional[List[int]] = None,
    ) -> Dict[str, Any]:
        """Read a file from a Bitbucket repository with line numbers.

        Params:
          - project: project key (required).
          - repository: repository slug (required).
          - path: repository-relative path or file URI (required).
          - read_range: optional [start, end], 1-indexed and inclusive.

        Returns:
          {"absolutePath": str, "content": str, "contentURL": None}
        """
        ctx = context.for_invocation()
        return await drive(
            run(project=project, repository=repository, path=path, read_range=read_range, context=ctx),
            token=ctx.token,
            tool_name=TOOL_NAME,
        )
