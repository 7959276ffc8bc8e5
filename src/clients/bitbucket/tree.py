"""Repository file-tree enumeration over the paginated browse endpoint.

The walk is depth-first in the order the server lists children, driven by
an explicit stack of directory cursors instead of recursion. A directory
whose page cannot be fetched is skipped; everything gathered so far and
every other branch is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
from urllib.parse import quote

from clients.bitbucket.client import repo_api_path
from core.context import ToolContext
from core.models import BrowsePage, FileTreeEntry, ServerConfig

logger = logging.getLogger(__name__)

BROWSE_PAGE_SIZE = 1000


@dataclass
class _DirectoryCursor:
    path: str
    start: int = 0
    exhausted: bool = False
    entries: Optional[Iterator[FileTreeEntry]] = field(default=None, repr=False)


def browse_path(project: str, repository: str, path: str = "") -> str:
    tail = quote(path, safe="/") if path else ""
    return repo_api_path(project, repository, "browse", tail)


async def fetch_browse_page(
    context: ToolContext,
    config: ServerConfig,
    *,
    project: str,
    repository: str,
    path: str,
    start: int,
) -> Optional[BrowsePage]:
    """Fetch one page of a directory listing; None if it is not accessible."""
    response = await context.request(
        browse_path(project, repository, path),
        config=config,
        params={"limit": BROWSE_PAGE_SIZE, "start": start},
    )
    if not response.ok or not response.data:
        logger.debug(
            "Skipping directory %r in %s/%s (status %s)",
            path,
            project,
            repository,
            response.status,
        )
        return None
    return BrowsePage.from_api(response.data)


async def list_repository_files(
    context: ToolContext,
    config: ServerConfig,
    *,
    project: str,
    repository: str,
) -> List[str]:
    """Return every file path in the repository, depth-first in server order."""
    files: List[str] = []
    stack: List[_DirectoryCursor] = [_DirectoryCursor(path="")]

    while stack:
        cursor = stack[-1]

        if cursor.entries is None:
            if cursor.exhausted:
                stack.pop()
                continue

            page = await fetch_browse_page(
                context,
                config,
                project=project,
                repository=repository,
                path=cursor.path,
                start=cursor.start,
            )
            if page is None:
                stack.pop()
                continue

            cursor.entries = iter(page.entries)
            # A page that is not last but names no next start ends the directory
            if page.is_last_page or not page.next_page_start:
                cursor.exhausted = True
            else:
                cursor.start = page.next_page_start
            continue

        entry = next(cursor.entries, None)
        if entry is None:
            cursor.entries = None
            continue

        if entry.is_file:
            files.append(entry.path)
        elif entry.is_directory:
            # Children are expanded before the remaining siblings
            stack.append(_DirectoryCursor(path=entry.path))

    return files
