"""Immutable dataclasses shared by the client and the tools.

Includes the resolved server configuration, the uniform API response
shape returned by the HTTP client, and the small value types the tools
build from Bitbucket payloads (ProjectSummary, FileTreeEntry, BrowsePage).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ServerConfig:
    """Connection settings resolved once per invocation.

    Field groups:
    - Server: base_url
    - Auth: token, or username + password
    - HTTP: verify, timeout
    """

    base_url: str

    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    verify: bool = True
    timeout: float = 20.0


@dataclass(frozen=True)
class APIResponse:
    """Result of one Bitbucket API call.

    `data` is the decoded JSON body and is only populated when `ok` is True.
    `text` always carries the raw body so callers can report diagnostics.
    """

    ok: bool
    status: int
    status_text: str = ""
    data: Any = None
    text: Optional[str] = None


@dataclass(frozen=True)
class ProjectSummary:
    key: str
    name: str
    description: Optional[str]
    is_public: bool
    type: str

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "ProjectSummary":
        return cls(
            key=str(raw.get("key") or ""),
            name=str(raw.get("name") or ""),
            description=raw.get("description") or None,
            is_public=bool(raw.get("public", False)),
            type=str(raw.get("type") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "isPublic": self.is_public,
            "type": self.type,
        }


@dataclass(frozen=True)
class FileTreeEntry:
    components: Tuple[str, ...]
    kind: str

    @property
    def path(self) -> str:
        return "/".join(self.components)

    @property
    def is_file(self) -> bool:
        return self.kind == "FILE"

    @property
    def is_directory(self) -> bool:
        return self.kind == "DIRECTORY"

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "FileTreeEntry":
        path = raw.get("path") or {}
        components = path.get("components") or []
        return cls(
            components=tuple(str(c) for c in components),
            kind=str(raw.get("type") or ""),
        )


@dataclass(frozen=True)
class BrowsePage:
    """One page of a directory listing from the browse endpoint."""

    entries: List[FileTreeEntry] = field(default_factory=list)
    is_last_page: bool = True
    next_page_start: Optional[int] = None

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "BrowsePage":
        children = raw.get("children") or {}
        values = children.get("values") or []
        next_start = children.get("nextPageStart")
        return cls(
            entries=[FileTreeEntry.from_api(v) for v in values],
            is_last_page=bool(children.get("isLastPage", True)),
            next_page_start=int(next_start) if next_start is not None else None,
        )


@dataclass(frozen=True)
class ToolSpec:
    """What a tool publishes to the host tool-calling framework."""

    name: str
    description: str
    input_schema: Dict[str, Any]
    source: str = "builtin"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "source": self.source,
        }
