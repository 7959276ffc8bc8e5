from __future__ import annotations

import fnmatch
import re
from functools import lru_cache
from typing import Callable, List, Tuple
from urllib.parse import quote

"""
Path utilities used across the project.

Provides repository-relative path normalization, the canonical file URI
used in tool results, a component-wise glob matcher with '**' and brace
support, and the simpler glob-to-regex translation used to filter code
search hits.
"""


FILE_SCHEME = "file://"


def split_posix(p: str) -> Tuple[str, ...]:
    """Split a POSIX path into non-empty segments."""
    s = (p or "").strip().replace("\\", "/").strip("/")
    if not s:
        return tuple()
    return tuple(seg for seg in s.split("/") if seg)


def to_repo_relative_path(path: str, *, project: str, repository: str) -> str:
    """Turn a user-supplied path or file URI into a repository-relative path.

    Applied in order: drop a 'file://' scheme, drop a '/{project}/{repository}/'
    prefix, drop one remaining leading '/'.
    """
    rel = path or ""
    if rel.startswith(FILE_SCHEME):
        rel = rel[len(FILE_SCHEME):]

    prefix = f"/{project}/{repository}/"
    if rel.startswith(prefix):
        rel = rel[len(prefix):]

    if rel.startswith("/"):
        rel = rel[1:]
    return rel


def file_uri(project: str, repository: str, path: str) -> str:
    """Canonical identifier for a file inside a repository."""
    return FILE_SCHEME + quote(f"/{project}/{repository}/{path}", safe="/")


def expand_braces(pattern: str) -> List[str]:
    """Expand '{a,b}' alternations (nested allowed) into plain patterns.

    Unbalanced braces and braces without a top-level comma are kept literally.
    """
    depth = 0
    start = -1
    for i, ch in enumerate(pattern):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                options = _split_top_level(pattern[start + 1 : i])
                if len(options) < 2:
                    continue
                head, tail = pattern[:start], pattern[i + 1 :]
                out: List[str] = []
                for opt in options:
                    out.extend(expand_braces(head + opt + tail))
                return out
    return [pattern]


def _split_top_level(body: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current = ""
    for ch in body:
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current += ch
    parts.append(current)
    return parts


def _match_segments(parts: Tuple[str, ...], pats: Tuple[str, ...]) -> bool:
    @lru_cache(maxsize=None)
    def rec(i: int, j: int) -> bool:
        if j == len(pats):
            return i == len(parts)

        token = pats[j]
        if token == "**":
            if rec(i, j + 1):
                return True
            return i < len(parts) and not parts[i].startswith(".") and rec(i + 1, j)

        return (
            i < len(parts)
            and _match_segment(parts[i], token)
            and rec(i + 1, j + 1)
        )

    return rec(0, 0)


def _match_segment(part: str, token: str) -> bool:
    # Hidden entries only match a pattern segment that names the dot itself.
    if part.startswith(".") and not token.startswith("."):
        return False
    return fnmatch.fnmatchcase(part, token)


def compile_glob(pattern: str) -> Callable[[str], bool]:
    """Compile a glob pattern into a predicate over relative paths.

    '*', '?' and '[...]' never cross '/', a '**' segment crosses any number
    of directories, and '{a,b}' expands to alternatives. Segments starting
    with '.' are only matched by pattern segments that start with '.'.
    """
    pat = (pattern or "").strip().replace("\\", "/").strip("/")
    if not pat:
        pat = "**/*"  # Default: match everything.
    alternatives = [split_posix(p) for p in expand_braces(pat)]

    def is_match(rel_path: str) -> bool:
        parts = split_posix(rel_path)
        return any(_match_segments(parts, pats) for pats in alternatives)

    return is_match


def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a file glob into an anchored regex over full paths.

    '**/' matches zero or more leading directories, '**' any sequence
    including '/', '*' any sequence without '/', '[...]' a character class
    ('[!...]' negated). Everything else is literal.
    """
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "[":
            end = _class_end(pattern, i)
            if end < 0:
                out.append(re.escape("["))
                i += 1
            else:
                out.append(_translate_class(pattern[i + 1 : end]))
                i = end + 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(out) + "$")


def _class_end(pattern: str, start: int) -> int:
    """Index of the ']' closing the class opened at start, or -1."""
    j = start + 1
    if j < len(pattern) and pattern[j] == "!":
        j += 1
    if j < len(pattern) and pattern[j] == "]":
        j += 1
    while j < len(pattern) and pattern[j] != "]":
        j += 1
    return j if j < len(pattern) else -1


def _translate_class(body: str) -> str:
    body = body.replace("\\", "\\\\")
    if body.startswith("!"):
        body = "^" + body[1:]
    elif body.startswith("^"):
        body = "\\" + body
    return "[" + body.replace("[", "\\[") + "]"
