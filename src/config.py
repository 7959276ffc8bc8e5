"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
BITBUCKET_BASE_URL, HTTP_VERIFY, timeouts, concurrency and log level).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


# Bitbucket Server
BITBUCKET_BASE_URL = _env_str("BITBUCKET_BASE_URL")
BITBUCKET_TOKEN = _env_str("BITBUCKET_TOKEN")
BITBUCKET_USERNAME = _env_str("BITBUCKET_USERNAME")
BITBUCKET_PASSWORD = _env_str("BITBUCKET_PASSWORD")

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
BITBUCKET_TIMEOUT = _env_float("BITBUCKET_TIMEOUT", 20.0)
BITBUCKET_MAX_CONCURRENCY = _env_int("BITBUCKET_MAX_CONCURRENCY", 5)

# Logging (stderr; stdout carries the MCP stdio transport)
LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()
