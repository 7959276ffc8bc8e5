"""Core protocol and interface definitions.

Defines the two capabilities every tool receives explicitly: a
ConfigProvider that resolves server settings per invocation and an
APIClient that talks to the Bitbucket REST API.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from core.cancellation import CancellationToken
from core.models import APIResponse, ServerConfig


class ConfigProvider(Protocol):
    """Contract for anything that can supply the current server config."""
    async def resolve(self, token: Optional[CancellationToken] = None) -> ServerConfig:
        ...


class APIClient(Protocol):
    """Contract for the Bitbucket REST transport.

    Implementations return an APIResponse for every HTTP status and only
    raise for transport failures or cancellation.
    """
    async def request(
        self,
        path: str,
        *,
        config: ServerConfig,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        token: Optional[CancellationToken] = None,
    ) -> APIResponse:
        ...
