"""Execution context handed to every tool run."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from core.cancellation import CancellationToken
from core.interfaces import APIClient, ConfigProvider
from core.models import APIResponse, ServerConfig


@dataclass(frozen=True)
class ToolContext:
    config_provider: ConfigProvider
    client: APIClient
    token: CancellationToken = field(default_factory=CancellationToken)

    def for_invocation(self) -> "ToolContext":
        # Same capabilities, fresh cancellation signal.
        return replace(self, token=CancellationToken())

    async def resolve_config(self) -> ServerConfig:
        return await self.token.guard(self.config_provider.resolve(self.token))

    async def request(
        self,
        path: str,
        *,
        config: ServerConfig,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> APIResponse:
        return await self.token.guard(
            self.client.request(
                path,
                config=config,
                method=method,
                params=params,
                json=json,
                token=self.token,
            )
        )
