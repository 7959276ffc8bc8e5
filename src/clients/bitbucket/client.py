"""Bitbucket Server client module: one uniform request method for the tools.

This module provides a small async client around the Bitbucket Server REST
API. Every call returns an `APIResponse` (ok/status/status_text/data/text)
so tools decide themselves how to treat non-2xx answers; only transport
failures raise. It relies on `core.rate_limiter.RateLimiter` to honor
explicit server-side throttling signals.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

import httpx

from core.cancellation import CancellationToken
from core.errors import ExternalServiceError
from core.models import APIResponse, ServerConfig
from core.rate_limiter import RateLimiter


API_PREFIX = "rest/api/1.0"
SEARCH_PATH = "rest/search/latest/search"


def repo_api_path(project: str, repository: str, *tail: str) -> str:
    """Build 'rest/api/1.0/projects/{project}/repos/{repository}/...'."""
    parts = [API_PREFIX, "projects", project, "repos", repository, *tail]
    return "/".join(p for p in parts if p)


class BitbucketClient:
    """Async Bitbucket Server client.

    Purpose:
      - request(path, config=..., method='GET', params=None, json=None) -> APIResponse

    Key behavior:
      - A fresh httpx.AsyncClient per call, configured from the resolved ServerConfig.
      - Limits concurrency (Semaphore) across tool runs sharing this client.
      - Honors server-side throttling (Retry-After) via RateLimiter.
      - Never raises for HTTP error statuses; `data` is only set for ok JSON bodies.
    """

    JSON_ACCEPT = "application/json"
    USER_AGENT = "bitbucket-mcp-server"

    _MAX_RATE_LIMIT_RETRIES = 2  # total attempts = 1 + retries

    def __init__(
        self,
        *,
        max_concurrency: int = 5,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._sem = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._rate_limiter = rate_limiter or RateLimiter()

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
        async with self._create_client(config) as client:
            resp = await self._send(
                client,
                method.upper(),
                path,
                params=params,
                json=json,
                token=token,
            )
            return self._to_api_response(resp)

    # --- HTTP helpers ---

    def _build_headers(self, config: ServerConfig) -> dict[str, str]:
        headers = {
            "Accept": self.JSON_ACCEPT,
            "User-Agent": self.USER_AGENT,
        }
        # Personal access tokens take precedence over basic auth
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        return headers

    def _create_client(self, config: ServerConfig) -> httpx.AsyncClient:
        auth = None
        if not config.token and config.username:
            auth = httpx.BasicAuth(config.username, config.password or "")
        return httpx.AsyncClient(
            base_url=config.base_url,
            headers=self._build_headers(config),
            auth=auth,
            timeout=config.timeout,
            verify=config.verify,
        )

    def _external(self, context: str, err: BaseException) -> ExternalServiceError:
        return ExternalServiceError(f"Bitbucket request failed ({context}): {err}")

    def _to_api_response(self, resp: httpx.Response) -> APIResponse:
        ok = resp.is_success
        data = None
        if ok and "json" in resp.headers.get("Content-Type", ""):
            try:
                data = resp.json()
            except ValueError:
                # Malformed JSON behaves like a missing payload
                data = None
        return APIResponse(
            ok=ok,
            status=resp.status_code,
            status_text=resp.reason_phrase,
            data=data,
            text=resp.text,
        )

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        token: Optional[CancellationToken] = None,
    ) -> httpx.Response:
        """Send with concurrency limit + bounded retries for explicit throttling signals."""
        attempts = self._MAX_RATE_LIMIT_RETRIES + 1

        for attempt in range(attempts):
            if token is not None:
                token.raise_if_cancelled()

            try:
                async with self._sem:
                    resp = await client.request(
                        method,
                        url,
                        params=dict(params or {}),
                        json=json,
                    )
            except httpx.HTTPError as e:
                raise self._external(f"{method} {url}", e) from e

            if attempt < attempts - 1:
                should_retry = await self._rate_limiter.maybe_sleep_and_retry(resp)
                if should_retry:
                    continue

            return resp

        raise RuntimeError("Unreachable: _send did not return a response")
