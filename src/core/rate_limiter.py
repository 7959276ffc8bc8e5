"""Utility to interpret server-side throttling signals and sleep when needed.

Bitbucket Server (Data Center) rate limiting answers with 429 and a
Retry-After header; a node under maintenance may answer 503 with the same
header. Retry-After may be delta-seconds or an HTTP date. Sleep is bounded
to a configurable maximum to avoid long blocking.
"""

from __future__ import annotations

import asyncio
import time
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional

import httpx


_THROTTLE_STATUSES = (429, 503)


class RateLimiter:
    # Bitbucket throttle handling
    def __init__(self, *, max_sleep_seconds: int = 60) -> None:
        self._max_sleep_seconds = int(max_sleep_seconds)

    async def maybe_sleep_and_retry(self, response: httpx.Response) -> bool:
        # Returns True if caller should retry after sleeping.
        if response.status_code not in _THROTTLE_STATUSES:
            return False

        delay = self._parse_retry_after(response.headers)
        if delay is None:
            return False

        await self._sleep_bounded(delay)
        return True

    async def _sleep_bounded(self, seconds: int) -> None:
        await asyncio.sleep(min(int(seconds), self._max_sleep_seconds))

    def _parse_retry_after(self, headers: Mapping[str, str]) -> Optional[int]:
        value = (headers.get("Retry-After") or "").strip()
        if not value:
            return None
        if value.isdigit():
            return int(value)

        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when is None:
            return None
        return max(0, int(when.timestamp() - time.time())) + 1
