"""ConfigProvider backed by the environment-derived values in `config`."""

from __future__ import annotations

from typing import Optional

import config
from core.cancellation import CancellationToken
from core.errors import ValidationError
from core.models import ServerConfig


class EnvConfigProvider:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        verify: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base_url = base_url
        self._token = token
        self._username = username
        self._password = password
        self._verify = verify
        self._timeout = timeout

    async def resolve(self, token: Optional[CancellationToken] = None) -> ServerConfig:
        if token is not None:
            token.raise_if_cancelled()

        # Explicit constructor values win over the environment
        base_url = (self._base_url if self._base_url is not None else config.BITBUCKET_BASE_URL).strip()
        if not base_url:
            raise ValidationError("BITBUCKET_BASE_URL is not configured")

        return ServerConfig(
            base_url=base_url.rstrip("/") + "/",
            token=self._token if self._token is not None else (config.BITBUCKET_TOKEN or None),
            username=self._username if self._username is not None else (config.BITBUCKET_USERNAME or None),
            password=self._password if self._password is not None else (config.BITBUCKET_PASSWORD or None),
            verify=self._verify if self._verify is not None else config.HTTP_VERIFY,
            timeout=self._timeout if self._timeout is not None else config.BITBUCKET_TIMEOUT,
        )
