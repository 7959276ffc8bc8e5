import pytest

import config
from clients.bitbucket.settings import EnvConfigProvider
from core.cancellation import CancellationToken
from core.errors import OperationCancelledError, ValidationError


@pytest.mark.asyncio
async def test_resolve_uses_environment_values(monkeypatch):
    monkeypatch.setattr(config, "BITBUCKET_BASE_URL", "https://bb.example.test")
    monkeypatch.setattr(config, "BITBUCKET_TOKEN", "tok")
    monkeypatch.setattr(config, "HTTP_VERIFY", False)
    monkeypatch.setattr(config, "BITBUCKET_TIMEOUT", 7.5)

    cfg = await EnvConfigProvider().resolve()

    assert cfg.base_url == "https://bb.example.test/"
    assert cfg.token == "tok"
    assert cfg.verify is False
    assert cfg.timeout == 7.5


@pytest.mark.asyncio
async def test_constructor_values_override_environment(monkeypatch):
    monkeypatch.setattr(config, "BITBUCKET_BASE_URL", "https://env.test")
    monkeypatch.setattr(config, "BITBUCKET_TOKEN", "")

    cfg = await EnvConfigProvider(base_url="https://explicit.test/", username="bob", password="pw").resolve()

    assert cfg.base_url == "https://explicit.test/"
    assert cfg.token is None
    assert (cfg.username, cfg.password) == ("bob", "pw")


@pytest.mark.asyncio
async def test_missing_base_url_is_a_validation_error(monkeypatch):
    monkeypatch.setattr(config, "BITBUCKET_BASE_URL", "")

    with pytest.raises(ValidationError):
        await EnvConfigProvider().resolve()


@pytest.mark.asyncio
async def test_resolve_honors_cancelled_token():
    token = CancellationToken()
    token.cancel()

    with pytest.raises(OperationCancelledError):
        await EnvConfigProvider(base_url="https://bb.test").resolve(token)
