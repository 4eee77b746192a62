from __future__ import annotations

import pytest

from recaptcha_relay.config import Settings, UpstreamCredentials, Variant
from recaptcha_relay.domain.errors import ConfigurationError, MissingTokenError, UpstreamError
from recaptcha_relay.domain.result import Err, Ok
from recaptcha_relay.service import VerificationRelay, build_client
from tests.stubs import UpstreamStub, refuse, respond


def _relay(settings: Settings, stub: UpstreamStub) -> VerificationRelay:
    return VerificationRelay(settings, build_client(settings, stub.transport))


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "   ", 42])
async def test_missing_token_short_circuits(legacy_settings, token):
    stub = UpstreamStub(respond({"success": True, "score": 0.9}))
    result = await _relay(legacy_settings, stub).verify(token)
    assert isinstance(result, Err)
    assert isinstance(result.error, MissingTokenError)
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_missing_configuration_short_circuits(caplog):
    settings = Settings(variant=Variant.enterprise, credentials=UpstreamCredentials(secret_key="k"))
    stub = UpstreamStub(respond({}))
    result = await _relay(settings, stub).verify("tok")
    assert isinstance(result, Err)
    assert isinstance(result.error, ConfigurationError)
    assert stub.calls == 0
    assert any(r.getMessage() == "relay.config_missing" for r in caplog.records)


@pytest.mark.asyncio
async def test_upstream_failure_is_an_err(legacy_settings):
    result = await _relay(legacy_settings, UpstreamStub(refuse)).verify("tok")
    assert not result.ok
    assert isinstance(result.error, UpstreamError)


@pytest.mark.asyncio
async def test_negative_decision_is_still_ok(enterprise_settings):
    stub = UpstreamStub(respond({"tokenProperties": {"valid": True}, "riskAnalysis": {"score": 0.1}}))
    result = await _relay(enterprise_settings, stub).verify("tok")
    assert isinstance(result, Ok)
    assert result.value.success is False
    assert result.value.score == 0.1


@pytest.mark.asyncio
async def test_threshold_comes_from_settings():
    settings = Settings(credentials=UpstreamCredentials(secret_key="s"), score_threshold=0.2)
    stub = UpstreamStub(respond({"success": True, "score": 0.3}))
    result = await _relay(settings, stub).verify("tok")
    assert result.ok
    assert result.value.success is True


@pytest.mark.asyncio
async def test_secrets_and_token_are_not_logged(legacy_settings, caplog):
    caplog.set_level("INFO")
    stub = UpstreamStub(respond({"success": True, "score": 0.9}))
    await _relay(legacy_settings, stub).verify("very-private-token")
    for record in caplog.records:
        flat = str(record.__dict__)
        assert "very-private-token" not in flat
        assert "test-secret" not in flat
