from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from recaptcha_relay.config import Settings, UpstreamCredentials, Variant
from recaptcha_relay.main import create_app
from tests.stubs import UpstreamStub


@pytest.fixture
def legacy_settings() -> Settings:
    return Settings(
        variant=Variant.legacy,
        credentials=UpstreamCredentials(secret_key="test-secret"),
    )


@pytest.fixture
def enterprise_settings() -> Settings:
    return Settings(
        variant=Variant.enterprise,
        credentials=UpstreamCredentials(
            secret_key="test-api-key", project_id="demo-project", site_key="site-key-123"
        ),
    )


@pytest.fixture
def make_client() -> Callable[[Settings, UpstreamStub], TestClient]:
    def _make(settings: Settings, stub: UpstreamStub) -> TestClient:
        return TestClient(create_app(settings, transport=stub.transport))

    return _make
