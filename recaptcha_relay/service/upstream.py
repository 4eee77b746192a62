"""Clients for the two reCAPTCHA verification APIs.

Both expose the same coroutine, `verify(token, credentials)`, and return an
`UpstreamResult`; which one the relay uses is decided by `Settings.variant`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..config import Settings, UpstreamCredentials, Variant
from ..domain.errors import ConfigurationError, UpstreamError
from ..domain.upstream import (
    AssessmentResponse,
    SiteVerifyResponse,
    UpstreamResponse,
    UpstreamResult,
)
from ..logging_conf import get_logger

__all__ = [
    "SITEVERIFY_URL",
    "ENTERPRISE_API_BASE",
    "UpstreamClient",
    "LegacyClient",
    "EnterpriseClient",
    "build_client",
]

logger = get_logger("service.upstream")

SITEVERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
ENTERPRISE_API_BASE = "https://recaptchaenterprise.googleapis.com/v1"

# Upstream error bodies are kept (truncated) in the UpstreamError message, which is logged only.
_DETAIL_LIMIT = 200


class UpstreamClient(ABC):
    """Base for a reCAPTCHA API client.

    Subclasses build the request and name the response model; sending,
    status checking and parsing live here.
    """

    variant: Variant
    response_model: type[UpstreamResponse]

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def check_credentials(self, credentials: UpstreamCredentials) -> None:
        """Raise ConfigurationError if `credentials` cannot authenticate a call."""
        if not credentials.secret_key:
            raise ConfigurationError("RECAPTCHA_SECRET_KEY is not configured")

    @abstractmethod
    def build_request(
        self, token: str, credentials: UpstreamCredentials, remote_ip: Optional[str]
    ) -> dict[str, Any]:
        """Return keyword arguments for `httpx.AsyncClient.post`."""

    async def verify(
        self,
        token: str,
        credentials: UpstreamCredentials,
        *,
        remote_ip: Optional[str] = None,
    ) -> UpstreamResult:
        """Send one verification request and interpret the answer.

        Raises:
            ConfigurationError: credentials are incomplete (no request is sent).
            UpstreamError: transport failure, non-2xx status, or an unusable body.
        """
        self.check_credentials(credentials)
        request_kwargs = self.build_request(token, credentials, remote_ip)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(**request_kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise UpstreamError(
                f"HTTP {status}: {e.response.text[:_DETAIL_LIMIT]}", upstream_status=status
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"{type(e).__name__}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(
                "response is not JSON", upstream_status=response.status_code
            ) from e
        if not isinstance(body, dict):
            raise UpstreamError(
                "response is not a JSON object", upstream_status=response.status_code
            )

        try:
            parsed = self.response_model.model_validate(body)
        except ValidationError as e:
            raise UpstreamError(
                f"unexpected response shape: {e.error_count()} error(s)",
                upstream_status=response.status_code,
            ) from e

        result = parsed.to_result()
        logger.info(
            "upstream.response",
            extra={
                "event": "upstream_response",
                "variant": self.variant.value,
                "valid": result.valid,
                "score": result.score,
                "action": result.action,
                "invalid_reason": result.invalid_reason,
            },
        )
        return result


class LegacyClient(UpstreamClient):
    """reCAPTCHA v3 `siteverify` endpoint; secret and token go as query params."""

    variant = Variant.legacy
    response_model = SiteVerifyResponse

    def __init__(self, *, url: str = SITEVERIFY_URL, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._url = url

    def build_request(
        self, token: str, credentials: UpstreamCredentials, remote_ip: Optional[str]
    ) -> dict[str, Any]:
        params = {"secret": credentials.secret_key, "response": token}
        if remote_ip:
            params["remoteip"] = remote_ip
        return {"url": self._url, "params": params}


class EnterpriseClient(UpstreamClient):
    """reCAPTCHA Enterprise `assessments.create`, authenticated with an API key."""

    variant = Variant.enterprise
    response_model = AssessmentResponse

    def __init__(
        self,
        *,
        expected_action: str = "submit",
        api_base: str = ENTERPRISE_API_BASE,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._expected_action = expected_action
        self._api_base = api_base.rstrip("/")

    def check_credentials(self, credentials: UpstreamCredentials) -> None:
        if not credentials.secret_key or not credentials.project_id:
            raise ConfigurationError("API key or GOOGLE_CLOUD_PROJECT_ID is not configured")

    def build_request(
        self, token: str, credentials: UpstreamCredentials, remote_ip: Optional[str]
    ) -> dict[str, Any]:
        event: dict[str, Any] = {"token": token, "expectedAction": self._expected_action}
        if credentials.site_key:
            event["siteKey"] = credentials.site_key
        if remote_ip:
            event["userIpAddress"] = remote_ip
        return {
            "url": f"{self._api_base}/projects/{credentials.project_id}/assessments",
            "params": {"key": credentials.secret_key},
            "json": {"event": event},
        }


def build_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> UpstreamClient:
    """Return the client for `settings.variant`."""
    if settings.variant is Variant.enterprise:
        return EnterpriseClient(
            expected_action=settings.expected_action,
            timeout=settings.upstream_timeout,
            transport=transport,
        )
    return LegacyClient(timeout=settings.upstream_timeout, transport=transport)
