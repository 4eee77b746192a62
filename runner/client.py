from __future__ import annotations

import asyncio
import time
from typing import Optional

import httpx

from recaptcha_relay.logging_conf import get_logger
from runner.types import RelayAnswer, SmokeError, VerifyError

logger = get_logger("runner.client")


async def wait_for_health(
    base_url: str,
    timeout_s: float = 20.0,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Ping /health until it reports status "ok" or raise after a timeout."""
    deadline = time.monotonic() + timeout_s
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0, transport=transport) as client:
        while time.monotonic() < deadline:
            try:
                r = await client.get("/health")
                if r.status_code == 200 and r.json().get("status") == "ok":
                    logger.info("health.ok", extra={"event": "health_ok"})
                    return
            except (httpx.HTTPError, ValueError):
                pass
            await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def verify_token(
    base_url: str,
    token: str,
    *,
    retries: int = 3,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RelayAnswer:
    """POST `token` to the relay and return its answer, retrying transport errors.

    Any HTTP status (200, 400, 500) is an answer; only a relay that cannot be
    reached at all is retried.
    """
    last_err: Exception | None = None
    for attempt in range(retries):
        try:
            async with httpx.AsyncClient(
                base_url=base_url, timeout=30.0, transport=transport
            ) as client:
                r = await client.post("/api/verify-recaptcha", json={"token": token})
                body = r.json()
                logger.info(
                    "verify.answer",
                    extra={
                        "event": "verify_answer",
                        "status_code": r.status_code,
                        "success": body.get("success"),
                        "score": body.get("score"),
                        "attempt": attempt + 1,
                    },
                )
                return RelayAnswer(status_code=r.status_code, body=body)
        except (httpx.TransportError, ValueError) as e:
            last_err = e
            logger.warning(
                "verify.retry",
                extra={
                    "event": "verify_retry",
                    "attempt": attempt + 1,
                    "error": str(e),
                },
            )
    raise VerifyError(str(last_err) if last_err else "verify failed")
