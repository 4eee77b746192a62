#!/usr/bin/env python3
"""Smoke-test a running relay end to end.

Steps:
- wait for /health
- submit one token to /api/verify-recaptcha
- log the decision; exit 0 if the relay answered with a decision (HTTP 200)
"""
from __future__ import annotations

import asyncio
import sys
from typing import Optional

import httpx

from recaptcha_relay.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import verify_token, wait_for_health
from runner.types import SmokeError

setup_logging()
logger = get_logger("runner")


async def run_smoke(
    *,
    base_url: str,
    token: str,
    timeout_s: float = 20.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    try:
        await wait_for_health(base_url, timeout_s, transport=transport)
        answer = await verify_token(base_url, token, transport=transport)
    except SmokeError as e:
        logger.error("runner.failed", extra={"event": "runner_failed", "error": str(e)})
        return 1

    logger.info(
        "runner.summary",
        extra={
            "component": "runner",
            "event": "summary",
            "status_code": answer.status_code,
            "decision": answer.body,
        },
    )
    return 0 if answer.answered else 1


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    code = asyncio.run(
        run_smoke(base_url=args.base_url, token=args.token, timeout_s=args.timeout)
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
