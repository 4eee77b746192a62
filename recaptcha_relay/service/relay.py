from __future__ import annotations

from typing import Optional

from ..config import Settings
from ..domain.decision import VerificationDecision, decide
from ..domain.errors import ConfigurationError, MissingTokenError, UpstreamError
from ..domain.result import Err, Ok, Result
from ..logging_conf import get_logger
from .upstream import UpstreamClient

logger = get_logger("service.relay")


class VerificationRelay:
    """Turns a client token into a VerificationDecision.

    Holds only immutable settings and a stateless upstream client, so one
    instance serves every request concurrently.
    """

    def __init__(self, settings: Settings, client: UpstreamClient) -> None:
        self.settings = settings
        self.client = client

    async def verify(
        self, token: Optional[str], *, remote_ip: Optional[str] = None
    ) -> Result[VerificationDecision]:
        """Verify `token` upstream and return Ok(decision) or Err(error).

        A negative decision (invalid token, low score) is still Ok; Err is
        reserved for a missing token, missing configuration and upstream failures.
        """
        if not isinstance(token, str) or not token.strip():
            return Err(MissingTokenError())

        credentials = self.settings.credentials
        try:
            self.client.check_credentials(credentials)
        except ConfigurationError as e:
            logger.error(
                "relay.config_missing",
                extra={
                    "event": "relay_config_missing",
                    "variant": self.client.variant.value,
                    "error": str(e),
                },
            )
            return Err(e)

        try:
            result = await self.client.verify(token, credentials, remote_ip=remote_ip)
        except UpstreamError as e:
            logger.error(
                "relay.upstream_error",
                extra={
                    "event": "relay_upstream_error",
                    "variant": self.client.variant.value,
                    "error": str(e),
                    "upstream_status": e.upstream_status,
                },
            )
            return Err(e)

        decision = decide(result, self.settings.score_threshold)
        logger.info(
            "relay.decision",
            extra={
                "event": "relay_decision",
                "variant": self.client.variant.value,
                "success": decision.success,
                "score": decision.score,
                "action": decision.action,
            },
        )
        return Ok(decision)
