from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .upstream import UpstreamResult

__all__ = [
    "SCORE_THRESHOLD",
    "MSG_SUCCESS",
    "MSG_LOW_SCORE",
    "MSG_INVALID_PREFIX",
    "VerificationDecision",
    "decide",
]

SCORE_THRESHOLD = 0.5

MSG_SUCCESS = "Verification successful"
MSG_LOW_SCORE = "Verification failed - score too low"
MSG_INVALID_PREFIX = "Token invalid"
_UNKNOWN_REASON = "Unknown reason"


class VerificationDecision(BaseModel):
    """Normalized pass/fail answer returned to the caller."""

    success: bool
    score: Optional[float] = None
    action: Optional[str] = None
    timestamp: Optional[str] = None
    hostname: Optional[str] = None
    message: str


def decide(result: UpstreamResult, threshold: float = SCORE_THRESHOLD) -> VerificationDecision:
    """Apply the validity check and score threshold to an upstream result.

    - invalid token      -> failure, "Token invalid: <reason>", score kept if the provider sent one
    - valid, score >= t  -> success
    - valid, score < t   -> failure, "score too low"

    A valid token without a score counts as score 0.
    """
    if not result.valid:
        return VerificationDecision(
            success=False,
            score=result.score,
            message=f"{MSG_INVALID_PREFIX}: {result.invalid_reason or _UNKNOWN_REASON}",
        )

    score = result.score if result.score is not None else 0.0
    passed = score >= threshold
    return VerificationDecision(
        success=passed,
        score=score,
        action=result.action,
        timestamp=result.timestamp,
        hostname=result.hostname,
        message=MSG_SUCCESS if passed else MSG_LOW_SCORE,
    )
