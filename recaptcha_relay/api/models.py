from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..domain.decision import VerificationDecision


class VerifyRequest(BaseModel):
    """Body of POST /api/verify-recaptcha."""
    token: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body returned with 4xx/5xx: the decision shape plus a machine error code.

    `upstream_status` is the provider's HTTP status when it answered with an error.
    """
    success: bool = False
    score: Optional[float] = None
    message: str
    error: Optional[str] = None
    upstream_status: Optional[int] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "reCAPTCHA Verification API is running"


__all__ = ["VerifyRequest", "VerificationDecision", "ErrorResponse", "HealthResponse"]
