from __future__ import annotations

import ipaddress
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..domain.errors import RelayError, UpstreamError
from ..domain.result import Err
from ..logging_conf import get_logger
from ..service.relay import VerificationRelay
from .models import ErrorResponse, VerificationDecision, VerifyRequest

router = APIRouter()
logger = get_logger("api")


def get_relay(request: Request) -> VerificationRelay:
    return request.app.state.relay


def client_ip(request: Request) -> Optional[str]:
    """Return the peer address if it is a real IP literal, else None."""
    host = request.client.host if request.client else None
    if not host:
        return None
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        return None


def error_response(error: RelayError) -> JSONResponse:
    """Map a relay error to its HTTP status and a client-safe JSON body."""
    upstream_status = error.upstream_status if isinstance(error, UpstreamError) else None
    body = ErrorResponse(
        message=error.public_message, error=error.code, upstream_status=upstream_status
    )
    return JSONResponse(status_code=error.status_code, content=body.model_dump())


@router.post(
    "/api/verify-recaptcha",
    response_model=VerificationDecision,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    summary="Verify a reCAPTCHA token",
)
async def verify_recaptcha(
    request: Request,
    body: Optional[VerifyRequest] = None,
    relay: VerificationRelay = Depends(get_relay),
):
    """Verify the token upstream. Low scores and invalid tokens still answer 200."""
    token = body.token if body else None
    result = await relay.verify(token, remote_ip=client_ip(request))
    if isinstance(result, Err):
        logger.info(
            "verify.rejected",
            extra={
                "event": "verify_rejected",
                "error_code": result.error.code,
                "status_code": result.error.status_code,
            },
        )
        return error_response(result.error)
    return result.value
