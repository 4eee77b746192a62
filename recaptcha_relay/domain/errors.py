from __future__ import annotations

from typing import Optional

__all__ = [
    "RelayError",
    "MissingTokenError",
    "ConfigurationError",
    "UpstreamError",
]


class RelayError(Exception):
    """Base class for failures that stop a verification from producing a decision.

    `code` is a stable machine code and `status_code` the HTTP status the API
    answers with; `public_message` is the only text the client ever sees.
    """

    code: str = "relay_error"
    status_code: int = 500
    public_message: str = "Verification failed due to server error"


class MissingTokenError(RelayError):
    code = "missing_token"
    status_code = 400
    public_message = "reCAPTCHA token is required"

    def __init__(self, message: str = "token is missing or blank") -> None:
        super().__init__(message)


class ConfigurationError(RelayError):
    code = "configuration_error"
    public_message = "Server configuration error"


class UpstreamError(RelayError):
    """The verification provider could not be reached or answered unusably."""

    code = "upstream_error"

    def __init__(self, message: str, *, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
