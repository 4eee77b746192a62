from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RelayAnswer:
    """HTTP status and JSON body the relay returned for one token."""

    status_code: int
    body: dict[str, Any]

    @property
    def answered(self) -> bool:
        """True when the relay produced a decision (HTTP 200), pass or fail."""
        return self.status_code == 200


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class VerifyError(SmokeError):
    """Raised when the verify endpoint cannot be reached after retries."""
