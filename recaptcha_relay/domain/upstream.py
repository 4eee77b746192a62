from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "UpstreamResult",
    "UpstreamResponse",
    "SiteVerifyResponse",
    "TokenProperties",
    "RiskAnalysis",
    "AssessmentResponse",
]


@dataclass(frozen=True)
class UpstreamResult:
    """What either reCAPTCHA flavour said about a token, in one shape.

    `score` is None when the provider returned none (e.g. v2 keys, or an
    Enterprise token that failed validation).
    """

    valid: bool
    score: Optional[float] = None
    action: Optional[str] = None
    timestamp: Optional[str] = None
    hostname: Optional[str] = None
    invalid_reason: Optional[str] = None


class UpstreamResponse(BaseModel):
    """A provider response body that can be read as an UpstreamResult."""

    @abstractmethod
    def to_result(self) -> UpstreamResult: ...


# ------------------------
# Legacy: /recaptcha/api/siteverify
# ------------------------
class SiteVerifyResponse(UpstreamResponse):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    score: Optional[float] = None
    action: Optional[str] = None
    challenge_ts: Optional[str] = None
    hostname: Optional[str] = None
    error_codes: list[str] = Field(default_factory=list, alias="error-codes")

    def to_result(self) -> UpstreamResult:
        if not self.success:
            return UpstreamResult(
                valid=False,
                score=self.score,
                invalid_reason=", ".join(self.error_codes) or None,
            )
        return UpstreamResult(
            valid=True,
            score=self.score,
            action=self.action,
            timestamp=self.challenge_ts,
            hostname=self.hostname,
        )


# ------------------------
# Enterprise: projects/{id}/assessments
# ------------------------
class TokenProperties(BaseModel):
    valid: bool = False
    invalidReason: Optional[str] = None
    action: Optional[str] = None
    createTime: Optional[str] = None
    hostname: Optional[str] = None


class RiskAnalysis(BaseModel):
    score: Optional[float] = None
    reasons: list[str] = Field(default_factory=list)


class AssessmentResponse(UpstreamResponse):
    """Subset of the Enterprise Assessment resource the relay reads."""

    name: Optional[str] = None
    tokenProperties: Optional[TokenProperties] = None
    riskAnalysis: Optional[RiskAnalysis] = None

    def to_result(self) -> UpstreamResult:
        props = self.tokenProperties
        if props is None or not props.valid:
            return UpstreamResult(
                valid=False,
                invalid_reason=props.invalidReason if props else None,
            )
        score = self.riskAnalysis.score if self.riskAnalysis else None
        return UpstreamResult(
            valid=True,
            score=score if score is not None else 0.0,
            action=props.action,
            timestamp=props.createTime,
            hostname=props.hostname,
        )
