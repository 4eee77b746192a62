from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .domain.decision import SCORE_THRESHOLD

__all__ = [
    "Variant",
    "UpstreamCredentials",
    "Settings",
    "load_settings",
]


class Variant(str, Enum):
    legacy = "legacy"
    enterprise = "enterprise"


class UpstreamCredentials(BaseModel):
    """Secrets sent to the upstream with every verification."""

    model_config = ConfigDict(frozen=True)

    secret_key: Optional[str] = None  # legacy secret, or the Enterprise API key
    project_id: Optional[str] = None
    site_key: Optional[str] = None


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and never mutated."""

    model_config = ConfigDict(frozen=True)

    variant: Variant = Variant.legacy
    credentials: UpstreamCredentials = UpstreamCredentials()
    expected_action: str = "submit"
    score_threshold: float = Field(SCORE_THRESHOLD, ge=0.0, le=1.0)
    upstream_timeout: float = Field(10.0, gt=0.0)
    allowed_origins: list[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    log_level: str = "INFO"


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _parse_origins(raw: str | None) -> list[str]:
    if not raw:
        return ["*"]
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment (after loading a local .env, if any).

    Pass `env` explicitly to bypass os.environ and .env entirely.

    Raises:
        ValueError: on an unknown variant or malformed numbers; pydantic.ValidationError
            (a ValueError subclass) on out-of-range values.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    raw_variant = (env.get("RECAPTCHA_VARIANT") or Variant.legacy.value).strip().lower()
    try:
        variant = Variant(raw_variant)
    except ValueError as e:
        raise ValueError(
            f"RECAPTCHA_VARIANT must be one of {[v.value for v in Variant]}, got {raw_variant!r}"
        ) from e

    raw_port = env.get("PORT") or "3000"
    try:
        port = int(raw_port, 10)
    except ValueError as e:
        raise ValueError(f"PORT must be an integer, got {raw_port!r}") from e

    # Ranges are enforced by the Settings field constraints.
    return Settings(
        variant=variant,
        credentials=UpstreamCredentials(
            secret_key=_blank_to_none(env.get("RECAPTCHA_SECRET_KEY")),
            project_id=_blank_to_none(env.get("GOOGLE_CLOUD_PROJECT_ID")),
            site_key=_blank_to_none(env.get("RECAPTCHA_SITE_KEY")),
        ),
        expected_action=env.get("RECAPTCHA_EXPECTED_ACTION") or "submit",
        score_threshold=_parse_float(env, "RECAPTCHA_SCORE_THRESHOLD", SCORE_THRESHOLD),
        upstream_timeout=_parse_float(env, "UPSTREAM_TIMEOUT", 10.0),
        allowed_origins=_parse_origins(env.get("ALLOWED_ORIGINS")),
        host=env.get("HOST") or "0.0.0.0",
        port=port,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
