"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Client settings and explicit environment loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import get_args

from .types import RequestOptions, ResponseType


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_response_type(name: str, default: ResponseType) -> ResponseType:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    allowed = get_args(ResponseType)
    if value not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)}, got {raw!r}")
    return value  # type: ignore[return-value]


def _env_timeout(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    if raw.strip().lower() in ("", "none", "off"):
        return None
    return float(raw)


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """Explicit settings used by the client builder and the bundled transport."""

    base_url: str | None = None
    timeout_s: float | None = 30.0
    response_type: ResponseType = "json"
    follow_redirects: bool = True
    verify_ssl: bool = True
    user_agent: str | None = None

    @staticmethod
    def from_env() -> "ClientSettings":
        """Load settings from environment variables."""
        return ClientSettings(
            base_url=os.getenv("ECHO_HTTP_BASE_URL") or None,
            timeout_s=_env_timeout("ECHO_HTTP_TIMEOUT_S", 30.0),
            response_type=_env_response_type("ECHO_HTTP_RESPONSE_TYPE", "json"),
            follow_redirects=_env_flag("ECHO_HTTP_FOLLOW_REDIRECTS", True),
            verify_ssl=_env_flag("ECHO_HTTP_VERIFY_SSL", True),
            user_agent=os.getenv("ECHO_HTTP_USER_AGENT") or None,
        )

    def default_options(self) -> RequestOptions:
        """Instance-level request options derived from these settings."""
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}
        return RequestOptions(
            headers=headers,
            timeout=self.timeout_s,
            response_type=self.response_type,
        )
