# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from pwgate.auth.tokens import SESSION_WINDOW_SECONDS

logger = logging.getLogger(__name__)

# Development defaults, never meant for production.
DEV_SIGNING_KEY = "your-secret-key-change-in-production"
DEV_PASSWORD = "admin123"

_TRUTHY = {"1", "true", "yes", "y"}

# HS256 digest size
MIN_SIGNING_KEY_BYTES = 32


def _first_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


@dataclass(frozen=True)
class GateSettings:
    signing_key: str = DEV_SIGNING_KEY
    password: str = DEV_PASSWORD
    protected_prefix: str = "/projects/"
    login_path: str = "/login"
    cookie_name: str = "auth-token"
    cookie_secure: bool = False
    cookie_samesite: str = "lax"
    session_max_age: int = SESSION_WINDOW_SECONDS

    @classmethod
    def from_env(cls) -> "GateSettings":
        """Read configuration once from the environment, falling back to dev defaults."""
        signing_key = _first_env("PWGATE_SIGNING_KEY", "JWT_SECRET")
        if not signing_key:
            logger.warning("No signing key configured; using the development default")
            signing_key = DEV_SIGNING_KEY
        elif len(signing_key.encode("utf-8")) < MIN_SIGNING_KEY_BYTES:
            logger.warning(
                f"Signing key is shorter than {MIN_SIGNING_KEY_BYTES} bytes; use a longer random value"
            )

        password = _first_env("PWGATE_PASSWORD", "PROTECTED_PASSWORD")
        if not password:
            logger.warning("No protected password configured; using the development default")
            password = DEV_PASSWORD

        return cls(
            signing_key=signing_key,
            password=password,
            protected_prefix=os.getenv("PWGATE_PROTECTED_PREFIX", "/projects/"),
            login_path=os.getenv("PWGATE_LOGIN_PATH", "/login"),
            cookie_name=os.getenv("PWGATE_COOKIE_NAME", "auth-token"),
            cookie_secure=os.getenv("PWGATE_COOKIE_SECURE", "false").lower() in _TRUTHY,
            cookie_samesite=os.getenv("PWGATE_COOKIE_SAMESITE", "lax").lower(),
        )


def cookie_settings(settings: GateSettings) -> dict:
    return {
        "httponly": True,
        "samesite": settings.cookie_samesite,
        "secure": settings.cookie_secure,
        "path": "/",
    }
