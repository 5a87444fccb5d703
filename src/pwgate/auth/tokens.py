# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Mapping

import jwt

from pwgate.errors import ConfigurationFault

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_WINDOW_SECONDS = 24 * 60 * 60

Clock = Callable[[], float]


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"
    UNUSABLE_KEY = "unusable_key"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TokenIssuer:
    """Signs session tokens valid for 24 hours from issuance."""

    def __init__(self, signing_key: str, *, clock: Clock = time.time):
        self._key = signing_key
        self._clock = clock

    def issue(self, claims: Mapping[str, Any]) -> str:
        """Return a signed token carrying ``claims`` plus an ``exp`` claim.

        Raises ConfigurationFault when the signing key is empty or unusable.
        """
        return self._sign(claims, self._clock())

    def issue_session_credential(self) -> str:
        now = self._clock()
        return self._sign({"authenticated": True, "issuedAt": int(now * 1000)}, now)

    def _sign(self, claims: Mapping[str, Any], now: float) -> str:
        if not self._key:
            raise ConfigurationFault("Signing key is not configured")
        payload: Dict[str, Any] = dict(claims)
        payload["exp"] = now + SESSION_WINDOW_SECONDS
        try:
            return jwt.encode(payload, self._key, algorithm=ALGORITHM)
        except jwt.InvalidKeyError as e:
            raise ConfigurationFault(f"Signing key is unusable: {e}") from e


class TokenVerifier:
    """Checks signature, algorithm and expiry of session tokens. Never raises."""

    def __init__(self, signing_key: str, *, clock: Clock = time.time):
        self._key = signing_key
        self._clock = clock

    def check(self, token: str) -> TokenStatus:
        if not token or not isinstance(token, str):
            return TokenStatus.INVALID
        if not self._key:
            return TokenStatus.UNUSABLE_KEY
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[ALGORITHM],
                options={
                    "verify_signature": True,
                    # expiry is checked below against the injected clock
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["exp"],
                },
            )
        except jwt.InvalidKeyError as e:
            logger.debug(f"Signing key rejected during verification: {e}")
            return TokenStatus.UNUSABLE_KEY
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid session token: {e}")
            return TokenStatus.INVALID
        except Exception as e:
            logger.warning(f"Unexpected error verifying session token: {e}")
            return TokenStatus.INVALID

        exp = payload.get("exp")
        if not _is_number(exp):
            return TokenStatus.INVALID
        if self._clock() >= exp:
            return TokenStatus.EXPIRED
        return TokenStatus.VALID

    def verify(self, token: str) -> bool:
        return self.check(token) is TokenStatus.VALID
