# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hmac


class PasswordAuthenticator:
    """Compares a submitted password against the single configured secret."""

    def __init__(self, password: str):
        self._expected = (password or "").encode("utf-8")

    def authenticate(self, candidate: str) -> bool:
        if not isinstance(candidate, str) or not candidate or not self._expected:
            return False
        # exact match, case-sensitive, no trimming
        return hmac.compare_digest(candidate.encode("utf-8"), self._expected)
