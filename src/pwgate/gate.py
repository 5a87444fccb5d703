# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Request
from fastapi.responses import RedirectResponse

from pwgate.auth.tokens import TokenStatus, TokenVerifier
from pwgate.settings import GateSettings

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    UNPROTECTED = "unprotected"
    NO_CREDENTIAL = "no_credential"
    CREDENTIAL_INVALID = "credential_invalid"
    CREDENTIAL_VALID = "credential_valid"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    token_status: Optional[TokenStatus] = None

    @property
    def forward(self) -> bool:
        return self.state in (GateState.UNPROTECTED, GateState.CREDENTIAL_VALID)

    @property
    def clear_credential(self) -> bool:
        return self.state is GateState.CREDENTIAL_INVALID


class RouteGate:
    """Per-request access decision for paths under the protected prefix.

    Stateless: each request is judged only from its path and its session
    cookie. Anything other than a valid token is denied (fail closed), and a
    token that was presented but rejected is cleared from the client.

    Instances are also usable as FastAPI HTTP middleware:
        app.middleware("http")(gate)
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        *,
        protected_prefix: str = "/projects/",
        login_path: str = "/login",
        cookie_name: str = "auth-token",
    ):
        self.verifier = verifier
        self.protected_prefix = protected_prefix
        self.login_path = login_path
        self.cookie_name = cookie_name

    @classmethod
    def from_settings(cls, settings: GateSettings, verifier: TokenVerifier) -> "RouteGate":
        return cls(
            verifier,
            protected_prefix=settings.protected_prefix,
            login_path=settings.login_path,
            cookie_name=settings.cookie_name,
        )

    def is_protected(self, path: str) -> bool:
        return path.startswith(self.protected_prefix)

    def evaluate(self, path: str, credential: Optional[str]) -> GateDecision:
        if not self.is_protected(path):
            return GateDecision(GateState.UNPROTECTED)
        if credential is None:
            return GateDecision(GateState.NO_CREDENTIAL)

        try:
            status = self.verifier.check(credential)
        except Exception as e:
            logger.error(f"Token verifier raised for {path}: {e}")
            return GateDecision(GateState.CREDENTIAL_INVALID)

        if status is TokenStatus.VALID:
            return GateDecision(GateState.CREDENTIAL_VALID, status)
        return GateDecision(GateState.CREDENTIAL_INVALID, status)

    async def __call__(self, request: Request, call_next):
        path = str(request.url.path)
        decision = self.evaluate(path, request.cookies.get(self.cookie_name))
        if decision.forward:
            return await call_next(request)

        if decision.clear_credential:
            status = decision.token_status.value if decision.token_status else "error"
            logger.info(f"Rejected session token ({status}) for {path}; clearing cookie")
        else:
            logger.debug(f"No session token for {path}; redirecting to {self.login_path}")

        resp = RedirectResponse(url=self.login_path, status_code=302)
        if decision.clear_credential:
            resp.delete_cookie(self.cookie_name, path="/")
        return resp
