# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from pwgate.auth.passwords import PasswordAuthenticator
from pwgate.auth.tokens import TokenIssuer, TokenVerifier
from pwgate.errors import AuthenticationFailure, MalformedRequest
from pwgate.gate import RouteGate
from pwgate.settings import GateSettings, cookie_settings

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
    if forwarded:
        return forwarded
    return request.client.host if request.client else "unknown"


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _read_password(request: Request) -> str:
    """Extract the ``password`` field from a JSON body. Raises MalformedRequest."""
    body = await request.body()
    if not body.strip():
        data = {}
    else:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedRequest("Invalid request body") from e
    if not isinstance(data, dict):
        raise MalformedRequest("Invalid request body")
    password = data.get("password")
    if not isinstance(password, str) or not password:
        raise MalformedRequest("Password is required")
    return password


def _safe_next(next_url: str, default: str) -> str:
    """Only local absolute paths are accepted as post-login targets."""
    s = (next_url or "").strip()
    if s.startswith("/") and not s.startswith("//") and "\\" not in s:
        return s
    return default


def create_app(settings: Optional[GateSettings] = None) -> FastAPI:
    settings = settings or GateSettings.from_env()

    issuer = TokenIssuer(settings.signing_key)
    verifier = TokenVerifier(settings.signing_key)
    authenticator = PasswordAuthenticator(settings.password)
    gate = RouteGate.from_settings(settings, verifier)

    app = FastAPI(title="pwgate")
    app.state.settings = settings
    app.state.issuer = issuer
    app.state.verifier = verifier
    app.state.authenticator = authenticator
    app.state.gate = gate

    app.middleware("http")(gate)

    def _set_session_cookie(resp, token: str) -> None:
        resp.set_cookie(
            settings.cookie_name,
            token,
            max_age=settings.session_max_age,
            **cookie_settings(settings),
        )

    def _render_login(request: Request, next_url: str, error: str = "", status_code: int = 200):
        ctx = {"next": next_url, "error": error, "login_path": settings.login_path}
        return templates.TemplateResponse(request, "login.html", ctx, status_code=status_code)

    # ------------------ Routes ------------------

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        return templates.TemplateResponse(
            request, "index.html", {"protected_prefix": settings.protected_prefix}
        )

    @app.post("/api/authenticate")
    async def authenticate_post(request: Request):
        client_ip = _client_ip(request)
        logger.info(f"Authentication request from {client_ip}")
        try:
            password = await _read_password(request)
            if not authenticator.authenticate(password):
                raise AuthenticationFailure("Invalid password")
            token = issuer.issue_session_credential()
        except MalformedRequest as e:
            logger.info(f"Malformed authentication request from {client_ip}: {e}")
            return _error(400, str(e))
        except AuthenticationFailure:
            logger.warning(f"Invalid password attempt from {client_ip}")
            return _error(401, "Invalid password")
        except Exception:
            logger.exception(f"Error processing authentication request from {client_ip}")
            return _error(500, "Internal server error")

        logger.info(f"Successful authentication from {client_ip}, token issued")
        resp = JSONResponse({"token": token, "message": "Authentication successful"})
        _set_session_cookie(resp, token)
        return resp

    @app.api_route("/api/authenticate", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"])
    def authenticate_method_not_allowed(request: Request):
        logger.info(f"Method not allowed - {request.method} from {_client_ip(request)}")
        return _error(405, "Method not allowed", headers={"Allow": "POST"})

    @app.get(settings.login_path, response_class=HTMLResponse)
    def login_get(request: Request, next: str = ""):
        target = _safe_next(next, settings.protected_prefix)
        if verifier.verify(request.cookies.get(settings.cookie_name, "")):
            return RedirectResponse(url=target, status_code=303)
        return _render_login(request, target)

    @app.post(settings.login_path)
    def login_post(request: Request, password: str = Form(""), next: str = Form("")):
        client_ip = _client_ip(request)
        target = _safe_next(next, settings.protected_prefix)
        if not password:
            logger.info(f"Missing password in login form from {client_ip}")
            return _render_login(request, target, "Password is required", status_code=400)
        if not authenticator.authenticate(password):
            logger.warning(f"Invalid password attempt from {client_ip}")
            return _render_login(request, target, "Invalid password", status_code=401)
        try:
            token = issuer.issue_session_credential()
        except Exception:
            logger.exception(f"Error issuing session token for {client_ip}")
            return _render_login(request, target, "Internal server error", status_code=500)

        logger.info(f"Successful login from {client_ip}")
        resp = RedirectResponse(url=target, status_code=303)
        _set_session_cookie(resp, token)
        return resp

    @app.api_route("/logout", methods=["GET", "POST"])
    def logout(request: Request):
        resp = RedirectResponse(url=settings.login_path, status_code=303)
        resp.delete_cookie(settings.cookie_name, path="/")
        return resp

    @app.get(settings.protected_prefix.rstrip("/") + "/{name:path}", response_class=HTMLResponse)
    def project_page(request: Request, name: str):
        return templates.TemplateResponse(request, "project.html", {"name": name or "index"})

    return app


app = create_app()
