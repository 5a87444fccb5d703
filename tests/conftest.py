import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import time

import pytest
from fastapi.testclient import TestClient

from pwgate.app import create_app
from pwgate.auth.tokens import TokenIssuer, TokenVerifier
from pwgate.settings import GateSettings

SIGNING_KEY = "test-signing-key-0123456789abcdef"
PASSWORD = "Open-Sesame"


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def issuer(clock) -> TokenIssuer:
    return TokenIssuer(SIGNING_KEY, clock=clock)


@pytest.fixture()
def verifier(clock) -> TokenVerifier:
    return TokenVerifier(SIGNING_KEY, clock=clock)


@pytest.fixture()
def settings() -> GateSettings:
    return GateSettings(signing_key=SIGNING_KEY, password=PASSWORD)


@pytest.fixture()
def client(settings) -> TestClient:
    # follow_redirects off so gate redirects can be asserted directly
    return TestClient(create_app(settings), follow_redirects=False)


@pytest.fixture()
def fresh_token() -> str:
    return TokenIssuer(SIGNING_KEY).issue_session_credential()


@pytest.fixture()
def expired_token() -> str:
    issued_at = time.time() - 25 * 60 * 60
    return TokenIssuer(SIGNING_KEY, clock=lambda: issued_at).issue_session_credential()
