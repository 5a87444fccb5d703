import jwt
import pytest

from pwgate.auth.tokens import SESSION_WINDOW_SECONDS, TokenIssuer, TokenStatus, TokenVerifier
from pwgate.errors import ConfigurationFault

from conftest import SIGNING_KEY

PEM_KEY = "-----BEGIN PUBLIC KEY-----\nMFkwEwYHKoZIzj0CAQYIKoZIzj0DAQcDQgAE\n-----END PUBLIC KEY-----\n"


def _decode(token: str) -> dict:
    return jwt.decode(token, SIGNING_KEY, algorithms=["HS256"], options={"verify_exp": False})


@pytest.mark.parametrize(
    "claims",
    [
        {},
        {"authenticated": True, "issuedAt": 1_700_000_000_000},
        {"authenticated": True, "note": "ünïcode", "tags": ["a", "b"]},
    ],
)
def test_issued_token_verifies_immediately(issuer, verifier, claims):
    token = issuer.issue(claims)
    assert verifier.verify(token) is True
    assert verifier.check(token) is TokenStatus.VALID


def test_session_credential_claims(issuer, clock):
    token = issuer.issue_session_credential()
    payload = _decode(token)
    assert payload["authenticated"] is True
    assert payload["issuedAt"] == int(clock.now * 1000)
    assert payload["exp"] == clock.now + SESSION_WINDOW_SECONDS


def test_algorithm_is_pinned_to_hs256(issuer):
    token = issuer.issue_session_credential()
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_caller_supplied_exp_is_overridden(issuer, clock):
    token = issuer.issue({"authenticated": True, "exp": clock.now + 10 * SESSION_WINDOW_SECONDS})
    assert _decode(token)["exp"] == clock.now + SESSION_WINDOW_SECONDS


def test_token_valid_until_just_before_window_end(issuer, verifier, clock):
    token = issuer.issue_session_credential()
    clock.advance(60 * 60)
    assert verifier.verify(token)
    clock.advance(SESSION_WINDOW_SECONDS - 60 * 60 - 0.001)
    assert verifier.verify(token)


def test_token_expires_at_window_end(issuer, verifier, clock):
    token = issuer.issue_session_credential()
    clock.advance(SESSION_WINDOW_SECONDS)
    assert verifier.check(token) is TokenStatus.EXPIRED
    clock.advance(0.5)
    assert verifier.verify(token) is False


def _tampered(token: str) -> str:
    header, payload, signature = token.split(".")
    flipped = "A" if signature[0] != "A" else "B"
    return ".".join([header, payload, flipped + signature[1:]])


@pytest.mark.parametrize(
    "make_token",
    [
        lambda t: "",
        lambda t: "not-a-token",
        lambda t: "a.b.c",
        lambda t: t[: len(t) // 2],
        lambda t: t + "x",
        _tampered,
        lambda t: TokenIssuer("some-other-signing-key-0123456789abcdef").issue_session_credential(),
        lambda t: jwt.encode(_decode(t), SIGNING_KEY, algorithm="HS512"),
        lambda t: jwt.encode(_decode(t), None, algorithm="none"),
        lambda t: jwt.encode({"authenticated": True}, SIGNING_KEY, algorithm="HS256"),
        lambda t: jwt.encode({"authenticated": True, "exp": "tomorrow"}, SIGNING_KEY, algorithm="HS256"),
    ],
    ids=[
        "empty",
        "garbage",
        "three-segments",
        "truncated",
        "trailing-junk",
        "bad-signature",
        "other-key",
        "hs512",
        "alg-none",
        "missing-exp",
        "non-numeric-exp",
    ],
)
def test_invalid_tokens_are_rejected_without_raising(make_token, verifier):
    token = make_token(TokenIssuer(SIGNING_KEY).issue_session_credential())
    assert verifier.verify(token) is False
    assert verifier.check(token) is TokenStatus.INVALID


def test_non_string_input_is_rejected(verifier):
    assert verifier.verify(None) is False
    assert verifier.verify(b"bytes") is False


def test_empty_key_is_configuration_fault():
    with pytest.raises(ConfigurationFault):
        TokenIssuer("").issue_session_credential()
    with pytest.raises(ConfigurationFault):
        TokenIssuer(None).issue({"authenticated": True})


def test_asymmetric_key_is_configuration_fault():
    with pytest.raises(ConfigurationFault):
        TokenIssuer(PEM_KEY).issue_session_credential()


def test_unusable_key_on_verify_is_classified(issuer):
    token = issuer.issue_session_credential()
    assert TokenVerifier("").check(token) is TokenStatus.UNUSABLE_KEY
    assert TokenVerifier(PEM_KEY).check(token) is TokenStatus.UNUSABLE_KEY
    assert TokenVerifier(PEM_KEY).verify(token) is False


def test_clock_read_once_per_issue():
    calls = []

    def counting_clock():
        calls.append(1)
        return 1_700_000_000.0

    TokenIssuer(SIGNING_KEY, clock=counting_clock).issue_session_credential()
    assert len(calls) == 1
