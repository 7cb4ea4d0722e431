from __future__ import annotations

import time
from typing import Any

import pytest
from google.auth import crypt, jwt
from google.oauth2 import id_token as google_id_token

from google_oauth_exec.tests.tokens import CLIENT_ID, KEY_ID, SigningKey, generate_signing_key


@pytest.fixture(scope="session")
def signing_key() -> SigningKey:
    return generate_signing_key()


@pytest.fixture(scope="session")
def other_signing_key() -> SigningKey:
    return generate_signing_key()


@pytest.fixture
def google_claims() -> dict[str, Any]:
    now = int(time.time())
    return {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "123",
        "email": "user@example.com",
        "email_verified": True,
        "iat": now - 60,
        "exp": now + 3600,
    }


@pytest.fixture
def sign_token(signing_key: SigningKey):
    def _sign(claims: dict[str, Any], key: SigningKey | None = None) -> str:
        signer = crypt.RSASigner.from_string((key or signing_key).private_pem, KEY_ID)
        return jwt.encode(signer, claims).decode("ascii")

    return _sign


@pytest.fixture
def google_certs(monkeypatch: pytest.MonkeyPatch, signing_key: SigningKey) -> list[str]:
    """Serve the test certificate in place of Google's published certificates."""

    fetched: list[str] = []

    def _fetch_certs(_request: Any, certs_url: str) -> dict[str, str]:
        fetched.append(certs_url)
        return {KEY_ID: signing_key.cert_pem}

    monkeypatch.setattr(google_id_token, "_fetch_certs", _fetch_certs)
    return fetched
