"""Google ID token verification helpers."""

from __future__ import annotations

import enum
import functools
import logging
from typing import Any, Callable, Mapping

import requests as requests_lib
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token as google_id_token

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
REDACTED = "<redacted>"

Verifier = Callable[[str, str], Mapping[str, Any]]


class ErrorKind(str, enum.Enum):
    MISSING_INPUT = "MissingInput"
    INVALID_CONFIGURATION = "InvalidConfiguration"
    TOKEN_INVALID = "TokenInvalid"
    TOKEN_EXPIRED = "TokenExpired"
    AUDIENCE_MISMATCH = "AudienceMismatch"
    ISSUER_UNTRUSTED = "IssuerUntrusted"
    KEY_RETRIEVAL_FAILURE = "KeyRetrievalFailure"
    VERIFIER_TIMEOUT = "VerifierTimeout"
    SERIALIZATION_FAILURE = "SerializationFailure"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    ErrorKind.MISSING_INPUT: 2,
    ErrorKind.INVALID_CONFIGURATION: 2,
    ErrorKind.TOKEN_INVALID: 3,
    ErrorKind.TOKEN_EXPIRED: 4,
    ErrorKind.AUDIENCE_MISMATCH: 5,
    ErrorKind.ISSUER_UNTRUSTED: 6,
    ErrorKind.KEY_RETRIEVAL_FAILURE: 7,
    ErrorKind.VERIFIER_TIMEOUT: 8,
    ErrorKind.SERIALIZATION_FAILURE: 9,
}

# google-auth reports verification failures through exception messages only.
_MESSAGE_KINDS = (
    ("Token expired", ErrorKind.TOKEN_EXPIRED),
    ("wrong audience", ErrorKind.AUDIENCE_MISMATCH),
    ("Wrong issuer", ErrorKind.ISSUER_UNTRUSTED),
    ("Could not fetch certificates", ErrorKind.KEY_RETRIEVAL_FAILURE),
)


class GoogleTokenError(ValueError):
    """Raised when a Google ID token cannot be validated."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


def _is_timeout(exc: BaseException) -> bool:
    candidates = [exc.__cause__, *exc.args]
    return any(isinstance(candidate, requests_lib.exceptions.Timeout) for candidate in candidates)


def classify_error(exc: Exception) -> ErrorKind:
    """Map a google-auth verification failure onto an ``ErrorKind``."""

    if isinstance(exc, GoogleTokenError):
        return exc.kind
    if isinstance(exc, google_exceptions.TransportError):
        if _is_timeout(exc):
            return ErrorKind.VERIFIER_TIMEOUT
        return ErrorKind.KEY_RETRIEVAL_FAILURE

    text = str(exc)
    for needle, kind in _MESSAGE_KINDS:
        if needle in text:
            return kind
    return ErrorKind.TOKEN_INVALID


class GoogleIdTokenVerifier:
    """Validate ID tokens against Google's published signing certificates.

    Certificate retrieval, signature, expiry, issuer and audience checks are
    all performed by ``google.oauth2.id_token.verify_oauth2_token``. This
    class only bounds the certificate fetch and passes the clock skew along.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        clock_skew_seconds: int = 0,
        request: Any = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.clock_skew_seconds = clock_skew_seconds
        self._request = request if request is not None else requests.Request()

    def __call__(self, token: str, audience: str) -> dict[str, Any]:
        request = functools.partial(self._request, timeout=self.timeout_seconds)
        return google_id_token.verify_oauth2_token(
            token,
            request,
            audience,
            clock_skew_in_seconds=self.clock_skew_seconds,
        )


def redact_token(message: str, token: str) -> str:
    """Strip the token, and its bytes repr as google-auth prints it, from ``message``."""

    # Longest first so the escaped repr is not left half-replaced.
    forms = sorted({token, repr(token.encode("utf-8"))[2:-1]}, key=len, reverse=True)
    for form in forms:
        if form:
            message = message.replace(form, REDACTED)
    return message


def verify_id_token(
    token: str,
    audience: str,
    verifier: Verifier | None = None,
) -> dict[str, Any]:
    """Verify a Google ID token and return the decoded claims."""

    if not token or not token.strip():
        raise GoogleTokenError(ErrorKind.MISSING_INPUT, "Missing token")
    if not audience or not audience.strip():
        raise GoogleTokenError(ErrorKind.MISSING_INPUT, "Missing audience")

    if verifier is None:
        verifier = GoogleIdTokenVerifier()

    try:
        claims = verifier(token, audience)
    except (ValueError, google_exceptions.GoogleAuthError) as exc:
        kind = classify_error(exc)
        message = redact_token(str(exc), token)
        logger.info("Failed to verify Google ID token (%s): %s", kind.value, message)
        raise GoogleTokenError(kind, message) from exc

    return dict(claims)
