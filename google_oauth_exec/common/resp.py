"""Output helpers for the claim line and failure diagnostics."""

from __future__ import annotations

import json
from typing import Any, Mapping

from google_oauth_exec.common.google import ErrorKind, GoogleTokenError


def claims_line(claims: Mapping[str, Any]) -> str:
    """Return the claim set as a single line of compact, key-sorted JSON."""

    try:
        return json.dumps(
            dict(claims),
            separators=(",", ":"),
            sort_keys=True,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise GoogleTokenError(ErrorKind.SERIALIZATION_FAILURE, str(exc)) from exc


def error_line(kind: ErrorKind, message: str) -> str:
    """Return a standardized failure diagnostic."""

    return json.dumps({"error": kind.value, "message": message})
