"""Validate a Google ID token from the environment and print its claims."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Mapping, Sequence, TextIO

import requests as requests_lib
from google.auth.transport import requests
from pydantic import ValidationError

from google_oauth_exec import __version__
from google_oauth_exec.common.google import (
    ErrorKind,
    GoogleIdTokenVerifier,
    GoogleTokenError,
    Verifier,
    verify_id_token,
)
from google_oauth_exec.common.resp import claims_line, error_line
from google_oauth_exec.models import ExecSettings, ValidationOutcome

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="google-oauth-exec",
        description=(
            "Validate the Google ID token in GOOGLE_OAUTH_EXEC_INPUT_TOKEN against "
            "the audience in GOOGLE_OAUTH_EXEC_CLIENT_ID and print its claims as JSON."
        ),
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed for fetching Google's signing certificates",
    )
    parser.add_argument(
        "--clock-skew",
        type=int,
        default=None,
        help="Seconds of clock skew tolerated for iat/exp checks",
    )
    parser.add_argument("--log-level", default=None, help="Logging level for stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def validate(settings: ExecSettings, verifier: Verifier | None = None) -> ValidationOutcome:
    """Run the delegated verifier once and classify the result."""

    if verifier is None:
        with requests_lib.Session() as session:
            return validate(
                settings,
                GoogleIdTokenVerifier(
                    timeout_seconds=settings.timeout_seconds,
                    clock_skew_seconds=settings.clock_skew_seconds,
                    request=requests.Request(session),
                ),
            )

    try:
        claims = verify_id_token(settings.token, settings.client_id, verifier)
    except GoogleTokenError as exc:
        return ValidationOutcome.failure(exc.kind, exc.message)

    return ValidationOutcome.success(claims)


def _fail(stderr: TextIO, kind: ErrorKind, message: str) -> int:
    logger.info("Validation failed: %s", kind.value)
    print(error_line(kind, message), file=stderr)
    return kind.exit_code


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    verifier: Verifier | None = None,
) -> int:
    args = parse_args(argv)
    environ = os.environ if environ is None else environ
    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr

    try:
        settings = ExecSettings.from_env(
            environ,
            timeout_seconds=args.timeout,
            clock_skew_seconds=args.clock_skew,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        return _fail(stderr, ErrorKind.INVALID_CONFIGURATION, str(exc))

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, stream=stderr)

    outcome = validate(settings, verifier)
    if not outcome.ok:
        return _fail(stderr, outcome.error, outcome.message or "")

    try:
        line = claims_line(outcome.claims or {})
    except GoogleTokenError as exc:
        return _fail(stderr, exc.kind, exc.message)

    print(line, file=stdout)
    logger.debug("Printed %d claims", len(outcome.claims or {}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
