import pytest
from pydantic import ValidationError

from google_oauth_exec.common.google import DEFAULT_TIMEOUT_SECONDS, ErrorKind
from google_oauth_exec.models import ExecSettings, ValidationOutcome


def test_settings_read_from_environment():
    settings = ExecSettings.from_env(
        {
            "GOOGLE_OAUTH_EXEC_INPUT_TOKEN": "tok",
            "GOOGLE_OAUTH_EXEC_CLIENT_ID": "client-abc",
            "GOOGLE_OAUTH_EXEC_TIMEOUT": "2.5",
            "GOOGLE_OAUTH_EXEC_CLOCK_SKEW": "30",
            "GOOGLE_OAUTH_EXEC_LOG_LEVEL": "debug",
        }
    )

    assert settings.token == "tok"
    assert settings.client_id == "client-abc"
    assert settings.timeout_seconds == 2.5
    assert settings.clock_skew_seconds == 30
    assert settings.log_level == "DEBUG"


def test_settings_defaults_and_empty_values():
    settings = ExecSettings.from_env({"GOOGLE_OAUTH_EXEC_TIMEOUT": ""})

    assert settings.token == ""
    assert settings.client_id == ""
    assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert settings.clock_skew_seconds == 0
    assert settings.log_level == "WARNING"


def test_token_is_not_in_repr():
    settings = ExecSettings(token="secret-token", client_id="client-abc")

    assert "secret-token" not in repr(settings)


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("GOOGLE_OAUTH_EXEC_TIMEOUT", "0"),
        ("GOOGLE_OAUTH_EXEC_TIMEOUT", "soon"),
        ("GOOGLE_OAUTH_EXEC_TIMEOUT", "inf"),
        ("GOOGLE_OAUTH_EXEC_CLOCK_SKEW", "-1"),
        ("GOOGLE_OAUTH_EXEC_CLOCK_SKEW", "3600"),
        ("GOOGLE_OAUTH_EXEC_LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_settings_are_rejected(name, value):
    with pytest.raises(ValidationError):
        ExecSettings.from_env({name: value})


def test_outcome_is_immutable():
    outcome = ValidationOutcome.success({"sub": "123"})

    with pytest.raises(ValidationError):
        outcome.claims = {}


def test_failure_outcome_exit_code():
    outcome = ValidationOutcome.failure(ErrorKind.KEY_RETRIEVAL_FAILURE, "offline")

    assert not outcome.ok
    assert outcome.exit_code == 7
    assert outcome.message == "offline"


def test_infinite_timeout_override_is_rejected():
    with pytest.raises(ValidationError):
        ExecSettings.from_env({}, timeout_seconds=float("inf"))
