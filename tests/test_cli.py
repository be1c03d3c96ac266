# Tests for cli.py

import json
from unittest.mock import AsyncMock, patch

import pytest

from helpers import AUTH_URL, TOKEN_URL
from oauth2_client.cli import main
from oauth2_client.models import OperationResult, TokenResponse

BASE_ARGS = ["--client-id", "cli-client", "--authorization-url", AUTH_URL, "--token-url", TOKEN_URL]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CLIENT_ID", "CLIENT_SECRET", "AUTHORIZATION_URL", "TOKEN_URL", "REDIRECT_URI",
                 "SCOPES", "USE_PKCE", "REVOCATION_URL", "TIMEOUT"):
        monkeypatch.delenv(f"OAUTH2_{name}", raising=False)


def run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_url_command(capsys):
    assert run([*BASE_ARGS, "--scopes", "read", "url"]) == 0

    out, err = capsys.readouterr()
    assert out.startswith(f"{AUTH_URL}?")
    assert "client_id=cli-client" in out
    assert "code_challenge_method=S256" in out
    assert "state:" in err
    assert "code_verifier:" in err


def test_url_command_without_pkce(capsys):
    assert run([*BASE_ARGS, "--no-pkce", "url"]) == 0
    out, err = capsys.readouterr()
    assert "code_challenge" not in out
    assert "code_verifier:" not in err


def test_config_from_environment(monkeypatch, capsys):
    monkeypatch.setenv("OAUTH2_CLIENT_ID", "env-client")
    monkeypatch.setenv("OAUTH2_AUTHORIZATION_URL", AUTH_URL)
    monkeypatch.setenv("OAUTH2_TOKEN_URL", TOKEN_URL)

    assert run(["url"]) == 0
    assert "client_id=env-client" in capsys.readouterr().out


def test_missing_config(capsys):
    assert run(["url"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    main([])
    assert "usage:" in capsys.readouterr().out


def test_refresh_prints_token(capsys):
    token = TokenResponse(access_token="new", refresh_token="R1", expires_at=1_700_000_000.0)
    with patch("oauth2_client.cli.OAuth2Client.refresh", AsyncMock(return_value=OperationResult.succeeded(token))):
        assert run([*BASE_ARGS, "refresh", "--refresh-token", "R1"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["access_token"] == "new"
    assert data["refresh_token"] == "R1"


def test_refresh_failure_exit_code(capsys):
    failure = OperationResult.failed("refresh_failed", "Failed to refresh token")
    with patch("oauth2_client.cli.OAuth2Client.refresh", AsyncMock(return_value=failure)):
        assert run([*BASE_ARGS, "refresh", "--refresh-token", "R1"]) == 1
    assert "refresh_failed" in capsys.readouterr().err


def test_revoke_without_endpoint_succeeds(capsys):
    assert run([*BASE_ARGS, "revoke", "--token", "T1"]) == 0
    assert "Token revoked." in capsys.readouterr().err
