import json
from unittest import mock

import httpx
import pytest

from nscm.exceptions import (
    MalformedResponseError,
    MissingCredentialError,
    TransportError,
    UnexpectedStatusError,
)
from nscm.exchange import (
    exchange_code,
    exchange_credentials,
    parse_auth_response,
    signin_endpoint,
    token_endpoint,
)

TOKEN_URL = "http://nodesource.example-registry.com/api-proxy/v1/oauth/token"
SIGNIN_URL = "https://nodesource.example-registry.com/-/signin"

PAYLOAD = {
    "jwt": "abc",
    "teams": [{"id": "t1", "name": "Acme", "role": "admin"}],
}


def test_endpoints() -> None:
    assert token_endpoint("nodesource.example-registry.com") == TOKEN_URL
    assert signin_endpoint("nodesource.example-registry.com") == SIGNIN_URL


def test_exchange_code_success(httpx_mock, settings) -> None:
    httpx_mock.add_response(url=TOKEN_URL, method="POST", json=PAYLOAD)

    result = exchange_code(settings, "code123", "verifier123")

    assert result.jwt == "abc"
    assert [team.id for team in result.teams] == ["t1"]
    assert result.teams[0].name == "Acme"
    assert result.teams[0].role == "admin"


def test_exchange_code_request_body(httpx_mock, settings) -> None:
    httpx_mock.add_response(url=TOKEN_URL, method="POST", json=PAYLOAD)

    exchange_code(settings, "code123", "verifier123")

    request = httpx_mock.get_request()
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {
        "grant_type": "authorization_code",
        "client_id": "client123",
        "code_verifier": "verifier123",
        "code": "code123",
        "redirect_uri": "https://example.com/callback",
    }


def test_exchange_credentials_request_body(httpx_mock, settings) -> None:
    httpx_mock.add_response(url=SIGNIN_URL, method="POST", json=PAYLOAD)

    result = exchange_credentials(settings, "me@example.com", "hunter2")

    assert result.jwt == "abc"
    request = httpx_mock.get_request()
    assert json.loads(request.content) == {
        "email": "me@example.com",
        "password": "hunter2",
    }


def test_uses_given_client_without_closing_it(httpx_mock, settings) -> None:
    httpx_mock.add_response(url=SIGNIN_URL, method="POST", json=PAYLOAD)

    with httpx.Client() as client:
        exchange_credentials(settings, "me@example.com", "pw", client=client)
        assert not client.is_closed


def test_unexpected_status_surfaces_body(httpx_mock, settings) -> None:
    httpx_mock.add_response(
        url=TOKEN_URL, method="POST", status_code=401, text="invalid_grant"
    )

    with pytest.raises(UnexpectedStatusError) as exc_info:
        exchange_code(settings, "bad-code", "verifier123")

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "invalid_grant"
    assert "invalid_grant" in str(exc_info.value)
    assert exc_info.value.kind == "unexpected_status"


def test_transport_failure(httpx_mock, settings) -> None:
    httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

    with pytest.raises(TransportError, match="Connection refused"):
        exchange_credentials(settings, "me@example.com", "pw")


def test_timeout_is_transport_failure(httpx_mock, settings) -> None:
    httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

    with pytest.raises(TransportError):
        exchange_code(settings, "code", "verifier")


def test_invalid_url_is_transport_failure(settings) -> None:
    client = mock.Mock(spec=httpx.Client)
    client.post.side_effect = httpx.InvalidURL(
        "Invalid non-printable ASCII character in URL"
    )

    with pytest.raises(TransportError, match="non-printable"):
        exchange_code(settings, "code", "verifier", client=client)


def test_non_json_body_is_malformed(httpx_mock, settings) -> None:
    httpx_mock.add_response(url=TOKEN_URL, method="POST", text="<html>oops</html>")

    with pytest.raises(MalformedResponseError) as exc_info:
        exchange_code(settings, "code", "verifier")

    assert "<html>oops</html>" in str(exc_info.value)


def test_missing_jwt(httpx_mock, settings) -> None:
    httpx_mock.add_response(url=SIGNIN_URL, method="POST", json={"teams": []})

    with pytest.raises(MissingCredentialError):
        exchange_credentials(settings, "me@example.com", "pw")


@pytest.mark.parametrize(
    "body",
    [
        "[]",
        '{"jwt": "abc", "teams": "nope"}',
        '{"jwt": "abc", "teams": [{"name": "no id"}]}',
        '{"jwt": "abc", "teams": [{"id": ""}]}',
        '{"jwt": 42}',
    ],
)
def test_shape_mismatch_is_malformed(body) -> None:
    with pytest.raises(MalformedResponseError):
        parse_auth_response(body)


@pytest.mark.parametrize("body", ['{"jwt": ""}', '{"jwt": null, "teams": []}', "{}"])
def test_empty_jwt_is_missing_credential(body) -> None:
    with pytest.raises(MissingCredentialError):
        parse_auth_response(body)


def test_missing_teams_defaults_to_empty() -> None:
    result = parse_auth_response('{"jwt": "abc"}')

    assert result.teams == []


def test_team_name_and_role_are_optional() -> None:
    result = parse_auth_response('{"jwt": "abc", "teams": [{"id": "t1"}]}')

    assert result.teams[0].name == ""
    assert result.teams[0].role == ""
