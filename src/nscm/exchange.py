"""Token exchange with the auth proxy.

Two ways to obtain a JWT and the user's teams:
1. Authorization code (PKCE) exchange after browser SSO
2. Direct email/password sign-in

Both endpoints answer 200 with ``{"jwt": ..., "teams": [{id, name, role}, ...]}``.
"""

import logging

import httpx
from pydantic import ValidationError

from nscm.config import SessionSettings
from nscm.exceptions import (
    MalformedResponseError,
    MissingCredentialError,
    TransportError,
    UnexpectedStatusError,
)
from nscm.models import AuthResult

logger = logging.getLogger(__name__)


def token_endpoint(auth_proxy: str) -> str:
    return f"http://{auth_proxy}/api-proxy/v1/oauth/token"


def signin_endpoint(auth_proxy: str) -> str:
    return f"https://{auth_proxy}/-/signin"


def parse_auth_response(body: str, source: str = "auth proxy") -> AuthResult:
    """Parse a sign-in response body.

    Raises:
        MalformedResponseError: If the body is not the expected JSON shape.
        MissingCredentialError: If the JWT is absent or empty.
    """
    try:
        result = AuthResult.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponseError(
            f"signin failed: error parsing response from {source}",
            detail=body or str(e),
        ) from e

    if not result.jwt:
        raise MissingCredentialError()

    return result


def _post_json(
    url: str,
    payload: dict[str, str],
    timeout: float,
    client: httpx.Client | None = None,
) -> AuthResult:
    own_client = client is None
    http_client = client or httpx.Client(timeout=timeout)

    logger.debug("POST %s", url)
    try:
        response = http_client.post(url, json=payload)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransportError(
            "signin failed: unexpected error receiving access token",
            detail=str(e) or type(e).__name__,
        ) from e
    finally:
        if own_client:
            http_client.close()

    logger.debug("POST %s -> %s", url, response.status_code)
    if response.status_code != 200:
        raise UnexpectedStatusError(url, response.status_code, response.text)

    return parse_auth_response(response.text, source=url)


def exchange_code(
    settings: SessionSettings,
    code: str,
    code_verifier: str,
    *,
    client: httpx.Client | None = None,
) -> AuthResult:
    """Exchange an authorization code for a JWT and team list."""
    return _post_json(
        token_endpoint(settings.auth_proxy),
        {
            "grant_type": "authorization_code",
            "client_id": settings.client_id,
            "code_verifier": code_verifier,
            "code": code,
            "redirect_uri": settings.redirect_uri,
        },
        settings.timeout,
        client=client,
    )


def exchange_credentials(
    settings: SessionSettings,
    email: str,
    password: str,
    *,
    client: httpx.Client | None = None,
) -> AuthResult:
    """Sign in with email and password."""
    return _post_json(
        signin_endpoint(settings.auth_proxy),
        {"email": email, "password": password},
        settings.timeout,
        client=client,
    )
