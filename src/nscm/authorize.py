"""Authorization URL for the browser-based SSO flow."""

import urllib.parse
from enum import StrEnum

from nscm.config import SessionSettings

SCOPE = "email offline_access openid"
DEVICE = "nscm"
RESPONSE_TYPE = "code"
CODE_CHALLENGE_METHOD = "S256"


class Connection(StrEnum):
    """Identity provider connections available for SSO."""

    GITHUB = "github"
    GOOGLE = "google-oauth2"


def audience_for(auth_domain: str) -> str:
    return f"https://{auth_domain}/userinfo"


def build_authorization_url(
    connection: Connection,
    settings: SessionSettings,
    code_challenge: str,
) -> str:
    """Build the URL the operator opens to sign in through ``connection``."""
    auth_params = {
        "connection": str(connection),
        "audience": audience_for(settings.auth_domain),
        "scope": SCOPE,
        "device": DEVICE,
        "response_type": RESPONSE_TYPE,
        "client_id": settings.client_id,
        "code_challenge": code_challenge,
        "code_challenge_method": CODE_CHALLENGE_METHOD,
        "redirect_uri": settings.redirect_uri,
    }
    query = urllib.parse.urlencode(auth_params, quote_via=urllib.parse.quote)
    return f"https://{settings.auth_domain}/authorize?{query}"
