"""PKCE (RFC 7636) verifier and S256 challenge generation."""

import base64
import hashlib
import secrets
from dataclasses import dataclass

VERIFIER_BYTES = 32


@dataclass(frozen=True)
class PkceSecret:
    """Verifier/challenge pair for a single authorization exchange. Never persisted."""

    verifier: str
    challenge: str


def base64url_encode(data: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def challenge_for(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier.

    The digest is taken over the verifier exactly as it is sent to the token
    endpoint, which recomputes it for comparison.
    """
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64url_encode(digest)


def generate_pkce() -> PkceSecret:
    """Generate PKCE code verifier and challenge."""
    verifier = base64url_encode(secrets.token_bytes(VERIFIER_BYTES))
    return PkceSecret(verifier=verifier, challenge=challenge_for(verifier))
