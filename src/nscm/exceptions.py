"""nscm exceptions.

This module provides exception classes for sign-in and configuration errors,
with clear error messages that can be propagated to CLI output. Every class
carries a ``kind`` identifying the failure for callers that need to branch on it.
"""


class NscmError(Exception):
    """Base exception for all nscm errors."""

    kind = "error"


class ConfigurationError(NscmError):
    """Required settings are missing or invalid."""

    kind = "configuration"


class SigninError(NscmError):
    """Sign-in failed.

    Attributes:
        status_code: HTTP status code (if available)
        detail: Diagnostic detail, e.g. the raw response body
    """

    kind = "signin"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
    ):
        self.status_code = status_code
        self.detail = detail
        # Build a clear message
        parts = [message]
        if status_code:
            parts.append(f"(HTTP {status_code})")
        if detail:
            parts.append(f": {detail}")
        super().__init__(" ".join(parts))


class TransportError(SigninError):
    """The request could not be sent or timed out."""

    kind = "transport"


class UnexpectedStatusError(SigninError):
    """The identity provider answered with a status other than 200.

    The raw response body is kept in ``detail``.
    """

    kind = "unexpected_status"

    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(
            f"signin failed: unexpected response from {url}",
            status_code=status_code,
            detail=body or None,
        )


class MalformedResponseError(SigninError):
    """The response body is not the expected JSON shape."""

    kind = "malformed_response"


class MissingCredentialError(SigninError):
    """The response parsed but carried no JWT."""

    kind = "missing_credential"

    def __init__(self, detail: str | None = None):
        super().__init__("signin failed: did not receive JWT", detail=detail)


class TeamResolutionError(SigninError):
    """No team could be bound to the sign-in."""

    kind = "team_resolution"


class NoTeamsAvailableError(TeamResolutionError):
    """The identity provider returned no team memberships."""

    kind = "no_teams"

    def __init__(self):
        super().__init__("post-signin config failed: no teams available for user")


class InvalidTeamSelectionError(TeamResolutionError):
    """The operator's team selection does not name a listed team."""

    kind = "invalid_team_selection"

    def __init__(self, selection: str | None = None):
        super().__init__(
            "post-signin config failed: invalid team",
            detail=f"selection {selection!r}" if selection is not None else None,
        )


class SubstitutionError(SigninError):
    """The team id could not be substituted into the auth proxy hostname."""

    kind = "substitution"

    def __init__(self, auth_proxy: str, placeholder: str):
        self.auth_proxy = auth_proxy
        self.placeholder = placeholder
        super().__init__(
            "signin failed: could not construct registry URL",
            detail=f"'{placeholder}' not found in auth proxy host '{auth_proxy}'",
        )


class ConfigFileError(NscmError):
    """Reading or writing a configuration file failed.

    The file on disk is left as it was before the update.
    """

    kind = "file_io"

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not update {path}: {reason}")
