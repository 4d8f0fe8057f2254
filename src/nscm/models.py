"""Identity provider response models."""

from pydantic import BaseModel, ConfigDict, Field


class Team(BaseModel):
    """A team membership returned by the identity provider."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str = ""
    role: str = ""


class AuthResult(BaseModel):
    """Parsed sign-in response.

    ``jwt`` is optional here so that a response without it can be reported
    as a missing credential rather than as a malformed body.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    jwt: str | None = None
    teams: list[Team] = Field(default_factory=list)
