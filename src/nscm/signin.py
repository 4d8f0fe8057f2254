"""Sign-in flow.

Authenticates via browser SSO (GitHub or Google, PKCE code flow) or via
email/password, binds the session to one team and persists:
- the team registry's auth token in the global ~/.npmrc
- the team registry as ``registry`` in the local ./.npmrc

Any previously active ``registry`` in the local file is commented out rather
than deleted. The returned ``SessionResult`` is what callers cache.
"""

import logging
import urllib.parse
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import httpx

from nscm.authorize import Connection, build_authorization_url
from nscm.config import (
    NPMRC_FILENAME,
    SessionSettings,
    config_provider,
    get_global_npmrc_path,
    get_local_npmrc_path,
)
from nscm.exceptions import MissingCredentialError, SubstitutionError
from nscm.exchange import exchange_code, exchange_credentials
from nscm.interaction import Browser, Prompter, SystemBrowser, TyperPrompter
from nscm.models import AuthResult, Team
from nscm.pkce import generate_pkce
from nscm.rc import (
    DEFAULT_COMMENT_CHAR,
    comment_and_replace,
    replace_key,
    update_config,
)
from nscm.teams import resolve_team

logger = logging.getLogger(__name__)

NPMRC_REGISTRY_KEY = "registry"
AUTH_TOKEN_SUFFIX = ":_authToken"
GLOBAL_NPMRC_MODE = 0o600
LOCAL_NPMRC_MODE = 0o644

SSO_INTRO = "a browser will launch and ask you to sign in."
SSO_CODE_PROMPT = "once you have the authorization code, please enter it here: "


class SigninState(StrEnum):
    START = "start"
    SSO = "sso"
    EMAIL = "email"
    EXCHANGING = "exchanging"
    TEAM_RESOLVING = "team_resolving"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class SigninOptions:
    """Sign-in method flags. Neither flag set means email/password."""

    github: bool = False
    google: bool = False

    def __post_init__(self):
        if self.github and self.google:
            raise ValueError("github and google sign-in are mutually exclusive")

    @property
    def connection(self) -> Connection | None:
        if self.github:
            return Connection.GITHUB
        if self.google:
            return Connection.GOOGLE
        return None


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a successful sign-in."""

    token: str
    registry: str
    team: Team
    auth_token_key: str
    global_config_path: Path
    local_config_path: Path


def registry_url_for(settings: SessionSettings, team: Team) -> str:
    """Team registry URL: the auth proxy host with its placeholder replaced by the team id.

    Raises:
        SubstitutionError: If the placeholder is not part of the auth proxy host.
    """
    placeholder = settings.registry_placeholder
    if placeholder not in settings.auth_proxy:
        raise SubstitutionError(settings.auth_proxy, placeholder)
    registry = settings.auth_proxy.replace(placeholder, team.id, 1)
    return f"https://{registry}"


def auth_token_key_for(registry_url: str) -> str:
    """npm auth token key for a registry, e.g. ``//host/:_authToken``."""
    hostname = urllib.parse.urlsplit(registry_url).hostname
    return f"//{hostname}/{AUTH_TOKEN_SUFFIX}"


class SigninFlow:
    """One sign-in attempt.

    ``state`` moves START -> SSO | EMAIL -> EXCHANGING -> TEAM_RESOLVING ->
    PERSISTING -> DONE, or to FAILED on the first error, which is re-raised.
    """

    def __init__(
        self,
        settings: SessionSettings,
        prompter: Prompter | None = None,
        browser: Browser | None = None,
        client: httpx.Client | None = None,
        home: Path | None = None,
        cwd: Path | None = None,
    ) -> None:
        self.settings = settings
        self.prompter = prompter or TyperPrompter()
        self.browser = browser or SystemBrowser()
        self.client = client
        self.global_config_path = (
            home / NPMRC_FILENAME if home is not None else get_global_npmrc_path()
        )
        self.local_config_path = (
            cwd / NPMRC_FILENAME if cwd is not None else get_local_npmrc_path()
        )
        self.state = SigninState.START

    def _transition(self, state: SigninState) -> None:
        logger.debug("signin: %s -> %s", self.state, state)
        self.state = state

    def run(self, options: SigninOptions) -> SessionResult:
        try:
            if options.connection is not None:
                auth = self._sso(options.connection)
            else:
                auth = self._email()

            self._transition(SigninState.TEAM_RESOLVING)
            team = resolve_team(auth.teams, self.prompter)

            self._transition(SigninState.PERSISTING)
            result = self._persist(auth, team)
        except Exception:
            self._transition(SigninState.FAILED)
            raise

        self._transition(SigninState.DONE)
        return result

    def _sso(self, connection: Connection) -> AuthResult:
        self._transition(SigninState.SSO)
        pkce = generate_pkce()
        url = build_authorization_url(connection, self.settings, pkce.challenge)

        self.prompter.echo(SSO_INTRO)
        if not self.browser.open(url):
            self.prompter.echo(f"open a browser and navigate to: {url}")
        code = self.prompter.ask(SSO_CODE_PROMPT).strip()

        self._transition(SigninState.EXCHANGING)
        return exchange_code(self.settings, code, pkce.verifier, client=self.client)

    def _email(self) -> AuthResult:
        self._transition(SigninState.EMAIL)
        email = self.prompter.ask("email: ").strip()
        password = self.prompter.ask_secret("password: ")

        self._transition(SigninState.EXCHANGING)
        return exchange_credentials(
            self.settings, email, password, client=self.client
        )

    def _persist(self, auth: AuthResult, team: Team) -> SessionResult:
        jwt = auth.jwt
        if not jwt:
            raise MissingCredentialError()
        registry = registry_url_for(self.settings, team)
        auth_token_key = auth_token_key_for(registry)

        update_config(
            self.global_config_path,
            DEFAULT_COMMENT_CHAR,
            lambda lines: replace_key(lines, auth_token_key, jwt),
            mode=GLOBAL_NPMRC_MODE,
        )
        update_config(
            self.local_config_path,
            DEFAULT_COMMENT_CHAR,
            lambda lines: comment_and_replace(lines, NPMRC_REGISTRY_KEY, registry),
            mode=LOCAL_NPMRC_MODE,
        )
        logger.debug("Persisted registry %s for team %s", registry, team.id)

        return SessionResult(
            token=jwt,
            registry=registry,
            team=team,
            auth_token_key=auth_token_key,
            global_config_path=self.global_config_path,
            local_config_path=self.local_config_path,
        )


def signin(
    name: str | None,
    sub: str | None,
    options: SigninOptions,
    *,
    settings: SessionSettings | None = None,
    prompter: Prompter | None = None,
    browser: Browser | None = None,
    client: httpx.Client | None = None,
) -> SessionResult:
    """Run a sign-in with the method selected by ``options``.

    ``name`` and ``sub`` identify the invoking command and are only logged.
    """
    logger.debug("signin invoked as %s %s", name, sub)
    flow = SigninFlow(
        settings or config_provider.get(),
        prompter=prompter,
        browser=browser,
        client=client,
    )
    return flow.run(options)
