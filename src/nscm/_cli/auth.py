"""Sign-in command for nscm CLI.

Supports two authentication modes:
1. Browser SSO via GitHub (--github) or Google (--google), PKCE code flow
2. Email and password (default)

On success the auth token is written to ~/.npmrc, the team registry to
./.npmrc, and both are cached in the settings store.
"""

import logging

import typer

from nscm.config import REGISTRY_KEY, TOKEN_KEY, SettingsStore, config_provider
from nscm.exceptions import NscmError
from nscm.signin import SigninOptions, signin

logger = logging.getLogger(__name__)


def signin_command(
    github: bool = typer.Option(
        False,
        "--github",
        help="Sign in through GitHub in your browser",
    ),
    google: bool = typer.Option(
        False,
        "--google",
        help="Sign in through Google in your browser",
    ),
) -> None:
    """Sign in and point npm at your team's registry.

    Without --github or --google you are asked for email and password.
    """
    try:
        options = SigninOptions(github=github, google=google)
    except ValueError:
        raise typer.BadParameter("--github and --google cannot be used together")

    try:
        settings = config_provider.get()
        result = signin("signin", None, options, settings=settings)
    except NscmError as e:
        logger.debug("signin failed (%s)", e.kind)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    store = SettingsStore()
    store.set(TOKEN_KEY, result.token)
    store.set(REGISTRY_KEY, result.registry)

    typer.echo("")
    typer.echo(f"Signed in to team: {result.team.name or result.team.id}")
    typer.echo(f"Auth token saved to {result.global_config_path}")
    typer.echo(f"Registry set to {result.registry} in {result.local_config_path}")
