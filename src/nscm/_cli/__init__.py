"""nscm CLI - Command line interface for nscm.

Usage:
    nscm signin [--github | --google]

    nscm config show
    nscm config get <key>
    nscm config set <key> <value>

Configuration:
    Settings are read from ~/.nscm/config.json and can be overridden with
    NSCM_CLIENT_ID, NSCM_AUTH_PROXY, NSCM_REDIRECT_URI, NSCM_AUTH_DOMAIN,
    NSCM_REGISTRY_PLACEHOLDER and NSCM_TIMEOUT.
"""

import logging

import typer

from nscm._cli import auth, config

# Main CLI app
app = typer.Typer(
    name="nscm",
    help="nscm CLI - sign in to certified modules registries",
    no_args_is_help=True,
)

# Add subcommands
app.command("signin")(auth.signin_command)
app.add_typer(config.app, name="config")


@app.command()
def version() -> None:
    """Show the nscm version."""
    try:
        from importlib.metadata import version as get_version

        ver = get_version("nscm")
    except Exception:
        ver = "unknown"

    typer.echo(f"nscm {ver}")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
) -> None:
    """nscm CLI - sign in to certified modules registries.

    Use 'nscm signin' to authenticate and configure npm for your team.
    Use 'nscm config' commands to inspect and change settings.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


if __name__ == "__main__":
    app()
