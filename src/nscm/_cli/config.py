"""Configuration commands for nscm CLI.

Settings are stored in ~/.nscm/config.json.
"""

import typer

from nscm.config import (
    REGISTRY_KEY,
    STORE_KEYS,
    TOKEN_KEY,
    SettingsStore,
    config_provider,
)
from nscm.exceptions import ConfigurationError

app = typer.Typer(help="Manage nscm CLI configuration")

SETTABLE_KEYS = tuple(STORE_KEYS.values())


def _check_key(key: str) -> None:
    if key not in SETTABLE_KEYS:
        typer.echo(f"Error: Unknown setting '{key}'", err=True)
        typer.echo(f"Known settings: {', '.join(SETTABLE_KEYS)}")
        raise typer.Exit(1)


@app.command("show")
def show_config() -> None:
    """Show current settings and the cached sign-in."""
    store = SettingsStore()

    typer.echo("Configuration:")
    typer.echo(f"  Settings file: {store.path}")
    typer.echo("")

    typer.echo("Settings:")
    try:
        settings = config_provider.get()
    except ConfigurationError as e:
        typer.echo(f"  (incomplete) {e}")
    else:
        typer.echo(f"  Client ID: {settings.client_id}")
        typer.echo(f"  Auth proxy: {settings.auth_proxy}")
        typer.echo(f"  Auth domain: {settings.auth_domain}")
        typer.echo(f"  Redirect URI: {settings.redirect_uri}")
        typer.echo(f"  Registry placeholder: {settings.registry_placeholder}")
        typer.echo(f"  Timeout: {settings.timeout}s")

    typer.echo("")
    typer.echo("Session:")
    registry = store.get(REGISTRY_KEY)
    token = store.get(TOKEN_KEY)
    typer.echo(f"  Registry: {registry or '(not set)'}")
    if token:
        typer.echo(f"  Token: {token[:20]}...")
    else:
        typer.echo("  Token: (not signed in)")


@app.command("get")
def get_setting(
    key: str = typer.Argument(..., help="Setting name, e.g. 'authProxy'"),
) -> None:
    """Print a stored setting."""
    _check_key(key)
    value = SettingsStore().get(key)
    if value is None:
        typer.echo(f"Setting '{key}' is not set.")
        raise typer.Exit(1)
    typer.echo(str(value))


@app.command("set")
def set_setting(
    key: str = typer.Argument(..., help="Setting name, e.g. 'authProxy'"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Store a setting.

    Examples:
        nscm config set authProxy nodesource.example.com
        nscm config set clientId abc123
    """
    _check_key(key)
    store = SettingsStore()
    store.set(key, value)
    config_provider.reset()
    typer.echo(f"Set {key} = {value}")
    typer.echo(f"Config saved to: {store.path}")
