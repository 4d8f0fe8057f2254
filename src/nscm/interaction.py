"""Operator interaction: line prompts and browser launch."""

import logging
import webbrowser
from typing import Protocol

import typer

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    def ask(self, prompt: str) -> str: ...

    def ask_secret(self, prompt: str) -> str: ...

    def echo(self, message: str) -> None: ...


class Browser(Protocol):
    def open(self, url: str) -> bool: ...


class TyperPrompter:
    """Blocking terminal prompts."""

    def ask(self, prompt: str) -> str:
        return typer.prompt(prompt, prompt_suffix="")

    def ask_secret(self, prompt: str) -> str:
        return typer.prompt(prompt, prompt_suffix="", hide_input=True)

    def echo(self, message: str) -> None:
        typer.echo(message)


class SystemBrowser:
    """Opens URLs with the platform's default browser."""

    def open(self, url: str) -> bool:
        try:
            return webbrowser.open(url)
        except webbrowser.Error as e:
            logger.debug("Could not launch browser: %s", e)
            return False
