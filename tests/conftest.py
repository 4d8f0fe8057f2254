import os
import typing
from pathlib import Path

import pytest

from nscm.config import SessionSettings, clear_config_cache, config_provider


class FakePrompter:
    """Scripted answers for prompts; records everything shown."""

    def __init__(
        self, answers: list[str] | None = None, secrets: list[str] | None = None
    ):
        self.answers = list(answers or [])
        self.secrets = list(secrets or [])
        self.prompts: list[str] = []
        self.secret_prompts: list[str] = []
        self.messages: list[str] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0)

    def ask_secret(self, prompt: str) -> str:
        self.secret_prompts.append(prompt)
        return self.secrets.pop(0)

    def echo(self, message: str) -> None:
        self.messages.append(message)


class FakeBrowser:
    def __init__(self, opens: bool = True):
        self.opens = opens
        self.urls: list[str] = []

    def open(self, url: str) -> bool:
        self.urls.append(url)
        return self.opens


@pytest.fixture
def make_prompter() -> type[FakePrompter]:
    return FakePrompter


@pytest.fixture
def make_browser() -> type[FakeBrowser]:
    return FakeBrowser


@pytest.fixture
def settings() -> SessionSettings:
    return SessionSettings(
        client_id="client123",
        auth_proxy="nodesource.example-registry.com",
        redirect_uri="https://example.com/callback",
        auth_domain="auth.example.com",
    )


@pytest.fixture
def temp_home(tmp_path, monkeypatch) -> Path:
    """Isolated home and working directories."""
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()

    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(project)
    clear_config_cache()

    return home


@pytest.fixture(scope="function", autouse=True)
def cleared_nscm_env_vars() -> typing.Generator[None, None, None]:
    """Clear NSCM_* environment variables for the duration of the test."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("NSCM_")}
    for key in saved:
        del os.environ[key]
    try:
        yield
    finally:
        os.environ.update(saved)
        config_provider.reset()
