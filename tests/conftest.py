"""
Shared pytest fixtures for the Piemme test suite.

Usage in tests:
    def test_something(lookup):
        result = resolve("Say [[greeting]]", lookup, execute_commands=False)

    def test_with_store(prompt_store):
        prompt_store.create("Hello", name="greeting")

    def test_cli(piemme_cli):
        piemme_cli._resolve_cmd.resolve("greeting")
"""

import pytest

from piemme.config import ConfigManager
from piemme.store import PromptStore


SAMPLE_PROMPTS = {
    "greeting": "Hello, World!",
    "nested": "Start [[greeting]] End",
    "circular_a": "A references [[circular_b]]",
    "circular_b": "B references [[circular_a]]",
    "self_ref": "I am [[self_ref]]",
}


class CountingLookup:
    """Dict-backed lookup that records every name it is asked for."""

    def __init__(self, prompts):
        self.prompts = dict(prompts)
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        return self.prompts.get(name)


@pytest.fixture
def lookup():
    """
    Lookup over SAMPLE_PROMPTS that counts calls.

    Example:
        def test_calls(lookup):
            resolve("[[greeting]]", lookup)
            assert lookup.calls == ["greeting"]
    """
    return CountingLookup(SAMPLE_PROMPTS)


@pytest.fixture
def make_lookup():
    """Factory for CountingLookup over arbitrary prompts."""
    return CountingLookup


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.piemme and PIEMME_* variables."""
    user_dir = tmp_path / "home" / ".piemme"
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", user_dir)
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", user_dir / "config.yaml")
    for env_key in ConfigManager.ENV_OVERRIDES:
        monkeypatch.delenv(env_key, raising=False)
    monkeypatch.setenv("PIEMME_ASCII_ONLY", "1")
    return user_dir


@pytest.fixture
def project_dir(tmp_path):
    """Empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def prompt_store(project_dir):
    """Empty PromptStore under project_dir/.piemme/prompts."""
    return PromptStore(project_dir / ".piemme" / "prompts")


@pytest.fixture
def piemme_cli(project_dir):
    """
    PiemmeCLI over an empty project.

    Example:
        def test_add(piemme_cli):
            piemme_cli._add_cmd.add("Hello", name="greeting")
    """
    from piemme.cli import PiemmeCLI
    return PiemmeCLI(project_dir)
