"""
BaseCommand — What every subcommand can reach

Commands hold the PiemmeCLI they were created by and read the shared
store, config and resolver from it. Nothing is built per command.
"""

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..cli import PiemmeCLI
    from ..config import Config, ConfigManager
    from ..engine import PromptResolver
    from ..presentation import SymbolSet
    from ..store import PromptStore


class BaseCommand:
    """Shared accessors and messages for CLI commands."""

    def __init__(self, cli: 'PiemmeCLI'):
        self._cli = cli

    @property
    def project_dir(self) -> Path:
        return self._cli.project_dir

    @property
    def piemme_dir(self) -> Path:
        """The project's .piemme/ directory."""
        return self._cli.piemme_dir

    @property
    def store(self) -> 'PromptStore':
        return self._cli.store

    @property
    def config(self) -> 'Config':
        return self._cli.config

    @property
    def config_manager(self) -> 'ConfigManager':
        return self._cli.config_manager

    @property
    def symbols(self) -> 'SymbolSet':
        return self._cli.symbols

    @property
    def resolver(self) -> 'PromptResolver':
        """Resolver over the store, with file and command paths relative to the project."""
        return self._cli.resolver

    def report_missing(self, name: str):
        """Print a not-found message with close matches."""
        print(f"No prompt named \"{name}\".")
        suggestions = self.store.similar_names(name)
        if suggestions:
            print(f"\nDid you mean: {', '.join(suggestions)}?")
        print("\nTry: piemme list")
