"""
CLI -- Command interface

Prompts live as markdown files under .piemme/prompts/ and compose by
reference:

    [[name]]          inline another prompt (recursively)
    [[file:path]]     inline a file, relative to the project directory
    {{command}}       inline a shell command's output

Commands never run unseen while safe mode is on (the default):
'piemme resolve' lists them and asks first.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import ConfigManager
from .engine import PromptResolver
from .store import PromptStore
from .presentation.symbols import get_symbols
from .commands.add_cmd import AddCommand
from .commands.list_cmd import ListCommand
from .commands.search_cmd import SearchCommand
from .commands.manage_cmd import ManageCommand
from .commands.resolve_cmd import ResolveCommand
from .commands.refs_cmd import RefsCommand
from .commands.config_cmd import ConfigCommand
from . import __version__


logger = logging.getLogger(__name__)


class PiemmeCLI:
    """Command-line interface for the Piemme prompt library."""

    def __init__(self, project_dir: Path):
        self.project_dir = Path(project_dir).resolve()
        self.piemme_dir = self.project_dir / ".piemme"

        self.config_manager = ConfigManager(self.project_dir)
        self.config = self.config_manager.load()

        self.symbols = get_symbols(self.config.display.symbols)

        self.store = PromptStore(self.piemme_dir / "prompts")

        # File references and commands are relative to the project directory
        self.resolver = PromptResolver(
            self.store.lookup,
            self.config.resolve.to_options(base_dir=self.project_dir),
        )

        self._add_cmd = AddCommand(self)
        self._list_cmd = ListCommand(self)
        self._search_cmd = SearchCommand(self)
        self._manage_cmd = ManageCommand(self)
        self._resolve_cmd = ResolveCommand(self)
        self._refs_cmd = RefsCommand(self)
        self._config_cmd = ConfigCommand(self)

        logger.debug("Project %s, prompts in %s", self.project_dir, self.store.prompts_dir)


def main():
    """Entry point for the piemme console script."""
    parser = argparse.ArgumentParser(
        description="Piemme -- Composable prompt library",
        epilog="Reference prompts with [[name]], files with [[file:path]], commands with {{cmd}}."
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("PIEMME_PROJECT_PATH", "."),
        help='Project directory (default: PIEMME_PROJECT_PATH or current)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log resolution details to stderr'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'piemme {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Each module under commands/ adds its own subparser
    from .commands import register_all, dispatch
    register_all(subparsers)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    cli = PiemmeCLI(Path(args.project))

    try:
        outcome = dispatch(args.command, cli, args)
    except KeyError as e:
        print(f"Error: {e}")
        parser.print_help()
        sys.exit(2)

    # Handlers return None or False when they could not do what was asked
    if outcome is None or outcome is False:
        sys.exit(1)


if __name__ == '__main__':
    main()
