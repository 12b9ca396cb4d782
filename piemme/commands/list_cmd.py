"""
ListCommand — Prompt discovery

- list: names with a one-line preview, optionally filtered by tag
- show: raw content of one prompt, references untouched
"""

from typing import Optional

from ..commands.base import BaseCommand
from ..engine import has_commands, has_file_references, has_references
from ..presentation.symbols import safe_print, truncate


class ListCommand(BaseCommand):
    """Command for listing and showing prompts."""

    def list_prompts(self, tag: Optional[str] = None, full: bool = False):
        """
        List prompts with preview and markup hints.

        Args:
            tag: Only prompts carrying this tag
            full: Don't truncate previews
        """
        symbols = self.symbols
        prompts = self.store.list_prompts(tag=tag)

        if not prompts:
            if tag:
                print(f"No prompts tagged \"{tag}\".")
            else:
                print("No prompts yet.")
                print(f"\n  {symbols.arrow} Create one: piemme add NAME --content TEXT")
            return []

        title = f"Prompts tagged \"{tag}\"" if tag else "Prompts"
        print(f"{title} ({len(prompts)}):\n")

        width = max(len(p.name) for p in prompts)
        for prompt in prompts:
            markers = self._markers(prompt.content)
            line = f"  {prompt.name.ljust(width)}  {truncate(prompt.preview, full=full)}"
            if markers:
                line += f"  {markers}"
            safe_print(line)

        return prompts

    def show(self, name: str):
        """Print a prompt's raw content."""
        prompt = self.store.get(name)
        if prompt is None:
            self.report_missing(name)
            return None

        safe_print(prompt.content)
        return prompt

    def _markers(self, content: str) -> str:
        """Symbols for the kinds of markup a prompt contains."""
        symbols = self.symbols
        markers = []
        if has_references(content):
            markers.append(symbols.ref_valid)
        if has_file_references(content):
            markers.append(symbols.file_ref)
        if has_commands(content):
            markers.append(symbols.command)
        return " ".join(markers)


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAMES = ['list', 'show']


def register_parser(subparsers):
    """Register list and show command parsers."""
    p1 = subparsers.add_parser('list', help='List prompts')
    p1.add_argument('--tag', '-t', help='Only prompts with this tag')
    p1.add_argument('--full', action='store_true', help='Show full previews without truncation')

    p2 = subparsers.add_parser('show', help='Show raw prompt content')
    p2.add_argument('name', help='Prompt name')

    return p1, p2


def handle(cli, args):
    """Handle list or show command dispatch."""
    if args.command == 'list':
        return cli._list_cmd.list_prompts(tag=args.tag, full=args.full)
    elif args.command == 'show':
        return cli._list_cmd.show(args.name)
