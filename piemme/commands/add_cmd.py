"""
AddCommand — Create a prompt from text or a file
"""

import sys
from pathlib import Path
from typing import Optional, List

from ..commands.base import BaseCommand
from ..store import PromptStoreError


class AddCommand(BaseCommand):
    """Command for creating prompts."""

    def add(self, content: str, name: Optional[str] = None, tags: Optional[List[str]] = None):
        """
        Create a prompt.

        Args:
            content: Prompt body
            name: Explicit name (generated from the first line when omitted)
            tags: Tags to attach
        """
        symbols = self.symbols

        try:
            prompt = self.store.create(content, name=name, tags=tags)
        except PromptStoreError as e:
            print(f"{symbols.check_fail} {e}")
            return None

        print(f"{symbols.check_pass} Created prompt: {prompt.name}")
        if tags:
            print(f"  Tags: {', '.join(prompt.tags)}")
        print(f"\n  {symbols.arrow} Reference it as [[{prompt.name}]]")
        return prompt


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'add'


def register_parser(subparsers):
    """Register add command parser."""
    p = subparsers.add_parser('add', help='Create a new prompt')
    p.add_argument('name', nargs='?', help='Prompt name (default: derived from first line)')
    source = p.add_mutually_exclusive_group()
    source.add_argument('--content', '-c', help='Prompt text')
    source.add_argument('--file', '-f', help='Read prompt text from file ("-" for stdin)')
    p.add_argument('--tag', '-t', action='append', default=[], help='Tag (repeatable)')
    return p


def handle(cli, args):
    """Handle add command dispatch."""
    if args.file == '-':
        content = sys.stdin.read()
    elif args.file:
        try:
            content = Path(args.file).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Cannot read {args.file}: {e}")
            return None
    elif args.content is not None:
        content = args.content
    else:
        print("Usage: piemme add [NAME] --content TEXT")
        print("       piemme add [NAME] --file PATH")
        return None

    return cli._add_cmd.add(content, name=args.name, tags=args.tag)
