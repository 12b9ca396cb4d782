"""
ManageCommand — Change prompts that already exist

- delete: remove a prompt file (asks first unless --yes)
- rename: move a prompt to a new name
- duplicate: copy a prompt under a name derived from its first line
- edit: replace a prompt's body
- tag: add or remove tags

References are never rewritten. delete and rename point out the prompts
whose [[name]] references they leave broken.
"""

import sys
from pathlib import Path
from typing import List, Optional

from ..commands.base import BaseCommand
from ..store import PromptStoreError


class ManageCommand(BaseCommand):
    """Command for deleting, renaming, copying, editing and tagging prompts."""

    def delete(self, name: str, assume_yes: bool = False) -> bool:
        """
        Delete a prompt.

        Args:
            name: Prompt to delete
            assume_yes: Skip the confirmation

        Returns:
            True if deleted, False if declined or failed
        """
        symbols = self.symbols
        if not self.store.exists(name):
            self.report_missing(name)
            return False

        referrers = [n for n in self.store.referrers(name) if n != name]
        if not assume_yes and not self._confirm(f"Delete prompt \"{name}\"?", referrers):
            print("Not deleted.")
            return False

        try:
            self.store.delete(name)
        except PromptStoreError as e:
            print(f"{symbols.check_fail} {e}")
            return False

        print(f"{symbols.check_pass} Deleted prompt: {name}")
        self._warn_broken(name, referrers)
        return True

    def rename(self, old_name: str, new_name: str):
        """Rename a prompt; references to the old name are reported, not rewritten."""
        symbols = self.symbols
        if not self.store.exists(old_name):
            self.report_missing(old_name)
            return None

        referrers = [n for n in self.store.referrers(old_name) if n != old_name]
        try:
            prompt = self.store.rename(old_name, new_name)
        except PromptStoreError as e:
            print(f"{symbols.check_fail} {e}")
            return None

        print(f"{symbols.check_pass} Renamed '{old_name}' to '{new_name}'")
        self._warn_broken(old_name, referrers)
        return prompt

    def duplicate(self, name: str):
        """Copy a prompt's content and tags into a new prompt."""
        symbols = self.symbols
        if not self.store.exists(name):
            self.report_missing(name)
            return None

        try:
            copy = self.store.duplicate(name)
        except PromptStoreError as e:
            print(f"{symbols.check_fail} {e}")
            return None

        print(f"{symbols.check_pass} Duplicated as '{copy.name}'")
        return copy

    def edit(self, name: str, content: str):
        """Replace a prompt's body, keeping its name, id and tags."""
        symbols = self.symbols
        prompt = self.store.get(name)
        if prompt is None:
            self.report_missing(name)
            return None

        prompt.set_content(content)
        try:
            self.store.save(prompt)
        except PromptStoreError as e:
            print(f"{symbols.check_fail} {e}")
            return None

        print(f"{symbols.check_pass} Updated prompt: {name}")
        return prompt

    def tag(self, name: str, tags: List[str], remove: bool = False):
        """
        Add tags to a prompt, or remove them.

        Args:
            name: Prompt name
            tags: Tags to add or remove
            remove: Remove instead of add
        """
        symbols = self.symbols
        prompt = self.store.get(name)
        if prompt is None:
            self.report_missing(name)
            return None

        if remove:
            missing = [t for t in tags if not prompt.remove_tag(t)]
            for tag in missing:
                print(f"{symbols.check_warn} Not tagged \"{tag}\"")
        else:
            for tag in tags:
                prompt.add_tag(tag)

        try:
            self.store.save(prompt)
        except PromptStoreError as e:
            print(f"{symbols.check_fail} {e}")
            return None

        print(f"{symbols.check_pass} Tags for {name}: {', '.join(prompt.tags) or '(none)'}")
        return prompt

    def _confirm(self, question: str, referrers: List[str]) -> bool:
        symbols = self.symbols
        if referrers:
            print(f"{symbols.check_warn} Referenced by: {', '.join(referrers)}", file=sys.stderr)
        print(f"{question} [y/N] ", end="", file=sys.stderr, flush=True)

        try:
            choice = input().strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False

        return choice in ('y', 'yes')

    def _warn_broken(self, name: str, referrers: List[str]):
        if referrers:
            print(f"{self.symbols.check_warn} [[{name}]] is now broken in: {', '.join(referrers)}")


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAMES = ['delete', 'rename', 'duplicate', 'edit', 'tag']


def register_parser(subparsers):
    """Register delete, rename, duplicate, edit and tag command parsers."""
    p1 = subparsers.add_parser('delete', help='Delete a prompt')
    p1.add_argument('name', help='Prompt name')
    p1.add_argument('--yes', '-y', action='store_true', help='Delete without asking')

    p2 = subparsers.add_parser('rename', help='Rename a prompt')
    p2.add_argument('name', help='Current name')
    p2.add_argument('new_name', help='New name')

    p3 = subparsers.add_parser('duplicate', help='Copy a prompt under a generated name')
    p3.add_argument('name', help='Prompt name')

    p4 = subparsers.add_parser('edit', help='Replace a prompt\'s text')
    p4.add_argument('name', help='Prompt name')
    source = p4.add_mutually_exclusive_group(required=True)
    source.add_argument('--content', '-c', help='New prompt text')
    source.add_argument('--file', '-f', help='Read new text from file ("-" for stdin)')

    p5 = subparsers.add_parser('tag', help='Add or remove tags')
    p5.add_argument('name', help='Prompt name')
    p5.add_argument('tags', nargs='+', help='Tags')
    p5.add_argument('--remove', '-r', action='store_true', help='Remove the tags instead')

    return p1, p2, p3, p4, p5


def _read_source(args) -> Optional[str]:
    if args.file == '-':
        return sys.stdin.read()
    if args.file:
        try:
            return Path(args.file).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Cannot read {args.file}: {e}")
            return None
    return args.content


def handle(cli, args):
    """Handle prompt management command dispatch."""
    if args.command == 'delete':
        return cli._manage_cmd.delete(args.name, assume_yes=args.yes)
    elif args.command == 'rename':
        return cli._manage_cmd.rename(args.name, args.new_name)
    elif args.command == 'duplicate':
        return cli._manage_cmd.duplicate(args.name)
    elif args.command == 'edit':
        content = _read_source(args)
        if content is None:
            return None
        return cli._manage_cmd.edit(args.name, content)
    elif args.command == 'tag':
        return cli._manage_cmd.tag(args.name, args.tags, remove=args.remove)
