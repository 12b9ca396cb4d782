"""
RefsCommand — Inspect the markup inside one prompt

Shows, without resolving anything:
- [[name]] references, marked valid or broken against the store
- [[file:path]] references, marked valid if the file exists
- {{command}} tokens that resolving would run
"""

from typing import Any, Dict, Optional

from ..commands.base import BaseCommand
from ..engine import (
    find_and_validate_references,
    find_and_validate_file_references,
    find_commands,
)


class RefsCommand(BaseCommand):
    """Command for listing a prompt's references."""

    def refs(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Print reference validity for a prompt.

        Returns:
            Dict with 'prompts', 'files', 'commands' lists, or None if not found
        """
        symbols = self.symbols
        prompt = self.store.get(name)
        if prompt is None:
            self.report_missing(name)
            return None

        prompt_refs = find_and_validate_references(prompt.content, self.store.names())
        file_refs = find_and_validate_file_references(prompt.content, self.resolver.options.base_dir)
        commands = find_commands(prompt.content)

        print(f"References in {name}:\n")

        if not (prompt_refs or file_refs or commands):
            print("  (none)")
            return {"prompts": [], "files": [], "commands": []}

        if prompt_refs:
            print("Prompts:")
            for ref in prompt_refs:
                if ref.is_valid:
                    print(f"  {symbols.ref_valid} {ref.name}")
                else:
                    line = f"  {symbols.ref_broken} {ref.name} (not found)"
                    suggestions = self.store.similar_names(ref.name)
                    if suggestions:
                        line += f" {symbols.arrow} did you mean {', '.join(suggestions)}?"
                    print(line)

        if file_refs:
            print("Files:")
            for ref in file_refs:
                marker = symbols.file_ref if ref.is_valid else symbols.ref_broken
                status = "" if ref.is_valid else " (not found)"
                print(f"  {marker} {ref.path}{status}")

        if commands:
            print("Commands:")
            for command in commands:
                print(f"  {symbols.command} {command}")

        return {"prompts": prompt_refs, "files": file_refs, "commands": commands}


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'refs'


def register_parser(subparsers):
    """Register refs command parser."""
    p = subparsers.add_parser('refs', help='List references and commands in a prompt')
    p.add_argument('name', help='Prompt name')
    return p


def handle(cli, args):
    """Handle refs command dispatch."""
    return cli._refs_cmd.refs(args.name)
