"""
ResolveCommand — Produce a prompt's final text

Two-step flow so nothing runs unseen:
1. Resolve files and references with command execution off
2. If commands were found and safe mode is on, list them and ask;
   only on approval are they executed

Declining still prints the text, with {{command}} tokens left as written.
Diagnostics (cycles, depth limit, broken references) go to stderr so
stdout stays pipeable.
"""

import json
import sys
from dataclasses import replace
from typing import Optional, List

from ..commands.base import BaseCommand
from ..engine import PromptResolver, ResolveResult, find_and_validate_references
from ..presentation.symbols import safe_print


class ResolveCommand(BaseCommand):
    """Command for resolving prompts with the safe-mode gate."""

    def resolve(
        self,
        name: str,
        assume_yes: bool = False,
        no_exec: bool = False,
        output_format: Optional[str] = None,
        max_depth: Optional[int] = None,
    ) -> Optional[ResolveResult]:
        """
        Resolve a stored prompt and print the result.

        Args:
            name: Prompt name
            assume_yes: Skip the confirmation even in safe mode
            no_exec: Never run commands, only list them
            output_format: "json" for machine-readable output
            max_depth: Override configured recursion limit

        Returns:
            Final ResolveResult, or None if the prompt doesn't exist
        """
        prompt = self.store.get(name)
        if prompt is None:
            self.report_missing(name)
            return None

        resolver = self.resolver
        if max_depth is not None:
            try:
                resolver = PromptResolver(resolver.lookup, replace(resolver.options, max_depth=max_depth))
            except ValueError as e:
                print(f"{self.symbols.check_fail} {e}")
                return None

        result = resolver.resolve(prompt.content, execute_commands=False)

        if result.commands and not no_exec:
            if assume_yes or not self.config.resolve.safe_mode or self._confirm_commands(result.commands):
                result = replace(result, content=resolver.execute_commands(result.content))
            else:
                print("Commands not executed.", file=sys.stderr)

        if output_format == "json":
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            safe_print(result.content)
            self._report_diagnostics(result, resolver.options.max_depth)

        return result

    def _confirm_commands(self, commands: List[str]) -> bool:
        """List commands and ask before running them."""
        symbols = self.symbols
        print(f"{symbols.check_warn} The following commands will be executed:\n", file=sys.stderr)
        for command in commands:
            print(f"  {symbols.command} {command}", file=sys.stderr)
        print("\nProceed? [y/N] ", end="", file=sys.stderr, flush=True)

        try:
            choice = input().strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False

        return choice in ('y', 'yes')

    def _report_diagnostics(self, result: ResolveResult, max_depth: int):
        """Warn about anything the resolver had to leave unresolved."""
        symbols = self.symbols

        if result.had_circular_refs:
            print(f"{symbols.check_warn} Circular reference detected; the loop was cut.", file=sys.stderr)
        if result.max_depth_exceeded:
            print(
                f"{symbols.check_warn} Reference depth limit reached "
                f"({max_depth}); deeper references left as written.",
                file=sys.stderr,
            )

        broken = [
            ref.name for ref in find_and_validate_references(result.content, self.store.names())
            if not ref.is_valid
        ]
        if broken:
            print(f"{symbols.check_warn} Unknown reference(s): {', '.join(sorted(set(broken)))}", file=sys.stderr)


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'resolve'


def register_parser(subparsers):
    """Register resolve command parser."""
    p = subparsers.add_parser('resolve', help='Print a prompt with references and commands resolved')
    p.add_argument('name', help='Prompt name')
    p.add_argument('--yes', '-y', action='store_true',
                   help='Run commands without asking (overrides safe mode)')
    p.add_argument('--no-exec', action='store_true',
                   help='Never run commands; leave {{...}} tokens in place')
    p.add_argument('--json', action='store_true',
                   help='Output the full result as JSON')
    p.add_argument('--max-depth', type=int, metavar='N',
                   help='Override the reference depth limit')
    return p


def handle(cli, args):
    """Handle resolve command dispatch."""
    return cli._resolve_cmd.resolve(
        args.name,
        assume_yes=args.yes,
        no_exec=args.no_exec,
        output_format="json" if args.json else None,
        max_depth=args.max_depth,
    )
