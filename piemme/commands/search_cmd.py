"""
SearchCommand — Find prompts by text

Case-insensitive substring match on names and content. Names that look
like a typo of the query are listed after the exact matches.
"""

from ..commands.base import BaseCommand
from ..presentation.symbols import safe_print, truncate


class SearchCommand(BaseCommand):
    """Command for searching prompts."""

    def search(self, query: str, fuzzy: bool = True, full: bool = False):
        """
        Print prompts matching query.

        Args:
            query: Text to look for
            fuzzy: Also list names close to query
            full: Don't truncate previews
        """
        matches = self.store.search(query, fuzzy=fuzzy)

        if not matches:
            print(f"No prompts match \"{query}\".")
            return []

        print(f"Matches for \"{query}\" ({len(matches)}):\n")
        width = max(len(p.name) for p in matches)
        for prompt in matches:
            safe_print(f"  {prompt.name.ljust(width)}  {truncate(prompt.preview, full=full)}")

        return matches


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'search'


def register_parser(subparsers):
    """Register search command parser."""
    p = subparsers.add_parser('search', help='Find prompts by name or content')
    p.add_argument('query', help='Text to search for')
    p.add_argument('--exact', action='store_true', help='Skip fuzzy name matches')
    p.add_argument('--full', action='store_true', help='Show full previews without truncation')
    return p


def handle(cli, args):
    """Handle search command dispatch."""
    return cli._search_cmd.search(args.query, fuzzy=not args.exact, full=args.full)
