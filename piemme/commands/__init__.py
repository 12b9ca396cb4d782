"""
Commands — One module per CLI subcommand

A command module provides:
- an XxxCommand(BaseCommand) with the actual behavior, attached to PiemmeCLI
- register_parser(subparsers) to declare its argparse subparser(s)
- handle(cli, args) to route parsed arguments to the XxxCommand

COMMAND_NAME names the subcommand; modules serving several subcommands
list them in COMMAND_NAMES instead.
"""

import importlib
from typing import Any, Callable, Dict, List

from .base import BaseCommand

# Subcommands appear in --help in this order
COMMAND_MODULES = [
    'add_cmd',
    'list_cmd',
    'search_cmd',
    'manage_cmd',
    'resolve_cmd',
    'refs_cmd',
    'config_cmd',
]

# subcommand name -> handle(cli, args)
_handlers: Dict[str, Callable[[Any, Any], Any]] = {}


def _names_for(module) -> List[str]:
    default = getattr(module, 'COMMAND_NAME', module.__name__.rsplit('.', 1)[-1].replace('_cmd', ''))
    return list(getattr(module, 'COMMAND_NAMES', [default]))


def register_all(subparsers) -> None:
    """Add every command module's subparsers and remember its handler."""
    _handlers.clear()

    for module_name in COMMAND_MODULES:
        module = importlib.import_module(f'.{module_name}', __package__)
        module.register_parser(subparsers)
        for name in _names_for(module):
            _handlers[name] = module.handle


def dispatch(command: str, cli: Any, args: Any) -> Any:
    """
    Run the handler registered for command.

    Raises:
        KeyError: command was never registered
    """
    handler = _handlers.get(command)
    if handler is None:
        raise KeyError(f"Unknown command: {command}. Available: {', '.join(_handlers)}")
    return handler(cli, args)


def get_registered_commands() -> List[str]:
    """Registered subcommand names, in registration order."""
    return list(_handlers)


__all__ = [
    "BaseCommand",
    "COMMAND_MODULES",
    "register_all",
    "dispatch",
    "get_registered_commands",
]
