"""
Piemme — Composable prompt library

Short text prompts stored as files, composed by reference.

Markup:
    [[name]]          inline another prompt, recursively
    [[file:path]]     inline a file's text
    {{command}}       inline a shell command's output

Usage:
    piemme add greeting --content "Hello, World!"
    piemme add intro --content "Say [[greeting]] from {{whoami}}"
    piemme refs intro
    piemme resolve intro
    piemme config --set resolve.safe_mode=false
"""

__version__ = "0.1.0"

# Engine
from .engine import (
    resolve,
    resolve_commands_in_content,
    needs_resolution,
    PromptResolver,
    ResolveOptions,
    ResolveResult,
    PromptReference,
    FileReference,
    ShellCommandToken,
    CommandError,
    scan_prompt_refs,
    scan_file_refs,
    scan_commands,
    run_command,
    execute_safe,
    read_file,
)

# Store
from .store import Prompt, PromptStore

# Config (stays at root)
from .config import Config, ConfigManager, get_config, ResolveConfig, DisplayConfig

__all__ = [
    # Engine
    'resolve', 'resolve_commands_in_content', 'needs_resolution',
    'PromptResolver', 'ResolveOptions', 'ResolveResult',
    'PromptReference', 'FileReference', 'ShellCommandToken', 'CommandError',
    'scan_prompt_refs', 'scan_file_refs', 'scan_commands',
    'run_command', 'execute_safe', 'read_file',
    # Store
    'Prompt', 'PromptStore',
    # Config
    'Config', 'ConfigManager', 'get_config', 'ResolveConfig', 'DisplayConfig',
]
