"""
Commands — Scanning and running {{command}} tokens.

The scanner is pure. The executor is the only part of the engine that
starts processes. It does no gating of its own: asking the user before
anything runs is the caller's job (see the resolve command's safe mode).

Usage:
    from piemme.engine.commands import scan_commands, run_command, execute_safe

    for token in scan_commands("Today: {{date}}"):
        print(token.command)           # "date"

    try:
        output = run_command("git rev-parse HEAD")
    except CommandError as e:
        print(e.stderr)

    text = execute_safe("false")       # "<!-- Command failed: ... -->"
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import Iterator, List, Optional


logger = logging.getLogger(__name__)

COMMAND_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


@dataclass
class ShellCommandToken:
    """One occurrence of {{command}}."""
    full_match: str
    command: str
    start: int
    end: int


class CommandError(Exception):
    """
    Raised when a command cannot be run or exits non-zero.

    Carries the captured standard error when there is one, so the
    message reads like what the shell printed.
    """

    def __init__(self, command: str, message: str, exit_code: Optional[int] = None, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        self.message = message
        super().__init__(message)


# =============================================================================
# Scanning
# =============================================================================

def has_commands(content: str) -> bool:
    """
    Check if content contains any {{command}} token.

    Text without '{{' is answered without running the regex.
    """
    if "{{" not in content:
        return False
    return COMMAND_PATTERN.search(content) is not None


def scan_commands(content: str) -> Iterator[ShellCommandToken]:
    """Yield every {{command}} token in content, left to right, inner text trimmed."""
    if "{{" not in content:
        return
    for match in COMMAND_PATTERN.finditer(content):
        yield ShellCommandToken(
            full_match=match.group(0),
            command=match.group(1).strip(),
            start=match.start(),
            end=match.end(),
        )


def find_commands(content: str) -> List[str]:
    """List the trimmed command strings in content, in order."""
    return [token.command for token in scan_commands(content)]


# =============================================================================
# Execution
# =============================================================================

def _shell_args(command: str) -> List[str]:
    """Argument vector for the platform shell."""
    if os.name == "nt":
        return ["cmd", "/C", command]
    return ["sh", "-c", command]


def run_command(command: str, timeout: Optional[float] = None, cwd: Optional[str] = None) -> str:
    """
    Run a command through the platform shell and return its stdout.

    Args:
        command: Shell command line
        timeout: Seconds to wait before killing the process (None = no limit)
        cwd: Working directory (default: current)

    Returns:
        Standard output decoded as UTF-8 (invalid bytes replaced),
        whitespace untouched

    Raises:
        CommandError: spawn failure, I/O error, timeout, or non-zero exit
    """
    logger.debug("Running command: %s", command)

    try:
        result = subprocess.run(
            _shell_args(command),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(command, f"Command timed out after {timeout}s") from e
    except (OSError, ValueError) as e:
        # ValueError: arguments the OS cannot take, such as an embedded NUL
        raise CommandError(command, str(e)) from e

    stdout = result.stdout.decode("utf-8", errors="replace")
    stderr = result.stderr.decode("utf-8", errors="replace")

    if result.returncode != 0:
        message = stderr.strip() or f"Exit code: {result.returncode}"
        raise CommandError(command, message, exit_code=result.returncode, stderr=stderr)

    return stdout


def execute_safe(command: str, timeout: Optional[float] = None, cwd: Optional[str] = None) -> str:
    """
    Run a command, turning any failure into an inline comment.

    Never raises, so one bad command cannot abort a resolution.
    Trailing whitespace of successful output is stripped.
    """
    try:
        return run_command(command, timeout=timeout, cwd=cwd).rstrip()
    except CommandError as e:
        logger.warning("Command failed: %s (%s)", command, e.message)
        return f"<!-- Command failed: {e.message} -->"
