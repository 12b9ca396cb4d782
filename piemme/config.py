"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables
  2. Project config (.piemme/config.yaml)
  3. User config (~/.piemme/config.yaml)
  4. Defaults
"""

import copy
import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .engine.result import ResolveOptions, DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT
from .presentation.symbols import get_symbols


logger = logging.getLogger(__name__)


TRUE_VALUES = ('true', '1', 'yes', 'on')


@dataclass
class ResolveConfig:
    """Prompt resolution preferences."""
    safe_mode: bool = True  # Confirm before running {{commands}}
    max_depth: int = DEFAULT_MAX_DEPTH
    command_timeout: Optional[float] = None  # None = wait for the command to exit

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not isinstance(self.max_depth, int) or not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            return f"Invalid max_depth '{self.max_depth}'. Must be an integer from 0 to {MAX_DEPTH_LIMIT}"
        if self.command_timeout is not None and self.command_timeout <= 0:
            return f"Invalid command_timeout '{self.command_timeout}'. Must be positive or unset"
        return None

    def to_options(self, base_dir: Optional[Path] = None) -> ResolveOptions:
        """Build engine options for one resolve call."""
        return ResolveOptions(
            max_depth=self.max_depth,
            execute_commands=True,
            base_dir=base_dir,
            command_timeout=self.command_timeout,
        )


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    resolve: ResolveConfig = field(default_factory=ResolveConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "resolve": {
                "safe_mode": self.resolve.safe_mode,
                "max_depth": self.resolve.max_depth,
                "command_timeout": self.resolve.command_timeout,
            },
            "display": {
                "symbols": self.display.symbols,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        resolve_data = _section(data, "resolve")
        display_data = _section(data, "display")

        timeout = resolve_data.get("command_timeout")

        return cls(
            resolve=ResolveConfig(
                safe_mode=_to_bool(resolve_data.get("safe_mode", True)),
                max_depth=int(resolve_data.get("max_depth", DEFAULT_MAX_DEPTH)),
                command_timeout=float(timeout) if timeout is not None else None,
            ),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto"),
            ),
        )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """A config section as a dict. Scalars and lists count as empty."""
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in TRUE_VALUES


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment (PIEMME_SAFE_MODE, PIEMME_MAX_DEPTH, PIEMME_COMMAND_TIMEOUT)
      2. Project config (.piemme/config.yaml)
      3. User config (~/.piemme/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".piemme"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".piemme"
    PROJECT_CONFIG_FILE = "config.yaml"

    ENV_OVERRIDES = {
        "PIEMME_SAFE_MODE": ("resolve", "safe_mode"),
        "PIEMME_MAX_DEPTH": ("resolve", "max_depth"),
        "PIEMME_COMMAND_TIMEOUT": ("resolve", "command_timeout"),
    }

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Start with defaults
        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        # Layer 3: Environment overrides
        for env_key, (section, setting) in self.ENV_OVERRIDES.items():
            if os.environ.get(env_key):
                section_data = config_data.get(section)
                if not isinstance(section_data, dict):
                    section_data = config_data[section] = {}
                section_data[setting] = os.environ[env_key]

        try:
            config = Config.from_dict(config_data)
            error = config.resolve.validate() or config.display.validate()
        except (TypeError, ValueError) as e:
            error = str(e)

        if error:
            logger.warning("Ignoring invalid configuration (%s); using defaults", error)
            config = Config()

        self._config = config
        return self._config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        """Read one config layer. Malformed files count as empty."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return {}
        return data if isinstance(data, dict) else {}

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "resolve.safe_mode")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        # Rejected values never reach the loaded config
        config = copy.deepcopy(self.load())

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'resolve.safe_mode')"

        section, setting = parts

        if section == "resolve":
            if setting == "safe_mode":
                config.resolve.safe_mode = value.lower() in TRUE_VALUES
            elif setting == "max_depth":
                try:
                    config.resolve.max_depth = int(value)
                except ValueError:
                    return f"Invalid max_depth '{value}'. Must be a non-negative integer"
            elif setting == "command_timeout":
                if value.lower() in ("", "none", "off"):
                    config.resolve.command_timeout = None
                else:
                    try:
                        config.resolve.command_timeout = float(value)
                    except ValueError:
                        return f"Invalid command_timeout '{value}'. Must be a number of seconds or 'none'"
            else:
                return f"Unknown resolve setting: {setting}. Valid: safe_mode, max_depth, command_timeout"
            error = config.resolve.validate()
            if error:
                return error

        elif section == "display":
            if setting == "symbols":
                config.display.symbols = value
            else:
                return f"Unknown display setting: {setting}. Valid: symbols"
            error = config.display.validate()
            if error:
                return error
        else:
            return f"Unknown section: {section}. Valid: resolve, display"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts

        if section == "resolve":
            if setting == "safe_mode":
                return str(config.resolve.safe_mode).lower()
            elif setting == "max_depth":
                return str(config.resolve.max_depth)
            elif setting == "command_timeout":
                timeout = config.resolve.command_timeout
                return "none" if timeout is None else str(timeout)
        elif section == "display":
            if setting == "symbols":
                return config.display.symbols

        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        safe_status = f"{symbols.check_pass} On" if config.resolve.safe_mode else f"{symbols.check_warn} Off"
        timeout = config.resolve.command_timeout
        lines = [
            "Configuration:",
            "",
            "Resolve:",
            f"  Safe mode: {safe_status}",
            f"  Max depth: {config.resolve.max_depth}",
            f"  Command timeout: {'none' if timeout is None else f'{timeout}s'}",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]

        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
