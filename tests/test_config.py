"""
Tests for Config — Layered settings

These tests validate:
- Config hierarchy (env > project > user > defaults)
- Set/get with validation errors as messages
- Conversion to resolver options
"""

from piemme.config import Config, ConfigManager, ResolveConfig, DisplayConfig, get_config


class TestResolveConfig:
    """Resolve section validation."""

    def test_defaults(self):
        config = ResolveConfig()

        assert config.safe_mode is True
        assert config.max_depth == 10
        assert config.command_timeout is None
        assert config.validate() is None

    def test_invalid_values(self):
        assert "max_depth" in ResolveConfig(max_depth=-1).validate()
        assert "command_timeout" in ResolveConfig(command_timeout=-2.0).validate()

    def test_to_options(self, tmp_path):
        options = ResolveConfig(max_depth=4, command_timeout=3.0).to_options(base_dir=tmp_path)

        assert options.max_depth == 4
        assert options.command_timeout == 3.0
        assert options.base_dir == tmp_path
        assert options.execute_commands is True


class TestDisplayConfig:
    """Display section validation."""

    def test_symbols_values(self):
        assert DisplayConfig().validate() is None
        assert DisplayConfig(symbols="ascii").validate() is None
        assert "Unknown symbols" in DisplayConfig(symbols="emoji").validate()


class TestConfigSerialization:
    """Config round-trips through plain dicts."""

    def test_from_dict_partial(self):
        config = Config.from_dict({"resolve": {"max_depth": 3}})

        assert config.resolve.max_depth == 3
        assert config.resolve.safe_mode is True
        assert config.display.symbols == "auto"

    def test_from_dict_non_mapping_sections(self):
        """Sections that are not mappings are ignored."""
        config = Config.from_dict({"resolve": "strict", "display": ["ascii"]})

        assert config == Config()

    def test_string_booleans(self):
        assert Config.from_dict({"resolve": {"safe_mode": "off"}}).resolve.safe_mode is False
        assert Config.from_dict({"resolve": {"safe_mode": "yes"}}).resolve.safe_mode is True

    def test_to_dict(self):
        data = Config().to_dict()
        assert data == {
            "resolve": {"safe_mode": True, "max_depth": 10, "command_timeout": None},
            "display": {"symbols": "auto"},
        }


class TestConfigManager:
    """Config hierarchy and persistence."""

    def test_defaults_without_files(self, project_dir):
        config = ConfigManager(project_dir).load()
        assert config.resolve.safe_mode is True

    def test_project_overrides_user(self, project_dir, isolated_config):
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.yaml").write_text("resolve:\n  max_depth: 4\n  safe_mode: false\n")
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve:\n  max_depth: 7\n")

        config = ConfigManager(project_dir).load()

        assert config.resolve.max_depth == 7
        assert config.resolve.safe_mode is False

    def test_env_overrides_files(self, project_dir, monkeypatch):
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve:\n  safe_mode: true\n")
        monkeypatch.setenv("PIEMME_SAFE_MODE", "false")
        monkeypatch.setenv("PIEMME_MAX_DEPTH", "2")
        monkeypatch.setenv("PIEMME_COMMAND_TIMEOUT", "1.5")

        config = ConfigManager(project_dir).load()

        assert config.resolve.safe_mode is False
        assert config.resolve.max_depth == 2
        assert config.resolve.command_timeout == 1.5

    def test_malformed_yaml_is_ignored(self, project_dir):
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve: [unclosed\n")

        assert ConfigManager(project_dir).load().resolve.max_depth == 10

    def test_out_of_range_value_falls_back_to_defaults(self, project_dir, caplog):
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve:\n  max_depth: -5\n")

        assert ConfigManager(project_dir).load().resolve.max_depth == 10
        assert "Invalid max_depth" in caplog.text

    def test_unparseable_value_falls_back_to_defaults(self, project_dir, monkeypatch):
        monkeypatch.setenv("PIEMME_MAX_DEPTH", "deep")
        assert ConfigManager(project_dir).load().resolve.max_depth == 10

    def test_set_project(self, project_dir):
        manager = ConfigManager(project_dir)

        assert manager.set("resolve.safe_mode", "false") is None
        assert manager.project_config_path.exists()

        reloaded = ConfigManager(project_dir).load()
        assert reloaded.resolve.safe_mode is False

    def test_set_user(self, project_dir, isolated_config):
        manager = ConfigManager(project_dir)

        assert manager.set("display.symbols", "ascii", scope="user") is None
        assert (isolated_config / "config.yaml").exists()
        assert ConfigManager(project_dir).load().display.symbols == "ascii"

    def test_set_timeout_and_clear(self, project_dir):
        manager = ConfigManager(project_dir)

        assert manager.set("resolve.command_timeout", "5") is None
        assert manager.get("resolve.command_timeout") == "5.0"
        assert manager.set("resolve.command_timeout", "none") is None
        assert manager.get("resolve.command_timeout") == "none"

    def test_set_errors(self, project_dir):
        manager = ConfigManager(project_dir)

        assert "Invalid key format" in manager.set("safe_mode", "true")
        assert "Unknown section" in manager.set("llm.provider", "x")
        assert "Unknown resolve setting" in manager.set("resolve.colour", "x")
        assert "Invalid max_depth" in manager.set("resolve.max_depth", "abc")
        assert "Invalid max_depth" in manager.set("resolve.max_depth", "-3")
        assert "Unknown symbols" in manager.set("display.symbols", "emoji")
        assert not manager.project_config_path.exists()

    def test_get(self, project_dir):
        manager = ConfigManager(project_dir)

        assert manager.get("resolve.safe_mode") == "true"
        assert manager.get("resolve.max_depth") == "10"
        assert manager.get("display.symbols") == "auto"
        assert manager.get("nope") is None
        assert manager.get("resolve.unknown") is None

    def test_display(self, project_dir):
        text = ConfigManager(project_dir).display()

        assert "Safe mode:" in text
        assert "Max depth: 10" in text
        assert "Command timeout: none" in text
        assert str(project_dir) in text

    def test_get_config(self, project_dir):
        assert get_config(project_dir).resolve.max_depth == 10

    def test_scalar_section_is_treated_as_empty(self, project_dir):
        """A section written as a plain value falls back to its defaults."""
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve: strict\ndisplay: [ascii]\n")

        config = ConfigManager(project_dir).load()

        assert config.resolve.max_depth == 10
        assert config.resolve.safe_mode is True
        assert config.display.symbols == "auto"

    def test_env_override_replaces_scalar_section(self, project_dir, monkeypatch):
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve: strict\n")
        monkeypatch.setenv("PIEMME_MAX_DEPTH", "3")

        assert ConfigManager(project_dir).load().resolve.max_depth == 3

    def test_depth_above_limit_falls_back_to_defaults(self, project_dir):
        (project_dir / ".piemme").mkdir()
        (project_dir / ".piemme" / "config.yaml").write_text("resolve:\n  max_depth: 100000\n")

        assert ConfigManager(project_dir).load().resolve.max_depth == 10
