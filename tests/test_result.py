"""
Tests for ResolveOptions and ResolveResult.
"""

import dataclasses

import pytest

from piemme.engine import ResolveOptions, ResolveResult, DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT


class TestResolveOptions:
    """Tests for ResolveOptions."""

    def test_defaults(self):
        options = ResolveOptions()

        assert options.max_depth == DEFAULT_MAX_DEPTH == 10
        assert options.execute_commands is True
        assert options.base_dir is None
        assert options.command_timeout is None
        assert options.validate() is None

    def test_validate(self):
        assert "max_depth" in ResolveOptions(max_depth=-1).validate()
        assert "command_timeout" in ResolveOptions(command_timeout=0).validate()
        assert ResolveOptions(max_depth=0, command_timeout=1.5).validate() is None

    def test_validate_depth_upper_bound(self):
        """Depths past MAX_DEPTH_LIMIT are rejected."""
        assert ResolveOptions(max_depth=MAX_DEPTH_LIMIT).validate() is None
        assert "max_depth" in ResolveOptions(max_depth=MAX_DEPTH_LIMIT + 1).validate()

    def test_command_cwd(self, tmp_path):
        """Commands run in base_dir, or inherit the process cwd without one."""
        assert ResolveOptions(base_dir=tmp_path).command_cwd() == str(tmp_path)
        assert ResolveOptions().command_cwd() is None


class TestResolveResult:
    """Tests for ResolveResult."""

    def test_is_frozen(self):
        result = ResolveResult(content="x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.content = "y"

    def test_flags(self):
        plain = ResolveResult(content="x")
        assert not plain.has_commands
        assert not plain.has_issues

        assert ResolveResult(content="x", commands=["date"]).has_commands
        assert ResolveResult(content="x", had_circular_refs=True).has_issues
        assert ResolveResult(content="x", max_depth_exceeded=True).has_issues

    def test_summary(self):
        result = ResolveResult(
            content="x",
            commands=["date"],
            references=["a", "b"],
            had_circular_refs=True,
            max_depth_exceeded=True,
        )
        assert result.summary() == "2 ref(s), 0 file(s), 1 command(s), circular, max depth exceeded"
        assert ResolveResult(content="").summary() == "0 ref(s), 0 file(s), 0 command(s)"

    def test_to_dict(self):
        result = ResolveResult(content="hi", references=["a"], file_references=["f.txt"])
        assert result.to_dict() == {
            "content": "hi",
            "commands": [],
            "references": ["a"],
            "file_references": ["f.txt"],
            "had_circular_refs": False,
            "max_depth_exceeded": False,
        }
