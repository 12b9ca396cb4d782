"""
Tests for reference scanning and validation.

Covers:
- [[name]] scanning, name grammar, spans
- [[file:path]] scanning and separation from prompt references
- Flat (non-nested) scanning of bracket runs
- Validation against a name universe and the file system
"""

from piemme.engine import (
    PromptReference,
    FileReference,
    scan_prompt_refs,
    scan_file_refs,
    has_references,
    has_file_references,
    is_valid_name,
    validate_reference,
    find_and_validate_references,
    validate_file_reference,
    find_and_validate_file_references,
)


# =============================================================================
# Prompt Reference Scanning
# =============================================================================


class TestScanPromptRefs:
    """Tests for scan_prompt_refs."""

    def test_finds_references_in_order(self):
        """References are found left to right."""
        refs = list(scan_prompt_refs("Hello [[world]] and [[test_prompt]]!"))

        assert len(refs) == 2
        assert refs[0].name == "world"
        assert refs[0].full_match == "[[world]]"
        assert refs[1].name == "test_prompt"

    def test_spans_index_the_source(self):
        """start/end slice back to the matched text."""
        content = "ab [[x1]] cd [[y_2]]"
        for ref in scan_prompt_refs(content):
            assert content[ref.start:ref.end] == ref.full_match

    def test_no_references(self):
        """Plain text yields nothing."""
        assert list(scan_prompt_refs("Hello world without any references!")) == []

    def test_invalid_name_formats_are_literal(self):
        """Uppercase, spaces and hyphens are not references."""
        assert list(scan_prompt_refs("[[UPPER]] [[with space]] [[with-dash]] [[]]")) == []

    def test_file_reference_is_not_a_prompt_reference(self):
        """The ':' in file references keeps them out of the name scan."""
        assert list(scan_prompt_refs("[[file:notes.txt]]")) == []

    def test_scan_is_restartable(self):
        """Scanning twice gives the same result."""
        content = "[[a]] [[b]]"
        assert list(scan_prompt_refs(content)) == list(scan_prompt_refs(content))

    def test_validity_defaults_to_false(self):
        """Scanning makes no validity judgment."""
        ref = next(scan_prompt_refs("[[a]]"))
        assert ref.is_valid is False

    def test_bracket_runs_scan_flat(self):
        """Extra brackets are literal; the inner [[x]] is the only match."""
        refs = list(scan_prompt_refs("[[[[x]]]]"))

        assert len(refs) == 1
        assert refs[0].name == "x"
        assert (refs[0].start, refs[0].end) == (2, 7)

    def test_spans_never_overlap(self):
        """Adjacent tokens produce disjoint spans."""
        refs = list(scan_prompt_refs("[[a]][[b]][[c]]"))
        assert [r.name for r in refs] == ["a", "b", "c"]
        for left, right in zip(refs, refs[1:]):
            assert left.end <= right.start


class TestHasReferences:
    """Tests for has_references and has_file_references."""

    def test_has_references(self):
        assert has_references("Contains [[reference]]")
        assert not has_references("No references here")
        assert not has_references("[[Not_Lowercase]]")

    def test_has_file_references(self):
        assert has_file_references("See [[file:a.txt]]")
        assert not has_file_references("See [[a]]")


class TestIsValidName:
    """Tests for the prompt name grammar."""

    def test_valid_names(self):
        assert is_valid_name("greeting")
        assert is_valid_name("code_review_2")

    def test_invalid_names(self):
        assert not is_valid_name("")
        assert not is_valid_name("Greeting")
        assert not is_valid_name("with-dash")
        assert not is_valid_name("a b")
        assert not is_valid_name("name\n")


# =============================================================================
# File Reference Scanning
# =============================================================================


class TestScanFileRefs:
    """Tests for scan_file_refs."""

    def test_finds_relative_and_absolute_paths(self):
        """Path is captured raw."""
        refs = list(scan_file_refs("A [[file:notes/a.md]] B [[file:/etc/hosts]]"))

        assert [r.path for r in refs] == ["notes/a.md", "/etc/hosts"]
        assert refs[0].full_match == "[[file:notes/a.md]]"

    def test_prompt_refs_are_not_file_refs(self):
        assert list(scan_file_refs("[[greeting]]")) == []

    def test_path_may_contain_spaces(self):
        ref = next(scan_file_refs("[[file:my notes.txt]]"))
        assert ref.path == "my notes.txt"


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    """Tests for validating references."""

    def test_validate_reference(self):
        """A name in the universe is valid."""
        ref = PromptReference(full_match="[[a]]", name="a", start=0, end=5)
        assert validate_reference(ref, ["a", "b"]).is_valid is True

        ref = PromptReference(full_match="[[c]]", name="c", start=0, end=5)
        assert validate_reference(ref, ["a", "b"]).is_valid is False

    def test_find_and_validate_references(self):
        """Each reference gets its own validity."""
        refs = find_and_validate_references(
            "Check [[valid_ref]] and [[invalid_ref]]",
            ["valid_ref", "other"],
        )

        assert len(refs) == 2
        assert refs[0].is_valid
        assert not refs[1].is_valid

    def test_validate_file_reference(self, tmp_path):
        """Existing regular files are valid; directories and missing paths are not."""
        (tmp_path / "a.txt").write_text("x")
        (tmp_path / "sub").mkdir()

        ok = validate_file_reference(FileReference("[[file:a.txt]]", "a.txt", 0, 14), tmp_path)
        missing = validate_file_reference(FileReference("[[file:b.txt]]", "b.txt", 0, 14), tmp_path)
        directory = validate_file_reference(FileReference("[[file:sub]]", "sub", 0, 12), tmp_path)

        assert ok.is_valid is True
        assert missing.is_valid is False
        assert directory.is_valid is False

    def test_find_and_validate_file_references(self, tmp_path):
        (tmp_path / "a.txt").write_text("x")
        refs = find_and_validate_file_references("[[file:a.txt]] [[file:nope.txt]]", tmp_path)
        assert [r.is_valid for r in refs] == [True, False]
