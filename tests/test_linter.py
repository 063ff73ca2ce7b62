"""
Tests for the linter: the rule pipeline, inline suppressions and file walking.
"""

import pytest

from luastyle.config import LintConfig
from luastyle.diagnostics import Severity, summarize
from luastyle.errors import LintIOError
from luastyle.linter import collect_files, lint_file, lint_paths, lint_source


def rule_ids(report):
    return [d.rule_id for d in report.diagnostics]


class TestLintSource:
    """Test linting in-memory source."""

    def test_clean_source(self):
        report = lint_source("local x = 1\n")
        assert report.diagnostics == []
        assert report.parsed
        assert report.lines_checked == 1

    def test_byte_order_mark_ignored(self):
        assert lint_source("\ufefflocal x = 1\n").diagnostics == []

    def test_diagnostics_sorted_by_position(self):
        report = lint_source("local b = 'x'\nlocal a=1\n")
        keys = [(d.line, d.column) for d in report.diagnostics]
        assert keys == sorted(keys)

    def test_path_recorded(self):
        report = lint_source("local s = 'x'\n", path="a.lua")
        assert report.path == "a.lua"
        assert all(d.path == "a.lua" for d in report.diagnostics)

    def test_parse_error_keeps_text_and_token_rules(self):
        report = lint_source("local = 'x'  \n")
        assert not report.parsed
        ids = rule_ids(report)
        assert "syntax-error" in ids
        assert "trailing-whitespace" in ids
        assert "quote-style" in ids
        syntax = [d for d in report.diagnostics if d.rule_id == "syntax-error"][0]
        assert syntax.severity == Severity.ERROR
        assert (syntax.line, syntax.column) == (1, 7)

    def test_lex_error_keeps_text_rules_only(self):
        report = lint_source("local s = 'a'  \nlocal t = \"oops\n")
        ids = set(rule_ids(report))
        assert ids == {"syntax-error", "trailing-whitespace"}

    def test_ignore_removes_rule(self):
        config = LintConfig(ignore=("quote-style",))
        assert lint_source("local s = 'x'\n", config).diagnostics == []


class TestSuppressions:
    """Test inline `luastyle:` comments."""

    def test_ignore_line(self):
        assert lint_source("local s = 'a' -- luastyle: ignore\n").diagnostics == []

    def test_ignore_listed_rules_only(self):
        report = lint_source("local s = 'a' -- luastyle: ignore naming\n")
        assert rule_ids(report) == ["quote-style"]

    def test_ignore_several_rules(self):
        report = lint_source("local my_s = 'a' -- luastyle: ignore naming, quote-style\n")
        assert report.diagnostics == []

    def test_ignore_with_reason(self):
        report = lint_source("local s = 'a' -- luastyle: ignore legacy code\n")
        assert report.diagnostics == []

    def test_ignore_rule_with_reason(self):
        report = lint_source("local my_s = 'a' -- luastyle: ignore naming -- generated\n")
        assert rule_ids(report) == ["quote-style"]

    def test_unknown_rule_next_to_known_one(self):
        report = lint_source("local my_s = 'a' -- luastyle: ignore naming, quote-styel\n")
        assert rule_ids(report) == ["quote-style"]

    def test_ignore_next_line(self):
        source = "-- luastyle: ignore-next-line quote-style\nlocal s = 'a'\nlocal t = 'b'\n"
        report = lint_source(source)
        assert [(d.rule_id, d.line) for d in report.diagnostics] == [("quote-style", 3)]

    def test_ignore_file_for_rules(self):
        source = "-- luastyle: ignore-file quote-style\nlocal s = 'a'\nlocal t = 'b'\n"
        assert lint_source(source).diagnostics == []

    def test_ignore_whole_file(self):
        assert lint_source("-- luastyle: ignore-file\nlocal x=1\n").diagnostics == []

    def test_syntax_error_never_suppressed(self):
        report = lint_source("-- luastyle: ignore-file\nlocal = 1\n")
        assert rule_ids(report) == ["syntax-error"]

    def test_directive_after_lex_error(self):
        """Directives are still read from raw lines when lexing fails."""
        report = lint_source("local x = 1 -- luastyle: ignore  \nlocal t = \"oops\n")
        assert rule_ids(report) == ["syntax-error"]


class TestFiles:
    """Test file reading and directory walking."""

    def test_lint_file(self, tmp_path):
        path = tmp_path / "a.lua"
        path.write_text("local s = 'x'\n")
        report = lint_file(path)
        assert report.path == str(path)
        assert rule_ids(report) == ["quote-style"]

    def test_lint_file_with_bom(self, tmp_path):
        path = tmp_path / "a.lua"
        path.write_bytes(b"\xef\xbb\xbflocal x = 1\n")
        assert lint_file(path).diagnostics == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(LintIOError):
            lint_file(tmp_path / "missing.lua")

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "a.lua"
        path.write_bytes(b"local s = \"\xff\"\n")
        with pytest.raises(LintIOError, match="UTF-8"):
            lint_file(path)

    def test_markdown_file(self, tmp_path):
        path = tmp_path / "guide.md"
        path.write_text("# Guide\n\n```lua\nlocal s = 'x'\n```\n")
        report = lint_file(path)
        assert [(d.rule_id, d.line) for d in report.diagnostics] == [("quote-style", 4)]

    def make_tree(self, root):
        (root / "sub").mkdir()
        (root / "a.lua").write_text("local x = 1\n")
        (root / "sub" / "b.luau").write_text("local y = 2\n")
        (root / "notes.txt").write_text("text\n")
        (root / "README.md").write_text("# Readme\n")

    def test_collect_files(self, tmp_path):
        self.make_tree(tmp_path)
        files = collect_files([tmp_path])
        assert files == [tmp_path / "a.lua", tmp_path / "sub" / "b.luau"]

    def test_collect_markdown_when_enabled(self, tmp_path):
        self.make_tree(tmp_path)
        files = collect_files([tmp_path], LintConfig(markdown=True))
        assert tmp_path / "README.md" in files
        assert len(files) == 3

    @pytest.mark.parametrize("pattern", ["sub", "sub/*", "*.luau"])
    def test_exclude(self, tmp_path, pattern):
        self.make_tree(tmp_path)
        files = collect_files([tmp_path], LintConfig(exclude=(pattern,)))
        assert files == [tmp_path / "a.lua"]

    def test_exclude_only_matches_below_root(self, tmp_path):
        root = tmp_path / "build" / "proj"
        root.mkdir(parents=True)
        self.make_tree(root)
        files = collect_files([root], LintConfig(exclude=("build",)))
        assert files == [root / "a.lua", root / "sub" / "b.luau"]

    def test_explicit_file_always_included(self, tmp_path):
        self.make_tree(tmp_path)
        assert collect_files([tmp_path / "notes.txt"]) == [tmp_path / "notes.txt"]

    def test_duplicates_removed(self, tmp_path):
        self.make_tree(tmp_path)
        files = collect_files([tmp_path / "a.lua", tmp_path])
        assert files == [tmp_path / "a.lua", tmp_path / "sub" / "b.luau"]

    def test_missing_path(self, tmp_path):
        with pytest.raises(LintIOError, match="No such file"):
            collect_files([tmp_path / "nope"])

    def test_lint_paths_and_summary(self, tmp_path):
        self.make_tree(tmp_path)
        (tmp_path / "bad.lua").write_text("local s = 'x'\nlocal = 1\n")
        reports = lint_paths([tmp_path])
        assert len(reports) == 3
        summary = summarize(reports)
        assert summary.files_checked == 3
        assert summary.files_with_issues == 1
        assert summary.errors == 1
        assert summary.warnings == 1
        assert summary.by_rule == {"quote-style": 1, "syntax-error": 1}
        assert summary.total == 2
