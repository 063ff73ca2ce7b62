"""
Tests for documentation site validation (mkdocs.yml + docs/).
"""

import pytest

from luastyle.diagnostics import Severity
from luastyle.docsite import check_site, iter_nav_pages


MKDOCS = """\
site_name: Lua Style Guide
nav:
  - Home: index.md
  - Guide:
      - Tables: guide/tables.md
  - Source: https://example.com/repo
markdown_extensions:
  - pymdownx.emoji:
      emoji_index: !!python/name:material.extensions.emoji.twemoji
"""


@pytest.fixture
def site(tmp_path):
    """A documentation site that passes every check."""
    (tmp_path / "mkdocs.yml").write_text(MKDOCS)
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "img").mkdir()
    (docs / "img" / "logo.png").write_bytes(b"\x89PNG")
    (docs / "index.md").write_text(
        "---\ntitle: Home\n---\n# Home\n\n"
        "See [tables](guide/tables.md#trailing-commas), [home](#home), "
        "[site](https://example.com) and [mail](mailto:team@example.com).\n"
    )
    (docs / "guide" / "tables.md").write_text(
        "# Tables\n\n![logo](../img/logo.png)\n\n[Back](/index.md)\n\n[ref]: ../index.md\n"
    )
    return tmp_path


def ids(diagnostics):
    return [d.rule_id for d in diagnostics]


class TestCleanSite:
    """Test that a well-formed site has no diagnostics."""

    def test_no_problems(self, site):
        assert check_site(site) == []

    def test_nav_pages(self):
        nav = [{"Home": "index.md"}, {"Guide": [{"Tables": "guide/tables.md"}]}, "extra.md"]
        assert list(iter_nav_pages(nav)) == ["index.md", "guide/tables.md", "extra.md"]


class TestSiteConfig:
    """Test problems with mkdocs.yml itself."""

    def test_missing_config(self, tmp_path):
        (tmp_path / "docs").mkdir()
        diagnostics = check_site(tmp_path)
        assert ids(diagnostics) == ["site-config"]
        assert diagnostics[0].severity == Severity.ERROR

    def test_invalid_yaml(self, site):
        (site / "mkdocs.yml").write_text("site_name: x\nnav: [\n")
        diagnostics = check_site(site)
        assert "site-config" in ids(diagnostics)
        assert diagnostics[0].message.startswith("Invalid YAML")

    def test_missing_docs_dir(self, tmp_path):
        (tmp_path / "mkdocs.yml").write_text("site_name: x\n")
        assert ids(check_site(tmp_path)) == ["site-config"]

    def test_config_not_utf8(self, site):
        (site / "mkdocs.yml").write_bytes(b"site_name: caf\xe9\n")
        diagnostics = check_site(site)
        assert ids(diagnostics) == ["site-config"]
        assert "not valid UTF-8" in diagnostics[0].message

    def test_custom_docs_dir(self, tmp_path):
        (tmp_path / "mkdocs.yml").write_text("site_name: x\ndocs_dir: pages\nnav:\n  - index.md\n")
        (tmp_path / "pages").mkdir()
        (tmp_path / "pages" / "index.md").write_text("# Home\n")
        assert check_site(tmp_path) == []


class TestNav:
    """Test nav entries."""

    def test_missing_page(self, site):
        (site / "docs" / "guide" / "tables.md").unlink()
        (site / "docs" / "index.md").write_text("# Home\n")
        diagnostics = check_site(site)
        assert ids(diagnostics) == ["nav-missing-page"]
        assert diagnostics[0].line == 5
        assert diagnostics[0].path.endswith("mkdocs.yml")


class TestLinks:
    """Test relative link checking."""

    def test_broken_link(self, site):
        (site / "docs" / "index.md").write_text("# Home\n\nSee [x](nope.md).\n")
        diagnostics = check_site(site)
        assert ids(diagnostics) == ["broken-link"]
        assert (diagnostics[0].line, diagnostics[0].column) == (3, 9)
        assert "nope.md" in diagnostics[0].message

    def test_broken_image(self, site):
        (site / "docs" / "index.md").write_text("![missing](img/nope.png)\n")
        assert ids(check_site(site)) == ["broken-link"]

    def test_broken_reference_link(self, site):
        (site / "docs" / "index.md").write_text("[ref]: gone.md\n")
        assert ids(check_site(site)) == ["broken-link"]

    def test_footnotes_are_not_links(self, site):
        (site / "docs" / "index.md").write_text("Text.[^1]\n\n[^1]: Some footnote text.\n")
        assert check_site(site) == []

    def test_links_in_code_fences_ignored(self, site):
        (site / "docs" / "index.md").write_text("```md\n[x](nope.md)\n```\n")
        assert check_site(site) == []

    def test_directory_link_with_index(self, site):
        (site / "docs" / "guide" / "index.md").write_text("# Guide\n")
        (site / "docs" / "index.md").write_text("[guide](guide/)\n")
        assert check_site(site) == []

    def test_encoded_target(self, site):
        (site / "docs" / "my page.md").write_text("# Page\n")
        (site / "docs" / "index.md").write_text("[page](my%20page.md)\n")
        assert check_site(site) == []


class TestFrontMatter:
    """Test page front matter."""

    def test_unclosed(self, site):
        (site / "docs" / "index.md").write_text("---\ntitle: Home\n# Home\n")
        diagnostics = check_site(site)
        assert ids(diagnostics) == ["front-matter"]
        assert diagnostics[0].message == "Front matter is never closed"

    def test_not_a_mapping(self, site):
        (site / "docs" / "index.md").write_text("---\n- a\n- b\n---\n# Home\n")
        diagnostics = check_site(site)
        assert ids(diagnostics) == ["front-matter"]
        assert diagnostics[0].message == "Front matter must be a YAML mapping"

    def test_invalid_yaml(self, site):
        (site / "docs" / "index.md").write_text("---\ntitle: [\n---\n")
        assert ids(check_site(site)) == ["front-matter"]


class TestUnreadablePages:
    """Test pages that cannot be read as UTF-8."""

    def test_latin1_page(self, site):
        (site / "docs" / "index.md").write_bytes(b"caf\xe9\n")
        diagnostics = check_site(site)
        assert ids(diagnostics) == ["site-config"]
        assert diagnostics[0].path.endswith("index.md")
        assert "not valid UTF-8" in diagnostics[0].message

    def test_other_pages_still_checked(self, site):
        (site / "docs" / "index.md").write_bytes(b"caf\xe9\n")
        (site / "docs" / "guide" / "tables.md").write_text("[x](nope.md)\n")
        assert ids(check_site(site)) == ["broken-link", "site-config"]
