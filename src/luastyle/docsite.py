"""
Documentation site checks.

The style guide itself is published as a static site: a `mkdocs.yml`
configuration plus a `docs/` directory of Markdown pages. This module checks
that such a site would build cleanly:

    site-config       mkdocs.yml is missing or is not valid YAML, or a site
                      file cannot be read as UTF-8
    nav-missing-page  a `nav` entry names a page that does not exist
    broken-link       a relative link or image points at a missing file
    front-matter      a page's `---` front matter is unclosed or not a mapping

External links are never fetched.
"""

import logging
import re
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple
from urllib.parse import unquote

import yaml

from luastyle.diagnostics import Diagnostic, Severity
from luastyle.errors import LintIOError
from luastyle.linter import read_source

logger = logging.getLogger(__name__)

SITE_CONFIG_NAMES = ("mkdocs.yml", "mkdocs.yaml")

SITE_CHECKS = {
    "site-config": "mkdocs.yml exists and is valid YAML; every site file is readable UTF-8.",
    "nav-missing-page": "Every page listed in nav exists under docs_dir.",
    "broken-link": "Relative Markdown links and images point at existing files.",
    "front-matter": "Front matter blocks are closed and hold a YAML mapping.",
}

_INLINE_LINK = re.compile(r"!?\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+[\"'(][^)]*)?\)")
_REFERENCE_LINK = re.compile(r"^\s{0,3}\[(?!\^)[^\]]+\]:\s*<?(\S+?)>?(?:\s+.*)?$")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_FENCE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")


class _SiteLoader(yaml.SafeLoader):
    """SafeLoader that reads unknown tags (`!!python/name:...`, `!ENV`) as plain values."""
    pass


def _construct_unknown(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node)
    return loader.construct_mapping(node)


_SiteLoader.add_multi_constructor("", _construct_unknown)


def _error(check: str, path: Path, line: int, column: int, message: str) -> Diagnostic:
    return Diagnostic(rule_id=check, message=message, line=line, column=column,
                      severity=Severity.ERROR, path=str(path))


def _read(path: Path) -> Tuple[Optional[str], List[Diagnostic]]:
    """Read a site file; an unreadable or non-UTF-8 file becomes a site-config error."""
    try:
        return read_source(path), []
    except LintIOError as e:
        return None, [_error("site-config", path, 1, 1, str(e))]


def _line_of(text: str, needle: str) -> int:
    for number, line in enumerate(text.splitlines(), start=1):
        if needle in line:
            return number
    return 1


# =============================================================================
# SITE CONFIG AND NAV
# =============================================================================


def find_site_config(root: Path) -> Optional[Path]:
    for name in SITE_CONFIG_NAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_site_config(path: Path) -> Tuple[dict, List[Diagnostic]]:
    text, problems = _read(path)
    if text is None:
        return {}, problems
    try:
        data = yaml.load(text, Loader=_SiteLoader)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 if mark is not None else 1
        column = mark.column + 1 if mark is not None else 1
        problem = getattr(e, "problem", None) or str(e)
        return {}, [_error("site-config", path, line, column, f"Invalid YAML: {problem}")]
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return {}, [_error("site-config", path, 1, 1, "Site configuration must be a mapping")]
    return data, []


def iter_nav_pages(nav: Any) -> Iterator[str]:
    """Yield every page path in a mkdocs `nav` structure."""
    if isinstance(nav, str):
        yield nav
    elif isinstance(nav, list):
        for item in nav:
            yield from iter_nav_pages(item)
    elif isinstance(nav, dict):
        for value in nav.values():
            yield from iter_nav_pages(value)


def check_nav(config_path: Path, config: dict, docs_dir: Path) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    text = _read(config_path)[0] or ""
    for page in iter_nav_pages(config.get("nav", [])):
        if _SCHEME.match(page) or page.startswith("//"):
            continue
        if not (docs_dir / page).is_file():
            diagnostics.append(_error(
                "nav-missing-page", config_path, _line_of(text, page), 1,
                f"nav entry '{page}' does not exist under {docs_dir.name}/",
            ))
    return diagnostics


# =============================================================================
# PAGES
# =============================================================================


def check_front_matter(path: Path, lines: List[str]) -> Tuple[List[Diagnostic], int]:
    """
    Validate a leading `---` block.

    Returns the diagnostics and the number of lines the front matter occupies.
    """
    if not lines or lines[0].strip() != "---":
        return [], 0
    for end in range(1, len(lines)):
        if lines[end].strip() in ("---", "..."):
            break
    else:
        return [_error("front-matter", path, 1, 1, "Front matter is never closed")], 0

    try:
        data = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 2 if mark is not None else 1
        problem = getattr(e, "problem", None) or str(e)
        return [_error("front-matter", path, line, 1, f"Invalid YAML in front matter: {problem}")], end + 1
    if data is not None and not isinstance(data, dict):
        return [_error("front-matter", path, 1, 1, "Front matter must be a YAML mapping")], end + 1
    return [], end + 1


def _link_exists(target: str, page: Path, docs_dir: Path) -> bool:
    target = unquote(target.split("#", 1)[0].split("?", 1)[0])
    if not target:
        return True
    base = docs_dir if target.startswith("/") else page.parent
    resolved = base / target.lstrip("/")
    if resolved.is_file():
        return True
    return resolved.is_dir() and any((resolved / name).is_file() for name in ("index.md", "README.md"))


def check_links(path: Path, lines: List[str], docs_dir: Path, skip: int = 0) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    fence: Optional[str] = None
    for number, line in enumerate(lines, start=1):
        if number <= skip:
            continue
        fence_match = _FENCE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            continue
        if fence is not None:
            continue

        targets = [(m.group(1), m.start(1)) for m in _INLINE_LINK.finditer(line)]
        reference = _REFERENCE_LINK.match(line)
        if reference:
            targets.append((reference.group(1), reference.start(1)))

        for target, start in targets:
            if target.startswith("#") or target.startswith("//") or _SCHEME.match(target):
                continue
            if not _link_exists(target, path, docs_dir):
                diagnostics.append(_error(
                    "broken-link", path, number, start + 1, f"Broken link: '{target}' does not exist",
                ))
    return diagnostics


def check_page(path: Path, docs_dir: Path) -> List[Diagnostic]:
    text, problems = _read(path)
    if text is None:
        return problems
    lines = text.splitlines()
    diagnostics, front_matter_lines = check_front_matter(path, lines)
    diagnostics.extend(check_links(path, lines, docs_dir, skip=front_matter_lines))
    return diagnostics


def check_site(root: Path) -> List[Diagnostic]:
    """
    Check a documentation site rooted at `root`.

    Returns:
        Diagnostics ordered by file and position (empty if the site is clean)
    """
    root = Path(root)
    diagnostics: List[Diagnostic] = []
    docs_dir = root / "docs"

    config_path = find_site_config(root)
    if config_path is None:
        diagnostics.append(_error("site-config", root / SITE_CONFIG_NAMES[0], 1, 1, "Site configuration not found"))
    else:
        config, problems = load_site_config(config_path)
        diagnostics.extend(problems)
        docs_dir = root / str(config.get("docs_dir", "docs"))
        if config:
            diagnostics.extend(check_nav(config_path, config, docs_dir))

    if not docs_dir.is_dir():
        diagnostics.append(_error("site-config", docs_dir, 1, 1, "Documentation directory not found"))
        return diagnostics

    pages = sorted(p for p in docs_dir.rglob("*") if p.is_file() and p.suffix.lower() in (".md", ".markdown"))
    logger.debug("Checking %d page(s) under %s", len(pages), docs_dir)
    for page in pages:
        diagnostics.extend(check_page(page, docs_dir))

    diagnostics.sort(key=lambda d: d.sort_key)
    return diagnostics
