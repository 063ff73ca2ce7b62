"""
Configuration loading and validation.

Configuration lives in a YAML file at the project root:

    # .luastyle.yml
    indent: tabs
    max_line_length: 100
    ignore: [blank-lines]
    severity:
      line-length: error

Lookup order:
    1. An explicit path (CLI --config)
    2. The first of CONFIG_FILENAMES found walking up from the start directory
    3. Built-in defaults

Command-line flags are applied on top with LintConfig.with_overrides().
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from luastyle.diagnostics import Severity
from luastyle.errors import ConfigError, UnknownRuleError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".luastyle.yml", ".luastyle.yaml", "luastyle.yml")

# Rule ids that can never be turned off
ALWAYS_ENABLED = frozenset({"syntax-error"})


@dataclass(frozen=True)
class LintConfig:
    """
    Effective lint settings.

    Properties:
        indent: "tabs" or "spaces"
        indent_width: Spaces per level when indent == "spaces"
        tab_width: Display width of a tab, for line-length
        max_line_length: Longest allowed line in columns
        max_blank_lines: Longest allowed run of blank lines
        max_arguments: Most parameters a function may declare
        quote: Preferred string delimiter, "double" or "single"
        brace_spacing: Require `{ a }` (True) or `{a}` (False) on one line
        select: Rule ids to run; empty means all
        ignore: Rule ids to skip
        severity: Per-rule severity overrides
        extensions: File suffixes picked up when walking directories
        exclude: Glob patterns of paths to skip
        markdown: Also lint fenced Lua code in Markdown files
    """

    indent: str = "tabs"
    indent_width: int = 4
    tab_width: int = 4
    max_line_length: int = 120
    max_blank_lines: int = 2
    max_arguments: int = 5
    quote: str = "double"
    brace_spacing: bool = True
    select: Tuple[str, ...] = ()
    ignore: Tuple[str, ...] = ()
    severity: Dict[str, Severity] = field(default_factory=dict)
    extensions: Tuple[str, ...] = (".lua", ".luau")
    exclude: Tuple[str, ...] = ()
    markdown: bool = False

    def is_enabled(self, rule_id: str) -> bool:
        if rule_id in ALWAYS_ENABLED:
            return True
        if self.select and rule_id not in self.select:
            return False
        return rule_id not in self.ignore

    def severity_for(self, rule_id: str, default: Severity) -> Severity:
        return self.severity.get(rule_id, default)

    def with_overrides(self, **overrides: Any) -> "LintConfig":
        """Return a copy with the non-None overrides applied and validated."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        merged = {f.name: getattr(self, f.name) for f in fields(self)}
        merged.update(values)
        return config_from_dict(merged, source="command line")


DEFAULT_CONFIG = LintConfig()


# =============================================================================
# VALIDATION
# =============================================================================


def _require_int(key: str, value: Any, source: str, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{source}: '{key}' must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{source}: '{key}' must be at least {minimum}, got {value}")
    return value


def _require_choice(key: str, value: Any, choices: Tuple[str, ...], source: str) -> str:
    if value not in choices:
        raise ConfigError(f"{source}: '{key}' must be one of {', '.join(choices)}, got {value!r}")
    return value


def _string_list(key: str, value: Any, source: str) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(part).strip() for part in value]
    else:
        raise ConfigError(f"{source}: '{key}' must be a list of strings, got {value!r}")
    return tuple(item for item in items if item)


def _check_rule_ids(rule_ids: Tuple[str, ...]) -> None:
    from luastyle.rules import RULES_BY_ID

    for rule_id in rule_ids:
        if rule_id not in RULES_BY_ID and rule_id not in ALWAYS_ENABLED:
            raise UnknownRuleError(rule_id)


def config_from_dict(data: Dict[str, Any], source: str = "<config>") -> LintConfig:
    """
    Validate a raw mapping (from YAML or CLI flags) into a LintConfig.

    Keys may use dashes or underscores (`max-line-length` == `max_line_length`).

    Raises:
        ConfigError: On unknown keys or invalid values
        UnknownRuleError: If select/ignore/severity name an unknown rule
    """
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")

    known = {f.name for f in fields(LintConfig)}
    values: Dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).replace("-", "_")
        if key not in known:
            raise ConfigError(f"{source}: unknown option '{raw_key}'")
        values[key] = value

    if "indent" in values:
        values["indent"] = _require_choice("indent", values["indent"], ("tabs", "spaces"), source)
    if "quote" in values:
        values["quote"] = _require_choice("quote", values["quote"], ("double", "single"), source)
    for key, minimum in (("indent_width", 1), ("tab_width", 1), ("max_line_length", 1),
                         ("max_blank_lines", 0), ("max_arguments", 0)):
        if key in values:
            values[key] = _require_int(key, values[key], source, minimum)
    for key in ("brace_spacing", "markdown"):
        if key in values and not isinstance(values[key], bool):
            raise ConfigError(f"{source}: '{key}' must be true or false, got {values[key]!r}")
    for key in ("select", "ignore", "extensions", "exclude"):
        if key in values:
            values[key] = _string_list(key, values[key], source)

    for key in ("select", "ignore"):
        if key in values:
            _check_rule_ids(values[key])

    if "extensions" in values:
        values["extensions"] = tuple(
            ext if ext.startswith(".") else f".{ext}" for ext in values["extensions"]
        )

    if "severity" in values:
        raw = values["severity"]
        if not isinstance(raw, dict):
            raise ConfigError(f"{source}: 'severity' must map rule ids to severities")
        severity: Dict[str, Severity] = {}
        for rule_id, level in raw.items():
            _check_rule_ids((rule_id,))
            if isinstance(level, Severity):
                severity[rule_id] = level
                continue
            try:
                severity[rule_id] = Severity.parse(str(level))
            except ValueError as e:
                raise ConfigError(f"{source}: severity for '{rule_id}': {e}")
        values["severity"] = severity

    overlap = set(values.get("select", ())) & set(values.get("ignore", ()))
    if overlap:
        warnings.warn(
            f"{source}: rules both selected and ignored (ignore wins): {', '.join(sorted(overlap))}",
            UserWarning,
        )
    pinned = ALWAYS_ENABLED & set(values.get("ignore", ()))
    if pinned:
        warnings.warn(f"{source}: {', '.join(sorted(pinned))} cannot be ignored", UserWarning)

    return replace(DEFAULT_CONFIG, **values)


# =============================================================================
# FILES
# =============================================================================


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest config file at or above `start` (default: cwd)."""
    directory = (start or Path.cwd()).resolve()
    if directory.is_file():
        directory = directory.parent
    for candidate_dir in [directory, *directory.parents]:
        for name in CONFIG_FILENAMES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def load_config(path: Path) -> LintConfig:
    """
    Load and validate a YAML config file.

    An empty file yields the defaults.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or invalid
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if data is None:
        data = {}
    config = config_from_dict(data, source=str(path))
    logger.debug("Loaded config from %s", path)
    return config


def resolve_config(explicit: Optional[Path] = None, start: Optional[Path] = None) -> LintConfig:
    """Load the explicit config, else the discovered one, else defaults."""
    if explicit is not None:
        return load_config(explicit)
    found = find_config_file(start)
    if found is None:
        logger.debug("No config file found, using defaults")
        return DEFAULT_CONFIG
    return load_config(found)


def rule_list(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated CLI value into rule ids (None passes through)."""
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]
