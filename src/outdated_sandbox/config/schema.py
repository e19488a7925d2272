"""
outdated-sandbox: configuration schema and validation.

File: src/outdated_sandbox/config/schema.py

Purpose
- Define configuration defaults and strict validation rules.

What should be included in this file
- Validation rules for types, enums, and numeric constraints.
- Deterministic deep-merge helpers.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from outdated_sandbox.constants import COLOR_MODES, DEFAULT_CARGO_BIN, DEFAULT_TEMP_PREFIX

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS: Final[tuple[str, ...]] = ("console", "json")


class ResolverConfig(TypedDict):
    cargo_bin: str
    verbosity: int
    color: Literal["auto", "always", "never"]
    frozen: bool
    locked: bool
    offline: bool


class SandboxConfig(TypedDict):
    temp_prefix: str
    keep: bool


class ObservabilityConfig(TypedDict):
    log_level: str
    log_format: Literal["console", "json"]


class SandboxToolConfig(TypedDict):
    resolver: ResolverConfig
    sandbox: SandboxConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[SandboxToolConfig] = {
    "resolver": {
        "cargo_bin": DEFAULT_CARGO_BIN,
        "verbosity": 0,
        "color": "auto",
        "frozen": False,
        "locked": False,
        "offline": False,
    },
    "sandbox": {
        "temp_prefix": DEFAULT_TEMP_PREFIX,
        "keep": False,
    },
    "observability": {
        "log_level": "WARNING",
        "log_format": "console",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> SandboxToolConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, set(DEFAULT_CONFIG), "", issues)
    _validate_resolver(root.get("resolver", {}), "resolver", issues)
    _validate_sandbox(root.get("sandbox", {}), "sandbox", issues)
    _validate_observability(root.get("observability", {}), "observability", issues)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=_deep_copy_mapping(root), issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise :class:`ConfigValidationError` on any issue."""

    result = validate_config(config)
    if not result.is_valid or result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_resolver(value: object, path: str, issues: _IssueCollector) -> None:
    section = _as_object(value, path, issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(DEFAULT_CONFIG["resolver"]), path, issues)
    if "cargo_bin" in section:
        _as_str(section["cargo_bin"], _join(path, "cargo_bin"), issues)
    if "verbosity" in section:
        _as_int(section["verbosity"], _join(path, "verbosity"), issues, minimum=0)
    if "color" in section:
        _as_enum(section["color"], _join(path, "color"), issues, allowed_values=COLOR_MODES)
    for key in ("frozen", "locked", "offline"):
        if key in section:
            _as_bool(section[key], _join(path, key), issues)


def _validate_sandbox(value: object, path: str, issues: _IssueCollector) -> None:
    section = _as_object(value, path, issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(DEFAULT_CONFIG["sandbox"]), path, issues)
    if "temp_prefix" in section:
        prefix = _as_str(section["temp_prefix"], _join(path, "temp_prefix"), issues)
        if prefix is not None and ("/" in prefix or "\\" in prefix):
            issues.add(_join(path, "temp_prefix"), "must not contain path separators")
    if "keep" in section:
        _as_bool(section["keep"], _join(path, "keep"), issues)


def _validate_observability(value: object, path: str, issues: _IssueCollector) -> None:
    section = _as_object(value, path, issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(DEFAULT_CONFIG["observability"]), path, issues)
    if "log_level" in section:
        level = section["log_level"]
        if isinstance(level, str):
            level = level.upper()
        _as_enum(level, _join(path, "log_level"), issues, allowed_values=LOG_LEVELS)
    if "log_format" in section:
        _as_enum(
            section["log_format"],
            _join(path, "log_format"),
            issues,
            allowed_values=LOG_FORMATS,
        )


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        item = value[key]
        out[key] = _deep_copy_mapping(item) if isinstance(item, Mapping) else copy.deepcopy(item)
    return out


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "SandboxToolConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
