from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from swift_style_scanner.models import SEVERITIES, LintConfig, RuleSettings
from swift_style_scanner.rules.base import ParamSpec, RuleRegistry


class ConfigError(ValueError):
    pass


RULE_KEYS = frozenset({"enabled", "severity", "params"})
DOCUMENT_KEYS = frozenset(
    {"rules", "fail_on", "fail_fast", "jobs", "rule_jobs", "include_exts", "exclude_dirs", "max_file_size_bytes"}
)
FAIL_ON_CHOICES = ("warning", "error")


def load_config(path: str | Path, registry: RuleRegistry) -> LintConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Config file could not be read: {config_path}: {exc}") from exc

    return parse_config(raw, registry)


def parse_config(raw: object, registry: RuleRegistry) -> LintConfig:
    """Validate a decoded config document.

    Accepts either a bare ``{rule_id: settings}`` map or a full document with a
    ``rules`` key plus run options.
    """
    if not isinstance(raw, dict):
        raise ConfigError("Config must be a JSON object")

    if any(key in DOCUMENT_KEYS for key in raw):
        unknown = sorted(set(raw) - DOCUMENT_KEYS)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        document = raw
    else:
        document = {"rules": raw}

    rules_raw = document.get("rules", {})
    if not isinstance(rules_raw, dict):
        raise ConfigError("'rules' must be an object")
    rules = {rule_id: _parse_rule(rule_id, entry, registry) for rule_id, entry in rules_raw.items()}

    defaults = LintConfig()
    fail_on = document.get("fail_on", defaults.fail_on)
    if fail_on not in FAIL_ON_CHOICES:
        raise ConfigError(f"'fail_on' must be one of: {', '.join(FAIL_ON_CHOICES)}")

    fail_fast = document.get("fail_fast", defaults.fail_fast)
    if not isinstance(fail_fast, bool):
        raise ConfigError("'fail_fast' must be true or false")

    return LintConfig(
        rules=rules,
        fail_on=fail_on,
        fail_fast=fail_fast,
        jobs=_positive_int(document, "jobs", defaults.jobs),
        rule_jobs=_positive_int(document, "rule_jobs", defaults.rule_jobs),
        include_exts=normalize_extensions(
            _ensure_string_list(document.get("include_exts", list(defaults.include_exts)), "include_exts")
        ),
        exclude_dirs=tuple(
            _ensure_string_list(document.get("exclude_dirs", list(defaults.exclude_dirs)), "exclude_dirs")
        ),
        max_file_size_bytes=_positive_int(document, "max_file_size_bytes", defaults.max_file_size_bytes),
    )


def normalize_extensions(values) -> tuple[str, ...]:
    extensions = []
    for value in values:
        value = value.strip().lower()
        if not value:
            continue
        extensions.append(value if value.startswith(".") else f".{value}")
    if not extensions:
        raise ConfigError("At least one file extension must be included")
    return tuple(extensions)


def _parse_rule(rule_id: str, entry: object, registry: RuleRegistry) -> RuleSettings:
    if rule_id not in registry:
        raise ConfigError(f"Unknown rule id: {rule_id}")
    if not isinstance(entry, dict):
        raise ConfigError(f"Settings for rule '{rule_id}' must be an object")

    unknown = sorted(set(entry) - RULE_KEYS)
    if unknown:
        raise ConfigError(f"Rule '{rule_id}' has unknown keys: {', '.join(unknown)}")

    enabled = entry.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigError(f"Rule '{rule_id}': 'enabled' must be true or false")

    severity = entry.get("severity")
    if severity is not None and severity not in SEVERITIES:
        raise ConfigError(f"Rule '{rule_id}': severity must be one of: {', '.join(SEVERITIES)}")

    params_raw = entry.get("params", {})
    if not isinstance(params_raw, dict):
        raise ConfigError(f"Rule '{rule_id}': 'params' must be an object")

    spec = registry.get(rule_id)
    params: dict[str, Any] = {}
    for name, value in params_raw.items():
        param = spec.param(name)
        if param is None:
            raise ConfigError(f"Rule '{rule_id}' has no parameter '{name}'")
        params[name] = _check_param(rule_id, param, value)

    return RuleSettings(enabled=enabled, severity=severity, params=params)


def _check_param(rule_id: str, param: ParamSpec, value: object) -> Any:
    where = f"Rule '{rule_id}' parameter '{param.name}'"
    if param.kind is int:
        # bool is an int subclass; true/false is never a valid count
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigError(f"{where} must be an integer")
        if param.minimum is not None and value < param.minimum:
            raise ConfigError(f"{where} must be at least {param.minimum}")
        return value
    if param.kind is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{where} must be true or false")
        return value
    if param.kind is list:
        return tuple(_ensure_string_list(value, where))
    if not isinstance(value, param.kind):
        raise ConfigError(f"{where} must be of type {param.kind.__name__}")
    return value


def _positive_int(document: dict, key: str, default: int) -> int:
    value = document.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigError(f"'{key}' must be a positive integer")
    return value


def _ensure_string_list(value: object, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{where} must be a list of strings")
    return list(value)
