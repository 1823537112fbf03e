"""Config Loader - Loads ruleset files and resolves the rules to run.

Ruleset files are YAML with ${ENV_VAR} substitution. Each entry under
`rules` either switches a built-in rule on or off, or overrides its
severity, message or function options.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from oas_lint.models import RuleDefinition, RuleOverride, RulesetFile
from oas_lint.rules.registry import default_rules


class ConfigError(Exception):
    """Raised when ruleset loading or rule resolution fails."""


def load_ruleset(ruleset_path: Path) -> RulesetFile:
    """Load a ruleset from YAML with ${ENV_VAR} substitution."""
    if not ruleset_path.exists():
        raise ConfigError(f"Ruleset file not found: {ruleset_path}")

    try:
        with open(ruleset_path, "r", encoding="utf-8") as f:
            raw_ruleset = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in ruleset file: {e}") from e

    if raw_ruleset is None:
        raw_ruleset = {}
    if not isinstance(raw_ruleset, dict):
        raise ConfigError("Ruleset file must be a YAML mapping")

    raw_ruleset = _substitute_env_vars(raw_ruleset)

    try:
        return RulesetFile.model_validate(raw_ruleset)
    except Exception as e:
        raise ConfigError(f"Invalid ruleset structure: {e}") from e


def resolve_rules(
    ruleset: RulesetFile | None = None,
    only: list[str] | None = None,
) -> list[RuleDefinition]:
    """Work out the rules to run.

    Starts from the recommended built-in rules (unless the ruleset sets
    `recommended: false`) and applies the ruleset's switches and overrides.
    `only` then restricts the run to the named rules; a rule named there runs
    even when it is not recommended.

    Raises:
        ConfigError: If a rule id is not a built-in rule.
    """
    defaults = {rule.id: rule for rule in default_rules()}
    start_recommended = ruleset is None or ruleset.recommended
    selected: dict[str, RuleDefinition] = {}
    if start_recommended:
        selected = {rule_id: rule for rule_id, rule in defaults.items() if rule.recommended}

    configured: dict[str, RuleDefinition] = {}
    if ruleset is not None:
        for rule_id, setting in ruleset.rules.items():
            base = _builtin(defaults, rule_id)
            if setting is False or (isinstance(setting, RuleOverride) and not setting.enabled):
                selected.pop(rule_id, None)
                continue
            rule = base if setting is True else _apply_override(base, setting)
            selected[rule_id] = rule
            configured[rule_id] = rule

    if only:
        chosen = {}
        for rule_id in only:
            base = _builtin(defaults, rule_id)
            chosen[rule_id] = selected.get(rule_id) or configured.get(rule_id) or base
        selected = chosen

    # Keep the built-in order so output is stable
    return [selected[rule_id] for rule_id in defaults if rule_id in selected]


def _builtin(defaults: dict[str, RuleDefinition], rule_id: str) -> RuleDefinition:
    if rule_id not in defaults:
        available = ", ".join(defaults)
        raise ConfigError(f"Unknown rule '{rule_id}'. Available: {available}")
    return defaults[rule_id]


def _apply_override(base: RuleDefinition, override: RuleOverride) -> RuleDefinition:
    updates: dict[str, Any] = {}
    if override.severity is not None:
        updates["severity"] = override.severity
    if override.message is not None:
        updates["message"] = override.message
    if override.function_options is not None:
        updates["function_options"] = dict(override.function_options)
    return base.model_copy(update=updates)


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return pattern.sub(replacer, s)
