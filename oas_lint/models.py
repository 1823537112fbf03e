"""Rule and ruleset data models for oas-lint.

All models use Pydantic v2.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Rule Metadata
# =============================================================================


class Severity(str, Enum):
    """Finding severity, taken from the rule that produced the finding."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    HINT = "hint"


class RuleOption(BaseModel):
    """One option accepted by a rule function."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Option name as written in functionOptions")
    description: str = Field(default="", description="Human readable description")


class RuleFunctionSchema(BaseModel):
    """What a rule function accepts.

    error_message is used for the single finding a rule emits when one of its
    options cannot be coerced to the expected type.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Function name")
    options: list[RuleOption] = Field(default_factory=list, description="Recognized options")
    error_message: str = Field(default="", description="Message used when option values are invalid")

    def option_names(self) -> list[str]:
        return [option.name for option in self.options]


def _option_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class RuleDefinition(BaseModel):
    """A configured rule: which function runs, how findings are labelled."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(description="Stable rule identifier, e.g. camelCaseProperties")
    description: str = Field(default="", description="What the rule checks")
    message: str | None = Field(default=None, description="Message override for every finding")
    severity: Severity = Field(default=Severity.WARN, description="Severity of findings")
    function: str = Field(description="Name of the rule function to run")
    function_options: dict[str, Any] = Field(
        default_factory=dict, alias="functionOptions", description="Options passed to the function"
    )
    recommended: bool = Field(default=True, description="Enabled when no ruleset is given")

    def string_options(self) -> dict[str, str]:
        """Options as strings, the only form rule functions receive."""
        return {name: _option_string(value) for name, value in self.function_options.items()}


# =============================================================================
# Ruleset File
# =============================================================================


class RuleOverride(BaseModel):
    """Per-rule override in a ruleset file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    severity: Severity | None = Field(default=None, description="Replacement severity")
    message: str | None = Field(default=None, description="Replacement message")
    function_options: dict[str, Any] | None = Field(
        default=None, alias="functionOptions", description="Replacement options"
    )
    enabled: bool = Field(default=True, description="Set false to switch the rule off")


class RulesetFile(BaseModel):
    """Ruleset file (YAML).

    Each entry under `rules` is a boolean (enable or disable a built-in rule)
    or an override object.
    """

    model_config = ConfigDict(extra="forbid")

    recommended: bool = Field(
        default=True, description="Start from the recommended rules (false: only rules listed here)"
    )
    rules: dict[str, bool | RuleOverride] = Field(default_factory=dict, description="Rule id -> setting")

    @field_validator("rules")
    @classmethod
    def validate_rule_ids(cls, v: dict[str, bool | RuleOverride]) -> dict[str, bool | RuleOverride]:
        for rule_id in v:
            if not rule_id or not rule_id.strip():
                raise ValueError("rule ids must be non-empty")
        return v

    @model_validator(mode="after")
    def check_not_empty(self) -> Self:
        if not self.recommended and not self.rules:
            raise ValueError("ruleset disables recommended rules but enables none")
        return self
