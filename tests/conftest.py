"""Pytest configuration and shared helpers for oas-lint tests.

This file provides:
- parse_yaml: build a Document from an inline (indented) YAML string
- run_rule: evaluate one built-in rule against inline YAML
- messages: the messages of a finding list, sorted (rules do not order findings)
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from oas_lint.context import RuleContext
from oas_lint.document import Document
from oas_lint.findings import Finding
from oas_lint.loader import parse_document
from oas_lint.rules.registry import default_rules, get_rule_function

PROJECT_ROOT = Path(__file__).parent.parent


def parse_yaml(text: str, origin: str | None = None) -> Document:
    """Parse an inline YAML document (common indentation is removed)."""
    return parse_document(textwrap.dedent(text).lstrip("\n"), origin=origin)


def rule_definition(rule_id: str, options: dict[str, Any] | None = None, message: str | None = None):
    rule = next(r for r in default_rules() if r.id == rule_id)
    updates: dict[str, Any] = {}
    if options is not None:
        updates["function_options"] = options
    if message is not None:
        updates["message"] = message
    return rule.model_copy(update=updates) if updates else rule


def run_rule(
    rule_id: str,
    text: str | Document,
    options: dict[str, Any] | None = None,
    message: str | None = None,
) -> list[Finding]:
    """Evaluate one built-in rule against inline YAML (or an already built Document)."""
    document = text if isinstance(text, Document) else parse_yaml(text)
    rule = rule_definition(rule_id, options, message)
    function = get_rule_function(rule.function)
    return function.run(RuleContext(document, rule))


def messages(findings: list[Finding]) -> list[str]:
    return sorted(f.message for f in findings)


@pytest.fixture
def write_yaml(tmp_path: Path):
    """Write inline YAML to a file under tmp_path and return its path."""

    def _write(text: str, name: str = "openapi.yaml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return path

    return _write
