"""Tests for the rule host, lint results and text formatting."""

import logging
import threading

import pytest

from oas_lint.findings import Finding
from oas_lint.linter import LintResult, RuleHost, format_lint_result_text, lint_document
from oas_lint.models import RuleDefinition, Severity
from oas_lint.rules.base import RuleFunction
from oas_lint.rules.registry import RULE_FUNCTIONS
from tests.conftest import parse_yaml, rule_definition

DIRTY = """
    openapi: 3.1.0
    paths:
      /foo/{x}:
        get:
          parameters:
            - name: x
              in: path
              required: true
              description: The x
              schema:
                type: string
          responses: {}
      /foo/bar:
        get:
          responses: {}
    components:
      schemas:
        Thing:
          description: A thing
          type: object
          properties:
            created_at:
              type: string
"""

CLEAN = """
    openapi: 3.1.0
    paths: {}
"""


class ExplodingRule(RuleFunction):
    name = "exploding"

    def evaluate(self, context):
        raise RuntimeError("kaboom")


@pytest.fixture
def exploding_rule(monkeypatch):
    monkeypatch.setitem(RULE_FUNCTIONS, "exploding", ExplodingRule())
    return RuleDefinition(id="exploding", function="exploding", severity=Severity.ERROR)


# =============================================================================
# Test: LintResult
# =============================================================================


class TestLintResult:
    def test_add_by_severity(self):
        result = LintResult()
        for severity in Severity:
            result.add(Finding(message=severity.value, rule_id="r", path="$", severity=severity))
        assert [f.message for f in result.errors] == ["error"]
        assert [f.message for f in result.warnings] == ["warn"]
        assert [f.message for f in result.info] == ["info", "hint"]
        assert result.has_errors()

    def test_to_dict_summary(self):
        result = LintResult(rules_run=2, origin="/tmp/a.yaml", spec_version="3.1.0")
        result.add(Finding(message="m", rule_id="r", path="$", severity=Severity.WARN))
        summary = result.to_dict()["summary"]
        assert summary == {
            "origin": "/tmp/a.yaml",
            "spec_version": "3.1.0",
            "rules_run": 2,
            "rules_failed": [],
            "error_count": 0,
            "warning_count": 1,
            "info_count": 0,
        }

    def test_by_rule(self):
        result = LintResult()
        result.add(Finding(message="a", rule_id="one", path="$"))
        result.add(Finding(message="b", rule_id="two", path="$"))
        assert [f.message for f in result.by_rule("two")] == ["b"]


# =============================================================================
# Test: RuleHost
# =============================================================================


class TestRuleHost:
    def test_recommended_rules(self):
        result = lint_document(parse_yaml(DIRTY))
        assert [f.rule_id for f in result.errors] == ["noAmbiguousPaths"]
        # camelCaseProperties is not recommended
        assert result.by_rule("camelCaseProperties") == []
        assert result.rules_run == 9

    def test_explicit_rules(self):
        document = parse_yaml(DIRTY)
        result = RuleHost(document, [rule_definition("camelCaseProperties")]).run()
        assert [f.message for f in result.info] == ["property `created_at` is `snake_case` not `camelCase`"]
        assert result.rules_run == 1

    def test_failing_rule_does_not_stop_the_run(self, exploding_rule, caplog):
        document = parse_yaml(DIRTY)
        with caplog.at_level(logging.ERROR, logger="oas_lint.linter"):
            result = RuleHost(document, [exploding_rule, rule_definition("noAmbiguousPaths")]).run()
        assert result.rules_failed == ["exploding"]
        assert result.rules_run == 1
        assert len(result.errors) == 1
        assert "Rule exploding failed" in caplog.text

    def test_unknown_function_is_skipped(self, caplog):
        rule = RuleDefinition(id="ghost", function="noSuchFunction")
        with caplog.at_level(logging.WARNING, logger="oas_lint.linter"):
            result = RuleHost(parse_yaml(CLEAN), [rule]).run()
        assert result.rules_run == 0
        assert result.rules_failed == []
        assert "unknown function" in caplog.text

    def test_cancelled_run(self):
        event = threading.Event()
        event.set()
        result = lint_document(parse_yaml(DIRTY), cancel_event=event)
        assert result.rules_run == 0
        assert result.all_findings() == []

    def test_result_records_document(self):
        result = lint_document(parse_yaml(CLEAN, origin="/tmp/clean.yaml"))
        assert result.origin == "/tmp/clean.yaml"
        assert result.spec_version == "3.1.0"
        assert not result.has_errors()


# =============================================================================
# Test: Text output
# =============================================================================


class TestFormatText:
    def test_fail(self):
        result = lint_document(parse_yaml(DIRTY))
        text = format_lint_result_text(result)
        assert text.startswith("OpenAPI Lint Summary")
        assert "ERRORS (1)" in text
        assert "noAmbiguousPaths: paths are ambiguous with one another: `/foo/{x}` and `/foo/bar`" in text
        assert "at $.paths['/foo/bar']" in text
        assert text.endswith("Result: FAIL (errors found)")

    def test_pass_with_warnings(self):
        result = LintResult()
        result.add(Finding(message="m", rule_id="r", path="$", severity=Severity.WARN))
        assert format_lint_result_text(result).endswith("Result: PASS (with warnings)")

    def test_pass(self):
        result = lint_document(parse_yaml(CLEAN))
        assert format_lint_result_text(result).endswith("Result: PASS")
