"""Rule Host - runs the enabled rules against a document and collects findings.

Usage:
    document = load_document(Path("openapi.yaml"))
    result = RuleHost(document, resolve_rules()).run()
    if result.has_errors():
        print(format_lint_result_text(result))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from oas_lint.config_loader import resolve_rules
from oas_lint.context import DEFAULT_MAX_WORKERS, RuleContext
from oas_lint.document import Document
from oas_lint.findings import Finding
from oas_lint.models import RuleDefinition, Severity
from oas_lint.rules.registry import get_rule_function

logger = logging.getLogger(__name__)


@dataclass
class LintResult:
    """Findings of one run, split by severity (hints are kept with info)."""

    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)
    info: list[Finding] = field(default_factory=list)

    # Summary statistics
    rules_run: int = 0
    rules_failed: list[str] = field(default_factory=list)
    origin: str | None = None
    spec_version: str = ""

    def add(self, finding: Finding) -> None:
        """Add a finding to the appropriate list based on severity."""
        if finding.severity == Severity.ERROR:
            self.errors.append(finding)
        elif finding.severity == Severity.WARN:
            self.warnings.append(finding)
        else:
            self.info.append(finding)

    def has_errors(self) -> bool:
        """Return True if there are any error-severity findings."""
        return len(self.errors) > 0

    def all_findings(self) -> list[Finding]:
        return [*self.errors, *self.warnings, *self.info]

    def by_rule(self, rule_id: str) -> list[Finding]:
        return [f for f in self.all_findings() if f.rule_id == rule_id]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
            "info": [f.to_dict() for f in self.info],
            "summary": {
                "origin": self.origin,
                "spec_version": self.spec_version,
                "rules_run": self.rules_run,
                "rules_failed": list(self.rules_failed),
                "error_count": len(self.errors),
                "warning_count": len(self.warnings),
                "info_count": len(self.info),
            },
        }


class RuleHost:
    """Owns a document and the enabled rules; runs each rule with its own context.

    A rule that raises is logged and contributes no findings; the remaining
    rules still run.
    """

    def __init__(
        self,
        document: Document,
        rules: list[RuleDefinition],
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._document = document
        self._rules = list(rules)
        self._max_workers = max_workers

    @property
    def rules(self) -> list[RuleDefinition]:
        return list(self._rules)

    def run(self, cancel_event: threading.Event | None = None) -> LintResult:
        """Run every rule in order.

        Args:
            cancel_event: When set, no further rules start and running rules
                stop handing out work; findings collected so far are kept.
        """
        result = LintResult(origin=self._document.origin, spec_version=self._document.version)
        for rule in self._rules:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Run cancelled before rule %s", rule.id)
                break
            function = get_rule_function(rule.function)
            if function is None:
                logger.warning("Rule %s uses unknown function %s; skipping", rule.id, rule.function)
                continue

            context = RuleContext(self._document, rule, cancel_event, self._max_workers)
            logger.debug("Running rule %s", rule.id)
            try:
                findings = function.run(context)
            except Exception:
                logger.exception("Rule %s failed", rule.id)
                result.rules_failed.append(rule.id)
                continue
            for finding in findings:
                result.add(finding)
            result.rules_run += 1
            logger.debug("Rule %s finished with %d findings", rule.id, len(findings))
        return result


def lint_document(
    document: Document,
    rules: list[RuleDefinition] | None = None,
    cancel_event: threading.Event | None = None,
) -> LintResult:
    """Lint a document with the given rules (default: the recommended rules)."""
    if rules is None:
        rules = resolve_rules()
    return RuleHost(document, rules).run(cancel_event)


def format_lint_result_text(result: LintResult) -> str:
    """Format lint result as human-readable text.

    Args:
        result: The lint result to format.

    Returns:
        Formatted text output.
    """
    lines: list[str] = []

    lines.append("OpenAPI Lint Summary")
    lines.append("=" * 60)
    if result.origin:
        lines.append(f"Document: {result.origin}")
    lines.append(f"Version: {result.spec_version or 'unknown'}")
    lines.append(f"Rules run: {result.rules_run}")
    if result.rules_failed:
        lines.append(f"Rules failed: {', '.join(result.rules_failed)}")
    lines.append("")

    for title, findings in (("ERRORS", result.errors), ("WARNINGS", result.warnings), ("INFO", result.info)):
        if not findings:
            continue
        lines.append(f"{title} ({len(findings)})")
        lines.append("-" * 40)
        for finding in findings:
            lines.append(
                f"  {finding.start_line}:{finding.start_column} {finding.rule_id}: {finding.message}"
            )
            lines.append(f"      at {finding.path}")
        lines.append("")

    if result.has_errors():
        lines.append("Result: FAIL (errors found)")
    elif result.warnings:
        lines.append("Result: PASS (with warnings)")
    else:
        lines.append("Result: PASS")

    return "\n".join(lines)
