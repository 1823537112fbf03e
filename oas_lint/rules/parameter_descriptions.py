"""oasParamDescriptions - parameters must be described."""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction


class ParameterDescriptions(RuleFunction):
    name = "oasParamDescriptions"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        findings = []
        # document.parameters covers component, path-level and operation parameters
        for param in context.document.parameters:
            if param.location is None:
                continue
            if (param.description or "").strip():
                continue
            findings.append(
                self.build_finding(
                    context,
                    param,
                    f"the parameter `{param.name or ''}` does not contain a description",
                )
            )
        return findings
