"""oasExampleExternal - an example holds `value` or `externalValue`, not both."""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction


class ExamplesExternal(RuleFunction):
    name = "oasExampleExternal"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        findings = []
        seen: set[int] = set()
        for holder in context.document.example_holders():
            for _, example in holder.example_entries():
                if id(example) in seen:
                    continue
                seen.add(id(example))
                if example.has_value and example.external_value is not None:
                    findings.append(
                        self.build_finding(
                            context,
                            example,
                            f"{holder.container_label} example contains both `externalValue` and `value`",
                        )
                    )
        return findings
