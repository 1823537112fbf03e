"""camelCaseProperties - schema property names must be camelCase."""

from __future__ import annotations

import re

from oas_lint.context import RuleContext
from oas_lint.document import is_extension_key, quoted_segment
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction

CAMEL_CASE_PATTERN = re.compile(r"^[a-z][A-Za-z0-9]*$")
PASCAL_CASE_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")


def detect_case_type(name: str) -> str:
    """Name the casing style of a property name that is not camelCase."""
    if "_" in name:
        return "snake_case"
    if "-" in name:
        return "kebab-case"
    if PASCAL_CASE_PATTERN.match(name):
        return "PascalCase"
    return "non-camelCase"


class CamelCaseProperties(RuleFunction):
    name = "camelCaseProperties"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        findings = []
        for schema in context.document.schemas:
            for prop_name, proxy in schema.properties.items():
                if is_extension_key(prop_name) or CAMEL_CASE_PATTERN.match(prop_name):
                    continue
                findings.append(
                    self.build_finding(
                        context,
                        schema,
                        f"property `{prop_name}` is `{detect_case_type(prop_name)}` not `camelCase`",
                        suffix=f".properties{quoted_segment(prop_name)}",
                        start_node=proxy.key_node,
                    )
                )
        return findings
