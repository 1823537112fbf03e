"""missingType - schemas should declare a `type`.

A property schema without a type is reported twice: once as a schema and
once as a property of each schema that declares it, including properties
that reach it through `$ref`.
"""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import Schema, quoted_segment
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction

# Keywords that make the shape of a schema clear without a `type`
SHAPE_KEYWORDS = (
    "allOf",
    "anyOf",
    "oneOf",
    "const",
    "enum",
    "properties",
    "items",
    "additionalProperties",
    "patternProperties",
)


def is_untyped(schema: Schema) -> bool:
    return not schema.type and not any(schema.has(keyword) for keyword in SHAPE_KEYWORDS)


class MissingType(RuleFunction):
    name = "missingType"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        findings = []
        for schema in context.document.schemas:
            if is_untyped(schema):
                findings.append(self.build_finding(context, schema, "schema is missing a `type` field"))

            for name, proxy in schema.properties.items():
                prop = proxy.schema
                if prop is None or not is_untyped(prop):
                    continue
                findings.append(
                    self.build_finding(
                        context,
                        schema,
                        f"schema property `{name}` is missing a `type` field",
                        suffix=f".properties{quoted_segment(name)}",
                        start_node=proxy.key_node,
                    )
                )
        return findings
