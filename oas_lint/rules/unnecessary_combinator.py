"""oasUnnecessaryCombinator - a combinator with a single entry adds nothing."""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import Schema, is_extension_key
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction
from oas_lint.yaml_nodes import mapping_items, scalar_text

# Fields that OpenAPI 3.0 ignores next to a bare $ref, so authors wrap the ref in allOf
DESCRIPTIVE_SIBLINGS = frozenset(
    {
        "description",
        "title",
        "default",
        "example",
        "externalDocs",
        "nullable",
        "readOnly",
        "writeOnly",
        "deprecated",
        "xml",
        "enum",
    }
)


def has_descriptive_siblings(schema: Schema) -> bool:
    for key_node, _ in mapping_items(schema.value_node):
        key = scalar_text(key_node)
        if key is not None and (key in DESCRIPTIVE_SIBLINGS or is_extension_key(key)):
            return True
    return False


class UnnecessaryCombinator(RuleFunction):
    name = "oasUnnecessaryCombinator"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        findings = []
        is_oas30 = context.spec_version.startswith("3.0")
        for schema in context.document.schemas:
            for combinator, entries in schema.combinators():
                if len(entries) != 1:
                    continue
                if (
                    combinator == "allOf"
                    and is_oas30
                    and entries[0].is_reference
                    and has_descriptive_siblings(schema)
                ):
                    continue
                findings.append(
                    self.build_finding(
                        context,
                        schema,
                        f"schema with `{combinator}` combinator containing only one item "
                        "should be replaced with the item directly",
                        suffix=f".{combinator}",
                        start_node=schema.key_node_for(combinator),
                    )
                )
        return findings
