"""oasExampleSchema - every example must validate against its schema.

Covers schema-level `example` / `examples` and the examples attached to
parameters, headers and media types. XML media types are skipped: their
examples are documents, not JSON values.
"""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import ExampleHolder, MediaType, Schema, index_segment, quoted_segment
from oas_lint.example_validator import ExampleValidator
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction
from oas_lint.workers import FindingCollector, fan_out
from oas_lint.yaml_nodes import is_mapping, is_sequence, key_string


def is_xml_media_type(media_type: MediaType) -> bool:
    return "xml" in (media_type.name or "").lower()


class ExamplesSchema(RuleFunction):
    name = "oasExampleSchema"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        validator = ExampleValidator(context.document)
        collector = FindingCollector()

        def check_schema(schema: Schema) -> None:
            example = schema.example
            if example is not None:
                for violation in validator.validate(schema, example):
                    collector.add(
                        self.build_finding(
                            context,
                            schema,
                            violation.reason,
                            suffix=".example",
                            start_node=schema.key_node_for("example"),
                        )
                    )

            examples_key, examples_node = schema.field("examples")
            if is_sequence(examples_node):
                entries = [(index_segment(i), node) for i, node in enumerate(examples_node.value)]
            elif is_mapping(examples_node):
                entries = [(quoted_segment(key_string(k)), node) for k, node in examples_node.value]
            else:
                entries = []
            for segment, node in entries:
                for violation in validator.validate(schema, node):
                    collector.add(
                        self.build_finding(
                            context,
                            schema,
                            violation.reason,
                            suffix=f".examples{segment}",
                            start_node=examples_key,
                            end_node=node,
                        )
                    )

        def check_holder(holder: ExampleHolder) -> None:
            schema = holder.schema
            if schema is None:
                return
            if isinstance(holder, MediaType) and is_xml_media_type(holder):
                return
            if holder.examples:
                for _, example in holder.example_entries():
                    if not example.has_value:
                        continue
                    for violation in validator.validate(schema, example.example_value):
                        collector.add(self.build_finding(context, example, violation.reason))
            elif holder.example is not None:
                for violation in validator.validate(schema, holder.example):
                    collector.add(
                        self.build_finding(
                            context,
                            holder,
                            violation.reason,
                            suffix=".example",
                            start_node=holder.key_node_for("example"),
                        )
                    )

        fan_out(context.document.schemas, check_schema, context)
        fan_out(context.document.example_holders(), check_holder, context)
        return collector.findings
