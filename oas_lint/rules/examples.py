"""examples - examples on parameters, headers and media types must be usable.

For each named example: its `value` must validate against the container's
schema, it needs one of `value` and `externalValue` (not both), and it needs
a `summary`. A single `example` is validated against the schema as well.
"""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import ExampleHolder
from oas_lint.example_validator import ExampleValidator
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction
from oas_lint.workers import FindingCollector, SeenSet, fan_out


class Examples(RuleFunction):
    name = "examples"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        validator = ExampleValidator(context.document)
        collector = FindingCollector()
        # Examples shared through components are checked once
        checked = SeenSet()

        def check(holder: ExampleHolder) -> None:
            schema = holder.schema
            if holder.examples:
                for key, example in holder.example_entries():
                    if not checked.add(id(example)):
                        continue
                    if example.has_value and schema is not None:
                        for violation in validator.validate(schema, example.example_value):
                            collector.add(
                                self.build_finding(
                                    context,
                                    example,
                                    f"Example for `{key}` is not valid: {violation.reason}",
                                )
                            )
                    if not example.has_value and example.external_value is None:
                        collector.add(
                            self.build_finding(
                                context, example, f"example `{key}` has no `value` or `externalValue`"
                            )
                        )
                    if example.has_value and example.external_value is not None:
                        collector.add(
                            self.build_finding(
                                context, example, f"example `{key}` contains both `externalValue` and `value`"
                            )
                        )
                    if not (example.summary or "").strip():
                        collector.add(
                            self.build_finding(context, example, f"example `{key}` is missing a `summary`")
                        )
            elif holder.example is not None and schema is not None:
                name = holder.name or ""
                for violation in validator.validate(schema, holder.example):
                    collector.add(
                        self.build_finding(
                            context,
                            holder,
                            f"Example for `{name}` is not valid: {violation.reason}",
                            suffix=".example",
                            start_node=holder.key_node_for("example"),
                        )
                    )

        fan_out(context.document.example_holders(), check, context)
        return collector.findings
