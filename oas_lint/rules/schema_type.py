"""schemaTypeCheck - schema keywords must make sense for the declared type.

Checks, per entry of `type`:

- string: length bounds, ECMA-262 `pattern`
- integer / number: `multipleOf`, `minimum`/`maximum`, exclusive bounds
- array: item and contains bounds
- object: property bounds, `required` and `dependentRequired`

A `required` or `dependentRequired` name counts as defined when it is in the
schema's own `properties` or in the `properties` of any direct `allOf`,
`anyOf` or `oneOf` branch.
"""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import Schema, index_segment, quoted_segment
from oas_lint.ecma_regex import check_pattern
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction
from oas_lint.yaml_nodes import find_key, is_sequence

KNOWN_TYPES = frozenset({"string", "integer", "number", "boolean", "array", "object", "null"})

STRING_BOUNDS = (("minLength", "maxLength"),)
ARRAY_BOUNDS = (("minItems", "maxItems"), ("minContains", "maxContains"))
OBJECT_BOUNDS = (("minProperties", "maxProperties"),)


def polymorphic_property_names(schema: Schema) -> set[str]:
    """Property names defined by the schema or one of its direct combinator branches."""
    names = set(schema.properties)
    for _, entries in schema.combinators():
        for proxy in entries:
            branch = proxy.schema
            if branch is not None:
                names.update(branch.properties)
    return names


class SchemaTypeCheck(RuleFunction):
    name = "schemaTypeCheck"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for schema in context.document.schemas:
            for type_name in schema.type:
                if type_name == "string":
                    self._check_bounds(context, schema, STRING_BOUNDS, findings)
                    self._check_pattern(context, schema, findings)
                elif type_name in ("integer", "number"):
                    self._check_number(context, schema, findings)
                elif type_name == "array":
                    self._check_bounds(context, schema, ARRAY_BOUNDS, findings)
                elif type_name == "object":
                    self._check_bounds(context, schema, OBJECT_BOUNDS, findings)
                    self._check_required(context, schema, findings)
                    self._check_dependent_required(context, schema, findings)
                elif type_name not in KNOWN_TYPES:
                    findings.append(
                        self._finding(context, schema, f"unknown schema type: `{type_name}`", "type")
                    )
        return findings

    def _finding(self, context: RuleContext, schema: Schema, message: str, keyword: str) -> Finding:
        return self.build_finding(
            context, schema, message, suffix=f".{keyword}", start_node=schema.key_node_for(keyword)
        )

    # -------------------------------------------------------------------------
    # Bounds
    # -------------------------------------------------------------------------

    def _check_bounds(self, context, schema: Schema, bounds, findings: list[Finding]) -> None:
        for low_name, high_name in bounds:
            low = schema.number(low_name)
            high = schema.number(high_name)
            if low is not None and low < 0:
                findings.append(
                    self._finding(context, schema, f"`{low_name}` should be a non-negative number", low_name)
                )
            if high is not None and high < 0:
                findings.append(
                    self._finding(context, schema, f"`{high_name}` should be a non-negative number", high_name)
                )
            if low is not None and high is not None and high < low:
                findings.append(
                    self._finding(
                        context,
                        schema,
                        f"`{high_name}` should be greater than or equal to `{low_name}`",
                        high_name,
                    )
                )

    def _check_pattern(self, context, schema: Schema, findings: list[Finding]) -> None:
        pattern = schema.text("pattern")
        if pattern is None:
            return
        if check_pattern(pattern) is not None:
            findings.append(
                self._finding(
                    context, schema, "schema `pattern` should be a ECMA-262 regular expression dialect", "pattern"
                )
            )

    def _check_number(self, context, schema: Schema, findings: list[Finding]) -> None:
        multiple_of = schema.number("multipleOf")
        if multiple_of is not None and multiple_of <= 0:
            findings.append(
                self._finding(context, schema, "`multipleOf` should be a number greater than `0`", "multipleOf")
            )

        minimum = schema.number("minimum")
        maximum = schema.number("maximum")
        if minimum is not None and maximum is not None and maximum < minimum:
            findings.append(
                self._finding(
                    context, schema, "`maximum` should be a number greater than or equal to `minimum`", "maximum"
                )
            )

        # Only the numeric (3.1 / draft 6+) form; 3.0 uses booleans here
        exclusive_min = schema.number("exclusiveMinimum")
        exclusive_max = schema.number("exclusiveMaximum")
        if exclusive_min is not None and exclusive_max is not None and exclusive_max < exclusive_min:
            findings.append(
                self._finding(
                    context,
                    schema,
                    "`exclusiveMaximum` should be greater than or equal to `exclusiveMinimum`",
                    "exclusiveMaximum",
                )
            )

    # -------------------------------------------------------------------------
    # required / dependentRequired
    # -------------------------------------------------------------------------

    def _check_required(self, context, schema: Schema, findings: list[Finding]) -> None:
        required = schema.required
        if not required:
            return

        defined = polymorphic_property_names(schema)
        if not defined:
            findings.append(
                self._finding(context, schema, "object contains `required` fields but no `properties`", "required")
            )
            return

        _, required_node = schema.field("required")
        items = required_node.value if is_sequence(required_node) else []
        for i, name in enumerate(required):
            if name in defined:
                continue
            findings.append(
                self.build_finding(
                    context,
                    schema,
                    f"`required` field `{name}` is not defined in `properties`",
                    suffix=f".required{index_segment(i)}",
                    start_node=items[i] if i < len(items) else schema.key_node_for("required"),
                )
            )

    def _check_dependent_required(self, context, schema: Schema, findings: list[Finding]) -> None:
        dependencies = schema.dependent_required
        if not dependencies:
            return

        defined = polymorphic_property_names(schema)
        _, dependencies_node = schema.field("dependentRequired")
        for key, names in dependencies.items():
            key_node, names_node = find_key(dependencies_node, key)
            base = f".dependentRequired{quoted_segment(key)}"
            if key not in defined:
                findings.append(
                    self.build_finding(
                        context,
                        schema,
                        f"property `{key}` referenced in `dependentRequired` does not exist in schema `properties`",
                        suffix=base,
                        start_node=key_node,
                    )
                )

            items = names_node.value if is_sequence(names_node) else []
            for j, name in enumerate(names):
                start = items[j] if j < len(items) else key_node
                if name == key:
                    message = (
                        f"circular dependency detected: property `{key}` requires itself in `dependentRequired`"
                    )
                elif name not in defined:
                    message = (
                        f"property `{name}` referenced in `dependentRequired` does not exist in schema `properties`"
                    )
                else:
                    continue
                findings.append(
                    self.build_finding(
                        context, schema, message, suffix=f"{base}{index_segment(j)}", start_node=start
                    )
                )
