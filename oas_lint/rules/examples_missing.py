"""oasExampleMissing - things that need examples should have them.

An example is *inferred* (and nothing is reported) when any of these hold,
checked in order:

1. the schema type is boolean, string, number or integer, or it has an
   `enum` / `x-extensible-enum`
2. the schema has `const` or `default`
3. the schema has no type at all (missingType reports that instead)
4. the array items carry an example (or every item property does)
5. the enclosing parameter, header or media type has `example` / `examples`
   (directly or in its `content`), or the schema or an enclosing schema has
   an example

Containers (parameters, headers, media types) are checked first, then every
schema. Schemas settled while checking containers are not revisited. A
parameter or media type without any schema needs an example of its own.
When a property lacks an example, its schema (or media type) is reported
alongside it.
"""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import ExampleHolder, Header, MediaType, Schema, quoted_segment
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction
from oas_lint.walker import owning_holder, schema_ancestors, schema_dedup_key
from oas_lint.workers import FindingCollector, SeenSet, fan_out

IMPLICIT_EXAMPLE_TYPES = frozenset({"boolean", "string", "number", "integer"})

# Nesting ceiling when deciding whether all nested properties have examples
MAX_PROPERTY_DEPTH = 40


def has_explicit_example(schema: Schema) -> bool:
    return (
        schema.has_example
        or schema.has_const
        or schema.has_default
        or bool(schema.enum)
        or bool(schema.extensible_enum)
    )


def has_implicit_example(schema: Schema) -> bool:
    if schema.enum or schema.extensible_enum:
        return True
    if any(t in IMPLICIT_EXAMPLE_TYPES for t in schema.type):
        return True
    return schema.has_const or schema.has_default


def property_has_example(schema: Schema, depth: int = 0, active: frozenset[int] = frozenset()) -> bool:
    """Whether a property schema has, or can be given, an example.

    Object properties qualify when all of their own properties do.
    """
    if depth > MAX_PROPERTY_DEPTH or id(schema) in active:
        return False
    if has_explicit_example(schema) or has_implicit_example(schema):
        return True
    if schema.properties:
        active = active | {id(schema)}
        return all(
            proxy.schema is None or property_has_example(proxy.schema, depth + 1, active)
            for proxy in schema.properties.values()
        )
    return not schema.type


def items_have_example(schema: Schema) -> bool:
    items = schema.items.schema if schema.items is not None else None
    if items is None:
        return False
    if has_explicit_example(items):
        return True
    return bool(items.properties) and all(
        proxy.schema is None or has_explicit_example(proxy.schema) for proxy in items.properties.values()
    )


def holder_has_examples(holder: ExampleHolder | None) -> bool:
    return holder is not None and (holder.has_examples or holder.content_has_examples())


def example_inferred(schema: Schema, holder: ExampleHolder | None = None) -> bool:
    if has_implicit_example(schema):
        return True
    if not schema.type:
        return True
    if items_have_example(schema):
        return True
    if holder_has_examples(holder):
        return True
    return any(ancestor.has_example for ancestor in schema_ancestors(schema))


def inline_example_inferred(holder: ExampleHolder) -> bool:
    """Swagger 2.0 parameters declare a primitive `type` (or an array of one) inline."""
    return holder.has("type") or holder.has("enum") or holder.has("default")


def first_property_without_example(schema: Schema) -> str | None:
    for name, proxy in schema.properties.items():
        prop = proxy.schema
        if prop is not None and not property_has_example(prop):
            return name
    return None


class ExamplesMissing(RuleFunction):
    name = "oasExampleMissing"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        collector = FindingCollector()
        seen = SeenSet()

        def check_holder(holder: ExampleHolder) -> None:
            if holder.schema_proxy is None:
                # Headers without a schema are left alone
                if isinstance(holder, Header):
                    return
                if holder_has_examples(holder) or inline_example_inferred(holder):
                    return
                collector.add(self._container_finding(context, holder))
                return
            schema = holder.schema
            if schema is None:
                return
            # The container settles its schema either way
            seen.add(schema_dedup_key(schema))
            if holder_has_examples(holder) or example_inferred(schema, holder):
                return
            if isinstance(holder, MediaType) and schema.properties:
                missing = first_property_without_example(schema)
                if missing is None:
                    return
                collector.add(self._property_finding(context, schema, missing, "media type schema"))
            collector.add(self._container_finding(context, holder))

        def check_schema(schema: Schema) -> None:
            if not seen.add(schema_dedup_key(schema)):
                return
            if example_inferred(schema, owning_holder(schema)):
                return
            if schema.properties:
                missing = first_property_without_example(schema)
                if missing is None:
                    return
                collector.add(self._property_finding(context, schema, missing, "schema"))
            collector.add(self.build_finding(context, schema, "schema is missing `examples` or `example`"))

        fan_out(context.document.example_holders(), check_holder, context)
        if not context.cancelled():
            fan_out(context.document.schemas, check_schema, context)
        return collector.findings

    def _container_finding(self, context: RuleContext, holder: ExampleHolder) -> Finding:
        return self.build_finding(context, holder, f"{holder.container_label} is missing `examples` or `example`")

    def _property_finding(self, context: RuleContext, schema: Schema, name: str, label: str) -> Finding:
        return self.build_finding(
            context,
            schema,
            f"{label} property `{name}` is missing `examples` or `example`",
            suffix=f".properties{quoted_segment(name)}",
            start_node=schema.properties[name].key_node,
        )
