"""Example Validator - checks example values against schemas.

A schema is turned into a plain JSON Schema dict by decoding its node tree
with every local `$ref` inlined (a `$ref` already being inlined further up
becomes `{}`), then validated with jsonschema: Draft 4 for Swagger 2.0 and
OpenAPI 3.0, Draft 2020-12 for OpenAPI 3.1.

OpenAPI 3.0 spells nullability as `nullable: true`, which Draft 4 does not
know about. Errors about a null value are therefore dropped afterwards when
the schema that rejected it (or the property schema at the error location)
is nullable. 3.1 documents use `type: [X, "null"]` and need no filter.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Any

import yaml
from jsonschema import Draft4Validator, Draft202012Validator, ValidationError
from jsonschema.exceptions import SchemaError, UnknownType

from oas_lint.document import Document, Schema
from oas_lint.yaml_nodes import (
    MAX_DECODE_DEPTH,
    decode_node,
    decode_scalar,
    find_key,
    is_mapping,
    is_sequence,
    key_string,
    scalar_text,
)

# Reasons that only summarize nested failures; their leaf causes are reported instead
BANNED_REASONS = frozenset({"if-then failed", "if-else failed", "allOf failed", "oneOf failed"})

# Depth ceiling for the cycle check on polymorphic schemas
MAX_CYCLE_DEPTH = 40

_JSON_TYPES = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "number"),
    (str, "string"),
    (list, "array"),
    (dict, "object"),
)


@dataclass
class ExampleViolation:
    """One reason an example does not conform to its schema.

    Attributes:
        reason: Human-readable reason, e.g. "got string, want integer".
        location: JSON path into the example value ("$" for the root).
    """

    reason: str
    location: str = "$"


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    for python_type, name in _JSON_TYPES:
        if isinstance(value, python_type):
            return name
    return type(value).__name__


def _has_circular_reference(schema: Schema) -> bool:
    """Depth-limited search for a schema reachable from itself.

    Returns False once MAX_CYCLE_DEPTH is reached, so a very deep but
    acyclic schema is treated as acyclic.
    """
    clean: set[int] = set()

    def visit(current: Schema, on_path: set[int], depth: int) -> bool:
        if depth > MAX_CYCLE_DEPTH:
            return False
        if id(current) in on_path:
            return True
        if id(current) in clean:
            return False
        on_path.add(id(current))
        for child in current.children():
            target = child.schema
            if target is not None and visit(target, on_path, depth + 1):
                return True
        on_path.discard(id(current))
        clean.add(id(current))
        return False

    return visit(schema, set(), 0)


class ExampleValidator:
    """Validates example values against the schemas of one document.

    Converted schemas are cached per schema object; the validator is safe to
    share between worker threads.

    Usage:
        validator = ExampleValidator(document)
        for violation in validator.validate(schema, example_node):
            print(violation.reason)
    """

    def __init__(self, document: Document) -> None:
        self._document = document
        self._version = document.version
        self._lock = threading.Lock()
        self._validators: dict[int, Any] = {}
        if document.is_oas31:
            self._validator_class = Draft202012Validator
        else:
            self._validator_class = Draft4Validator

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def validate(self, schema: Schema | None, value_node: yaml.Node | None) -> list[ExampleViolation]:
        """Validate the value held by a node against a schema.

        Returns:
            Violations in validator order; empty when the value conforms or the
            schema cannot be converted (cyclic polymorphic schemas).
        """
        if schema is None or value_node is None:
            return []
        return self.validate_value(schema, decode_node(value_node))

    def validate_value(self, schema: Schema, instance: Any) -> list[ExampleViolation]:
        compiled = self._compiled(schema)
        if compiled is None:
            return []
        if isinstance(compiled, str):
            return [ExampleViolation(reason=compiled)]

        try:
            errors = list(compiled.iter_errors(instance))
        except (UnknownType, re.error) as e:
            return [ExampleViolation(reason=f"schema cannot be used for validation: {e}")]

        violations: list[ExampleViolation] = []
        for error in errors:
            for leaf, reason in self._leaf_reasons(error):
                if self._is_nullable_false_positive(leaf, reason, compiled.schema):
                    continue
                violations.append(ExampleViolation(reason=reason, location=leaf.json_path))
        return violations

    def to_json_schema(self, schema: Schema) -> dict[str, Any] | None:
        """Convert a schema into a JSON Schema document (None if it cannot be)."""
        if schema.is_polymorphic() and _has_circular_reference(schema):
            return None
        return self._inline(schema.value_node, frozenset(), 0)

    def _compiled(self, schema: Schema):
        """Validator for a schema, a schema error reason, or None when skipped."""
        with self._lock:
            if id(schema) in self._validators:
                return self._validators[id(schema)]

        schema_dict = self.to_json_schema(schema)
        compiled = None
        if schema_dict is not None:
            try:
                self._validator_class.check_schema(schema_dict)
            except SchemaError as e:
                compiled = f"schema cannot be used for validation: {e.message}"
            else:
                compiled = self._validator_class(
                    schema_dict, format_checker=self._validator_class.FORMAT_CHECKER
                )

        with self._lock:
            self._validators[id(schema)] = compiled
        return compiled

    # -------------------------------------------------------------------------
    # Schema conversion
    # -------------------------------------------------------------------------

    def _inline(self, node: yaml.Node | None, active_refs: frozenset[str], depth: int) -> Any:
        if node is None or depth > MAX_DECODE_DEPTH:
            return None
        if is_mapping(node):
            ref = scalar_text(find_key(node, "$ref")[1])
            if ref is not None:
                return self._inline_ref(node, ref, active_refs, depth)
            return {
                key_string(key_node): self._inline(value_node, active_refs, depth + 1)
                for key_node, value_node in node.value
            }
        if is_sequence(node):
            return [self._inline(item, active_refs, depth + 1) for item in node.value]
        return decode_scalar(node)

    def _inline_ref(self, node: yaml.Node, ref: str, active_refs: frozenset[str], depth: int) -> Any:
        if ref in active_refs:
            return {}
        target = self._document.index.find_pointer(ref)
        if target is None:
            # External or broken reference: keep it out of the validator's way
            return {key_string(k): decode_node(v) for k, v in node.value if key_string(k) != "$ref"}
        return self._inline(target, active_refs | {ref}, depth + 1)

    # -------------------------------------------------------------------------
    # Error handling
    # -------------------------------------------------------------------------

    def _leaf_reasons(self, error: ValidationError):
        reason = self._reason(error)
        if reason in BANNED_REASONS:
            for cause in error.context or ():
                yield from self._leaf_reasons(cause)
            return
        yield error, reason

    @staticmethod
    def _reason(error: ValidationError) -> str:
        if error.validator == "type":
            wanted = error.validator_value
            if isinstance(wanted, list):
                wanted = ", ".join(str(w) for w in wanted)
            return f"got {json_type_name(error.instance)}, want {wanted}"
        if error.validator == "oneOf" and error.context:
            return "oneOf failed"
        if error.validator == "anyOf" and error.context:
            return "anyOf failed"
        if error.validator == "allOf":
            return "allOf failed"
        return error.message

    def _is_nullable_false_positive(self, error: ValidationError, reason: str, root: Any) -> bool:
        if not self._version.startswith("3.0") or "got null" not in reason:
            return False
        if isinstance(error.schema, dict) and error.schema.get("nullable") is True:
            return True
        target = _schema_at(root, list(error.absolute_path))
        return isinstance(target, dict) and target.get("nullable") is True


def _schema_at(schema: Any, location: list[str | int]) -> Any:
    """Follow an instance location through properties/items of a schema dict.

    Properties contributed by allOf/anyOf/oneOf branches are found as well.
    """
    current = schema
    for segment in location:
        if not isinstance(current, dict):
            return None
        if isinstance(segment, int):
            current = current.get("items")
            continue
        found = _property_schema(current, segment)
        if found is None:
            return None
        current = found
    return current


def _property_schema(schema: dict[str, Any], name: str) -> Any:
    properties = schema.get("properties")
    if isinstance(properties, dict) and name in properties:
        return properties[name]
    for combinator in ("allOf", "anyOf", "oneOf"):
        for branch in schema.get(combinator) or ():
            if isinstance(branch, dict):
                found = _property_schema(branch, name)
                if found is not None:
                    return found
    return None
