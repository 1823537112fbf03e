"""Tests for the schemaTypeCheck rule."""

from tests.conftest import messages, run_rule


def _schemas(body, version="3.1.0"):
    """Wrap schema definitions (indented for `components.schemas`) in a document."""
    return f"openapi: {version}\npaths: {{}}\ncomponents:\n  schemas:\n{body}"


# =============================================================================
# Test: required
# =============================================================================


class TestRequired:
    def test_required_satisfied_through_all_of(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    BaseSchema:
      type: object
      properties:
        id:
          type: string
        name:
          type: string
    ExtendedSchema:
      type: object
      properties:
        extra:
          type: string
    Composed:
      type: object
      allOf:
        - $ref: '#/components/schemas/BaseSchema'
        - $ref: '#/components/schemas/ExtendedSchema'
      required: [id, name, extra, missing]
"""
            ),
        )
        assert messages(findings) == ["`required` field `missing` is not defined in `properties`"]
        assert findings[0].path == "$.components.schemas['Composed'].required[3]"

    def test_required_without_properties(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Empty:
      type: object
      required: [a, b]
"""
            ),
        )
        assert messages(findings) == ["object contains `required` fields but no `properties`"]
        assert findings[0].path == "$.components.schemas['Empty'].required"

    def test_required_satisfied_through_one_of(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Choice:
      type: object
      oneOf:
        - properties:
            card:
              type: string
        - properties:
            iban:
              type: string
      required: [card]
"""
            ),
        )
        assert findings == []


# =============================================================================
# Test: dependentRequired
# =============================================================================


class TestDependentRequired:
    def test_dependent_required(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Billing:
      type: object
      properties:
        a:
          type: string
        b:
          type: string
      dependentRequired:
        a: [b, c]
        d: [a]
        b: [b]
"""
            ),
        )
        assert messages(findings) == [
            "circular dependency detected: property `b` requires itself in `dependentRequired`",
            "property `c` referenced in `dependentRequired` does not exist in schema `properties`",
            "property `d` referenced in `dependentRequired` does not exist in schema `properties`",
        ]
        base = "$.components.schemas['Billing'].dependentRequired"
        assert sorted(f.path for f in findings) == sorted(
            [f"{base}['a'][1]", f"{base}['d']", f"{base}['b'][0]"]
        )


# =============================================================================
# Test: Bounds
# =============================================================================


class TestBounds:
    def test_string_bounds(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Code:
      type: string
      minLength: 5
      maxLength: 2
    Negative:
      type: string
      minLength: -1
"""
            ),
        )
        assert messages(findings) == [
            "`maxLength` should be greater than or equal to `minLength`",
            "`minLength` should be a non-negative number",
        ]
        assert sorted(f.path for f in findings) == [
            "$.components.schemas['Code'].maxLength",
            "$.components.schemas['Negative'].minLength",
        ]

    def test_array_bounds(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    List:
      type: array
      minItems: 3
      maxItems: 1
      minContains: 2
      maxContains: 1
"""
            ),
        )
        assert messages(findings) == [
            "`maxContains` should be greater than or equal to `minContains`",
            "`maxItems` should be greater than or equal to `minItems`",
        ]

    def test_object_bounds(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Bag:
      type: object
      maxProperties: -2
"""
            ),
        )
        assert messages(findings) == ["`maxProperties` should be a non-negative number"]

    def test_valid_bounds(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Code:
      type: string
      minLength: 1
      maxLength: 10
"""
            ),
        )
        assert findings == []


# =============================================================================
# Test: Numbers
# =============================================================================


class TestNumbers:
    def test_number_keywords(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Amount:
      type: number
      multipleOf: 0
      minimum: 10
      maximum: 1
    Window:
      type: integer
      exclusiveMinimum: 10
      exclusiveMaximum: 5
"""
            ),
        )
        assert messages(findings) == [
            "`exclusiveMaximum` should be greater than or equal to `exclusiveMinimum`",
            "`maximum` should be a number greater than or equal to `minimum`",
            "`multipleOf` should be a number greater than `0`",
        ]

    def test_boolean_exclusive_bounds_in_30(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Window:
      type: integer
      minimum: 1
      maximum: 5
      exclusiveMinimum: true
      exclusiveMaximum: false
""",
                version="3.0.3",
            ),
        )
        assert findings == []


# =============================================================================
# Test: Patterns and types
# =============================================================================


class TestPatternAndType:
    def test_invalid_pattern(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Code:
      type: string
      pattern: '[a-z'
"""
            ),
        )
        assert messages(findings) == ["schema `pattern` should be a ECMA-262 regular expression dialect"]
        assert findings[0].path == "$.components.schemas['Code'].pattern"

    def test_valid_pattern(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Code:
      type: string
      pattern: '^[a-z]+$'
"""
            ),
        )
        assert findings == []

    def test_unknown_type(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Typo:
      type: strin
"""
            ),
        )
        assert messages(findings) == ["unknown schema type: `strin`"]

    def test_each_type_of_a_type_list_is_checked(self):
        findings = run_rule(
            "schemaTypeCheck",
            _schemas(
                """\
    Either:
      type: [string, array]
      minLength: -1
      minItems: -1
"""
            ),
        )
        assert messages(findings) == [
            "`minItems` should be a non-negative number",
            "`minLength` should be a non-negative number",
        ]
