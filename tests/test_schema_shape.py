"""Tests for the oasUnnecessaryCombinator and missingType rules."""

from tests.conftest import messages, run_rule

SINGLE_ALL_OF = (
    "schema with `allOf` combinator containing only one item should be replaced with the item directly"
)


def _schemas(body, version="3.1.0"):
    return f"openapi: {version}\npaths: {{}}\ncomponents:\n  schemas:\n{body}"


BASE = """\
    Base:
      type: object
"""


# =============================================================================
# Test: oasUnnecessaryCombinator
# =============================================================================


class TestUnnecessaryCombinator:
    def test_single_inline_all_of(self):
        findings = run_rule(
            "oasUnnecessaryCombinator",
            _schemas(
                """\
    Wrapped:
      allOf:
        - type: string
"""
            ),
        )
        assert messages(findings) == [SINGLE_ALL_OF]
        assert findings[0].path == "$.components.schemas['Wrapped'].allOf"

    def test_two_entries_are_fine(self):
        findings = run_rule(
            "oasUnnecessaryCombinator",
            _schemas(
                """\
    Either:
      oneOf:
        - type: string
        - type: integer
"""
            ),
        )
        assert findings == []

    def test_ref_with_description_in_30_is_allowed(self):
        findings = run_rule(
            "oasUnnecessaryCombinator",
            _schemas(
                BASE
                + """\
    Described:
      description: Base with a description
      allOf:
        - $ref: '#/components/schemas/Base'
""",
                version="3.0.3",
            ),
        )
        assert findings == []

    def test_ref_with_description_in_31_is_reported(self):
        findings = run_rule(
            "oasUnnecessaryCombinator",
            _schemas(
                BASE
                + """\
    Described:
      description: Base with a description
      allOf:
        - $ref: '#/components/schemas/Base'
"""
            ),
        )
        assert messages(findings) == [SINGLE_ALL_OF]

    def test_bare_ref_in_30_is_reported(self):
        findings = run_rule(
            "oasUnnecessaryCombinator",
            _schemas(
                BASE
                + """\
    Bare:
      allOf:
        - $ref: '#/components/schemas/Base'
""",
                version="3.0.3",
            ),
        )
        assert messages(findings) == [SINGLE_ALL_OF]

    def test_single_any_of_with_description_in_30_is_reported(self):
        findings = run_rule(
            "oasUnnecessaryCombinator",
            _schemas(
                BASE
                + """\
    Maybe:
      description: Only one choice
      anyOf:
        - $ref: '#/components/schemas/Base'
""",
                version="3.0.3",
            ),
        )
        assert messages(findings) == [
            "schema with `anyOf` combinator containing only one item should be replaced with the item directly"
        ]


# =============================================================================
# Test: missingType
# =============================================================================


class TestMissingType:
    def test_property_without_type_is_reported_twice(self):
        findings = run_rule(
            "missingType",
            _schemas(
                """\
    Thing:
      type: object
      properties:
        a:
          description: no type here
        b:
          format: date
"""
            ),
        )
        assert messages(findings) == [
            "schema is missing a `type` field",
            "schema is missing a `type` field",
            "schema property `a` is missing a `type` field",
            "schema property `b` is missing a `type` field",
        ]
        assert sorted({f.path for f in findings}) == [
            "$.components.schemas['Thing'].properties['a']",
            "$.components.schemas['Thing'].properties['b']",
        ]

    def test_shape_keywords_stand_in_for_type(self):
        findings = run_rule(
            "missingType",
            _schemas(
                """\
    Colour:
      enum: [red, green]
    Shape:
      oneOf:
        - type: string
        - type: integer
    Bag:
      properties:
        size:
          type: integer
"""
            ),
        )
        assert findings == []

    def test_component_without_type(self):
        findings = run_rule(
            "missingType",
            _schemas(
                """\
    Loose:
      description: anything
"""
            ),
        )
        assert messages(findings) == ["schema is missing a `type` field"]
        assert findings[0].path == "$.components.schemas['Loose']"

    def test_referenced_property_without_type(self):
        findings = run_rule(
            "missingType",
            _schemas(
                """\
    Owner:
      type: object
      properties:
        thing:
          $ref: '#/components/schemas/Untyped'
    Untyped:
      description: no type here
"""
            ),
        )
        assert messages(findings) == [
            "schema is missing a `type` field",
            "schema property `thing` is missing a `type` field",
        ]
        assert sorted(f.path for f in findings) == [
            "$.components.schemas['Owner'].properties['thing']",
            "$.components.schemas['Untyped']",
        ]
