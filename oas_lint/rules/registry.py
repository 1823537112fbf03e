"""Rule registry - built-in rule functions and their default definitions."""

from __future__ import annotations

from oas_lint.models import RuleDefinition, Severity
from oas_lint.rules.base import RuleFunction
from oas_lint.rules.camel_case_properties import CamelCaseProperties
from oas_lint.rules.component_descriptions import ComponentDescriptions
from oas_lint.rules.examples import Examples
from oas_lint.rules.examples_external import ExamplesExternal
from oas_lint.rules.examples_missing import ExamplesMissing
from oas_lint.rules.examples_schema import ExamplesSchema
from oas_lint.rules.missing_type import MissingType
from oas_lint.rules.no_ambiguous_paths import NoAmbiguousPaths
from oas_lint.rules.parameter_descriptions import ParameterDescriptions
from oas_lint.rules.schema_type import SchemaTypeCheck
from oas_lint.rules.unnecessary_combinator import UnnecessaryCombinator

RULE_FUNCTIONS: dict[str, RuleFunction] = {
    function.name: function
    for function in (
        CamelCaseProperties(),
        ComponentDescriptions(),
        Examples(),
        ExamplesExternal(),
        ExamplesMissing(),
        ExamplesSchema(),
        NoAmbiguousPaths(),
        SchemaTypeCheck(),
        ParameterDescriptions(),
        UnnecessaryCombinator(),
        MissingType(),
    )
}

# (id, severity, recommended, description)
_DEFAULTS = (
    ("camelCaseProperties", Severity.INFO, False, "Schema property names should be camelCase"),
    ("oasComponentDescriptions", Severity.WARN, True, "Components should have descriptions"),
    ("examples", Severity.ERROR, True, "Examples must be valid and carry a summary"),
    ("oasExampleExternal", Severity.ERROR, True, "Examples cannot use both value and externalValue"),
    ("oasExampleMissing", Severity.WARN, True, "Schemas, parameters and media types should have examples"),
    ("oasExampleSchema", Severity.ERROR, True, "Examples must validate against their schema"),
    ("noAmbiguousPaths", Severity.ERROR, True, "Paths must not be ambiguous with one another"),
    ("schemaTypeCheck", Severity.ERROR, True, "Schema keywords must be valid for the declared type"),
    ("oasParamDescriptions", Severity.WARN, True, "Parameters should have descriptions"),
    ("oasUnnecessaryCombinator", Severity.WARN, True, "Single-entry combinators should be replaced by the entry"),
    ("missingType", Severity.WARN, False, "Schemas should declare a type"),
)


def get_rule_function(name: str) -> RuleFunction | None:
    return RULE_FUNCTIONS.get(name)


def default_rules() -> list[RuleDefinition]:
    """Fresh definitions of every built-in rule (recommended or not)."""
    return [
        RuleDefinition(
            id=rule_id,
            description=description,
            severity=severity,
            function=rule_id,
            recommended=recommended,
        )
        for rule_id, severity, recommended, description in _DEFAULTS
    ]
