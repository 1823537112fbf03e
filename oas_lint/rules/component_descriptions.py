"""oasComponentDescriptions - every component needs a description."""

from __future__ import annotations

from oas_lint.context import RuleContext
from oas_lint.document import COMPONENT_TYPES, Reference, SchemaProxy
from oas_lint.findings import Finding
from oas_lint.models import RuleOption
from oas_lint.rules.base import RuleFunction


class ComponentDescriptions(RuleFunction):
    """Checks each component map for missing or too-short descriptions.

    Option `minWords` (integer, default 0) sets the minimum description
    length in words. Referenced components (`$ref`) are skipped; their
    target is checked where it is defined.
    """

    name = "oasComponentDescriptions"
    options = (RuleOption(name="minWords", description="Minimum number of words in a description"),)
    error_message = "`minWords` must be a non-negative integer"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        document = context.document
        min_words = self._min_words(context)
        if min_words is None:
            return [self.build_finding(context, document, self.error_message)]

        components = document.components
        findings = []
        for component_type in COMPONENT_TYPES:
            label = components.section_names[component_type]
            for name, component in components.sections[component_type].items():
                if isinstance(component, Reference):
                    continue
                if isinstance(component, SchemaProxy) and (component.is_reference or component.boolean is not None):
                    continue
                description = (component.description or "").strip()
                if not description:
                    message = f"`{label}` component `{name}` is missing a description"
                elif min_words and len(description.split()) < min_words:
                    message = f"`{label}` component `{name}` description must be at least `{min_words}` words long"
                else:
                    continue
                findings.append(self.build_finding(context, component, message))
        return findings

    @staticmethod
    def _min_words(context: RuleContext) -> int | None:
        raw = (context.option("minWords") or "").strip()
        if not raw:
            return 0
        try:
            value = int(raw)
        except ValueError:
            return None
        return value if value >= 0 else None
