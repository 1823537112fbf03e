"""Rule function contract shared by every built-in rule."""

from __future__ import annotations

from abc import ABC, abstractmethod

import yaml

from oas_lint.context import RuleContext
from oas_lint.document import ModelNode
from oas_lint.findings import Finding
from oas_lint.locator import path_and_alternates
from oas_lint.models import RuleFunctionSchema, RuleOption

CATEGORY_OPENAPI = "openapi"


class RuleFunction(ABC):
    """A named, stateless check over a whole document.

    Subclasses set `name` (and `options` / `error_message` when they take
    options) and implement evaluate(). evaluate() must only read the document,
    so one instance can serve concurrent runs.
    """

    name: str = ""
    category: str = CATEGORY_OPENAPI
    options: tuple[RuleOption, ...] = ()
    error_message: str = ""

    def schema(self) -> RuleFunctionSchema:
        return RuleFunctionSchema(name=self.name, options=list(self.options), error_message=self.error_message)

    def run(self, context: RuleContext) -> list[Finding]:
        """Evaluate the rule; a context without a document yields nothing."""
        if context.document is None:
            return []
        return self.evaluate(context)

    @abstractmethod
    def evaluate(self, context: RuleContext) -> list[Finding]:
        """Inspect the document and return findings (possibly empty)."""

    def build_finding(
        self,
        context: RuleContext,
        node: ModelNode,
        message: str,
        suffix: str = "",
        start_node: yaml.Node | None = None,
        end_node: yaml.Node | None = None,
    ) -> Finding:
        """Create a finding located at `node` (plus `suffix`) and attach it to the node.

        Args:
            context: Current rule context.
            node: Model node the finding is about.
            message: Default message; a configured rule message replaces it.
            suffix: Extra path segments below the node, e.g. ".required[1]".
            start_node: Source node for the span (defaults to the node's key).
            end_node: End of the span (defaults to start_node).
        """
        path, paths = path_and_alternates(context.document, node, suffix)
        start = start_node if start_node is not None else node.anchor_node
        finding = Finding(
            message=context.message_or(message),
            rule_id=context.rule.id,
            severity=context.rule.severity,
            path=path,
            paths=paths,
            start_node=start,
            end_node=end_node if end_node is not None else start,
            origin=context.document.origin,
        )
        node.add_finding(finding)
        return finding
