"""noAmbiguousPaths - no concrete URL may match two path templates.

Segments are compared pairwise. Two variables clash unless their declared
types are incompatible; a variable against a literal clashes only if the
literal parses as the variable's type. When one template has the variable
at one position and the other template has it at another, no single URL
can fit both, so the pair is not ambiguous.
"""

from __future__ import annotations

import re

from oas_lint.context import RuleContext
from oas_lint.document import PathItem
from oas_lint.findings import Finding
from oas_lint.rules.base import RuleFunction

VARIABLE_SEGMENT = re.compile(r"^\{(.+)\}$")
INTEGER_LITERAL = re.compile(r"^-?\d+$")
NUMBER_LITERAL = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)$")

NUMERIC_TYPES = frozenset({"integer", "number"})

# Which side of a mixed segment pair holds the variable
_LEFT_VARIABLE = "variable-literal"
_RIGHT_VARIABLE = "literal-variable"


def literal_matches_type(literal: str, type_name: str) -> bool:
    """Can a literal segment be a value of the declared parameter type?"""
    if type_name == "integer":
        return bool(INTEGER_LITERAL.match(literal))
    if type_name == "number":
        return bool(NUMBER_LITERAL.match(literal))
    if type_name == "boolean":
        return literal in ("true", "false")
    # string, unknown or undeclared types accept anything
    return True


def types_compatible(left: str, right: str) -> bool:
    if not left or not right:
        return True
    return left == right or (left in NUMERIC_TYPES and right in NUMERIC_TYPES)


def split_segments(path: str) -> list[str]:
    segments = path.split("/")
    if segments and segments[0] == "":
        segments = segments[1:]
    return segments


def paths_ambiguous(
    left: str,
    right: str,
    left_types: dict[str, str] | None = None,
    right_types: dict[str, str] | None = None,
) -> bool:
    """Decide whether two path templates can match the same concrete URL.

    Args:
        left: First template, e.g. "/pets/{id}".
        right: Second template.
        left_types: Path parameter name -> declared type for the first template.
        right_types: Same for the second template. Missing entries mean "any".
    """
    left_types = left_types or {}
    right_types = right_types or {}
    left_segments = split_segments(left)
    right_segments = split_segments(right)
    if len(left_segments) != len(right_segments):
        return False

    orientations: set[str] = set()
    for left_segment, right_segment in zip(left_segments, right_segments):
        left_var = VARIABLE_SEGMENT.match(left_segment)
        right_var = VARIABLE_SEGMENT.match(right_segment)
        if left_var is None and right_var is None:
            if left_segment != right_segment:
                return False
        elif left_var is not None and right_var is not None:
            left_type = left_types.get(left_var.group(1), "")
            right_type = right_types.get(right_var.group(1), "")
            if not types_compatible(left_type, right_type):
                return False
        elif left_var is not None:
            if not literal_matches_type(right_segment, left_types.get(left_var.group(1), "")):
                return False
            orientations.add(_LEFT_VARIABLE)
        else:
            if not literal_matches_type(left_segment, right_types.get(right_var.group(1), "")):
                return False
            orientations.add(_RIGHT_VARIABLE)

    return len(orientations) < 2


def path_parameter_types(item: PathItem) -> dict[str, str]:
    """Declared types of path parameters: path-level first, then each operation."""
    types: dict[str, str] = {}
    params = list(item.resolved_parameters())
    for operation in item.operations.values():
        params.extend(operation.resolved_parameters())
    for param in params:
        name = param.name
        if param.location != "path" or not name:
            continue
        declared = param.declared_type
        if declared and name not in types:
            types[name] = declared
    return types


class NoAmbiguousPaths(RuleFunction):
    name = "noAmbiguousPaths"

    def evaluate(self, context: RuleContext) -> list[Finding]:
        items = list(context.document.paths.items())
        types = {path: path_parameter_types(item) for path, item in items}
        findings = []
        for i, (left, _) in enumerate(items):
            for right, right_item in items[i + 1:]:
                if not paths_ambiguous(left, right, types[left], types[right]):
                    continue
                findings.append(
                    self.build_finding(
                        context,
                        right_item,
                        f"paths are ambiguous with one another: `{left}` and `{right}`",
                    )
                )
        return findings
