"""Finding - one diagnostic emitted by a rule for one document location."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import yaml

from oas_lint.models import Severity
from oas_lint.yaml_nodes import column_of, end_column_of, end_line_of, line_of


@dataclass
class Finding:
    """A diagnostic anchored to a source span and a JSON path.

    paths is only set when the offending node is reachable at more than one
    location (through `$ref`); it then holds every location, primary first.
    """

    message: str
    rule_id: str
    path: str
    severity: Severity = Severity.WARN
    paths: list[str] | None = None
    start_node: yaml.Node | None = None
    end_node: yaml.Node | None = None
    origin: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def start_line(self) -> int:
        return line_of(self.start_node)

    @property
    def start_column(self) -> int:
        return column_of(self.start_node)

    @property
    def end_line(self) -> int:
        return end_line_of(self.end_node or self.start_node)

    @property
    def end_column(self) -> int:
        return end_column_of(self.end_node or self.start_node)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result: dict[str, Any] = {
            "message": self.message,
            "ruleId": self.rule_id,
            "severity": self.severity.value,
            "path": self.path,
            "startLine": self.start_line,
            "startColumn": self.start_column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
        }
        if self.paths:
            result["paths"] = list(self.paths)
        if self.origin:
            result["origin"] = self.origin
        return result
