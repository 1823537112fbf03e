"""Evaluation context handed to every rule function."""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Mapping

from oas_lint.document import Document, ReferenceIndex
from oas_lint.models import RuleDefinition

DEFAULT_MAX_WORKERS = 10


class RuleContext:
    """Immutable per-rule snapshot of everything a rule may read.

    Options are converted to strings once, here, and rules read them through
    option(); option names the rule does not declare are simply never asked
    for.
    """

    def __init__(
        self,
        document: Document | None,
        rule: RuleDefinition,
        cancel_event: threading.Event | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.document = document
        self.index: ReferenceIndex | None = document.index if document is not None else None
        self.spec_version = document.version if document is not None else ""
        self.rule = rule
        self.cancel_event = cancel_event
        self.max_workers = max_workers
        self._options: Mapping[str, str] = MappingProxyType(rule.string_options())

    @property
    def options(self) -> Mapping[str, str]:
        return self._options

    def option(self, name: str, default: str | None = None) -> str | None:
        return self._options.get(name, default)

    def message_or(self, default: str) -> str:
        """The rule's configured message override, else the default message."""
        return self.rule.message or default

    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()
