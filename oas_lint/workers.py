"""Worker pool used by rules that fan out over many schemas or containers."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, TypeVar

from oas_lint.context import RuleContext
from oas_lint.findings import Finding

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FindingCollector:
    """Thread-safe accumulator for findings produced by workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._findings: list[Finding] = []

    def add(self, finding: Finding) -> None:
        with self._lock:
            self._findings.append(finding)

    def extend(self, findings: Iterable[Finding]) -> None:
        with self._lock:
            self._findings.extend(findings)

    @property
    def findings(self) -> list[Finding]:
        with self._lock:
            return list(self._findings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._findings)


class SeenSet:
    """Thread-safe set with an atomic check-and-add."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seen: set = set()

    def add(self, key) -> bool:
        """Add key; return False if it was already present."""
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._seen


def fan_out(
    items: Iterable[T],
    work: Callable[[T], None],
    context: RuleContext,
    max_workers: int | None = None,
) -> None:
    """Run work(item) for every item on a thread pool and wait for all of them.

    Cancellation is checked before each item starts; items not yet started
    when the context's cancel event is set are skipped. A worker that raises
    is logged and the remaining items still run.
    """
    items = list(items)
    if not items:
        return
    workers = min(max_workers or context.max_workers, len(items))

    def run(item: T) -> None:
        if context.cancelled():
            return
        work(item)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(run, item) for item in items]
        for future in as_completed(futures):
            error = future.exception()
            if error is not None:
                logger.error("Worker failed in rule %s: %s", context.rule.id, error, exc_info=error)

    if context.cancelled():
        logger.info("Rule %s cancelled; returning partial findings", context.rule.id)
