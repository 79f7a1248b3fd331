from __future__ import annotations

import threading
from typing import Iterable

from swift_style_scanner.models import Finding, severity_counts
from swift_style_scanner.suppressions import Suppressions


def sort_key(item: Finding) -> tuple:
    return (item.line, item.column, item.rule_id, item.span.end.offset, item.message)


class Aggregator:
    """Collects findings for one file; safe to feed from several rule workers."""

    def __init__(self, path: str = ""):
        self.path = path
        self._lock = threading.Lock()
        self._findings: list[Finding] = []

    def add(self, findings: Iterable[Finding]) -> None:
        items = list(findings)
        with self._lock:
            self._findings.extend(items)

    def finalize(self, suppressions: Suppressions | None = None) -> tuple[Finding, ...]:
        with self._lock:
            collected = list(self._findings)

        # Exact duplicates: same rule, span and message.
        deduped: dict[tuple, Finding] = {}
        for item in collected:
            deduped.setdefault((item.rule_id, item.span, item.message), item)

        kept = [item for item in deduped.values() if suppressions is None or not suppressions.suppresses(item)]
        return tuple(sorted(kept, key=sort_key))

    def counts(self, suppressions: Suppressions | None = None) -> dict[str, int]:
        return severity_counts(self.finalize(suppressions))
