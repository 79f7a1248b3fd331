"""
Inline suppression comments.

    let x = y!  // style-scan:disable force-unwrap
    // style-scan:disable-next-line naming-case, line-length
    let MAX = 1

``all`` suppresses every rule; a directive with no rule ids means ``all``.
"""

from __future__ import annotations

import re

from swift_style_scanner.models import Finding

ALL_RULES = "all"

_DIRECTIVE = re.compile(r"style-scan:(disable-next-line|disable)\b([ \t]+[\w\-]+(?:[ \t]*,[ \t]*[\w\-]+)*)?")


class Suppressions:
    def __init__(self, by_line: dict[int, frozenset[str]] | None = None):
        self.by_line = dict(by_line or {})

    @classmethod
    def from_tokens(cls, tokens) -> Suppressions:
        by_line: dict[int, set[str]] = {}
        for token in tokens:
            if token.kind != "comment":
                continue
            for match in _DIRECTIVE.finditer(token.text):
                action, raw_ids = match.groups()
                ids = {item.strip() for item in (raw_ids or "").split(",") if item.strip()} or {ALL_RULES}
                line = token.span.start.line if action == "disable" else token.span.end.line + 1
                by_line.setdefault(line, set()).update(ids)
        return cls({line: frozenset(ids) for line, ids in by_line.items()})

    def suppresses(self, finding: Finding) -> bool:
        ids = self.by_line.get(finding.line)
        if not ids:
            return False
        return ALL_RULES in ids or finding.rule_id in ids

    def __len__(self) -> int:
        return len(self.by_line)
