from __future__ import annotations

from pathlib import Path
from typing import Iterable

from swift_style_scanner.logging import get_logger
from swift_style_scanner.models import Finding, Report

logger = get_logger(__name__)


def apply_fixes(text: str, findings: Iterable[Finding]) -> tuple[str, int]:
    """Apply the replacements carried by ``findings`` to ``text``.

    Spans are byte offsets into the UTF-8 encoding. Edits are applied from the
    end of the file backwards; an edit overlapping one already applied is
    skipped and left for the next run.
    """
    edits = sorted(
        (item for item in findings if item.replacement is not None),
        key=lambda item: (item.span.start.offset, item.span.end.offset),
        reverse=True,
    )
    data = text.encode("utf-8")
    applied = 0
    boundary = len(data) + 1
    for item in edits:
        start = item.span.start.offset
        end = item.span.end.offset
        if end > boundary:
            continue
        data = data[:start] + item.replacement.encode("utf-8") + data[end:]
        boundary = start
        applied += 1
    return data.decode("utf-8"), applied


def fix_report(report: Report) -> int:
    """Rewrite every file in ``report`` that has fixable findings; returns edits applied."""
    total = 0
    for file_report in report.files:
        fixable = [item for item in file_report.findings if item.replacement is not None]
        if not fixable:
            continue
        path = Path(file_report.path)
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                original = handle.read()
            fixed, applied = apply_fixes(original, fixable)
            if not applied or fixed == original:
                continue
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(fixed)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not fix %s: %s", file_report.path, exc)
            continue
        logger.info("Applied %d fixes to %s", applied, file_report.path)
        total += applied
    return total
