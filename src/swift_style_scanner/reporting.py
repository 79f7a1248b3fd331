from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from swift_style_scanner.models import SEVERITY_RANK, Report

FORMATS = ("text", "json", "csv")

CSV_FIELDS = ["path", "line", "column", "end_line", "end_column", "severity", "rule_id", "message", "fixable"]

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_TOOLING_ERROR = 2


def exit_code(report: Report, fail_on: str = "error") -> int:
    """2 for any tooling diagnostic, else 1 for a finding at or above ``fail_on``, else 0."""
    if report.diagnostics:
        return EXIT_TOOLING_ERROR
    threshold = SEVERITY_RANK[fail_on]
    if any(SEVERITY_RANK[item.severity] >= threshold for item in report.findings):
        return EXIT_FINDINGS
    return EXIT_OK


def render(report: Report, fmt: str = "text") -> str:
    if fmt == "text":
        return render_text(report)
    if fmt == "json":
        return render_json(report)
    if fmt == "csv":
        return render_csv(report)
    raise ValueError(f"Unsupported format: {fmt}")


def render_text(report: Report) -> str:
    lines = []
    for file_report in report.files:
        for diagnostic in file_report.diagnostics:
            if diagnostic.span is not None:
                where = f"{diagnostic.path}:{diagnostic.span.start.line}:{diagnostic.span.start.column}"
            else:
                where = diagnostic.path
            lines.append(f"{where}: {diagnostic.kind}: {diagnostic.message}")
        for item in file_report.findings:
            lines.append(f"{item.path}:{item.line}:{item.column}: {item.severity}: {item.message} [{item.rule_id}]")

    summary = report.summary()
    lines.append(
        f"{summary['files_analyzed']} files analyzed: {summary['findings_total']} findings "
        f"({summary['error']} errors, {summary['warning']} warnings, {summary['info']} info), "
        f"{summary['diagnostics_total']} tooling errors"
        + (" [cancelled]" if report.cancelled else "")
    )
    return "\n".join(lines) + "\n"


def render_json(report: Report) -> str:
    payload = {
        "summary": report.summary(),
        "findings": [item.to_dict() for item in report.findings],
        "diagnostics": [item.to_dict() for item in report.diagnostics],
    }
    return json.dumps(payload, indent=2, ensure_ascii=True) + "\n"


def render_csv(report: Report) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_FIELDS, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for item in report.findings:
        writer.writerow(item.to_dict())
    return buffer.getvalue()


def write_report(content: str, output: str | Path | None) -> None:
    if output is None:
        print(content, end="")
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)
