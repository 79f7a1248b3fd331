from __future__ import annotations

from pathlib import Path

from swift_style_scanner.fixes import apply_fixes, fix_report
from swift_style_scanner.models import Finding, LintConfig, Position, Span
from swift_style_scanner.pipeline import analyze_source, run_lint
from swift_style_scanner.rules import build_registry


def findings_for(source: str):
    return analyze_source(source, "Sample.swift", LintConfig(), build_registry()).findings


def test_safe_fixes_are_applied_together() -> None:
    source = "let a = 1;  \nfunc f() -> () {}"

    fixed, applied = apply_fixes(source, findings_for(source))

    assert fixed == "let a = 1\nfunc f() -> Void {}\n"
    assert applied == 4


def test_fixes_use_byte_offsets() -> None:
    source = "let é = \"ü\"   \n"

    fixed, applied = apply_fixes(source, findings_for(source))

    assert fixed == "let é = \"ü\"\n"
    assert applied == 1


def test_extra_blank_lines_are_removed() -> None:
    source = "let a = 1\n\n\n\nlet b = 2\n\n\n"

    fixed, _ = apply_fixes(source, findings_for(source))

    assert fixed == "let a = 1\n\nlet b = 2\n"


def test_fixing_is_stable() -> None:
    source = "let a = 1;  \n\n\n\nfunc f() -> () {}"

    once, _ = apply_fixes(source, findings_for(source))
    twice, applied = apply_fixes(once, findings_for(once))

    assert twice == once
    assert applied == 0


def test_overlapping_edits_keep_the_later_one() -> None:
    def edit(start: int, end: int, text: str) -> Finding:
        span = Span(Position(1, start + 1, start), Position(1, end + 1, end))
        return Finding("demo", "info", span, "edit", replacement=text)

    fixed, applied = apply_fixes("abcdef", [edit(1, 4, "X"), edit(3, 5, "Y")])

    assert fixed == "abcYf"
    assert applied == 1


def test_findings_without_replacement_are_ignored() -> None:
    source = "let MAX_VALUE = 1\n"

    fixed, applied = apply_fixes(source, findings_for(source))

    assert (fixed, applied) == (source, 0)


def test_fix_report_rewrites_files(tmp_path: Path) -> None:
    dirty = tmp_path / "Dirty.swift"
    dirty.write_bytes(b"let a = 1;\r\nlet b = 2   \r\n")
    clean = tmp_path / "Clean.swift"
    clean.write_text("let c = 3\n", encoding="utf-8")
    registry = build_registry()

    applied = fix_report(run_lint([tmp_path], LintConfig(), registry))

    assert applied == 2
    assert dirty.read_bytes() == b"let a = 1\r\nlet b = 2\r\n"
    assert clean.read_text(encoding="utf-8") == "let c = 3\n"
    assert run_lint([tmp_path], LintConfig(), registry).findings == ()


def test_fix_report_skips_files_that_disappeared(tmp_path: Path) -> None:
    gone = tmp_path / "Gone.swift"
    gone.write_text("let a = 1;\n", encoding="utf-8")
    kept = tmp_path / "Kept.swift"
    kept.write_text("let b = 2;\n", encoding="utf-8")
    report = run_lint([tmp_path], LintConfig(), build_registry())
    gone.unlink()

    assert fix_report(report) == 1
    assert kept.read_text(encoding="utf-8") == "let b = 2\n"
    assert not gone.exists()
