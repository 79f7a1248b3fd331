from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable

from swift_style_scanner.lexer import LexError, tokenize
from swift_style_scanner.logging import get_logger
from swift_style_scanner.models import Diagnostic, FileReport, LintConfig, Report
from swift_style_scanner.rules.base import RuleRegistry
from swift_style_scanner.rules.engine import evaluate
from swift_style_scanner.syntax import ParseError, build_tree

logger = get_logger(__name__)

# Diagnostics that stop a file from being analyzed at all.
FILE_ERROR_KINDS = frozenset({"lex-error", "parse-error", "read-error", "internal-error"})


def discover_files(
    paths: Iterable[str | Path],
    include_exts: Iterable[str],
    exclude_dirs: Iterable[str],
) -> list[Path]:
    include = {item.lower() for item in include_exts}
    exclude = set(exclude_dirs)
    found: dict[str, Path] = {}
    for raw in paths:
        root = Path(raw)
        if root.is_file():
            found[root.as_posix()] = root
        elif root.is_dir():
            for path in _iter_candidate_files(root, include, exclude):
                found[path.as_posix()] = path
        else:
            raise ValueError(f"Path does not exist: {root}")
    return [found[key] for key in sorted(found)]


def _iter_candidate_files(root: Path, include_exts: set[str], exclude_dirs: set[str]):
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        if any(part in exclude_dirs for part in path.relative_to(root).parts[:-1]):
            continue
        if path.suffix.lower() in include_exts:
            yield path


def analyze_source(
    text: str,
    path: str,
    config: LintConfig,
    registry: RuleRegistry,
    cancel: threading.Event | None = None,
) -> FileReport | None:
    """Run tokenize, parse and evaluate on one file's text.

    Returns None when ``cancel`` is set between stages; a cancelled file never
    yields a partial report.
    """
    cancel = cancel or threading.Event()
    try:
        tokens = list(tokenize(text))
    except LexError as exc:
        logger.warning("%s: %s", path, exc)
        return FileReport(path, diagnostics=(Diagnostic("lex-error", path, exc.message, span=exc.span),))
    if cancel.is_set():
        return None

    try:
        tree = build_tree(tokens)
    except ParseError as exc:
        logger.warning("%s: %s", path, exc)
        return FileReport(path, diagnostics=(Diagnostic("parse-error", path, exc.message, span=exc.span),))
    except RecursionError:
        logger.warning("%s: nesting too deep to parse", path)
        return FileReport(path, diagnostics=(Diagnostic("parse-error", path, "nesting too deep"),))
    if cancel.is_set():
        return None

    result = evaluate(tree, tokens, config, registry, path=path)
    if cancel.is_set():
        return None
    return FileReport(path, findings=result.findings, diagnostics=result.diagnostics)


def analyze_file(
    file_path: Path,
    config: LintConfig,
    registry: RuleRegistry,
    cancel: threading.Event | None = None,
) -> FileReport | None:
    cancel = cancel or threading.Event()
    if cancel.is_set():
        return None

    display = file_path.as_posix()
    try:
        size = file_path.stat().st_size
        if size > config.max_file_size_bytes:
            logger.debug("Skipping %s: %d bytes exceeds limit", display, size)
            return None
        # newline="" keeps \r\n intact so offsets match the bytes on disk
        with file_path.open("r", encoding="utf-8", newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", display, exc)
        return FileReport(display, diagnostics=(Diagnostic("read-error", display, str(exc)),))

    if cancel.is_set():
        return None
    return analyze_source(text, display, config, registry, cancel)


def run_lint(
    paths: Iterable[str | Path],
    config: LintConfig,
    registry: RuleRegistry,
    *,
    cancel: threading.Event | None = None,
) -> Report:
    files = discover_files(paths, config.include_exts, config.exclude_dirs)
    cancel = cancel or threading.Event()
    logger.info("Linting %d files with %d workers", len(files), config.jobs)

    reports: list[FileReport] = []
    with ThreadPoolExecutor(max_workers=config.jobs, thread_name_prefix="lint") as executor:
        future_to_path = {
            executor.submit(analyze_file, file_path, config, registry, cancel): file_path for file_path in files
        }
        for future in as_completed(future_to_path):
            if future.cancelled():
                continue
            try:
                report = future.result()
            except Exception as exc:
                report = _failed_report(future_to_path[future], exc)
            if report is None:
                continue
            reports.append(report)
            if config.fail_fast and any(item.kind in FILE_ERROR_KINDS for item in report.diagnostics):
                if not cancel.is_set():
                    logger.info("Stopping after file error in %s", report.path)
                cancel.set()
                for pending in future_to_path:
                    pending.cancel()

    reports.sort(key=lambda item: item.path)
    result = Report(files=tuple(reports), cancelled=cancel.is_set())
    logger.info(
        "Linted %d files: %d findings, %d diagnostics%s",
        result.files_analyzed,
        len(result.findings),
        len(result.diagnostics),
        " (cancelled)" if result.cancelled else "",
    )
    return result


def _failed_report(file_path: Path, exc: Exception) -> FileReport:
    display = file_path.as_posix()
    logger.error("Unexpected failure while linting %s", display, exc_info=exc)
    message = f"{type(exc).__name__}: {exc}"
    return FileReport(display, diagnostics=(Diagnostic("internal-error", display, message),))
