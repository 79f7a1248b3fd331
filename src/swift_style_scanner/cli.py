from __future__ import annotations

import argparse
import json
from dataclasses import replace

from swift_style_scanner import __version__
from swift_style_scanner.config import FAIL_ON_CHOICES, ConfigError, load_config, normalize_extensions
from swift_style_scanner.fixes import fix_report
from swift_style_scanner.logging import get_logger, setup_logging
from swift_style_scanner.models import LintConfig
from swift_style_scanner.pipeline import run_lint
from swift_style_scanner.reporting import FORMATS, exit_code, render, write_report
from swift_style_scanner.rules import build_registry

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swift-style-scan",
        description="Rule-based style linter for Swift sources",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lint_parser = subparsers.add_parser("lint", help="Lint Swift files or directories")
    lint_parser.add_argument("paths", nargs="+", help="Files or directories to analyze")
    lint_parser.add_argument("--config", default=None, help="JSON rule configuration")
    lint_parser.add_argument("--format", choices=FORMATS, default="text")
    lint_parser.add_argument("--fail-on", choices=FAIL_ON_CHOICES, default=None)
    lint_parser.add_argument("--output", default=None, help="Write the report to this file")
    lint_parser.add_argument("--jobs", type=int, default=None)
    lint_parser.add_argument("--fail-fast", action="store_true")
    lint_parser.add_argument("--fix", action="store_true", help="Apply safe fixes in place, then report")
    lint_parser.add_argument("--include-exts", default=None, help="Comma-separated extensions, e.g. .swift")
    lint_parser.add_argument("--exclude-dirs", default=None, help="Comma-separated directory names to skip")
    lint_parser.add_argument("--log-level", default="WARNING")
    lint_parser.add_argument("--log-json", action="store_true")

    rules_parser = subparsers.add_parser("rules", help="List available rules")
    rules_parser.add_argument("--format", choices=["text", "json"], default="text")

    return parser


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _apply_overrides(config: LintConfig, args: argparse.Namespace) -> LintConfig:
    changes: dict = {}
    if args.fail_on is not None:
        changes["fail_on"] = args.fail_on
    if args.jobs is not None:
        if args.jobs < 1:
            raise ConfigError("--jobs must be at least 1")
        changes["jobs"] = args.jobs
    if args.fail_fast:
        changes["fail_fast"] = True
    if args.include_exts is not None:
        changes["include_exts"] = normalize_extensions(_split_csv(args.include_exts))
    if args.exclude_dirs is not None:
        changes["exclude_dirs"] = tuple(_split_csv(args.exclude_dirs))
    return replace(config, **changes)


def _rules_payload(registry) -> list[dict]:
    return [
        {
            "id": spec.rule_id,
            "severity": spec.default_severity,
            "fixable": spec.fixable,
            "description": spec.description,
            "params": {
                item.name: {"default": item.default, "type": item.kind.__name__, "description": item.description}
                for item in spec.params
            },
        }
        for spec in registry
    ]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    registry = build_registry()

    if args.command == "rules":
        payload = _rules_payload(registry)
        if args.format == "json":
            print(json.dumps(payload, indent=2, ensure_ascii=True))
            return 0
        for item in payload:
            params = ", ".join(f"{name}={value['default']!r}" for name, value in item["params"].items())
            suffix = f" ({params})" if params else ""
            print(f"{item['id']:<32} {item['severity']:<8} {item['description']}{suffix}")
        return 0

    if args.command == "lint":
        setup_logging(args.log_level, structured=args.log_json)
        try:
            config = load_config(args.config, registry) if args.config else LintConfig()
            config = _apply_overrides(config, args)
        except ConfigError as exc:
            parser.error(str(exc))
            return 2

        try:
            report = run_lint(args.paths, config, registry)
            if args.fix:
                applied = fix_report(report)
                logger.info("Applied %d fixes; re-running", applied)
                report = run_lint(args.paths, config, registry)
        except ValueError as exc:
            parser.error(str(exc))
            return 2

        write_report(render(report, args.format), args.output)
        return exit_code(report, config.fail_on)

    parser.error(f"Unsupported command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
