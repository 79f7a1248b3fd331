from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from swift_style_scanner.aggregator import Aggregator
from swift_style_scanner.models import Diagnostic, Finding, LintConfig
from swift_style_scanner.rules.base import RuleContext, RuleRegistry, RuleSpec, SourceFile
from swift_style_scanner.suppressions import Suppressions
from swift_style_scanner.syntax import SyntaxNode

logger = logging.getLogger(__name__)


class RuleInternalError(RuntimeError):
    """A rule raised while checking a file."""

    def __init__(self, rule_id: str, path: str, cause: BaseException):
        self.rule_id = rule_id
        self.path = path
        self.cause = cause
        super().__init__(f"rule '{rule_id}' failed on {path or '<source>'}: {type(cause).__name__}: {cause}")


@dataclass(frozen=True)
class EvaluationResult:
    findings: tuple[Finding, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()


def build_contexts(source: SourceFile, config: LintConfig, registry: RuleRegistry) -> list[tuple[RuleSpec, RuleContext]]:
    contexts = []
    for spec in registry:
        settings = config.settings_for(spec.rule_id)
        if not settings.enabled:
            continue
        context = RuleContext(
            rule_id=spec.rule_id,
            severity=settings.severity or spec.default_severity,
            source=source,
            params=spec.resolve_params(settings.params),
        )
        contexts.append((spec, context))
    return contexts


def evaluate(
    tree: SyntaxNode,
    tokens,
    config: LintConfig,
    registry: RuleRegistry,
    *,
    path: str = "",
    max_workers: int | None = None,
) -> EvaluationResult:
    """Run every enabled rule over one file and collect the merged findings.

    A rule that raises is reported as a ``rule-internal-error`` diagnostic and
    does not stop the remaining rules.
    """
    source = SourceFile(path, tokens, tree)
    contexts = build_contexts(source, config, registry)
    aggregator = Aggregator(path)
    workers = config.rule_jobs if max_workers is None else max_workers

    if workers > 1 and len(contexts) > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rule") as executor:
            outcomes = list(executor.map(lambda item: _run_rule(*item, aggregator), contexts))
    else:
        outcomes = [_run_rule(spec, context, aggregator) for spec, context in contexts]

    diagnostics = tuple(item for item in outcomes if item is not None)
    findings = aggregator.finalize(Suppressions.from_tokens(source.tokens))
    return EvaluationResult(findings=findings, diagnostics=diagnostics)


def _call_rule(spec: RuleSpec, context: RuleContext) -> list[Finding]:
    try:
        return list(spec.check(context))
    except Exception as exc:
        raise RuleInternalError(spec.rule_id, context.path, exc) from exc


def _run_rule(spec: RuleSpec, context: RuleContext, aggregator: Aggregator) -> Diagnostic | None:
    try:
        findings = _call_rule(spec, context)
    except RuleInternalError as exc:
        logger.error("%s", exc, exc_info=exc.cause)
        return Diagnostic(
            kind="rule-internal-error",
            path=context.path,
            message=str(exc),
            rule_id=spec.rule_id,
        )
    aggregator.add(findings)
    return None
