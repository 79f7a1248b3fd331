from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from swift_style_scanner.lexer import advance, significant
from swift_style_scanner.models import SEVERITIES, Finding, Position, Span, Token
from swift_style_scanner.syntax import SyntaxNode


_LINE_BREAK = re.compile(r"(\r\n|\r|\n)")


class RulesError(ValueError):
    pass


@dataclass(frozen=True)
class ParamSpec:
    name: str
    default: Any
    kind: type
    description: str = ""
    minimum: int | None = None


@dataclass(frozen=True)
class RuleSpec:
    rule_id: str
    description: str
    default_severity: str
    check: Callable[[RuleContext], Iterable[Finding]]
    params: tuple[ParamSpec, ...] = ()
    fixable: bool = False

    def param(self, name: str) -> ParamSpec | None:
        for item in self.params:
            if item.name == name:
                return item
        return None

    def resolve_params(self, overrides: Mapping[str, Any]) -> dict[str, Any]:
        values = {item.name: item.default for item in self.params}
        values.update(overrides)
        return values


class RuleRegistry:
    """Ordered table of rule specs, keyed by rule id."""

    def __init__(self, specs: Iterable[RuleSpec] = ()):
        self._specs: dict[str, RuleSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: RuleSpec) -> None:
        if spec.rule_id in self._specs:
            raise RulesError(f"Duplicate rule id: {spec.rule_id}")
        if spec.default_severity not in SEVERITIES:
            raise RulesError(f"Rule {spec.rule_id} has invalid severity: {spec.default_severity}")
        self._specs[spec.rule_id] = spec

    def get(self, rule_id: str) -> RuleSpec:
        try:
            return self._specs[rule_id]
        except KeyError:
            raise RulesError(f"Unknown rule id: {rule_id}") from None

    def ids(self) -> list[str]:
        return list(self._specs)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._specs

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


@dataclass(frozen=True)
class SourceLine:
    number: int
    text: str
    line_break: str
    start: Position
    blank: bool
    continued: bool

    @property
    def end(self) -> Position:
        return advance(self.start, self.text)

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)


def split_lines(tokens: Iterable[Token]) -> tuple[SourceLine, ...]:
    """Rebuild physical lines from a token stream.

    ``continued`` marks lines that begin inside a multi-line token such as a
    block comment or a multi-line string literal.
    """
    lines: list[SourceLine] = []
    pieces: list[str] = []
    start = Position(1, 1, 0)
    continued = False
    content = False

    def close(line_break: str) -> Position:
        text = "".join(pieces)
        lines.append(SourceLine(len(lines) + 1, text, line_break, start, not content, continued))
        return advance(start, text + line_break)

    for token in tokens:
        if token.kind == "newline":
            start = close(token.text)
            pieces = []
            continued = False
            content = False
            continue

        parts = _LINE_BREAK.split(token.text)
        pieces.append(parts[0])
        if token.kind != "whitespace":
            content = True
        for index in range(1, len(parts), 2):
            start = close(parts[index])
            pieces = [parts[index + 1]]
            continued = True
            content = True

    if pieces:
        close("")
    return tuple(lines)


class SourceFile:
    """Everything the rules may read about one analyzed file."""

    def __init__(self, path: str, tokens: Iterable[Token], tree: SyntaxNode):
        self.path = path
        self.tokens = tuple(tokens)
        self.tree = tree
        self.lines = split_lines(self.tokens)
        self.significant = tuple(significant(self.tokens))
        self._token_index = {token.span.start.offset: index for index, token in enumerate(self.tokens)}
        self._significant_index = {token.span.start.offset: index for index, token in enumerate(self.significant)}

    @property
    def end(self) -> Position:
        return self.tokens[-1].span.end if self.tokens else Position(1, 1, 0)

    def previous_token(self, token: Token) -> Token | None:
        index = self._token_index[token.span.start.offset]
        return self.tokens[index - 1] if index > 0 else None

    def next_token(self, token: Token) -> Token | None:
        index = self._token_index[token.span.start.offset] + 1
        return self.tokens[index] if index < len(self.tokens) else None

    def previous_significant(self, token: Token) -> Token | None:
        index = self._significant_index[token.span.start.offset]
        return self.significant[index - 1] if index > 0 else None

    def next_significant(self, token: Token) -> Token | None:
        index = self._significant_index[token.span.start.offset] + 1
        return self.significant[index] if index < len(self.significant) else None

    def starts_line(self, token: Token) -> bool:
        """True when nothing but whitespace precedes ``token`` on its line."""
        previous = self.previous_token(token)
        if previous is not None and previous.kind == "whitespace":
            previous = self.previous_token(previous)
        return previous is None or previous.kind == "newline" or previous.span.end.line < token.line


@dataclass(frozen=True)
class RuleContext:
    rule_id: str
    severity: str
    source: SourceFile
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def path(self) -> str:
        return self.source.path

    @property
    def tree(self) -> SyntaxNode:
        return self.source.tree

    @property
    def tokens(self) -> tuple[Token, ...]:
        return self.source.tokens

    @property
    def lines(self) -> tuple[SourceLine, ...]:
        return self.source.lines

    def finding(self, span: Span, message: str, replacement: str | None = None) -> Finding:
        return Finding(
            rule_id=self.rule_id,
            severity=self.severity,
            span=span,
            message=message,
            path=self.path,
            replacement=replacement,
        )


def line_span(line: SourceLine, first_column: int, last_column: int | None = None) -> Span:
    """Span covering columns ``first_column`` up to ``last_column`` (exclusive) of ``line``."""
    if last_column is None:
        last_column = len(line.text) + 1
    start = advance(line.start, line.text[: first_column - 1])
    end = advance(start, line.text[first_column - 1 : last_column - 1])
    return Span(start, end)


def token_span(first: Token, last: Token | None = None) -> Span:
    return Span(first.span.start, (last or first).span.end)
