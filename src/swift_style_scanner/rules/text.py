"""Rules that only look at physical lines and trivia tokens."""

from __future__ import annotations

from swift_style_scanner.lexer import INLINE_WHITESPACE, advance
from swift_style_scanner.models import Span
from swift_style_scanner.rules.base import RuleContext, line_span

WHITESPACE = "".join(sorted(INLINE_WHITESPACE - {"\ufeff"}))


def check_line_length(ctx: RuleContext):
    max_length = ctx.params["max_length"]
    for line in ctx.lines:
        length = len(line.text)
        if length > max_length:
            yield ctx.finding(
                line_span(line, max_length + 1),
                f"Line is {length} characters long; the limit is {max_length}",
            )


def check_indentation(ctx: RuleContext):
    width = ctx.params["indent_width"]
    for line in ctx.lines:
        if line.blank or line.continued:
            continue
        indent = line.text[: len(line.text) - len(line.text.lstrip(WHITESPACE))]
        if not indent:
            continue
        span = line_span(line, 1, len(indent) + 1)
        if "\t" in indent:
            yield ctx.finding(span, "Indent with spaces, not tabs")
        elif len(indent) % width:
            yield ctx.finding(span, f"Indentation of {len(indent)} spaces is not a multiple of {width}")


def check_trailing_whitespace(ctx: RuleContext):
    source = ctx.source
    for token in ctx.tokens:
        following = source.next_token(token)
        if following is not None and following.kind != "newline":
            continue
        if token.kind == "whitespace":
            span = token.span
        elif token.kind == "comment" and token.text.startswith("//"):
            stripped = token.text.rstrip(WHITESPACE)
            if stripped == token.text:
                continue
            span = Span(advance(token.span.start, stripped), token.span.end)
        else:
            continue
        yield ctx.finding(span, "Line has trailing whitespace", replacement="")


def check_vertical_whitespace(ctx: RuleContext):
    limit = ctx.params["max_empty_lines"]
    run = []
    for line in ctx.lines:
        if line.blank:
            run.append(line)
            continue
        if len(run) > limit:
            extra = run[limit:]
            last = extra[-1]
            span = Span(extra[0].start, advance(last.start, last.text + last.line_break))
            noun = "line" if limit == 1 else "lines"
            yield ctx.finding(
                span,
                f"Limit vertical whitespace to {limit} empty {noun}; found {len(run)}",
                replacement="",
            )
        run = []
    # Blank lines at the end of the file belong to trailing-newline.


def check_trailing_newline(ctx: RuleContext):
    lines = ctx.lines
    content = [line for line in lines if not line.blank]
    if not content:
        return
    last = content[-1]
    end = ctx.source.end
    if last is lines[-1] and not last.line_break:
        yield ctx.finding(Span(end, end), "File should end with a single newline", replacement="\n")
        return
    if last is not lines[-1]:
        start = advance(last.start, last.text + last.line_break)
        yield ctx.finding(Span(start, end), "File should end with exactly one newline", replacement="")


def check_trailing_semicolon(ctx: RuleContext):
    source = ctx.source
    for token in source.significant:
        if token.kind != "punctuation" or token.text != ";":
            continue
        following = source.next_significant(token)
        if following is None or following.line > token.span.end.line:
            yield ctx.finding(token.span, "Remove the trailing semicolon", replacement="")


def check_comment_spacing(ctx: RuleContext):
    for token in ctx.tokens:
        if token.kind != "comment" or not token.text.startswith("//"):
            continue
        body = token.text[2:]
        if body.startswith(("/", ":")):
            body = body[1:]
        if not body or body[0] in WHITESPACE or not body.strip("/"):
            continue
        marker = token.text[: len(token.text) - len(body)]
        yield ctx.finding(
            Span(token.span.start, advance(token.span.start, marker)),
            f"Put a space after '{marker}' in comments",
        )
