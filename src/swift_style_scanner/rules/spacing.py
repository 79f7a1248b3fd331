"""Brace, colon and parenthesis layout rules."""

from __future__ import annotations

from swift_style_scanner.rules.base import RuleContext, token_span

SELECTOR_DIRECTIVES = frozenset({"#selector", "#keyPath"})
PARENTHESIZED_STATEMENTS = frozenset({"while", "switch", "repeat"})


def _selector_offsets(significant) -> list[tuple[int, int]]:
    """Byte ranges of #selector(...) argument lists, where colons are part of names."""
    ranges = []
    for index, token in enumerate(significant):
        if token.kind != "directive" or token.text not in SELECTOR_DIRECTIVES:
            continue
        if index + 1 >= len(significant) or significant[index + 1].text != "(":
            continue
        depth = 0
        for closer in significant[index + 1 :]:
            if closer.text == "(":
                depth += 1
            elif closer.text == ")":
                depth -= 1
                if depth == 0:
                    ranges.append((token.span.start.offset, closer.span.end.offset))
                    break
    return ranges


def check_colon_spacing(ctx: RuleContext):
    source = ctx.source
    selectors = _selector_offsets(source.significant)
    pending_ternaries = 0

    for token in source.significant:
        if token.kind == "operator" and token.text == "?":
            before = source.previous_token(token)
            if before is not None and before.is_trivia:
                pending_ternaries += 1
            continue
        if token.kind == "punctuation" and token.text in ("{", "}", ";"):
            pending_ternaries = 0
            continue
        if token.kind != "punctuation" or token.text != ":":
            continue
        if pending_ternaries:
            pending_ternaries -= 1
            continue
        offset = token.span.start.offset
        if any(start <= offset < end for start, end in selectors):
            continue

        previous = source.previous_significant(token)
        following = source.next_significant(token)
        if previous is not None and following is not None and previous.text == "[" and following.text == "]":
            continue

        before = source.previous_token(token)
        if before is not None and before.kind == "whitespace" and not source.starts_line(token):
            yield ctx.finding(before.span, "Remove the space before ':'")

        after = source.next_token(token)
        if after is None or after.kind == "newline":
            continue
        if after.kind == "whitespace":
            beyond = source.next_token(after)
            if after.text != " " and beyond is not None and beyond.kind != "newline":
                yield ctx.finding(after.span, "Use exactly one space after ':'")
        elif after.text != ")":
            yield ctx.finding(token.span, "Add one space after ':'")


def check_opening_brace(ctx: RuleContext):
    source = ctx.source
    for node in ctx.tree.walk():
        if node.kind not in ("code_block", "member_block"):
            continue
        brace = node.tokens[0]
        previous = source.previous_significant(brace)
        if previous is None or previous.span.end.line == brace.line:
            continue
        yield ctx.finding(brace.span, "Opening brace should be on the same line as its declaration or statement")


def check_else_placement(ctx: RuleContext):
    source = ctx.source
    for token in source.significant:
        if token.kind != "keyword" or token.text not in ("else", "catch"):
            continue
        previous = source.previous_significant(token)
        if previous is not None and previous.text == "}" and previous.span.end.line < token.line:
            yield ctx.finding(token.span, f"'{token.text}' should be on the same line as the preceding '}}'")


def _wrapped_in_parens(tokens) -> bool:
    if len(tokens) < 2 or tokens[0].text != "(" or tokens[-1].text != ")":
        return False
    depth = 0
    for index, token in enumerate(tokens):
        if token.kind != "punctuation":
            continue
        if token.text in ("(", "["):
            depth += 1
        elif token.text in (")", "]"):
            depth -= 1
            if depth == 0 and index != len(tokens) - 1:
                return False
        elif token.text == "," and depth == 1:
            # (a, b) is a tuple, not a parenthesized condition
            return False
    return True


def check_control_statement_parens(ctx: RuleContext):
    for node in ctx.tree.walk():
        if node.kind in ("if_stmt", "guard_stmt"):
            keyword = node.keyword
        elif node.kind == "statement" and node.keyword in PARENTHESIZED_STATEMENTS:
            keyword = "while" if node.keyword == "repeat" else node.keyword
        else:
            continue
        condition = node.child("condition")
        if condition is None or condition.children or not _wrapped_in_parens(condition.tokens):
            continue
        yield ctx.finding(
            token_span(condition.tokens[0], condition.tokens[-1]),
            f"Remove the parentheses around the {keyword} condition",
        )
