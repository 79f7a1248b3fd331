"""Force unwrap, force try, force cast and implicitly unwrapped optionals."""

from __future__ import annotations

from dataclasses import dataclass

from swift_style_scanner.rules.base import RuleContext, token_span

OPERAND_KEYWORDS = frozenset({"self", "super", "Self"})


@dataclass(frozen=True)
class SafeRegion:
    """Byte range in which the listed operands are known to be non-nil."""

    operands: frozenset[str]
    start: int
    end: int

    def covers(self, operand: str, offset: int) -> bool:
        return operand in self.operands and self.start <= offset < self.end


def _is_chain_part(token) -> bool:
    return token.kind == "identifier" or (token.kind == "keyword" and token.text in OPERAND_KEYWORDS)


def _chain(tokens, index: int, step: int) -> str | None:
    """Dotted member chain ending (step=-1) or starting (step=1) at ``tokens[index]``."""
    parts = []
    expect_name = True
    while 0 <= index < len(tokens):
        token = tokens[index]
        if expect_name and _is_chain_part(token):
            parts.append(token.text)
        elif not expect_name and token.kind == "punctuation" and token.text == ".":
            parts.append(".")
        else:
            break
        expect_name = not expect_name
        index += step
    if not parts:
        return None
    if parts[-1] == ".":
        parts.pop()
    if step < 0:
        parts.reverse()
    return "".join(parts)


def _is_punct(token, text: str) -> bool:
    return token.kind == "punctuation" and token.text == text


def _is_op(token, text: str) -> bool:
    return token.kind == "operator" and token.text == text


def _split_top_level(tokens, is_separator) -> list[list]:
    parts: list[list] = [[]]
    depth = 0
    for token in tokens:
        if token.kind == "punctuation" and token.text in ("(", "["):
            depth += 1
        elif token.kind == "punctuation" and token.text in (")", "]"):
            depth -= 1
        elif depth == 0 and is_separator(token):
            parts.append([])
            continue
        parts[-1].append(token)
    return parts


def _compared_operand(clause) -> str | None:
    """Operand of a clause that is exactly ``operand != nil`` or ``nil != operand``."""
    if len(clause) < 3:
        return None
    if _is_op(clause[-2], "!=") and clause[-1].text == "nil":
        operand = clause[:-2]
    elif clause[0].text == "nil" and _is_op(clause[1], "!="):
        operand = clause[2:]
    else:
        return None
    chain = _chain(operand, 0, 1)
    if chain and chain == "".join(token.text for token in operand):
        return chain
    return None


def nil_checked_operands(tokens) -> frozenset[str]:
    """Operands compared with ``!= nil`` in clauses that must all hold.

    Clauses are joined at the top level by ``,`` or ``&&``. A clause with a
    top-level ``||`` guarantees nothing.
    """
    names = set()
    for clause in _split_top_level(tokens, lambda token: _is_punct(token, ",")):
        if len(_split_top_level(clause, lambda token: _is_op(token, "||"))) > 1:
            continue
        for part in _split_top_level(clause, lambda token: _is_op(token, "&&")):
            operand = _compared_operand(part)
            if operand:
                names.add(operand)
    return frozenset(names)


def _region_end(node, parent) -> int:
    for sibling in parent.children:
        if sibling.kind == "case_label" and sibling.span.start.offset >= node.span.end.offset:
            return sibling.span.start.offset
    return parent.span.end.offset


def safe_regions(tree):
    for node, ancestors in tree.walk_with_ancestors():
        if node.kind == "if_stmt":
            operands = nil_checked_operands(node.children[0].tokens)
            body = node.children[1]
            if operands:
                yield SafeRegion(operands, body.span.start.offset, body.span.end.offset)
        elif node.kind == "guard_stmt" and ancestors:
            operands = nil_checked_operands(node.children[0].tokens)
            if operands:
                yield SafeRegion(operands, node.span.end.offset, _region_end(node, ancestors[-1]))


def _is_operand_end(token) -> bool:
    if _is_chain_part(token):
        return True
    if token.kind == "punctuation":
        return token.text in (")", "]")
    return token.kind == "operator" and token.text in ("!", "?")


def check_force_unwrap(ctx: RuleContext):
    source = ctx.source
    significant = source.significant
    annotations = [node.span for node in ctx.tree.find("type_annotation")]
    regions = list(safe_regions(ctx.tree))

    for index, token in enumerate(significant):
        if token.kind != "operator" or token.text != "!" or index == 0:
            continue
        before = source.previous_token(token)
        previous = significant[index - 1]
        if before is None or before.is_trivia or not _is_operand_end(previous):
            continue
        if any(span.contains(token.span) for span in annotations):
            continue
        operand = _chain(significant, index - 1, -1)
        offset = token.span.start.offset
        if operand and any(region.covers(operand, offset) for region in regions):
            continue
        subject = f"'{operand}'" if operand else "expression"
        yield ctx.finding(token.span, f"Force unwrap of {subject}; prefer optional binding or chaining")


def check_force_try(ctx: RuleContext):
    yield from _forced_keyword(ctx, "try", "Avoid 'try!'; handle the error or use 'try?'")


def check_force_cast(ctx: RuleContext):
    yield from _forced_keyword(ctx, "as", "Avoid 'as!'; cast with 'as?' and handle the failure")


def _forced_keyword(ctx: RuleContext, keyword: str, message: str):
    source = ctx.source
    for token in source.significant:
        if token.kind != "keyword" or token.text != keyword:
            continue
        following = source.next_token(token)
        if following is not None and following.kind == "operator" and following.text == "!":
            yield ctx.finding(token_span(token, following), message)


def check_implicitly_unwrapped_optional(ctx: RuleContext):
    allow_iboutlets = ctx.params["allow_iboutlets"]
    for node, ancestors in ctx.tree.walk_with_ancestors():
        if node.kind != "type_annotation" or not node.tokens:
            continue
        last = node.tokens[-1]
        if last.kind != "operator" or last.text != "!":
            continue
        owner = next((item for item in reversed(ancestors) if item.is_declaration), None)
        if allow_iboutlets and owner is not None and any(attr.text == "@IBOutlet" for attr in owner.attributes):
            continue
        yield ctx.finding(node.span, "Implicitly unwrapped optional; declare the type as optional ('?') instead")
