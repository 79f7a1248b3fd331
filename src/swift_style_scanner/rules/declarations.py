from __future__ import annotations

from swift_style_scanner.rules.base import RuleContext, token_span

ACCESS_MODIFIERS = frozenset({"open", "public", "internal", "fileprivate", "private"})

SUGARED_TYPES = {
    "Array": "[Element]",
    "Dictionary": "[Key: Value]",
    "Optional": "Wrapped?",
    "ImplicitlyUnwrappedOptional": "Wrapped!",
}


def check_boolean_parameter(ctx: RuleContext):
    for node in ctx.tree.find("function_decl", "initializer_decl"):
        for parameter in node.children:
            if parameter.kind != "parameter" or parameter.label is None or parameter.label.text != "_":
                continue
            annotation = parameter.child("type_annotation")
            if annotation is None or [token.text for token in annotation.tokens] != ["Bool"]:
                continue
            yield ctx.finding(
                parameter.span,
                f"Boolean parameter '{parameter.name}' has no argument label; "
                "label it so call sites say what it controls",
            )


def check_modifier_order(ctx: RuleContext):
    for node in ctx.tree.walk():
        for index, modifier in enumerate(node.modifiers):
            if modifier.text not in ACCESS_MODIFIERS:
                continue
            # static is the one modifier allowed ahead of access control
            misplaced = [item.text for item in node.modifiers[:index] if item.text != "static"]
            if misplaced:
                yield ctx.finding(
                    modifier.span,
                    f"Access control modifier '{modifier.text}' should come before '{misplaced[0]}'",
                )
            break


def check_syntactic_sugar(ctx: RuleContext):
    source = ctx.source
    for token in source.significant:
        if token.kind != "identifier" or token.text not in SUGARED_TYPES:
            continue
        following = source.next_token(token)
        if following is None or following.kind != "operator" or not following.text.startswith("<"):
            continue
        yield ctx.finding(
            token.span,
            f"Prefer the shorthand '{SUGARED_TYPES[token.text]}' over '{token.text}<...>'",
        )


def check_void_return(ctx: RuleContext):
    source = ctx.source
    for token in source.significant:
        if token.kind != "punctuation" or token.text != "->":
            continue
        opener = source.next_significant(token)
        closer = source.next_significant(opener) if opener is not None else None
        if opener is None or closer is None or opener.text != "(" or closer.text != ")":
            continue
        after = source.next_significant(closer)
        if after is not None and after.text == "->":
            # -> () -> T returns a function taking no arguments
            continue
        yield ctx.finding(
            token_span(opener, closer),
            "Use 'Void' instead of '()' as a return type",
            replacement="Void",
        )
