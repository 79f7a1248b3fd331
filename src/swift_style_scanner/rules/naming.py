from __future__ import annotations

import re

from swift_style_scanner.rules.base import RuleContext

UPPER_CAMEL = re.compile(r"^[A-Z][A-Za-z0-9]*$")
LOWER_CAMEL = re.compile(r"^[a-z][A-Za-z0-9]*$")
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")


def split_words(name: str) -> list[str]:
    """Split snake_case, SCREAMING_CASE and camelCase names into words.

    >>> split_words("MAX_WIDGET_COUNT")
    ['MAX', 'WIDGET', 'COUNT']
    >>> split_words("URLSession")
    ['URL', 'Session']
    """
    return _WORD.findall(name)


def to_lower_camel(name: str) -> str:
    words = split_words(name)
    if not words:
        return name
    return words[0].lower() + "".join(word.capitalize() for word in words[1:])


def to_upper_camel(name: str) -> str:
    words = split_words(name)
    if not words:
        return name
    return "".join(word.capitalize() for word in words)


def _declared_names(tree):
    for node in tree.walk():
        token = node.name_token
        if token is None or token.kind != "identifier":
            continue
        if node.kind == "type_decl":
            if node.keyword != "extension":
                yield token, "type", True
        elif node.kind == "typealias_decl":
            yield token, "type alias" if node.keyword == "typealias" else "associated type", True
        elif node.kind == "function_decl":
            yield token, "function", False
        elif node.kind == "binding":
            yield token, "variable", False
        elif node.kind == "parameter":
            yield token, "parameter", False
        elif node.kind == "enum_element":
            yield token, "enum case", False


def check_naming_case(ctx: RuleContext):
    allowed = set(ctx.params["allowed_names"])
    for token, what, upper in _declared_names(ctx.tree):
        name = token.text.strip("`")
        if name == "_" or name in allowed or name.startswith("$"):
            continue
        pattern, style, convert = (
            (UPPER_CAMEL, "UpperCamelCase", to_upper_camel) if upper else (LOWER_CAMEL, "lowerCamelCase", to_lower_camel)
        )
        if pattern.match(name):
            continue
        yield ctx.finding(
            token.span,
            f"{what.capitalize()} name '{name}' should be {style} (e.g. '{convert(name)}')",
        )
