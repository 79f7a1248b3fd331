"""
Swift source tokenizer.

Converts raw Swift text into a lossless stream of tokens: concatenating the
text of every token reproduces the input exactly. Whitespace, line breaks and
comments are kept as trivia tokens so textual rules never re-scan the source.
"""

from __future__ import annotations

import re
from typing import Iterator

from swift_style_scanner.models import Position, SourceError, Span, Token


KEYWORDS = frozenset(
    {
        # declarations
        "associatedtype", "class", "deinit", "enum", "extension", "fileprivate", "func",
        "import", "init", "inout", "internal", "let", "open", "operator", "private",
        "precedencegroup", "protocol", "public", "rethrows", "static", "struct",
        "subscript", "typealias", "var",
        # statements
        "break", "case", "catch", "continue", "default", "defer", "do", "else",
        "fallthrough", "for", "guard", "if", "in", "repeat", "return", "throw",
        "switch", "where", "while",
        # expressions and types
        "Any", "as", "await", "is", "self", "Self", "super", "throws", "try",
    }
)

LITERAL_WORDS = frozenset({"true", "false", "nil"})

OPERATOR_CHARS = frozenset("/=-+!*%<>&|^~?")
PUNCTUATION = frozenset("()[]{},:;.")
INLINE_WHITESPACE = frozenset(" \t\f\v\u00a0\ufeff")
# A postfix ? or ! directly follows one of these without whitespace.
LEFT_UNBOUND = frozenset(" \t\f\v\r\n([{,;:")

_NUMBER = re.compile(
    r"""
    0x[0-9a-fA-F][0-9a-fA-F_]*(?:\.[0-9a-fA-F][0-9a-fA-F_]*)?(?:[pP][+-]?[0-9][0-9_]*)?
    | 0o[0-7][0-7_]*
    | 0b[01][01_]*
    | [0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9][0-9_]*)?
    """,
    re.VERBOSE,
)
_IDENTIFIER = re.compile(r"[^\W\d]\w*")
_DOLLAR_IDENTIFIER = re.compile(r"\$\w+")
_BACKTICK_IDENTIFIER = re.compile(r"`[^`\r\n]+`")
_RAW_STRING_START = re.compile(r'#+"')
_SPLIT_ANGLE = re.compile(r">+(?=[?!])")


class LexError(SourceError):
    """Malformed source: an unterminated literal or comment."""


def advance(position: Position, text: str) -> Position:
    """Return the position just past ``text`` when it starts at ``position``."""
    line = position.line
    column = position.column
    index = 0
    length = len(text)
    while index < length:
        ch = text[index]
        if ch == "\r":
            if index + 1 < length and text[index + 1] == "\n":
                index += 1
            line += 1
            column = 1
        elif ch == "\n":
            line += 1
            column = 1
        else:
            column += 1
        index += 1
    return Position(line, column, position.offset + len(text.encode("utf-8")))


class Tokenizer:
    """
    Lazy, restartable token stream over one source text.

    Usage:
        tokens = list(Tokenizer(source))

    Each iteration starts a fresh scan from the first character.
    """

    def __init__(self, source: str):
        self.source = source

    def __iter__(self) -> Iterator[Token]:
        return self._scan()

    def _scan(self) -> Iterator[Token]:
        src = self.source
        length = len(src)
        index = 0
        position = Position(1, 1, 0)

        while index < length:
            end, kind = self._next_token(index, position)
            text = src[index:end]
            end_position = advance(position, text)
            yield Token(kind, text, Span(position, end_position))
            index = end
            position = end_position

    def _next_token(self, index: int, position: Position) -> tuple[int, str]:
        src = self.source
        length = len(src)
        ch = src[index]

        if ch == "\r":
            if index + 1 < length and src[index + 1] == "\n":
                return index + 2, "newline"
            return index + 1, "newline"
        if ch == "\n":
            return index + 1, "newline"

        if ch in INLINE_WHITESPACE:
            end = index + 1
            while end < length and src[end] in INLINE_WHITESPACE:
                end += 1
            return end, "whitespace"

        if src.startswith("//", index):
            end = index + 2
            while end < length and src[end] not in "\r\n":
                end += 1
            return end, "comment"

        if src.startswith("/*", index):
            return self._scan_block_comment(index, position), "comment"

        if ch == '"' or (ch == "#" and _RAW_STRING_START.match(src, index)):
            return self._scan_string(index, position), "literal"

        if ch == "#":
            match = _IDENTIFIER.match(src, index + 1)
            if match:
                return match.end(), "directive"
            return index + 1, "punctuation"

        if ch == "@":
            match = _IDENTIFIER.match(src, index + 1)
            if match:
                return match.end(), "attribute"
            return index + 1, "punctuation"

        if ch == "`":
            match = _BACKTICK_IDENTIFIER.match(src, index)
            if not match:
                raise LexError("unterminated backtick identifier", self._line_span(index, position))
            return match.end(), "identifier"

        if ch == "$":
            match = _DOLLAR_IDENTIFIER.match(src, index)
            if match:
                return match.end(), "identifier"
            return index + 1, "operator"

        if ch in "0123456789":
            match = _NUMBER.match(src, index)
            return match.end(), "literal"

        match = _IDENTIFIER.match(src, index)
        if match:
            word = match.group(0)
            if word in LITERAL_WORDS:
                return match.end(), "literal"
            if word in KEYWORDS:
                return match.end(), "keyword"
            return match.end(), "identifier"

        if src.startswith("->", index):
            return index + 2, "punctuation"

        if ch == "." and index + 1 < length and (src[index + 1] == "." or src[index + 1] in OPERATOR_CHARS):
            end = index + 1
            while end < length and (src[end] == "." or src[end] in OPERATOR_CHARS):
                end += 1
            return end, "operator"

        if ch in PUNCTUATION:
            return index + 1, "punctuation"

        if ch in OPERATOR_CHARS:
            return self._scan_operator(index), "operator"

        # Anything else (stray unicode symbols, backslashes) is kept as a
        # one-character operator so the stream stays gap-free.
        return index + 1, "operator"

    def _scan_operator(self, index: int) -> int:
        src = self.source
        length = len(src)
        ch = src[index]
        left_bound = index > 0 and src[index - 1] not in LEFT_UNBOUND

        if left_bound and ch == "?":
            return index + 1
        if left_bound and ch == "!" and not (index + 1 < length and src[index + 1] == "="):
            return index + 1

        end = index
        while end < length and src[end] in OPERATOR_CHARS:
            if end > index and src[end] == "/" and end + 1 < length and src[end + 1] in "/*":
                break
            end += 1

        split = _SPLIT_ANGLE.match(src, index, end)
        if split:
            return split.end()
        return end

    def _scan_block_comment(self, index: int, position: Position) -> int:
        src = self.source
        length = len(src)
        depth = 0
        end = index
        while end < length:
            if src.startswith("/*", end):
                depth += 1
                end += 2
                continue
            if src.startswith("*/", end):
                depth -= 1
                end += 2
                if depth == 0:
                    return end
                continue
            end += 1
        raise LexError("unterminated block comment", self._span_to(index, length, position))

    def _scan_string(self, index: int, position: Position) -> int:
        src = self.source
        length = len(src)
        end = index
        hashes = 0
        while src[end] == "#":
            hashes += 1
            end += 1

        multiline = src.startswith('"""', end)
        end += 3 if multiline else 1
        closer = ('"""' if multiline else '"') + "#" * hashes
        escape = "\\" + "#" * hashes

        while True:
            if end >= length:
                raise LexError("unterminated string literal", self._span_to(index, length, position))
            ch = src[end]
            if not multiline and ch in "\r\n":
                raise LexError("unterminated string literal", self._span_to(index, end, position))
            if src.startswith(escape, end):
                end += len(escape)
                if end < length and src[end] == "(":
                    end = self._scan_interpolation(end + 1, index, position)
                elif end < length and (multiline or src[end] not in "\r\n"):
                    end += 1
                continue
            if src.startswith(closer, end):
                return end + len(closer)
            end += 1

    def _scan_interpolation(self, index: int, origin: int, position: Position) -> int:
        src = self.source
        length = len(src)
        depth = 1
        end = index
        while end < length:
            ch = src[end]
            if ch == '"' or (ch == "#" and _RAW_STRING_START.match(src, end)):
                end = self._scan_string(end, advance(position, src[origin:end]))
                continue
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return end + 1
            end += 1
        raise LexError("unterminated string interpolation", self._span_to(origin, length, position))

    def _span_to(self, index: int, end: int, position: Position) -> Span:
        return Span(position, advance(position, self.source[index:end]))

    def _line_span(self, index: int, position: Position) -> Span:
        end = index
        while end < len(self.source) and self.source[end] not in "\r\n":
            end += 1
        return self._span_to(index, end, position)


def tokenize(source: str) -> Iterator[Token]:
    return iter(Tokenizer(source))


def significant(tokens) -> list[Token]:
    return [token for token in tokens if not token.is_trivia]
