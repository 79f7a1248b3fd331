"""
Swift syntax tree builder.

Consumes the token stream from the lexer and produces a lightweight parse
tree: declarations with their names, modifiers and signatures, blocks, and
statements whose expression tokens are kept flat. The tree is enough for
style rules to match on; it is not a full Swift grammar.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from swift_style_scanner.models import Position, SourceError, Span, Token


TYPE_KEYWORDS = frozenset({"class", "struct", "enum", "protocol", "extension"})

DECLARATION_KEYWORDS = frozenset(
    {
        "class", "struct", "enum", "protocol", "extension", "func", "init", "deinit",
        "subscript", "var", "let", "typealias", "associatedtype", "import", "case",
        "operator", "precedencegroup",
    }
)

MODIFIERS = frozenset(
    {
        "open", "public", "internal", "fileprivate", "private", "static", "class", "final",
        "override", "mutating", "nonmutating", "lazy", "weak", "unowned", "dynamic",
        "optional", "required", "convenience", "indirect", "prefix", "postfix", "infix",
        "nonisolated", "distributed",
    }
)

DECLARATION_KINDS = frozenset(
    {
        "type_decl", "function_decl", "initializer_decl", "deinitializer_decl",
        "subscript_decl", "variable_decl", "enum_case_decl", "typealias_decl",
        "import_decl", "operator_decl",
    }
)

MATCHING = {"(": ")", "[": "]", "{": "}"}
CLOSERS = frozenset({")", "]", "}"})
CONTINUATION_PUNCTUATION = frozenset({",", ".", "(", "[", ":", "->"})


class ParseError(SourceError):
    """Malformed source that the tree builder cannot structure."""


@dataclass(frozen=True)
class SyntaxNode:
    kind: str
    span: Span
    children: tuple[SyntaxNode, ...] = ()
    tokens: tuple[Token, ...] = ()
    name: str = ""
    name_token: Token | None = None
    label: Token | None = None
    keyword: str = ""
    modifiers: tuple[Token, ...] = ()
    attributes: tuple[Token, ...] = ()

    @property
    def is_declaration(self) -> bool:
        return self.kind in DECLARATION_KINDS

    def child(self, kind: str) -> SyntaxNode | None:
        for node in self.children:
            if node.kind == kind:
                return node
        return None

    def walk(self) -> Iterator[SyntaxNode]:
        yield self
        for node in self.children:
            yield from node.walk()

    def walk_with_ancestors(
        self, ancestors: tuple[SyntaxNode, ...] = ()
    ) -> Iterator[tuple[SyntaxNode, tuple[SyntaxNode, ...]]]:
        yield self, ancestors
        inner = ancestors + (self,)
        for node in self.children:
            yield from node.walk_with_ancestors(inner)

    def find(self, *kinds: str) -> Iterator[SyntaxNode]:
        return (node for node in self.walk() if node.kind in kinds)


def build_tree(tokens) -> SyntaxNode:
    return TreeBuilder(list(tokens)).build()


class TreeBuilder:
    """Recursive-descent builder over the significant tokens of one file."""

    def __init__(self, tokens: list[Token]):
        self.all_tokens = tokens
        self.sig: list[Token] = []
        self.newline_before: list[bool] = []
        self.space_before: list[bool] = []

        saw_newline = True
        saw_trivia = True
        for token in tokens:
            if token.kind == "newline":
                saw_newline = True
                saw_trivia = True
            elif token.kind == "whitespace":
                saw_trivia = True
            elif token.kind == "comment":
                saw_trivia = True
                if "\n" in token.text or "\r" in token.text:
                    saw_newline = True
            else:
                self.sig.append(token)
                self.newline_before.append(saw_newline)
                self.space_before.append(saw_trivia)
                saw_newline = False
                saw_trivia = False
        # Sentinel so operators at end of file count as followed by whitespace.
        self.space_before.append(True)
        self.pos = 0

    def build(self) -> SyntaxNode:
        items = self._parse_items(closer=None, in_switch=False)
        start = Position(1, 1, 0)
        end = self.all_tokens[-1].span.end if self.all_tokens else start
        return SyntaxNode("source_file", Span(start, end), children=tuple(items))

    # ------------------------------------------------------------------
    # token access

    def _peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        if index < len(self.sig):
            return self.sig[index]
        return None

    def _token_at(self, index: int) -> Token | None:
        if 0 <= index < len(self.sig):
            return self.sig[index]
        return None

    def _at(self, text: str) -> bool:
        token = self._peek()
        return token is not None and token.text == text and token.kind != "literal"

    def _take(self) -> Token:
        token = self.sig[self.pos]
        self.pos += 1
        return token

    def _error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self._peek()
        if token is not None:
            return ParseError(message, token.span)
        end = self.all_tokens[-1].span.end if self.all_tokens else Position(1, 1, 0)
        return ParseError(message, Span(end, end))

    def _node(self, kind: str, start: int, **fields) -> SyntaxNode:
        span = Span(self.sig[start].span.start, self.sig[self.pos - 1].span.end)
        children = fields.pop("children", ())
        tokens = fields.pop("tokens", ())
        return SyntaxNode(kind, span, children=tuple(children), tokens=tuple(tokens), **fields)

    def _annotation(self, kind: str, tokens: list[Token], children=()) -> SyntaxNode:
        edges = [token.span for token in tokens] + [node.span for node in children]
        first = min(edges, key=lambda span: span.start.offset).start
        last = max(edges, key=lambda span: span.end.offset).end
        return SyntaxNode(kind, Span(first, last), children=tuple(children), tokens=tuple(tokens))

    def _skip_balanced(self, index: int) -> int | None:
        """Index just past the bracket group opening at ``index``, or None if unclosed."""
        depth = 0
        while index < len(self.sig):
            text = self.sig[index].text
            if text in MATCHING:
                depth += 1
            elif text in CLOSERS:
                depth -= 1
                if depth == 0:
                    return index + 1
            index += 1
        return None

    def _take_balanced(self) -> list[Token]:
        opener = self._peek()
        end = self._skip_balanced(self.pos)
        if end is None:
            raise self._error(f"expected '{MATCHING[opener.text]}' to close '{opener.text}'", opener)
        taken = self.sig[self.pos:end]
        self.pos = end
        return taken

    def _take_generic_clause(self) -> list[Token]:
        taken: list[Token] = []
        depth = 0
        while True:
            token = self._peek()
            if token is None:
                raise self._error("expected '>' to close generic parameter clause")
            taken.append(self._take())
            if token.kind == "operator":
                depth += token.text.count("<") - token.text.count(">")
                if depth <= 0:
                    return taken

    def _ends_statement(self, index: int) -> bool:
        if not self.newline_before[index]:
            return False
        if index == 0:
            return True
        token = self.sig[index]
        prev = self.sig[index - 1]
        if prev.kind == "operator" and (prev.text == "=" or self.space_before[index - 1]):
            return False
        if prev.kind == "punctuation" and prev.text in CONTINUATION_PUNCTUATION:
            return False
        if token.kind == "punctuation" and token.text in (".", "->"):
            return False
        if token.kind == "operator" and self.space_before[index + 1]:
            return False
        return True

    def _collect(
        self,
        stop: frozenset[str] | set[str] = frozenset(),
        *,
        fresh: bool = False,
        multiline: bool = False,
        generics: bool = False,
    ) -> tuple[list[Token], list[SyntaxNode]]:
        """Gather expression tokens up to a stop token or the end of the statement.

        Braces met inside the expression become ``closure`` children, and
        ``switch`` or ``if`` expressions become statement children. With
        ``generics`` set, stop tokens inside angle brackets are part of the type.
        """
        tokens: list[Token] = []
        children: list[SyntaxNode] = []
        stack: list[Token] = []
        angles = 0
        while True:
            token = self._peek()
            if token is None:
                if stack:
                    opener = stack[-1]
                    raise self._error(f"expected '{MATCHING[opener.text]}' to close '{opener.text}'", opener)
                return tokens, children

            structural = token.kind == "punctuation"
            if not stack:
                if not angles and not multiline and (tokens or not fresh) and self._ends_statement(self.pos):
                    return tokens, children
                if not angles and token.text in stop and token.kind != "literal":
                    return tokens, children
                if structural and token.text in (";", ")", "]", "}"):
                    return tokens, children

            if structural and token.text in ("(", "["):
                stack.append(token)
                tokens.append(self._take())
            elif structural and token.text in (")", "]"):
                opener = stack.pop()
                if MATCHING[opener.text] != token.text:
                    raise self._error(f"expected '{MATCHING[opener.text]}' but found '{token.text}'")
                tokens.append(self._take())
            elif token.kind == "keyword" and token.text == "switch":
                children.append(self._parse_loop("switch"))
            elif token.kind == "keyword" and token.text == "if":
                children.append(self._parse_if())
            elif structural and token.text == "{":
                children.append(self._parse_block("closure"))
            elif structural and token.text == "}":
                raise self._error(f"expected '{MATCHING[stack[-1].text]}' before '}}'")
            elif generics and not stack and token.kind == "operator" and token.text[0] in "<>":
                angles = max(0, angles + token.text.count("<") - token.text.count(">"))
                tokens.append(self._take())
            else:
                tokens.append(self._take())

    # ------------------------------------------------------------------
    # blocks and items

    def _parse_block(self, kind: str, in_switch: bool = False) -> SyntaxNode:
        start = self.pos
        opener = self._take()
        items = self._parse_items(closer="}", in_switch=in_switch)
        closer = self._take()
        return self._node(kind, start, children=items, tokens=(opener, closer))

    def _parse_items(self, closer: str | None, in_switch: bool) -> list[SyntaxNode]:
        items: list[SyntaxNode] = []
        while True:
            token = self._peek()
            if token is None:
                if closer:
                    raise self._error(f"expected '{closer}' before end of file")
                return items
            if token.kind == "punctuation" and token.text == ";":
                self.pos += 1
                continue
            if token.kind == "punctuation" and token.text in CLOSERS:
                if token.text == closer:
                    return items
                raise self._error(f"unexpected '{token.text}'")
            items.append(self._parse_item(in_switch))

    def _parse_item(self, in_switch: bool) -> SyntaxNode:
        if in_switch and self._starts_case_label():
            return self._parse_case_label()
        if self._is_declaration_start():
            return self._parse_declaration()
        return self._parse_statement()

    def _starts_case_label(self) -> bool:
        index = self.pos
        while self._token_at(index) is not None and self.sig[index].kind == "attribute":
            index += 1
        token = self._token_at(index)
        return token is not None and token.kind == "keyword" and token.text in ("case", "default")

    def _starts_declaration_keyword(self, index: int) -> bool:
        token = self._token_at(index)
        if token is None:
            return False
        if token.kind == "keyword" and token.text in DECLARATION_KEYWORDS:
            return True
        if token.kind == "identifier" and token.text == "actor":
            following = self._token_at(index + 1)
            return following is not None and following.kind == "identifier"
        return False

    def _modifier_end(self, index: int) -> int | None:
        token = self._token_at(index)
        if token is None or token.kind not in ("identifier", "keyword") or token.text not in MODIFIERS:
            return None
        following = index + 1
        paren = self._token_at(following)
        if paren is not None and paren.text == "(" and not self.space_before[following]:
            following = self._skip_balanced(following)
            if following is None:
                return None
        if self._starts_declaration_keyword(following) or self._modifier_end(following) is not None:
            return following
        return None

    def _is_declaration_start(self) -> bool:
        index = self.pos
        while self._token_at(index) is not None and self.sig[index].kind == "attribute":
            index += 1
            paren = self._token_at(index)
            if paren is not None and paren.text == "(" and not self.space_before[index]:
                index = self._skip_balanced(index)
                if index is None:
                    return False
        while True:
            following = self._modifier_end(index)
            if following is None:
                break
            index = following
        return self._starts_declaration_keyword(index)

    # ------------------------------------------------------------------
    # declarations

    def _parse_declaration(self) -> SyntaxNode:
        start = self.pos
        attributes: list[Token] = []
        modifiers: list[Token] = []
        own: list[Token] = []

        while self._peek() is not None and self._peek().kind == "attribute":
            attribute = self._take()
            attributes.append(attribute)
            own.append(attribute)
            if self._at("(") and not self.space_before[self.pos]:
                own.extend(self._take_balanced())

        while self._modifier_end(self.pos) is not None:
            modifier = self._take()
            modifiers.append(modifier)
            own.append(modifier)
            if self._at("(") and not self.space_before[self.pos]:
                own.extend(self._take_balanced())

        keyword = self._peek().text
        context = {"start": start, "own": own, "attributes": tuple(attributes), "modifiers": tuple(modifiers)}
        if keyword in TYPE_KEYWORDS or keyword == "actor":
            return self._parse_type_decl(**context)
        if keyword == "func":
            return self._parse_function(**context)
        if keyword in ("init", "subscript"):
            return self._parse_initializer(**context)
        if keyword == "deinit":
            return self._parse_deinit(**context)
        if keyword in ("var", "let"):
            return self._parse_variable(**context)
        if keyword in ("typealias", "associatedtype"):
            return self._parse_alias(**context)
        if keyword == "case":
            return self._parse_enum_case(**context)
        if keyword == "import":
            return self._parse_simple("import_decl", **context)
        return self._parse_simple("operator_decl", **context)

    def _parse_type_decl(self, start, own, attributes, modifiers) -> SyntaxNode:
        keyword = self._take()
        own.append(keyword)
        name_token = self._peek()
        if name_token is None or name_token.kind != "identifier":
            raise self._error(f"expected a name after '{keyword.text}'")
        own.append(self._take())
        name = name_token.text
        if keyword.text == "extension":
            while self._at(".") and self._peek(1) is not None and self._peek(1).kind == "identifier":
                own.append(self._take())
                name += "." + self._peek().text
                own.append(self._take())

        header, closures = self._collect({"{"})
        own.extend(header)
        if not self._at("{"):
            raise self._error(f"expected '{{' to open {keyword.text} body")
        body = self._parse_block("member_block")
        return self._node(
            "type_decl",
            start,
            children=[*closures, body],
            tokens=own,
            name=name,
            name_token=name_token,
            keyword=keyword.text,
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_function(self, start, own, attributes, modifiers) -> SyntaxNode:
        keyword = self._take()
        own.append(keyword)
        name_token = self._peek()
        if name_token is None or name_token.kind not in ("identifier", "operator"):
            raise self._error("expected a function name after 'func'")
        own.append(self._take())
        if self._peek() is not None and self._peek().text.startswith("<") and not self.space_before[self.pos]:
            own.extend(self._take_generic_clause())

        children = self._parse_signature(own, "function name")
        return self._node(
            "function_decl",
            start,
            children=children,
            tokens=own,
            name=name_token.text,
            name_token=name_token,
            keyword="func",
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_initializer(self, start, own, attributes, modifiers) -> SyntaxNode:
        keyword = self._take()
        own.append(keyword)
        following = self._peek()
        if following is not None and following.text in ("?", "!") and not self.space_before[self.pos]:
            own.append(self._take())
        if self._peek() is not None and self._peek().text.startswith("<"):
            own.extend(self._take_generic_clause())

        children = self._parse_signature(own, f"'{keyword.text}'")
        kind = "initializer_decl" if keyword.text == "init" else "subscript_decl"
        return self._node(
            kind,
            start,
            children=children,
            tokens=own,
            name=keyword.text,
            keyword=keyword.text,
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_signature(self, own: list[Token], after: str) -> list[SyntaxNode]:
        if not self._at("("):
            raise self._error(f"expected a parameter clause after {after}")
        parameters, punctuation = self._parse_parameter_clause()
        own.extend(punctuation)
        children: list[SyntaxNode] = list(parameters)

        effects, _ = self._collect({"->", "{", "where"})
        own.extend(effects)
        if self._at("->"):
            own.append(self._take())
            return_type, closures = self._collect({"{", "where"}, generics=True)
            if not return_type:
                raise self._error("expected a return type after '->'")
            children.append(self._annotation("type_annotation", return_type, closures))
        if self._at("where"):
            clause, _ = self._collect({"{"})
            own.extend(clause)
        if self._at("{"):
            children.append(self._parse_block("code_block"))
        return children

    def _parse_parameter_clause(self) -> tuple[list[SyntaxNode], list[Token]]:
        punctuation = [self._take()]
        parameters: list[SyntaxNode] = []
        while True:
            token = self._peek()
            if token is None:
                raise self._error("expected ')' to close parameter list", punctuation[0])
            if token.text == ")":
                punctuation.append(self._take())
                return parameters, punctuation
            parameters.append(self._parse_parameter())
            if self._at(","):
                punctuation.append(self._take())
            elif not self._at(")"):
                raise self._error("expected ',' or ')' in parameter list")

    def _parse_parameter(self) -> SyntaxNode:
        start = self.pos
        attributes: list[Token] = []
        own: list[Token] = []
        while self._peek() is not None and self._peek().kind == "attribute":
            attributes.append(self._take())
            own.append(attributes[-1])

        first = self._peek()
        if first is None or first.kind not in ("identifier", "keyword"):
            raise self._error("expected a parameter name")
        own.append(self._take())
        label = None
        name_token = first
        second = self._peek()
        if second is not None and second.kind in ("identifier", "keyword"):
            label = first
            name_token = self._take()
            own.append(name_token)

        if not self._at(":"):
            raise self._error("expected ':' after parameter name")
        own.append(self._take())
        type_tokens, closures = self._collect({",", ")", "="}, multiline=True, generics=True)
        if not type_tokens:
            raise self._error("expected a parameter type")
        children = [self._annotation("type_annotation", type_tokens, closures)]
        if self._at("="):
            own.append(self._take())
            default, closures = self._collect({",", ")"}, multiline=True)
            if not default:
                raise self._error("expected a default value after '='")
            children.append(self._annotation("initializer", default, closures))

        return self._node(
            "parameter",
            start,
            children=children,
            tokens=own,
            name=name_token.text,
            name_token=name_token,
            label=label,
            attributes=tuple(attributes),
        )

    def _parse_deinit(self, start, own, attributes, modifiers) -> SyntaxNode:
        own.append(self._take())
        if not self._at("{"):
            raise self._error("expected '{' after 'deinit'")
        body = self._parse_block("code_block")
        return self._node(
            "deinitializer_decl",
            start,
            children=[body],
            tokens=own,
            name="deinit",
            keyword="deinit",
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_variable(self, start, own, attributes, modifiers) -> SyntaxNode:
        keyword = self._take()
        own.append(keyword)
        bindings = [self._parse_binding(keyword.text)]
        while self._at(",") and not self._ends_statement(self.pos):
            own.append(self._take())
            bindings.append(self._parse_binding(keyword.text))
        first = bindings[0]
        return self._node(
            "variable_decl",
            start,
            children=bindings,
            tokens=own,
            name=first.name,
            name_token=first.name_token,
            keyword=keyword.text,
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_binding(self, keyword: str) -> SyntaxNode:
        start = self.pos
        token = self._peek()
        children: list[SyntaxNode] = []
        own: list[Token] = []
        name_token = None
        if token is not None and token.text == "(":
            pattern = self._take_balanced()
            own.extend(pattern)
            for item in pattern:
                if item.kind == "identifier" and item.text != "_":
                    children.append(SyntaxNode("binding", item.span, name=item.text, name_token=item))
        elif token is not None and token.kind == "identifier":
            name_token = self._take()
            own.append(name_token)
        else:
            raise self._error(f"expected a variable name after '{keyword}'")

        if self._at(":"):
            own.append(self._take())
            type_tokens, closures = self._collect({"=", "{", ","}, generics=True)
            if not type_tokens:
                raise self._error("expected a type after ':'")
            children.append(self._annotation("type_annotation", type_tokens, closures))
        if self._at("="):
            own.append(self._take())
            value, closures = self._collect({","})
            if not value and not closures:
                raise self._error("expected an initial value after '='")
            children.append(self._annotation("initializer", value, closures))
        if self._at("{"):
            children.append(self._parse_block("code_block"))

        return self._node(
            "binding",
            start,
            children=children,
            tokens=own,
            name=name_token.text if name_token else "",
            name_token=name_token,
        )

    def _parse_alias(self, start, own, attributes, modifiers) -> SyntaxNode:
        keyword = self._take()
        own.append(keyword)
        name_token = self._peek()
        if name_token is None or name_token.kind != "identifier":
            raise self._error(f"expected a name after '{keyword.text}'")
        own.append(self._take())
        children: list[SyntaxNode] = []
        rest, _ = self._collect({"="})
        own.extend(rest)
        if self._at("="):
            own.append(self._take())
            aliased, closures = self._collect(generics=True)
            if not aliased:
                raise self._error("expected a type after '='")
            children.append(self._annotation("type_annotation", aliased, closures))
        return self._node(
            "typealias_decl",
            start,
            children=children,
            tokens=own,
            name=name_token.text,
            name_token=name_token,
            keyword=keyword.text,
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_enum_case(self, start, own, attributes, modifiers) -> SyntaxNode:
        own.append(self._take())
        elements: list[SyntaxNode] = []
        while True:
            element_start = self.pos
            name_token = self._peek()
            if name_token is None or name_token.kind != "identifier":
                raise self._error("expected an enum case name after 'case'")
            element_tokens = [self._take()]
            if self._at("(") and not self.space_before[self.pos]:
                element_tokens.extend(self._take_balanced())
            children: list[SyntaxNode] = []
            if self._at("="):
                element_tokens.append(self._take())
                raw_value, closures = self._collect({","})
                if not raw_value:
                    raise self._error("expected a raw value after '='")
                children.append(self._annotation("initializer", raw_value, closures))
            elements.append(
                self._node(
                    "enum_element",
                    element_start,
                    children=children,
                    tokens=element_tokens,
                    name=name_token.text,
                    name_token=name_token,
                )
            )
            if self._at(",") and not self._ends_statement(self.pos):
                own.append(self._take())
                continue
            break
        return self._node(
            "enum_case_decl",
            start,
            children=elements,
            tokens=own,
            keyword="case",
            modifiers=modifiers,
            attributes=attributes,
        )

    def _parse_simple(self, kind, start, own, attributes, modifiers) -> SyntaxNode:
        keyword = self._take()
        own.append(keyword)
        rest, closures = self._collect({"{"})
        own.extend(rest)
        children: list[SyntaxNode] = list(closures)
        if self._at("{"):
            children.append(self._parse_block("member_block"))
        return self._node(
            kind,
            start,
            children=children,
            tokens=own,
            keyword=keyword.text,
            modifiers=modifiers,
            attributes=attributes,
        )

    # ------------------------------------------------------------------
    # statements

    def _parse_statement(self) -> SyntaxNode:
        token = self._peek()
        if token.kind == "keyword":
            if token.text == "guard":
                return self._parse_guard()
            if token.text == "if":
                return self._parse_if()
            if token.text in ("while", "for", "switch"):
                return self._parse_loop(token.text)
            if token.text == "repeat":
                return self._parse_repeat()
            if token.text in ("do", "defer"):
                return self._parse_do(token.text)

        start = self.pos
        tokens, children = self._collect(fresh=True)
        keyword = token.text if token.kind == "keyword" else ""
        return self._node("statement", start, children=children, tokens=tokens, keyword=keyword)

    def _parse_condition(self, keyword: str, stop: set[str]) -> SyntaxNode:
        tokens, closures = self._collect(stop)
        if not tokens:
            raise self._error(f"expected a condition after '{keyword}'")
        return self._annotation("condition", tokens, closures)

    def _parse_guard(self) -> SyntaxNode:
        start = self.pos
        keyword = self._take()
        condition = self._parse_condition("guard", {"else"})
        if not self._at("else"):
            raise self._error("expected 'else' after guard condition")
        else_token = self._take()
        if not self._at("{"):
            raise self._error("expected '{' after 'else'")
        body = self._parse_block("code_block")
        return self._node(
            "guard_stmt", start, children=[condition, body], tokens=(keyword, else_token), keyword="guard"
        )

    def _parse_if(self) -> SyntaxNode:
        start = self.pos
        own = [self._take()]
        condition = self._parse_condition("if", {"{"})
        if not self._at("{"):
            raise self._error("expected '{' after if condition")
        children = [condition, self._parse_block("code_block")]
        if self._at("else"):
            own.append(self._take())
            if self._at("if"):
                children.append(self._parse_if())
            elif self._at("{"):
                children.append(self._parse_block("code_block"))
            else:
                raise self._error("expected '{' or 'if' after 'else'")
        return self._node("if_stmt", start, children=children, tokens=own, keyword="if")

    def _parse_loop(self, keyword: str) -> SyntaxNode:
        start = self.pos
        own = [self._take()]
        condition = self._parse_condition(keyword, {"{"})
        if not self._at("{"):
            raise self._error(f"expected '{{' after {keyword} condition")
        body = self._parse_block("code_block", in_switch=keyword == "switch")
        return self._node("statement", start, children=[condition, body], tokens=own, keyword=keyword)

    def _parse_repeat(self) -> SyntaxNode:
        start = self.pos
        own = [self._take()]
        if not self._at("{"):
            raise self._error("expected '{' after 'repeat'")
        body = self._parse_block("code_block")
        if not self._at("while"):
            raise self._error("expected 'while' after repeat body")
        own.append(self._take())
        condition = self._parse_condition("while", set())
        return self._node("statement", start, children=[body, condition], tokens=own, keyword="repeat")

    def _parse_do(self, keyword: str) -> SyntaxNode:
        start = self.pos
        own = [self._take()]
        header, _ = self._collect({"{"})
        own.extend(header)
        if not self._at("{"):
            raise self._error(f"expected '{{' after '{keyword}'")
        children = [self._parse_block("code_block")]
        while keyword == "do" and self._at("catch"):
            own.append(self._take())
            pattern, closures = self._collect({"{"})
            if pattern:
                children.append(self._annotation("condition", pattern, closures))
            if not self._at("{"):
                raise self._error("expected '{' after catch clause")
            children.append(self._parse_block("code_block"))
        return self._node("statement", start, children=children, tokens=own, keyword=keyword)

    def _parse_case_label(self) -> SyntaxNode:
        start = self.pos
        own: list[Token] = []
        while self._peek().kind == "attribute":
            own.append(self._take())
        keyword = self._take()
        own.append(keyword)
        pattern, closures = self._collect({":"})
        own.extend(pattern)
        if not self._at(":"):
            raise self._error(f"expected ':' after '{keyword.text}' label")
        own.append(self._take())
        return self._node("case_label", start, children=closures, tokens=own, keyword=keyword.text)
