from __future__ import annotations

from swift_style_scanner.rules import declarations, naming, optionals, spacing, text
from swift_style_scanner.rules.base import ParamSpec, RuleContext, RuleRegistry, RuleSpec, RulesError


DEFAULT_RULES: tuple[RuleSpec, ...] = (
    RuleSpec(
        "line-length",
        "Lines should not exceed the maximum length.",
        "warning",
        text.check_line_length,
        params=(ParamSpec("max_length", 120, int, "Maximum characters per line.", minimum=1),),
    ),
    RuleSpec(
        "indentation",
        "Indent with spaces in multiples of the indent width.",
        "warning",
        text.check_indentation,
        params=(ParamSpec("indent_width", 2, int, "Spaces per indentation level.", minimum=1),),
    ),
    RuleSpec(
        "trailing-whitespace",
        "Lines should not end with spaces or tabs.",
        "warning",
        text.check_trailing_whitespace,
        fixable=True,
    ),
    RuleSpec(
        "vertical-whitespace",
        "Limit consecutive empty lines.",
        "info",
        text.check_vertical_whitespace,
        params=(ParamSpec("max_empty_lines", 1, int, "Empty lines allowed in a row.", minimum=0),),
        fixable=True,
    ),
    RuleSpec(
        "trailing-newline",
        "Files should end with exactly one newline.",
        "info",
        text.check_trailing_newline,
        fixable=True,
    ),
    RuleSpec(
        "trailing-semicolon",
        "Statements should not end with a semicolon.",
        "warning",
        text.check_trailing_semicolon,
        fixable=True,
    ),
    RuleSpec(
        "comment-spacing",
        "Line comments should start with a space after the slashes.",
        "info",
        text.check_comment_spacing,
    ),
    RuleSpec(
        "colon-spacing",
        "Colons have no space before and one space after.",
        "warning",
        spacing.check_colon_spacing,
    ),
    RuleSpec(
        "opening-brace",
        "Opening braces go on the same line as their declaration or statement.",
        "warning",
        spacing.check_opening_brace,
    ),
    RuleSpec(
        "else-placement",
        "'else' and 'catch' go on the same line as the closing brace before them.",
        "warning",
        spacing.check_else_placement,
    ),
    RuleSpec(
        "naming-case",
        "Types are UpperCamelCase; functions, variables, parameters and enum cases are lowerCamelCase.",
        "error",
        naming.check_naming_case,
        params=(ParamSpec("allowed_names", (), list, "Names exempt from the check."),),
    ),
    RuleSpec(
        "force-unwrap",
        "Avoid force unwrapping optionals.",
        "warning",
        optionals.check_force_unwrap,
    ),
    RuleSpec(
        "force-try",
        "Avoid 'try!'.",
        "warning",
        optionals.check_force_try,
    ),
    RuleSpec(
        "force-cast",
        "Avoid 'as!'.",
        "warning",
        optionals.check_force_cast,
    ),
    RuleSpec(
        "implicitly-unwrapped-optional",
        "Avoid implicitly unwrapped optional types.",
        "warning",
        optionals.check_implicitly_unwrapped_optional,
        params=(ParamSpec("allow_iboutlets", True, bool, "Allow '!' on @IBOutlet properties."),),
    ),
    RuleSpec(
        "boolean-parameter",
        "Boolean parameters need a descriptive argument label.",
        "warning",
        declarations.check_boolean_parameter,
    ),
    RuleSpec(
        "modifier-order",
        "Access control comes first among declaration modifiers.",
        "info",
        declarations.check_modifier_order,
    ),
    RuleSpec(
        "syntactic-sugar",
        "Prefer [T], [K: V] and T? over the spelled-out generic types.",
        "info",
        declarations.check_syntactic_sugar,
    ),
    RuleSpec(
        "void-return",
        "Write '-> Void' rather than '-> ()'.",
        "info",
        declarations.check_void_return,
        fixable=True,
    ),
    RuleSpec(
        "control-statement-parens",
        "Control statement conditions are not wrapped in parentheses.",
        "info",
        spacing.check_control_statement_parens,
    ),
)


def build_registry(specs=DEFAULT_RULES) -> RuleRegistry:
    """Return a fresh registry; callers own it for the length of one run."""
    return RuleRegistry(specs)


__all__ = [
    "DEFAULT_RULES",
    "ParamSpec",
    "RuleContext",
    "RuleRegistry",
    "RuleSpec",
    "RulesError",
    "build_registry",
]
