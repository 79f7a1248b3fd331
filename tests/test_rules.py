from __future__ import annotations

from swift_style_scanner.models import LintConfig, RuleSettings
from swift_style_scanner.pipeline import analyze_source
from swift_style_scanner.rules import DEFAULT_RULES, build_registry
from swift_style_scanner.rules.naming import split_words, to_lower_camel, to_upper_camel


def run_rule(rule_id: str, source: str, **params):
    registry = build_registry()
    rules = {other: RuleSettings(enabled=False) for other in registry.ids() if other != rule_id}
    rules[rule_id] = RuleSettings(params=params)
    report = analyze_source(source, "Sample.swift", LintConfig(rules=rules), registry)
    assert report.diagnostics == ()
    return list(report.findings)


def lint_defaults(source: str):
    report = analyze_source(source, "Sample.swift", LintConfig(), build_registry())
    assert report.diagnostics == ()
    return list(report.findings)


def test_default_rule_table() -> None:
    ids = [spec.rule_id for spec in DEFAULT_RULES]

    assert len(ids) == len(set(ids)) == 20
    assert len(build_registry()) == 20
    fixable = {spec.rule_id for spec in DEFAULT_RULES if spec.fixable}
    assert fixable == {
        "trailing-whitespace",
        "vertical-whitespace",
        "trailing-newline",
        "trailing-semicolon",
        "void-return",
    }


# line-length


def test_long_line_gives_exactly_one_finding_with_defaults() -> None:
    findings = lint_defaults("x" * 121 + "\n")

    assert [item.rule_id for item in findings] == ["line-length"]
    assert (findings[0].line, findings[0].column) == (1, 121)
    assert findings[0].message == "Line is 121 characters long; the limit is 120"
    assert findings[0].severity == "warning"


def test_line_at_limit_is_fine() -> None:
    assert run_rule("line-length", "x" * 120 + "\n") == []


def test_line_length_parameter() -> None:
    findings = run_rule("line-length", "let value = 1\n", max_length=10)

    assert len(findings) == 1
    assert findings[0].column == 11


# indentation


def test_indentation_not_a_multiple_of_width() -> None:
    findings = run_rule("indentation", "func f() {\n   let x = 1\n}\n")

    assert [(item.line, item.message) for item in findings] == [
        (2, "Indentation of 3 spaces is not a multiple of 2")
    ]


def test_indentation_with_tabs() -> None:
    findings = run_rule("indentation", "func f() {\n\tlet x = 1\n}\n")

    assert [item.message for item in findings] == ["Indent with spaces, not tabs"]


def test_indentation_skips_block_comment_continuations() -> None:
    assert run_rule("indentation", "/*\n   odd\n */\nlet x = 1\n") == []


def test_indentation_width_parameter() -> None:
    assert len(run_rule("indentation", "func f() {\n  let x = 1\n}\n", indent_width=4)) == 1


# trailing-whitespace


def test_trailing_whitespace() -> None:
    findings = run_rule("trailing-whitespace", "let x = 1   \nlet y = 2\n")

    assert len(findings) == 1
    assert (findings[0].line, findings[0].column) == (1, 10)
    assert findings[0].replacement == ""


def test_trailing_whitespace_in_line_comment() -> None:
    findings = run_rule("trailing-whitespace", "// note  \nlet y = 2\n")

    assert [(item.line, item.column) for item in findings] == [(1, 8)]


def test_trailing_whitespace_inside_multiline_string_is_content() -> None:
    assert run_rule("trailing-whitespace", 'let s = """\n  text   \n  """\n') == []


# vertical-whitespace


def test_vertical_whitespace() -> None:
    findings = run_rule("vertical-whitespace", "let a = 1\n\n\n\nlet b = 2\n")

    assert len(findings) == 1
    assert findings[0].line == 3
    assert findings[0].span.end.line == 5
    assert "found 3" in findings[0].message


def test_single_blank_line_is_fine() -> None:
    assert run_rule("vertical-whitespace", "let a = 1\n\nlet b = 2\n") == []


def test_vertical_whitespace_leaves_end_of_file_alone() -> None:
    assert run_rule("vertical-whitespace", "let a = 1\n\n\n\n") == []


# trailing-newline


def test_missing_trailing_newline() -> None:
    findings = run_rule("trailing-newline", "let a = 1")

    assert len(findings) == 1
    assert findings[0].replacement == "\n"
    assert findings[0].span.start == findings[0].span.end


def test_extra_trailing_newlines() -> None:
    findings = run_rule("trailing-newline", "let a = 1\n\n\n")

    assert len(findings) == 1
    assert (findings[0].span.start.offset, findings[0].span.end.offset) == (10, 12)
    assert findings[0].replacement == ""


def test_single_trailing_newline_and_empty_file_are_fine() -> None:
    assert run_rule("trailing-newline", "let a = 1\n") == []
    assert run_rule("trailing-newline", "") == []


# trailing-semicolon


def test_trailing_semicolon() -> None:
    findings = run_rule("trailing-semicolon", "let a = 1;\nlet b = 2; let c = 3\n")

    assert [(item.line, item.column) for item in findings] == [(1, 10)]


# comment-spacing


def test_comment_spacing() -> None:
    source = "//bad\n// good\n/// doc\n///bad doc\n//: playground\n////////\n"
    findings = run_rule("comment-spacing", source)

    assert [(item.line, item.message) for item in findings] == [
        (1, "Put a space after '//' in comments"),
        (4, "Put a space after '///' in comments"),
    ]


# colon-spacing


def test_colon_spacing_violations() -> None:
    assert [item.message for item in run_rule("colon-spacing", "let a : Int = 1\n")] == [
        "Remove the space before ':'"
    ]
    assert [item.message for item in run_rule("colon-spacing", "let b:Int = 1\n")] == ["Add one space after ':'"]
    assert [item.message for item in run_rule("colon-spacing", "let e:  Int = 1\n")] == [
        "Use exactly one space after ':'"
    ]


def test_colon_spacing_exemptions() -> None:
    source = (
        "let c = flag ? 1 : 2\n"
        "let d: [String: Int] = [:]\n"
        "button.addTarget(self, action: #selector(tap(_:)), for: .touchUpInside)\n"
        "switch d {\n"
        "case .a:\n"
        "  break\n"
        "default:\n"
        "  break\n"
        "}\n"
    )

    assert run_rule("colon-spacing", source) == []


# opening-brace


def test_opening_brace_on_next_line() -> None:
    assert [item.line for item in run_rule("opening-brace", "func f()\n{\n}\n")] == [2]
    assert [item.line for item in run_rule("opening-brace", "if ready\n{\n  go()\n}\n")] == [2]
    assert [item.line for item in run_rule("opening-brace", "struct S\n{\n}\n")] == [2]


def test_opening_brace_same_line_and_closures_are_fine() -> None:
    assert run_rule("opening-brace", "func f() {\n}\n") == []
    assert run_rule("opening-brace", "let f = {\n  1\n}\n") == []


# else-placement


def test_else_on_its_own_line() -> None:
    findings = run_rule("else-placement", "if a {\n  b()\n}\nelse {\n  c()\n}\n")

    assert [(item.line, item.column) for item in findings] == [(4, 1)]


def test_catch_on_its_own_line() -> None:
    findings = run_rule("else-placement", "do {\n  try run()\n}\ncatch {\n  print(error)\n}\n")

    assert [item.message for item in findings] == ["'catch' should be on the same line as the preceding '}'"]


def test_cuddled_else_is_fine() -> None:
    assert run_rule("else-placement", "if a {\n} else {\n}\n") == []


# naming-case


def test_screaming_case_constant_gives_exactly_one_finding_with_defaults() -> None:
    findings = lint_defaults("let MAX_WIDGET_COUNT = 5\n")

    assert [item.rule_id for item in findings] == ["naming-case"]
    assert findings[0].severity == "error"
    assert findings[0].message == (
        "Variable name 'MAX_WIDGET_COUNT' should be lowerCamelCase (e.g. 'maxWidgetCount')"
    )


def test_naming_case_per_declaration_kind() -> None:
    source = (
        "struct my_type {}\n"
        "func Compute() {}\n"
        "enum E { case Red }\n"
        "func f(Value: Int) {}\n"
    )
    messages = [item.message for item in run_rule("naming-case", source)]

    assert messages == [
        "Type name 'my_type' should be UpperCamelCase (e.g. 'MyType')",
        "Function name 'Compute' should be lowerCamelCase (e.g. 'compute')",
        "Enum case name 'Red' should be lowerCamelCase (e.g. 'red')",
        "Parameter name 'Value' should be lowerCamelCase (e.g. 'value')",
    ]


def test_naming_case_exemptions() -> None:
    source = (
        "extension my_type {}\n"
        "let _ = compute()\n"
        "struct A {\n"
        "  static func ==(lhs: A, rhs: A) -> Bool { true }\n"
        "}\n"
    )

    assert run_rule("naming-case", source) == []
    assert run_rule("naming-case", "let URL = 1\n", allowed_names=["URL"]) == []


def test_name_conversion_helpers() -> None:
    assert split_words("URLSession") == ["URL", "Session"]
    assert to_lower_camel("MAX_WIDGET_COUNT") == "maxWidgetCount"
    assert to_upper_camel("http_client") == "HttpClient"


# force-unwrap


def test_force_unwrap() -> None:
    findings = run_rule("force-unwrap", "let a = b!\n")

    assert len(findings) == 1
    assert findings[0].message == "Force unwrap of 'b'; prefer optional binding or chaining"


def test_force_unwrap_ignores_types_prefix_not_and_forced_keywords() -> None:
    source = "let a: Int! = 1\nlet ok = !flag\nlet d = try! load()\nlet e = f as! Int\nlet g = h != i\n"

    assert run_rule("force-unwrap", source) == []


def test_force_unwrap_inside_nil_checked_if_is_safe() -> None:
    assert run_rule("force-unwrap", "if value != nil {\n  use(value!)\n}\n") == []


def test_force_unwrap_after_nil_checking_guard_is_safe() -> None:
    source = "func show() {\n  guard self.view != nil else { return }\n  use(self.view!)\n}\n"

    assert run_rule("force-unwrap", source) == []


def test_force_unwrap_before_guard_or_of_other_operand_is_flagged() -> None:
    assert len(run_rule("force-unwrap", "use(view!)\nguard view != nil else { return }\n")) == 1
    assert len(run_rule("force-unwrap", "if a != nil {\n  use(b!)\n}\n")) == 1


def test_force_unwrap_is_safe_only_under_clauses_that_must_hold() -> None:
    assert len(run_rule("force-unwrap", "if x != nil || y {\n  print(x!)\n}\n")) == 1
    assert len(run_rule("force-unwrap", "if !(x != nil) {\n  print(x!)\n}\n")) == 1
    assert run_rule("force-unwrap", "if x != nil && y != nil, ready {\n  print(x!, y!)\n}\n") == []


def test_guard_in_one_switch_case_does_not_cover_the_next() -> None:
    source = (
        "switch mode {\n"
        "case .a:\n"
        "  guard x != nil else { return }\n"
        "  print(x!)\n"
        "case .b:\n"
        "  print(x!)\n"
        "}\n"
    )

    assert [item.line for item in run_rule("force-unwrap", source)] == [6]


# force-try and force-cast


def test_force_try() -> None:
    findings = run_rule("force-try", "let d = try! load()\nlet e = try? load()\n")

    assert len(findings) == 1
    assert (findings[0].column, findings[0].span.end.column) == (9, 13)


def test_force_cast() -> None:
    findings = run_rule("force-cast", "let e = f as! Int\nlet g = f as? Int\n")

    assert [(item.line, item.column) for item in findings] == [(1, 11)]


# implicitly-unwrapped-optional


def test_implicitly_unwrapped_optional() -> None:
    assert len(run_rule("implicitly-unwrapped-optional", "var name: String!\n")) == 1
    assert len(run_rule("implicitly-unwrapped-optional", "func f(x: Int!) {}\n")) == 1


def test_iboutlets_are_allowed_by_default() -> None:
    source = "@IBOutlet weak var label: UILabel!\n"

    assert run_rule("implicitly-unwrapped-optional", source) == []
    assert len(run_rule("implicitly-unwrapped-optional", source, allow_iboutlets=False)) == 1


# boolean-parameter


def test_unlabeled_boolean_parameter() -> None:
    findings = run_rule("boolean-parameter", "func setVisible(_ visible: Bool) {}\ninit(_ enabled: Bool) {}\n")

    assert [item.line for item in findings] == [1, 2]
    assert "'visible'" in findings[0].message


def test_labeled_or_non_bool_parameters_are_fine() -> None:
    source = "func setVisible(visible: Bool) {}\nfunc f(_ flags: [Bool]) {}\n"

    assert run_rule("boolean-parameter", source) == []


# modifier-order


def test_modifier_order() -> None:
    findings = run_rule("modifier-order", "override public func f() {}\n")

    assert [item.message for item in findings] == ["Access control modifier 'public' should come before 'override'"]


def test_static_may_precede_access_control() -> None:
    assert run_rule("modifier-order", "static private let a = 1\nprivate static let b = 1\n") == []


# syntactic-sugar


def test_syntactic_sugar() -> None:
    source = (
        "let a: Array<Int> = []\n"
        "let b: Dictionary<String, Int> = [:]\n"
        "let c: Optional<Int> = nil\n"
        "let d: [Int] = []\n"
    )

    assert [item.line for item in run_rule("syntactic-sugar", source)] == [1, 2, 3]


# void-return


def test_void_return() -> None:
    findings = run_rule("void-return", "func f() -> () {}\n")

    assert len(findings) == 1
    assert findings[0].replacement == "Void"
    assert (findings[0].column, findings[0].span.end.column) == (13, 15)


def test_function_returning_function_is_fine() -> None:
    assert run_rule("void-return", "func make() -> () -> Int {\n  { 1 }\n}\n") == []


# control-statement-parens


def test_parenthesized_conditions() -> None:
    source = "if (ready) {\n}\nwhile (running) {\n}\nguard (x > 0) else { return }\n"
    findings = run_rule("control-statement-parens", source)

    assert [item.message for item in findings] == [
        "Remove the parentheses around the if condition",
        "Remove the parentheses around the while condition",
        "Remove the parentheses around the guard condition",
    ]


def test_partial_parens_and_tuples_are_fine() -> None:
    source = "if (a || b) && c {\n}\nswitch (a, b) {\ndefault:\n  break\n}\n"

    assert run_rule("control-statement-parens", source) == []
