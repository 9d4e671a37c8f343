from __future__ import annotations

from textwrap import dedent

import pytest

from monkey.parser import parse_source
from monkey.token_types import TT, Token
from monkey.tree import (
    ArrayLiteral,
    Boolean,
    CallExpression,
    ExpressionStatement,
    FunctionLiteral,
    HashLiteral,
    Identifier,
    IfExpression,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    ReturnStatement,
    StringLiteral,
)
from tests.support.harness import Lexer, Parser, parse_errors, parse_program

PRECEDENCE_CASES = [
    pytest.param("-a * b", "((-a) * b)", id="prefix-minus-binds-tighter"),
    pytest.param("!-a", "(!(-a))", id="stacked-prefix"),
    pytest.param("a + b + c", "((a + b) + c)", id="sum-left-assoc"),
    pytest.param("a + b - c", "((a + b) - c)", id="sum-mixed"),
    pytest.param("a * b * c", "((a * b) * c)", id="product-left-assoc"),
    pytest.param("a * b / c", "((a * b) / c)", id="product-mixed"),
    pytest.param("a + b / c", "(a + (b / c))", id="product-over-sum"),
    pytest.param(
        "a + b * c + d / e - f",
        "(((a + (b * c)) + (d / e)) - f)",
        id="sum-product-chain",
    ),
    pytest.param("3 + 4; -5 * 5", "(3 + 4); ((-5) * 5)", id="two-statements"),
    pytest.param("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))", id="comparison-over-eq"),
    pytest.param("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))", id="comparison-over-neq"),
    pytest.param(
        "3 + 4 * 5 == 3 * 1 + 4 * 5",
        "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))",
        id="arith-over-eq",
    ),
    pytest.param("3 > 5 == false", "((3 > 5) == false)", id="bool-literal-operand"),
    pytest.param("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)", id="group-middle"),
    pytest.param("(5 + 5) * 2", "((5 + 5) * 2)", id="group-first"),
    pytest.param("2 / (5 + 5)", "(2 / (5 + 5))", id="group-last"),
    pytest.param("-(5 + 5)", "(-(5 + 5))", id="prefix-group"),
    pytest.param("!(true == true)", "(!(true == true))", id="bang-group"),
    pytest.param("a + add(b * c) + d", "((a + add((b * c))) + d)", id="call-in-sum"),
    pytest.param(
        "add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
        "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))",
        id="call-nested-args",
    ),
    pytest.param(
        "add(a + b + c * d / f + g)",
        "add((((a + b) + ((c * d) / f)) + g))",
        id="call-single-complex-arg",
    ),
    pytest.param(
        "a * [1, 2, 3, 4][b * c] * d",
        "((a * ([1, 2, 3, 4][(b * c)])) * d)",
        id="index-binds-tightest",
    ),
    pytest.param(
        "add(a * b[2], b[1], 2 * [1, 2][1])",
        "add((a * (b[2])), (b[1]), (2 * ([1, 2][1])))",
        id="index-in-call-args",
    ),
    pytest.param("f(1)(2)", "f(1)(2)", id="chained-calls"),
    pytest.param("a[0][1]", "((a[0])[1])", id="chained-index"),
    pytest.param("-f(x)", "(-f(x))", id="call-over-prefix"),
]


@pytest.mark.parametrize("source, expected", PRECEDENCE_CASES)
def test_operator_precedence(source: str, expected: str) -> None:
    assert str(parse_program(source)) == expected


@pytest.mark.parametrize(
    "source, name, value",
    [
        pytest.param("let x = 5;", "x", "5", id="int"),
        pytest.param("let y = true;", "y", "true", id="bool"),
        pytest.param("let foobar = y;", "foobar", "y", id="ident"),
        pytest.param("let z = 1 + 2", "z", "(1 + 2)", id="no-semicolon"),
    ],
)
def test_let_statements(source: str, name: str, value: str) -> None:
    program = parse_program(source)

    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, LetStatement)
    assert stmt.token_literal() == "let"
    assert stmt.name.value == name
    assert str(stmt.name) == name
    assert str(stmt.value) == value


@pytest.mark.parametrize(
    "source, value",
    [
        pytest.param("return 5;", "5", id="int"),
        pytest.param("return true;", "true", id="bool"),
        pytest.param("return foobar;", "foobar", id="ident"),
        pytest.param("return add(1, 2)", "add(1, 2)", id="call"),
    ],
)
def test_return_statements(source: str, value: str) -> None:
    program = parse_program(source)

    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ReturnStatement)
    assert stmt.token_literal() == "return"
    assert str(stmt.return_value) == value


def test_statements_without_semicolons() -> None:
    program = parse_program("let a = 1 let b = 2 a + b")

    assert [type(s) for s in program.statements] == [
        LetStatement,
        LetStatement,
        ExpressionStatement,
    ]
    assert str(program) == "let a = 1; let b = 2; (a + b)"


def _only_expression(source: str):
    program = parse_program(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


def test_identifier_expression() -> None:
    expr = _only_expression("foobar;")

    assert isinstance(expr, Identifier)
    assert expr.value == "foobar"
    assert expr.token_literal() == "foobar"


def test_integer_literal_expression() -> None:
    expr = _only_expression("5;")

    assert isinstance(expr, IntegerLiteral)
    assert expr.value == 5
    assert expr.token_literal() == "5"


def test_largest_integer_literal() -> None:
    expr = _only_expression("9223372036854775807")

    assert isinstance(expr, IntegerLiteral)
    assert expr.value == 9223372036854775807


@pytest.mark.parametrize(
    "source, expected",
    [pytest.param("true;", True, id="true"), pytest.param("false;", False, id="false")],
)
def test_boolean_expression(source: str, expected: bool) -> None:
    expr = _only_expression(source)

    assert isinstance(expr, Boolean)
    assert expr.value is expected


def test_string_literal_expression() -> None:
    expr = _only_expression('"hello world";')

    assert isinstance(expr, StringLiteral)
    assert expr.value == "hello world"
    assert str(expr) == '"hello world"'


@pytest.mark.parametrize(
    "source, operator, right",
    [
        pytest.param("!5;", "!", "5", id="bang-int"),
        pytest.param("-15;", "-", "15", id="minus-int"),
        pytest.param("!true;", "!", "true", id="bang-true"),
        pytest.param("!foobar;", "!", "foobar", id="bang-ident"),
    ],
)
def test_prefix_expressions(source: str, operator: str, right: str) -> None:
    expr = _only_expression(source)

    assert isinstance(expr, PrefixExpression)
    assert expr.operator == operator
    assert str(expr.right) == right


@pytest.mark.parametrize("operator", ["+", "-", "*", "/", ">", "<", "==", "!="])
def test_infix_expressions(operator: str) -> None:
    expr = _only_expression(f"5 {operator} 5;")

    assert isinstance(expr, InfixExpression)
    assert expr.operator == operator
    assert isinstance(expr.left, IntegerLiteral) and expr.left.value == 5
    assert isinstance(expr.right, IntegerLiteral) and expr.right.value == 5


def test_if_expression() -> None:
    expr = _only_expression("if (x < y) { x }")

    assert isinstance(expr, IfExpression)
    assert str(expr.condition) == "(x < y)"
    assert len(expr.consequence.statements) == 1
    assert str(expr.consequence.statements[0]) == "x"
    assert expr.alternative is None


def test_if_else_expression() -> None:
    expr = _only_expression("if (x < y) { x } else { y }")

    assert isinstance(expr, IfExpression)
    assert expr.alternative is not None
    assert str(expr.alternative) == "{ y }"
    assert str(expr) == "if ((x < y)) { x } else { y }"


def test_function_literal() -> None:
    expr = _only_expression("fn(x, y) { x + y; }")

    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == ["x", "y"]
    assert str(expr.body) == "{ (x + y) }"


@pytest.mark.parametrize(
    "source, params",
    [
        pytest.param("fn() {};", [], id="none"),
        pytest.param("fn(x) {};", ["x"], id="one"),
        pytest.param("fn(x, y, z) {};", ["x", "y", "z"], id="three"),
    ],
)
def test_function_parameters(source: str, params: list) -> None:
    expr = _only_expression(source)

    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == params


def test_call_expression() -> None:
    expr = _only_expression("add(1, 2 * 3, 4 + 5);")

    assert isinstance(expr, CallExpression)
    assert str(expr.function) == "add"
    assert [str(a) for a in expr.arguments] == ["1", "(2 * 3)", "(4 + 5)"]


def test_call_on_function_literal() -> None:
    expr = _only_expression("fn(x) { x }(5)")

    assert isinstance(expr, CallExpression)
    assert isinstance(expr.function, FunctionLiteral)
    assert str(expr) == "fn(x) { x }(5)"


def test_array_literal() -> None:
    expr = _only_expression("[1, 2 * 2, 3 + 3]")

    assert isinstance(expr, ArrayLiteral)
    assert [str(e) for e in expr.elements] == ["1", "(2 * 2)", "(3 + 3)"]


def test_empty_array_literal() -> None:
    expr = _only_expression("[]")

    assert isinstance(expr, ArrayLiteral)
    assert expr.elements == ()


def test_index_expression() -> None:
    expr = _only_expression("myArray[1 + 1]")

    assert isinstance(expr, IndexExpression)
    assert str(expr.left) == "myArray"
    assert str(expr.index) == "(1 + 1)"


@pytest.mark.parametrize(
    "source, pairs",
    [
        pytest.param("{}", [], id="empty"),
        pytest.param(
            '{"one": 1, "two": 2, "three": 3}',
            [('"one"', "1"), ('"two"', "2"), ('"three"', "3")],
            id="string-keys",
        ),
        pytest.param(
            '{"one": 0 + 1, "two": 10 - 8}',
            [('"one"', "(0 + 1)"), ('"two"', "(10 - 8)")],
            id="expression-values",
        ),
        pytest.param("{1: true, true: 2}", [("1", "true"), ("true", "2")], id="mixed-keys"),
        pytest.param('{"a": 1,}', [('"a"', "1")], id="trailing-comma"),
    ],
)
def test_hash_literal(source: str, pairs: list) -> None:
    expr = _only_expression(source)

    assert isinstance(expr, HashLiteral)
    assert [(str(k), str(v)) for k, v in expr.pairs] == pairs


def test_hash_keeps_duplicate_keys_in_source_order() -> None:
    expr = _only_expression('{"a": 1, "a": 2}')

    assert isinstance(expr, HashLiteral)
    assert len(expr.pairs) == 2


def test_empty_program() -> None:
    program = parse_program("")

    assert program.statements == ()
    assert str(program) == ""


def test_parser_accepts_any_token_iterable() -> None:
    tokens = [
        Token(TT.INT, "1", 1, 1),
        Token(TT.PLUS, "+", 1, 3),
        Token(TT.INT, "2", 1, 5),
    ]
    parser = Parser(iter(tokens))
    program = parser.parse_program()

    assert parser.errors == []
    assert str(program) == "(1 + 2)"


ERROR_CASES = [
    pytest.param(
        "let = 5;",
        "expected next token to be IDENT, got = instead at line 1, col 5",
        id="let-missing-name",
    ),
    pytest.param(
        "let x 5;",
        "expected next token to be =, got INT instead at line 1, col 7",
        id="let-missing-assign",
    ),
    pytest.param(
        "let 838383;",
        "expected next token to be IDENT, got INT instead at line 1, col 5",
        id="let-int-name",
    ),
    pytest.param("+5", "no prefix parse function for + found at line 1, col 1", id="no-prefix-plus"),
    pytest.param("@", "no prefix parse function for ILLEGAL found at line 1, col 1", id="illegal-char"),
    pytest.param(
        "fn(x, 1) { x }",
        "expected next token to be IDENT, got INT instead at line 1, col 7",
        id="bad-parameter",
    ),
    pytest.param(
        "if (x { x }",
        "expected next token to be ), got { instead at line 1, col 7",
        id="if-missing-rparen",
    ),
    pytest.param(
        "if (x) x",
        "expected next token to be {, got IDENT instead at line 1, col 8",
        id="if-missing-brace",
    ),
    pytest.param(
        "99999999999999999999",
        "could not parse 99999999999999999999 as integer at line 1, col 1",
        id="int-overflow",
    ),
    pytest.param("[1, 2", "expected next token to be ], got EOF instead", id="array-unclosed"),
    pytest.param("(1 + 2", "expected next token to be ), got EOF instead", id="group-unclosed"),
    pytest.param("fn() { 1", "expected next token to be }, got EOF instead", id="block-unclosed"),
    pytest.param('{"a" 1}', "expected next token to be :, got INT instead", id="hash-missing-colon"),
    pytest.param("[1, 2,]", "no prefix parse function for ] found", id="array-trailing-comma"),
]


@pytest.mark.parametrize("source, message", ERROR_CASES)
def test_parse_errors(source: str, message: str) -> None:
    errors = parse_errors(source)

    assert errors, f"expected a parse error for {source!r}"
    assert message in errors[0]


def test_errors_are_collected_across_statements() -> None:
    source = "let = 1; let y = 2; let 3; y"
    parser = Parser(Lexer(source))
    program = parser.parse_program()

    assert len(parser.errors) == 2
    assert "expected next token to be IDENT, got = instead" in parser.errors[0]
    assert "expected next token to be IDENT, got INT instead" in parser.errors[1]
    assert str(program) == "let y = 2; y"


def test_recovery_skips_semicolons_inside_brackets() -> None:
    errors = parse_errors("foo(1, ; 2); let z = 3;")
    assert errors == ["no prefix parse function for ; found at line 1, col 8"]


def test_recovery_resumes_at_next_let() -> None:
    source = dedent(
        """\
        let x = ;
        let y = 10
        let = 3
        return y
        """
    )
    errors = parse_errors(source)

    assert len(errors) == 2
    assert "no prefix parse function for ; found at line 1, col 9" == errors[0]
    assert "got = instead at line 3, col 5" in errors[1]


def test_error_inside_function_body_reports_position() -> None:
    source = "let f = fn(a) {\n  let = a;\n};"
    errors = parse_errors(source)

    assert errors[0].endswith("at line 2, col 7")


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param(
            "let a = (1; let b = ; let c = 2;",
            [
                "expected next token to be ), got ; instead at line 1, col 11",
                "no prefix parse function for ; found at line 1, col 21",
            ],
            id="unclosed-paren",
        ),
        pytest.param(
            "let a = [1, 2; let b = ;",
            [
                "expected next token to be ], got ; instead at line 1, col 14",
                "no prefix parse function for ; found at line 1, col 24",
            ],
            id="unclosed-bracket",
        ),
        pytest.param(
            "let f = fn() { let x = ; let y = 2; }; let z = ;",
            [
                "no prefix parse function for ; found at line 1, col 24",
                "no prefix parse function for ; found at line 1, col 48",
            ],
            id="block-body-stays-nested",
        ),
    ],
)
def test_recovery_after_unclosed_bracket(source: str, expected: list[str]) -> None:
    assert parse_errors(source) == expected


def test_unterminated_string_joins_earlier_errors() -> None:
    program, errors = parse_source('let x = ;\nlet s = "abc')

    assert errors == [
        "no prefix parse function for ; found at line 1, col 9",
        "Unterminated string at line 2, col 9",
    ]
    assert str(program) == ""


def test_unterminated_string_keeps_parsed_statements() -> None:
    parser = Parser(Lexer('let a = 1; let s = "abc'))
    program = parser.parse_program()

    assert parser.errors == ["Unterminated string at line 1, col 20"]
    assert str(program) == "let a = 1"


def test_unterminated_string_in_block_is_reported_once() -> None:
    assert parse_errors('fn(x) { "abc') == ["Unterminated string at line 1, col 9"]
