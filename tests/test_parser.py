import json
import re
from typing import Any, Callable

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from monkey.monkey_ast import (
    BooleanLiteral,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
)
from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import Parser, Precedence, parse
from monkey.monkey_token import Token, TokenType

UNEXPECTED = re.compile(r"expected next token to be \S+, got \S+ instead")

ParseClean = Callable[[str], Program]


def only_expression(program: Program) -> Expression:
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    assert stmt.expression is not None
    return stmt.expression


def assert_literal(expr: Any, expected: Any) -> None:
    if isinstance(expected, bool):
        assert isinstance(expr, BooleanLiteral)
    elif isinstance(expected, int):
        assert isinstance(expr, IntegerLiteral)
    else:
        assert isinstance(expr, Identifier)
    assert expr.value == expected
    assert expr.token_literal() == str(expected).lower()


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def test_let_statement(parse_clean: ParseClean) -> None:
    program = parse_clean("let x = 5;")
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, LetStatement)
    assert stmt.token_literal() == "let"
    assert stmt.name.value == "x"
    assert stmt.name.token_literal() == "x"
    assert_literal(stmt.value, 5)


@pytest.mark.parametrize(
    "source,name,value",
    [
        ("let x = 5;", "x", 5),
        ("let y = true;", "y", True),
        ("let foobar = y;", "foobar", "y"),
        ("let z = 10", "z", 10),
    ],
)
def test_let_statement_values(parse_clean: ParseClean, source: str, name: str, value: Any) -> None:
    stmt = parse_clean(source).statements[0]
    assert isinstance(stmt, LetStatement)
    assert stmt.name.value == name
    assert_literal(stmt.value, value)


def test_several_let_statements_in_order(parse_clean: ParseClean) -> None:
    program = parse_clean("let x = 5;\nlet y = 10;\nlet foobar = 838383;")
    names = [s.name.value for s in program.statements if isinstance(s, LetStatement)]
    assert names == ["x", "y", "foobar"]


@pytest.mark.parametrize(
    "source,value",
    [("return 5;", 5), ("return true;", True), ("return foobar;", "foobar")],
)
def test_return_statements(parse_clean: ParseClean, source: str, value: Any) -> None:
    stmt = parse_clean(source).statements[0]
    assert isinstance(stmt, ReturnStatement)
    assert stmt.token_literal() == "return"
    assert_literal(stmt.value, value)


@pytest.mark.parametrize("source", ["return;", "return"])
def test_bare_return(parse_clean: ParseClean, source: str) -> None:
    stmt = parse_clean(source).statements[0]
    assert isinstance(stmt, ReturnStatement)
    assert stmt.value is None


def test_semicolons_are_optional(parse_clean: ParseClean) -> None:
    program = parse_clean("a\nb;\nc")
    assert [str(s) for s in program.statements] == ["a", "b", "c"]


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


def test_identifier_expression(parse_clean: ParseClean) -> None:
    assert_literal(only_expression(parse_clean("foobar;")), "foobar")


def test_integer_literal_expression(parse_clean: ParseClean) -> None:
    assert_literal(only_expression(parse_clean("5;")), 5)


@pytest.mark.parametrize("source,value", [("true;", True), ("false;", False)])
def test_boolean_expression(parse_clean: ParseClean, source: str, value: bool) -> None:
    assert_literal(only_expression(parse_clean(source)), value)


@pytest.mark.parametrize(
    "source,operator,value",
    [
        ("!5;", "!", 5),
        ("-15;", "-", 15),
        ("-5", "-", 5),
        ("!true;", "!", True),
        ("!false;", "!", False),
        ("-a", "-", "a"),
    ],
)
def test_prefix_expressions(parse_clean: ParseClean, source: str, operator: str, value: Any) -> None:
    expr = only_expression(parse_clean(source))
    assert isinstance(expr, PrefixExpression)
    assert expr.operator == operator
    assert_literal(expr.right, value)


def test_double_negation_nests(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("--5"))
    assert isinstance(expr, PrefixExpression) and expr.operator == "-"
    inner = expr.right
    assert isinstance(inner, PrefixExpression) and inner.operator == "-"
    assert_literal(inner.right, 5)
    assert str(expr) == "(-(-5))"


@pytest.mark.parametrize("operator", ["+", "-", "*", "/", ">", "<", "==", "!="])
def test_infix_expressions(parse_clean: ParseClean, operator: str) -> None:
    expr = only_expression(parse_clean(f"5 {operator} 6;"))
    assert isinstance(expr, InfixExpression)
    assert_literal(expr.left, 5)
    assert expr.operator == operator
    assert_literal(expr.right, 6)


def test_boolean_infix(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("true != false"))
    assert isinstance(expr, InfixExpression)
    assert_literal(expr.left, True)
    assert_literal(expr.right, False)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("-a * b", "((-a) * b)"),
        ("!-a", "(!(-a))"),
        ("a + b + c", "((a + b) + c)"),
        ("a + b - c", "((a + b) - c)"),
        ("a * b * c", "((a * b) * c)"),
        ("a * b / c", "((a * b) / c)"),
        ("a + b / c", "(a + (b / c))"),
        ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
        ("3 + 4; -5 * 5", "(3 + 4)((-5) * 5)"),
        ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
        ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
        ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
        ("true", "true"),
        ("3 > 5 == false", "((3 > 5) == false)"),
        ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
        ("(5 + 5) * 2", "((5 + 5) * 2)"),
        ("-(5 + 5)", "(-(5 + 5))"),
        ("!(true == true)", "(!(true == true))"),
        ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
        (
            "add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
            "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))",
        ),
        ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
    ],
)
def test_operator_precedence(parse_clean: ParseClean, source: str, expected: str) -> None:
    assert str(parse_clean(source)) == expected


def test_if_expression(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("if (x < y) { x }"))
    assert isinstance(expr, IfExpression)
    assert str(expr.condition) == "(x < y)"
    assert expr.consequence is not None
    assert len(expr.consequence.statements) == 1
    assert_literal(expr.consequence.statements[0].expression, "x")  # type: ignore[attr-defined]
    assert expr.alternative is None


def test_if_else_expression(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("if (x < y) { x } else { y; }"))
    assert isinstance(expr, IfExpression)
    assert expr.alternative is not None
    assert_literal(expr.alternative.statements[0].expression, "y")  # type: ignore[attr-defined]


def test_function_literal(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("fn(x, y) { x + y; }"))
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == ["x", "y"]
    assert expr.body is not None
    assert str(expr.body) == "(x + y)"


@pytest.mark.parametrize(
    "source,params",
    [("fn() {};", []), ("fn(x) {};", ["x"]), ("fn(x, y, z) {};", ["x", "y", "z"])],
)
def test_function_parameters(parse_clean: ParseClean, source: str, params: list[str]) -> None:
    expr = only_expression(parse_clean(source))
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == params


def test_call_expression(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("add(1, 2 * 3, 4 + 5);"))
    assert isinstance(expr, CallExpression)
    assert_literal(expr.function, "add")
    assert [str(a) for a in expr.arguments] == ["1", "(2 * 3)", "(4 + 5)"]


def test_let_with_function_value(parse_clean: ParseClean) -> None:
    program = parse_clean("let add = fn(a, b) { return a + b; };\nadd(1, 2)")
    assert str(program) == "let add = fn(a, b) return (a + b);;add(1, 2)"


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def test_missing_assign_records_unexpected_token() -> None:
    program, errors = parse("let x 5;")
    assert errors[0] == "expected next token to be =, got INT instead"
    assert all(not isinstance(s, LetStatement) for s in program.statements)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("let = 10;", "expected next token to be IDENT, got = instead"),
        ("let 838383;", "expected next token to be IDENT, got INT instead"),
        ("let x", "expected next token to be =, got EOF instead"),
        ("(1 + 2", "expected next token to be ), got EOF instead"),
        ("if x { 1 }", "expected next token to be (, got IDENT instead"),
        ("fn(x, 1) {}", "expected next token to be IDENT, got INT instead"),
        ("if (x) { 1", "expected next token to be }, got EOF instead"),
    ],
)
def test_unexpected_token_diagnostics(source: str, expected: str) -> None:
    _, errors = parse(source)
    assert expected in errors


@pytest.mark.parametrize(
    "source,expected",
    [
        ("let x = ;", "no prefix parse function for ; found"),
        ("+5", "no prefix parse function for + found"),
        ("@", "no prefix parse function for ILLEGAL found"),
        ("}", "no prefix parse function for } found"),
    ],
)
def test_no_prefix_parse_function(source: str, expected: str) -> None:
    _, errors = parse(source)
    assert expected in errors


def test_errors_accumulate_across_statements() -> None:
    program, errors = parse("let = 1; let y = 2; let 3;")
    assert len([e for e in errors if UNEXPECTED.fullmatch(e)]) == 2
    assert "let y = 2;" in [str(s) for s in program.statements]


def test_integer_overflow_is_diagnosed() -> None:
    program, errors = parse("9223372036854775808")
    assert errors == ['could not parse "9223372036854775808" as integer']
    assert program.statements == []


def test_largest_int64_is_accepted(parse_clean: ParseClean) -> None:
    assert_literal(only_expression(parse_clean("9223372036854775807")), 9223372036854775807)


def test_huge_digit_run_is_diagnosed_not_raised() -> None:
    digits = "9" * 5000
    _, errors = parse(digits)
    assert errors == [f'could not parse "{digits}" as integer']


def test_nesting_limit_is_a_diagnostic() -> None:
    source = "-" * 300 + "5"
    _, errors = parse(source)
    assert "expression nesting exceeds maximum depth of 128" in errors


def test_nesting_limit_is_configurable() -> None:
    _, errors = parse("((((1))))", max_depth=3)
    assert errors[0] == "expression nesting exceeds maximum depth of 3"
    _, errors = parse("((((1))))", max_depth=5)
    assert errors == []


@pytest.mark.parametrize(
    "source",
    ["1" + " + 1" * 3000, "f" + "()" * 3000, "a" + " * b - c" * 1500],
)
def test_long_operator_chains_hit_the_nesting_limit(source: str) -> None:
    program, errors = parse(source)
    assert "expression nesting exceeds maximum depth of 128" in errors
    # Whatever survived must render and serialize without recursing too deep
    assert isinstance(str(program), str)
    assert isinstance(json.dumps(program.to_dict()), str)
    assert all(s.height() <= 130 for s in program.statements)


def test_chain_at_the_nesting_limit_is_accepted(parse_clean: ParseClean) -> None:
    expr = only_expression(parse_clean("1" + " + 1" * 127))
    assert expr.height() == 128
    assert str(expr).startswith("(" * 127 + "1 + 1)")


def test_grouped_chains_share_one_height_budget() -> None:
    inner = "(" + "1" + " + 1" * 100 + ")"
    _, errors = parse(inner + " + 1" * 100)
    assert errors[0] == "expression nesting exceeds maximum depth of 128"


# ---------------------------------------------------------------------------
# Parser machinery
# ---------------------------------------------------------------------------


def test_parser_primes_two_tokens() -> None:
    parser = Parser(Lexer("let x"))
    assert parser.cur_token.type == TokenType.LET
    assert parser.peek_token.type == TokenType.IDENT


def test_expect_peek_does_not_advance_on_mismatch() -> None:
    parser = Parser(Lexer("let 5"))
    assert parser.expect_peek(TokenType.IDENT) is False
    assert parser.cur_token.type == TokenType.LET
    assert parser.errors == ["expected next token to be IDENT, got INT instead"]
    assert parser.expect_peek(TokenType.INT) is True
    assert parser.cur_token.literal == "5"


def test_parser_rejects_non_lexer() -> None:
    with pytest.raises(TypeError):
        Parser("let x = 5;")  # type: ignore[arg-type]


def test_register_prefix_is_per_instance() -> None:
    def parse_string_as_ident(p: Parser) -> Expression:
        return Identifier(p.cur_token, p.cur_token.literal.upper())

    custom = Parser(Lexer("@"))
    custom.register_prefix(TokenType.ILLEGAL, parse_string_as_ident)
    program = custom.parse_program()
    assert custom.errors == []
    assert str(program) == "@"

    plain = Parser(Lexer("@"))
    plain.parse_program()
    assert plain.errors == ["no prefix parse function for ILLEGAL found"]


def test_register_infix_is_per_instance() -> None:
    def parse_plus(p: Parser, left: Expression) -> Expression | None:
        tok = p.cur_token
        p.next_token()
        right = p.parse_expression(Precedence.SUM)
        if right is None:
            return None
        return InfixExpression(tok, left, "plus", right)

    custom = Parser(Lexer("1 + 2 * 3"))
    custom.register_infix(TokenType.PLUS, parse_plus)
    assert str(custom.parse_program()) == "(1 plus (2 * 3))"
    assert custom.errors == []

    assert str(Parser(Lexer("1 + 2")).parse_program()) == "(1 + 2)"


def test_mock_token_source() -> None:
    class MockLexer:
        def __init__(self) -> None:
            self.tokens = iter(
                [
                    Token(TokenType.MINUS, "-"),
                    Token(TokenType.INT, "7"),
                ]
            )

        def next_token(self) -> Token:
            return next(self.tokens, Token(TokenType.EOF, ""))

    parser = Parser(MockLexer())  # type: ignore[arg-type]
    assert str(parser.parse_program()) == "(-7)"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


@settings(max_examples=200)  # type: ignore[misc]
@given(st.text(alphabet="letrnfiuxy =+-!*/<>(){},;0123456789@\n", max_size=80))  # type: ignore[misc]
def test_parser_never_raises(text: str) -> None:
    program, errors = parse(text)
    assert isinstance(program, Program)
    assert all(isinstance(e, str) for e in errors)


@given(st.integers(min_value=0, max_value=2**63 - 1))  # type: ignore[misc]
def test_int64_range_round_trips(n: int) -> None:
    program, errors = parse(str(n))
    assert errors == []
    assert_literal(only_expression(program), n)


@given(st.integers(min_value=2**63, max_value=2**80))  # type: ignore[misc]
def test_out_of_range_integers_are_rejected(n: int) -> None:
    program, errors = parse(str(n))
    assert errors == [f'could not parse "{n}" as integer']
    assert program.statements == []


@pytest.mark.parametrize(
    "owner,name",
    [(Parser, n) for n in vars(Parser) if n.startswith(("parse_", "register_", "peek_", "cur_"))]
    + [(Lexer, n) for n in ("read_char", "peek_char", "at_end", "skip_whitespace", "read_identifier", "read_number")],
)
def test_helpers_are_documented(owner: type, name: str) -> None:
    assert (getattr(owner, name).__doc__ or "").strip()
