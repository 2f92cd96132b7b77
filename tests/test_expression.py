"""
Tests for the quantity expression tokenizer, parser and evaluator.
"""

from decimal import Decimal

import pytest

from takeoff_rules.errors import ErrorKind, ExpressionEvaluationError
from takeoff_rules.expression import (
    MAX_DEPTH,
    BinOp,
    Literal,
    VarRef,
    evaluate,
    parse,
    referenced_names,
    tokenize,
)


def test_basic_evaluation():
    assert evaluate("length * 0.75", {"length": 10}) == 7.5


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("2 + 3 * 4", 14),
        ("(2 + 3) * 4", 20),
        ("10 - 4 - 3", 3),
        ("12 / 3 / 2", 2),
        (".5 * 4", 2),
        ("3.", 3),
        ("((length))", 10),
    ],
)
def test_precedence_and_associativity(expression, expected):
    assert evaluate(expression, {"length": 10}) == expected


def test_decimal_literals_are_exact():
    """Test decimal arithmetic gives the value the expression reads as."""
    assert evaluate("100*(1+0.07)", {}) == 107.0
    assert evaluate("length*(1+waste_pct)", {"length": 100, "waste_pct": 0.07}) == 107.0
    assert evaluate("length * 3", {"length": 0.1}) == 0.3


def test_division_by_zero():
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("length / 0", {"length": 10})
    assert exc_info.value.kind == ErrorKind.DIVISION_BY_ZERO
    assert str(exc_info.value) == "division_by_zero: division by zero in 'length / 0'"

    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("length / (w - w)", {"length": 10, "w": 0.5})
    assert exc_info.value.kind == ErrorKind.DIVISION_BY_ZERO


def test_unknown_variable():
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("length * perimeter", {"length": 10})
    assert exc_info.value.kind == ErrorKind.UNKNOWN_VARIABLE
    assert "perimeter" in exc_info.value.detail
    assert exc_info.value.expression == "length * perimeter"


@pytest.mark.parametrize("value", ["abc", True, None])
def test_non_numeric_variable(value):
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("length * 2", {"length": value})
    assert exc_info.value.kind == ErrorKind.UNKNOWN_VARIABLE


@pytest.mark.parametrize(
    "expression",
    [
        "",
        "   ",
        "length *",
        "(length",
        "length )",
        "2 ** 3",
        "-",
        "length - -",
        "+1",
        "length; import os",
        "__import__('os')",
        "length.real",
    ],
)
def test_parse_errors(expression):
    """Test anything outside the grammar is a parse error, never executed."""
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate(expression, {"length": 10})
    assert exc_info.value.kind == ErrorKind.PARSE_ERROR


def test_parse_error_position():
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        parse("length + ")
    assert exc_info.value.detail == "unexpected end of expression"
    assert exc_info.value.position == 9

    with pytest.raises(ExpressionEvaluationError) as exc_info:
        tokenize("length % 2")
    assert exc_info.value.position == 7


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("-1", -1),
        ("-length", -10),
        ("--length", 10),
        ("length - -2", 12),
        ("length * -0.5 + 20", 15),
        ("-(2 + 3) * 2", -10),
        ("-length / 4", -2.5),
    ],
)
def test_unary_minus(expression, expected):
    assert evaluate(expression, {"length": 10}) == expected


def test_unary_minus_tree():
    """Test negation is expressed with the binary node types."""
    assert parse("-a") == BinOp("-", Literal(Decimal(0)), VarRef("a"))
    assert parse("-a * b") == BinOp("*", BinOp("-", Literal(Decimal(0)), VarRef("a")), VarRef("b"))


def test_long_operator_chain():
    """Test chain length is not limited by the interpreter stack."""
    assert evaluate("+".join(["1"] * 5000), {}) == 5000
    assert evaluate(" - ".join(["length"] * 3000), {"length": 10}) == -29980
    assert referenced_names(parse(" * ".join(["a", "b"] * 2500))) == {"a", "b"}


def test_nesting_limit():
    nested = "(" * MAX_DEPTH + "length" + ")" * MAX_DEPTH
    assert evaluate(nested, {"length": 10}) == 10

    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("(" * 2000 + "1" + ")" * 2000, {})
    assert exc_info.value.kind == ErrorKind.PARSE_ERROR
    assert "too deeply nested" in exc_info.value.detail
    assert exc_info.value.position == MAX_DEPTH


def test_result_out_of_range():
    """Test a result beyond the float range is an error, never infinity."""
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("1" + "0" * 400, {})
    assert exc_info.value.kind == ErrorKind.OVERFLOW
    assert exc_info.value.to_dict()["kind"] == "overflow"

    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("-length * 1" + "0" * 400, {"length": 10})
    assert exc_info.value.kind == ErrorKind.OVERFLOW


def test_tokenize():
    tokens = tokenize("length * (1 + waste_pct)")
    assert [t.kind for t in tokens] == [
        "IDENT", "OP", "LPAREN", "NUMBER", "OP", "IDENT", "RPAREN", "END",
    ]
    assert tokens[0].text == "length"
    assert tokens[2].pos == 9


def test_parse_tree():
    assert parse("a + b * 2") == BinOp(
        "+", VarRef("a"), BinOp("*", VarRef("b"), Literal(Decimal("2")))
    )
    assert parse("8 - 2 - 1") == BinOp(
        "-", BinOp("-", Literal(Decimal("8")), Literal(Decimal("2"))), Literal(Decimal("1"))
    )


def test_referenced_names():
    assert referenced_names(parse("length * height_ft * 2 / 32")) == {"length", "height_ft"}
    assert referenced_names(parse("4")) == frozenset()


def test_error_to_dict_with_context():
    with pytest.raises(ExpressionEvaluationError) as exc_info:
        evaluate("count / 0", {"count": 3})
    error = exc_info.value.attach(sku="LED-2X4-40W", rule_id="rule_abc", feature_id="x1")
    assert error.to_dict() == {
        "kind": "division_by_zero",
        "expression": "count / 0",
        "detail": "division by zero",
        "position": None,
        "sku": "LED-2X4-40W",
        "rule_id": "rule_abc",
        "feature_id": "x1",
    }
