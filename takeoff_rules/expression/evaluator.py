"""
Expression evaluation over parsed trees.

Arithmetic runs on Decimal with a fixed 28-digit context, so decimal
literals behave the way they read (`100 * (1 + 0.07)` is exactly 107)
and results do not depend on the caller's decimal context. Floats from the
environment enter through their shortest repr.

Trees are walked with an explicit stack; a left-deep chain such as
`a + a + ... + a` is as deep as it is long.
"""

import math
from decimal import Context, Decimal, InvalidOperation, Overflow
from typing import Any, List, Mapping, Tuple

from ..errors import ErrorKind, ExpressionEvaluationError
from ..models import is_number
from .parser import BinOp, Literal, Node, VarRef, parse

_CONTEXT = Context(prec=28)


def to_decimal(value: Any) -> Decimal:
    """Convert an environment value to Decimal. Raises ValueError if not numeric."""
    if isinstance(value, Decimal):
        return value
    if is_number(value):
        return Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    raise ValueError(f"not a number: {value!r}")


def _lookup(node: VarRef, env: Mapping[str, Any], expression: str) -> Decimal:
    if node.name not in env:
        raise ExpressionEvaluationError(
            ErrorKind.UNKNOWN_VARIABLE, expression, f"unknown variable '{node.name}'"
        )
    try:
        return to_decimal(env[node.name])
    except ValueError:
        raise ExpressionEvaluationError(
            ErrorKind.UNKNOWN_VARIABLE,
            expression,
            f"variable '{node.name}' is not numeric ({env[node.name]!r})",
        ) from None


def _apply(op: str, left: Decimal, right: Decimal, expression: str) -> Decimal:
    try:
        if op == "+":
            return _CONTEXT.add(left, right)
        if op == "-":
            return _CONTEXT.subtract(left, right)
        if op == "*":
            return _CONTEXT.multiply(left, right)
        if op == "/":
            if right == 0:
                raise ExpressionEvaluationError(ErrorKind.DIVISION_BY_ZERO, expression, "division by zero")
            return _CONTEXT.divide(left, right)
    except (Overflow, InvalidOperation) as e:
        raise ExpressionEvaluationError(
            ErrorKind.OVERFLOW, expression, f"result out of range ({type(e).__name__})"
        ) from None
    raise ValueError(f"Unknown operator: {op}")


def evaluate_tree(node: Node, env: Mapping[str, Any], expression: str = "") -> Decimal:
    """Evaluate a parsed tree, left operand before right."""
    values: List[Decimal] = []
    stack: List[Tuple[Node, bool]] = [(node, False)]

    while stack:
        node, operands_done = stack.pop()

        if isinstance(node, Literal):
            values.append(node.value)
        elif isinstance(node, VarRef):
            values.append(_lookup(node, env, expression))
        elif isinstance(node, BinOp):
            if operands_done:
                right = values.pop()
                left = values.pop()
                values.append(_apply(node.op, left, right, expression))
            else:
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
        else:
            raise TypeError(f"Unknown expression node: {type(node).__name__}")

    return values[0]


def evaluate(expression: str, env: Mapping[str, Any]) -> float:
    """
    Evaluate a quantity expression against a value environment.

    Args:
        expression: e.g. "length * (1 + waste_pct)"
        env: name -> number mapping

    Returns:
        Result as a finite float

    Raises:
        ExpressionEvaluationError: UNKNOWN_VARIABLE, DIVISION_BY_ZERO,
            PARSE_ERROR, or OVERFLOW when the result does not fit a float
    """
    tree = parse(expression)
    result = float(evaluate_tree(tree, env, expression))
    if not math.isfinite(result):
        raise ExpressionEvaluationError(ErrorKind.OVERFLOW, expression, "result out of range")
    return result
