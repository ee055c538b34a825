"""
Expression evaluator for the rule expression language.

Evaluates expression AST nodes against a context (dict of names to values).
Pure evaluation, no I/O, no side effects. Does NOT use Python's eval();
this is a tree-walking interpreter over a closed set of node types and a
closed set of built-in functions.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from dsbridge.core.errors import ExpressionError
from dsbridge.core.ir.expressions import (
    BinaryExpr,
    BinaryOp,
    Expr,
    FieldRef,
    FuncCall,
    IfExpr,
    InExpr,
    Literal,
    UnaryExpr,
    UnaryOp,
)

_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


class ExpressionEvalError(ExpressionError):
    """Error during expression evaluation."""


def evaluate(expr: Expr, context: Mapping[str, Any]) -> Any:
    """Evaluate an expression against a context dict.

    Args:
        expr: Parsed expression AST.
        context: Names visible to the expression. Nested dicts are walked
            by dotted references.

    Returns:
        The computed value.

    Raises:
        ExpressionEvalError: If evaluation fails.
    """
    return _interpret(expr, context)


# =============================================================================
# Equality helpers (shared with the condition evaluator)
# =============================================================================


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float | None:
    """Coerce a number or numeric string to float; None if not numeric."""
    if is_number(value):
        return float(value)
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, str):
        try:
            return float(value.strip()) if value.strip() else 0.0
        except ValueError:
            return None
    return None


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion; 1 and 1.0 are equal, 1 and "1" are not."""
    if is_number(left) and is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return bool(left == right)


def loose_equals(left: Any, right: Any) -> bool:
    """Equality with numeric coercion between numbers, numeric strings and booleans."""
    if left is None or right is None:
        return left is None and right is None
    if strict_equals(left, right):
        return True
    if isinstance(left, (int, float, str)) and isinstance(right, (int, float, str)):
        if isinstance(left, str) and isinstance(right, str):
            return False
        a, b = to_number(left), to_number(right)
        return a is not None and b is not None and a == b
    return False


# =============================================================================
# Interpreter
# =============================================================================


def _interpret(expr: Expr, ctx: Mapping[str, Any]) -> Any:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, FieldRef):
        return _interpret_field_ref(expr, ctx)

    if isinstance(expr, BinaryExpr):
        return _interpret_binary(expr, ctx)

    if isinstance(expr, UnaryExpr):
        return _interpret_unary(expr, ctx)

    if isinstance(expr, FuncCall):
        return _interpret_func_call(expr, ctx)

    if isinstance(expr, InExpr):
        return _interpret_in(expr, ctx)

    if isinstance(expr, IfExpr):
        return _interpret_if(expr, ctx)

    raise ExpressionEvalError(f"Unknown expression type: {type(expr).__name__}")


def _interpret_field_ref(expr: FieldRef, ctx: Mapping[str, Any]) -> Any:
    """Resolve a reference against the context; missing segments yield None."""
    current: Any = ctx
    for segment in expr.path:
        if isinstance(current, Mapping):
            if segment in current:
                current = current[segment]
            elif segment.isdigit() and int(segment) in current:
                current = current[int(segment)]
            else:
                return None
        elif isinstance(current, (list, tuple)) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def _interpret_binary(expr: BinaryExpr, ctx: dict[str, Any]) -> Any:
    """Evaluate a binary expression."""
    # Short-circuit for logical operators
    if expr.op == BinaryOp.AND:
        left = _interpret(expr.left, ctx)
        if not left:
            return left
        return _interpret(expr.right, ctx)

    if expr.op == BinaryOp.OR:
        left = _interpret(expr.left, ctx)
        if left:
            return left
        return _interpret(expr.right, ctx)

    left = _interpret(expr.left, ctx)
    right = _interpret(expr.right, ctx)

    # Null-safe comparisons
    if expr.op == BinaryOp.EQ:
        return loose_equals(left, right)
    if expr.op == BinaryOp.NE:
        return not loose_equals(left, right)
    if expr.op == BinaryOp.STRICT_EQ:
        return strict_equals(left, right)
    if expr.op == BinaryOp.STRICT_NE:
        return not strict_equals(left, right)

    if expr.op in (BinaryOp.LT, BinaryOp.GT, BinaryOp.LE, BinaryOp.GE):
        return _compare(expr.op, left, right)

    # String concatenation
    if expr.op == BinaryOp.ADD and (isinstance(left, str) or isinstance(right, str)):
        return _to_text(left) + _to_text(right)

    # Null propagation for arithmetic
    if left is None or right is None:
        return None

    if not (is_number(left) and is_number(right)):
        raise ExpressionEvalError(
            f"Unsupported operands for {expr.op.value}: "
            f"{type(left).__name__} and {type(right).__name__}"
        )

    if expr.op == BinaryOp.ADD:
        return left + right
    if expr.op == BinaryOp.SUB:
        return left - right
    if expr.op == BinaryOp.MUL:
        return left * right
    if expr.op == BinaryOp.DIV:
        if right == 0:
            raise ExpressionEvalError("Division by zero")
        return left / right
    if expr.op == BinaryOp.MOD:
        if right == 0:
            raise ExpressionEvalError("Modulo by zero")
        return left % right

    raise ExpressionEvalError(f"Unknown binary op: {expr.op}")


def _compare(op: BinaryOp, left: Any, right: Any) -> bool:
    """Ordering comparison; incomparable operands are never ordered."""
    if left is None or right is None:
        return False
    if is_number(left) != is_number(right):
        a, b = to_number(left), to_number(right)
        if a is None or b is None:
            return False
        left, right = a, b
    try:
        if op == BinaryOp.LT:
            return bool(left < right)
        if op == BinaryOp.GT:
            return bool(left > right)
        if op == BinaryOp.LE:
            return bool(left <= right)
        return bool(left >= right)
    except TypeError:
        return False


def _interpret_unary(expr: UnaryExpr, ctx: dict[str, Any]) -> Any:
    """Evaluate a unary expression."""
    val = _interpret(expr.operand, ctx)
    if expr.op == UnaryOp.NOT:
        return not val
    if expr.op == UnaryOp.NEG:
        if val is None:
            return None
        if not is_number(val):
            raise ExpressionEvalError(f"Cannot negate {type(val).__name__}")
        return -val
    raise ExpressionEvalError(f"Unknown unary op: {expr.op}")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_number(value: Any) -> int | float | None:
    """Leading number of a value: 16 -> 16, "1.5rem" -> 1.5, "abc" -> None."""
    if is_number(value):
        return value
    if isinstance(value, str):
        m = _LEADING_NUMBER.match(value)
        if m:
            number = float(m.group(1))
            return int(number) if number.is_integer() else number
    return None


def _unit(suffix: str) -> Callable[[Any], str | None]:
    def fmt(value: Any) -> str | None:
        number = _parse_number(value)
        if number is None:
            return None
        return f"{_to_text(round(number, 4))}{suffix}"

    return fmt


def _min(*vals: Any) -> Any:
    present = [v for v in vals if v is not None]
    return min(present) if present else None


def _max(*vals: Any) -> Any:
    present = [v for v in vals if v is not None]
    return max(present) if present else None


def _coalesce(*vals: Any) -> Any:
    for val in vals:
        if val is not None:
            return val
    return None


def _null_safe(fn: Callable[..., Any]) -> Callable[..., Any]:
    def wrapper(*args: Any) -> Any:
        if args and args[0] is None:
            return None
        return fn(*args)

    return wrapper


# name -> (min args, max args or None for variadic, implementation)
_FUNCTIONS: dict[str, tuple[int, int | None, Callable[..., Any]]] = {
    "concat": (0, None, lambda *parts: "".join(_to_text(p) for p in parts)),
    "len": (1, 1, lambda val: 0 if val is None else len(val)),
    "abs": (1, 1, _null_safe(abs)),
    "min": (1, None, _min),
    "max": (1, None, _max),
    "round": (1, 2, _null_safe(lambda val, nd=0: round(val, int(nd)))),
    "floor": (1, 1, _null_safe(math.floor)),
    "ceil": (1, 1, _null_safe(math.ceil)),
    "coalesce": (0, None, _coalesce),
    "upper": (1, 1, _null_safe(lambda s: _to_text(s).upper())),
    "lower": (1, 1, _null_safe(lambda s: _to_text(s).lower())),
    "capitalize": (1, 1, _null_safe(lambda s: _to_text(s)[:1].upper() + _to_text(s)[1:])),
    "trim": (1, 1, _null_safe(lambda s: _to_text(s).strip())),
    "str": (1, 1, _to_text),
    "num": (1, 1, _parse_number),
    "px": (1, 1, _unit("px")),
    "rem": (1, 1, _unit("rem")),
    "em": (1, 1, _unit("em")),
    "starts_with": (2, 2, lambda s, p: isinstance(s, str) and s.startswith(_to_text(p))),
    "ends_with": (2, 2, lambda s, p: isinstance(s, str) and s.endswith(_to_text(p))),
    "contains": (2, 2, lambda s, p: s is not None and p in s),
    "replace": (
        3,
        3,
        _null_safe(lambda s, old, new: _to_text(s).replace(_to_text(old), _to_text(new))),
    ),
    "join": (1, 2, lambda items, sep=",": _to_text(sep).join(_to_text(i) for i in items or [])),
    "split": (1, 2, lambda s, sep=",": [] if s is None else _to_text(s).split(_to_text(sep))),
}


def _interpret_func_call(expr: FuncCall, ctx: dict[str, Any]) -> Any:
    """Evaluate a built-in function call (closed set, no user-defined functions)."""
    # Synthetic list function from parser
    if expr.name == "__list__":
        return [_interpret(a, ctx) for a in expr.args]

    entry = _FUNCTIONS.get(expr.name)
    if entry is None:
        raise ExpressionEvalError(f"Unknown function: {expr.name}()")

    min_args, max_args, fn = entry
    count = len(expr.args)
    if count < min_args or (max_args is not None and count > max_args):
        expected = str(min_args) if min_args == max_args else f"{min_args}-{max_args or 'n'}"
        raise ExpressionEvalError(f"{expr.name}() takes {expected} argument(s), got {count}")

    args = [_interpret(a, ctx) for a in expr.args]
    try:
        return fn(*args)
    except (TypeError, ValueError) as e:
        raise ExpressionEvalError(f"{expr.name}() failed: {e}") from e


def _interpret_in(expr: InExpr, ctx: dict[str, Any]) -> bool:
    """Evaluate an 'in' / 'not in' expression."""
    val = _interpret(expr.value, ctx)
    items = [_interpret(item, ctx) for item in expr.items]
    result = any(loose_equals(val, item) for item in items)
    return not result if expr.negated else result


def _interpret_if(expr: IfExpr, ctx: dict[str, Any]) -> Any:
    """Evaluate an if/elif/else expression."""
    for cond, val in expr.branches:
        if _interpret(cond, ctx):
            return _interpret(val, ctx)
    return _interpret(expr.otherwise, ctx)
