"""
Rule expression language.

Tokenizer, parser, and evaluator for the small expression language used by
computed rules, expression conditions, and computed design tokens.

Usage:
    from dsbridge.core.expression_lang import compile_expr, evaluate

    expr = compile_expr('size === "lg" && !disabled')
    result = evaluate(expr, {"size": "lg", "disabled": False})
    # result == True
"""

from functools import lru_cache

from dsbridge.core.expression_lang.evaluator import ExpressionEvalError, evaluate
from dsbridge.core.expression_lang.parser import ExpressionParseError, parse_expr
from dsbridge.core.ir.expressions import Expr


@lru_cache(maxsize=512)
def compile_expr(source: str) -> Expr:
    """Parse an expression string, reusing the AST for repeated sources."""
    return parse_expr(source)


__all__ = [
    "ExpressionEvalError",
    "ExpressionParseError",
    "compile_expr",
    "evaluate",
    "parse_expr",
]
