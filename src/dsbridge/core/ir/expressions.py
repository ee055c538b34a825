"""
Parsed form of rule and token expressions.

``compute`` strings on computed rules, ``expression`` conditions, and
``{compute: "..."}`` token directives all parse into these nodes. The
evaluator walks them against a scope holding the current ``value``, the
sibling inputs under ``props``, and token categories such as ``colors``.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class BinaryOp(StrEnum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    # == coerces numeric strings ("16" == 16); === never coerces
    EQ = "=="
    NE = "!="
    STRICT_EQ = "==="
    STRICT_NE = "!=="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    # and / or yield one of their operands, not a bool
    AND = "and"
    OR = "or"


class UnaryOp(StrEnum):
    NEG = "-"
    NOT = "not"


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Literal(_Node):
    value: int | float | str | bool | None


class FieldRef(_Node):
    """
    Dotted lookup into the scope.

    Segments are kept as text; numeric segments index lists and also match
    numeric mapping keys, so ``spacing.scale.4`` reaches the "4" step.
    """

    path: list[str] = Field(min_length=1)


class BinaryExpr(_Node):
    op: BinaryOp
    left: Expr
    right: Expr


class UnaryExpr(_Node):
    op: UnaryOp
    operand: Expr


class FuncCall(_Node):
    """Call to one of the evaluator's whitelisted functions (px, rem, concat, ...)."""

    name: str
    args: list[Expr] = Field(default_factory=list)


class InExpr(_Node):
    """``size in ["sm", "md"]``; membership uses == semantics."""

    value: Expr
    items: list[Expr]
    negated: bool = False


class IfExpr(_Node):
    """
    ``if a: x elif b: y else: z``.

    ``branches`` holds (condition, result) pairs in source order; the
    first truthy condition wins, otherwise ``otherwise`` is evaluated.
    """

    branches: list[tuple[Expr, Expr]] = Field(min_length=1)
    otherwise: Expr


Expr = Literal | FieldRef | BinaryExpr | UnaryExpr | FuncCall | InExpr | IfExpr

for _model in (BinaryExpr, UnaryExpr, FuncCall, InExpr, IfExpr):
    _model.model_rebuild()
