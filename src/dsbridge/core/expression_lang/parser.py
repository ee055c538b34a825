"""
Recursive descent parser for the rule expression language.

Grammar (precedence low to high):
    expr        → if_expr | or_expr
    if_expr     → "if" or_expr ":" or_expr ("elif" or_expr ":" or_expr)* "else" ":" or_expr
    or_expr     → and_expr (("or" | "||") and_expr)*
    and_expr    → not_expr (("and" | "&&") not_expr)*
    not_expr    → ("not" | "!") not_expr | comparison
    comparison  → addition (comp_op addition)?
                | addition ("in" | "not" "in") list_literal
                | addition ("is" "not"? "null")
    addition    → multiply (("+"|"-") multiply)*
    multiply    → unary (("*"|"/"|"%") unary)*
    unary       → "-" unary | primary
    primary     → literal | func_call | ref | "(" expr ")" | list_literal
    literal     → INT | FLOAT | STRING | "true" | "false" | "null"
    func_call   → IDENT "(" (expr ("," expr)*)? ")"
    ref         → IDENT ("." segment | "[" (STRING | INT) "]")*
    segment     → IDENT | INT IDENT?
    list_literal → "[" (expr ("," expr)*)? "]"
"""

from __future__ import annotations

from dsbridge.core.errors import ExpressionError
from dsbridge.core.expression_lang.tokenizer import (
    ExpressionTokenError,
    Token,
    TokenKind,
    tokenize,
)
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

_COMPARISON_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.EQ: BinaryOp.EQ,
    TokenKind.NE: BinaryOp.NE,
    TokenKind.STRICT_EQ: BinaryOp.STRICT_EQ,
    TokenKind.STRICT_NE: BinaryOp.STRICT_NE,
    TokenKind.LT: BinaryOp.LT,
    TokenKind.GT: BinaryOp.GT,
    TokenKind.LE: BinaryOp.LE,
    TokenKind.GE: BinaryOp.GE,
}


class ExpressionParseError(ExpressionError):
    """Error during expression parsing."""


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise ExpressionParseError(
                f"Expected {kind}, got {tok.kind} ({tok.value!r})",
                tok.pos,
            )
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def parse_expr(self) -> Expr:
        """Top-level: if_expr or or_expr."""
        if self.current.kind == TokenKind.IF:
            return self.parse_if_expr()
        return self.parse_or_expr()

    def parse_if_expr(self) -> IfExpr:
        """if cond: val (elif cond: val)* else: val"""
        self.expect(TokenKind.IF)
        condition = self.parse_or_expr()
        self.expect(TokenKind.COLON)
        branches: list[tuple[Expr, Expr]] = [(condition, self.parse_or_expr())]

        while self.match(TokenKind.ELIF):
            elif_cond = self.parse_or_expr()
            self.expect(TokenKind.COLON)
            branches.append((elif_cond, self.parse_or_expr()))

        self.expect(TokenKind.ELSE)
        self.expect(TokenKind.COLON)
        return IfExpr(branches=branches, otherwise=self.parse_or_expr())

    def parse_or_expr(self) -> Expr:
        left = self.parse_and_expr()
        while self.match(TokenKind.OR):
            right = self.parse_and_expr()
            left = BinaryExpr(op=BinaryOp.OR, left=left, right=right)
        return left

    def parse_and_expr(self) -> Expr:
        left = self.parse_not_expr()
        while self.match(TokenKind.AND):
            right = self.parse_not_expr()
            left = BinaryExpr(op=BinaryOp.AND, left=left, right=right)
        return left

    def parse_not_expr(self) -> Expr:
        if self.current.kind == TokenKind.NOT and self.peek(1).kind != TokenKind.IN:
            self.advance()
            operand = self.parse_not_expr()
            return UnaryExpr(op=UnaryOp.NOT, operand=operand)
        return self.parse_comparison()

    def parse_comparison(self) -> Expr:
        """addition (comp_op addition | 'in'/'not in' list | 'is' ['not'] 'null')?"""
        left = self.parse_addition()

        if self.current.kind == TokenKind.IS:
            self.advance()
            negated = bool(self.match(TokenKind.NOT))
            self.expect(TokenKind.NULL)
            return BinaryExpr(
                op=BinaryOp.NE if negated else BinaryOp.EQ,
                left=left,
                right=Literal(value=None),
            )

        if self.current.kind == TokenKind.IN:
            self.advance()
            items = self._parse_list_items()
            return InExpr(value=left, items=items, negated=False)
        if self.current.kind == TokenKind.NOT and self.peek(1).kind == TokenKind.IN:
            self.advance()  # not
            self.advance()  # in
            items = self._parse_list_items()
            return InExpr(value=left, items=items, negated=True)

        if self.current.kind in _COMPARISON_OPS:
            op = _COMPARISON_OPS[self.advance().kind]
            right = self.parse_addition()
            return BinaryExpr(op=op, left=left, right=right)

        return left

    def parse_addition(self) -> Expr:
        left = self.parse_multiply()
        while self.current.kind in (TokenKind.PLUS, TokenKind.MINUS):
            op = BinaryOp.ADD if self.current.kind == TokenKind.PLUS else BinaryOp.SUB
            self.advance()
            right = self.parse_multiply()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_multiply(self) -> Expr:
        left = self.parse_unary()
        while self.current.kind in (TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT):
            if self.current.kind == TokenKind.STAR:
                op = BinaryOp.MUL
            elif self.current.kind == TokenKind.SLASH:
                op = BinaryOp.DIV
            else:
                op = BinaryOp.MOD
            self.advance()
            right = self.parse_unary()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_unary(self) -> Expr:
        if self.match(TokenKind.MINUS):
            operand = self.parse_unary()
            return UnaryExpr(op=UnaryOp.NEG, operand=operand)
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        tok = self.current

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expr()
            self.expect(TokenKind.RPAREN)
            return expr

        if tok.kind == TokenKind.LBRACKET:
            return FuncCall(name="__list__", args=self._parse_list_items())

        if tok.kind == TokenKind.INT:
            self.advance()
            return Literal(value=int(tok.value))
        if tok.kind == TokenKind.FLOAT:
            self.advance()
            return Literal(value=float(tok.value))
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Literal(value=tok.value)
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return Literal(value=True)
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return Literal(value=False)
        if tok.kind == TokenKind.NULL:
            self.advance()
            return Literal(value=None)

        if tok.kind == TokenKind.IDENT:
            if self.peek(1).kind == TokenKind.LPAREN:
                return self._parse_func_call()
            return self._parse_ref()

        raise ExpressionParseError(
            f"Unexpected token: {tok.kind} ({tok.value!r})",
            tok.pos,
        )

    def _parse_func_call(self) -> FuncCall:
        name_tok = self.expect(TokenKind.IDENT)
        self.expect(TokenKind.LPAREN)

        args: list[Expr] = []
        if self.current.kind != TokenKind.RPAREN:
            args.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                args.append(self.parse_expr())

        self.expect(TokenKind.RPAREN)
        return FuncCall(name=name_tok.value, args=args)

    def _parse_ref(self) -> FieldRef:
        """IDENT ('.' segment | '[' key ']')*, with a leading '$' stripped."""
        first = self.expect(TokenKind.IDENT)
        path = [first.value.lstrip("$")]

        while self.current.kind in (TokenKind.DOT, TokenKind.LBRACKET):
            if self.match(TokenKind.LBRACKET):
                key = self.match(TokenKind.STRING, TokenKind.INT)
                if key is None:
                    raise ExpressionParseError(
                        f"Expected string or integer key, got {self.current.value!r}",
                        self.current.pos,
                    )
                self.expect(TokenKind.RBRACKET)
                path.append(key.value)
                continue

            self.advance()  # .
            tok = self.current
            if tok.kind == TokenKind.INT:
                self.advance()
                segment = tok.value
                # "2xl" arrives as INT "2" directly followed by IDENT "xl"
                if self.current.kind == TokenKind.IDENT and self.current.pos == tok.end:
                    segment += self.advance().value
                path.append(segment)
            elif tok.kind == TokenKind.EOF:
                raise ExpressionParseError("Expected path segment after '.'", tok.pos)
            else:
                # keywords are valid path segments (e.g. theme.null)
                path.append(self.advance().value)

        return FieldRef(path=path)

    def _parse_list_items(self) -> list[Expr]:
        """'[' (expr (',' expr)*)? ']'"""
        self.expect(TokenKind.LBRACKET)
        items: list[Expr] = []
        if self.current.kind != TokenKind.RBRACKET:
            items.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                items.append(self.parse_expr())
        self.expect(TokenKind.RBRACKET)
        return items


def parse_expr(source: str) -> Expr:
    """Parse an expression string into an AST.

    Args:
        source: Expression string (e.g., 'size === "lg" && !disabled')

    Returns:
        Parsed expression AST.

    Raises:
        ExpressionParseError: If the expression is invalid.
    """
    try:
        tokens = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(e.message, e.pos) from e

    parser = _Parser(tokens)
    expr = parser.parse_expr()

    if parser.current.kind != TokenKind.EOF:
        raise ExpressionParseError(
            f"Unexpected token after expression: {parser.current.value!r}",
            parser.current.pos,
        )

    return expr
