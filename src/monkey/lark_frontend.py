"""
Lark reference parser for Monkey.

The Pratt parser in parser.py is the production path; this grammar-driven
Earley parser exists to check it. Both produce the same AST dataclasses, so
their canonical renderings can be compared directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

from lark import Lark, Token as LarkToken, Transformer, v_args
from lark.exceptions import VisitError

from .parser import INT64_MAX, ParseError
from .token_types import TT, Token
from .tree import (
    ArrayLiteral,
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
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
    Program,
    ReturnStatement,
    StringLiteral,
)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

# Lark terminal name -> Monkey token type
_TERMINALS = {
    'IDENT': TT.IDENT,
    'INT': TT.INT,
    'STRING': TT.STRING,
    'LET': TT.LET,
    'RETURN': TT.RETURN,
    'TRUE': TT.TRUE,
    'FALSE': TT.FALSE,
    'IF': TT.IF,
    'ELSE': TT.ELSE,
    'FN': TT.FUNCTION,
    'EQ': TT.EQ,
    'NOT_EQ': TT.NOT_EQ,
    'LT': TT.LT,
    'GT': TT.GT,
    'PLUS': TT.PLUS,
    'MINUS': TT.MINUS,
    'ASTERISK': TT.ASTERISK,
    'SLASH': TT.SLASH,
    'BANG': TT.BANG,
    'LPAREN': TT.LPAREN,
    'LBRACKET': TT.LBRACKET,
    'LBRACE': TT.LBRACE,
}

_PARSER: Optional[Lark] = None

def build_parser(grammar_path: Optional[Path]=None) -> Lark:
    path = grammar_path or GRAMMAR_PATH
    return Lark(
        path.read_text(encoding="utf-8"),
        parser="earley",
        lexer="basic",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
    )

def get_parser() -> Lark:
    """Build the Earley parser once per process."""
    global _PARSER

    if _PARSER is None:
        _PARSER = build_parser()

    return _PARSER

def convert_token(tok: LarkToken) -> Token:
    literal = str(tok.value)

    if tok.type == 'STRING':
        literal = literal[1:-1]

    return Token(_TERMINALS[tok.type], literal, tok.line or 0, tok.column or 0)

def _leading_token(expr: Expression) -> Token:
    """First source token of an expression (infix nodes carry their operator)."""
    if isinstance(expr, (InfixExpression, IndexExpression)):
        return _leading_token(expr.left)

    if isinstance(expr, CallExpression):
        return _leading_token(expr.function)

    return expr.token

@v_args(inline=True)
class AstBuilder(Transformer):
    """Turn the Lark parse tree into monkey.tree nodes."""

    # ---------------- statements ----------------

    def start(self, *statements: Any) -> Program:
        return Program(tuple(statements))

    def let_stmt(self, let_tok: LarkToken, name: LarkToken, value: Expression) -> LetStatement:
        ident = convert_token(name)
        return LetStatement(convert_token(let_tok), Identifier(ident, ident.literal), value)

    def return_stmt(self, return_tok: LarkToken, value: Expression) -> ReturnStatement:
        return ReturnStatement(convert_token(return_tok), value)

    def expr_stmt(self, expr: Expression) -> ExpressionStatement:
        return ExpressionStatement(_leading_token(expr), expr)

    def block(self, lbrace: LarkToken, *statements: Any) -> BlockStatement:
        return BlockStatement(convert_token(lbrace), tuple(statements))

    # ---------------- operators ----------------

    def infix(self, left: Expression, op: LarkToken, right: Expression) -> InfixExpression:
        return InfixExpression(convert_token(op), left, str(op), right)

    def prefix(self, op: LarkToken, right: Expression) -> PrefixExpression:
        return PrefixExpression(convert_token(op), str(op), right)

    def call(self, function: Expression, lparen: LarkToken, args: Tuple[Expression, ...]=()) -> CallExpression:
        return CallExpression(convert_token(lparen), function, args)

    def index(self, left: Expression, lbracket: LarkToken, index: Expression) -> IndexExpression:
        return IndexExpression(convert_token(lbracket), left, index)

    def arguments(self, *exprs: Expression) -> Tuple[Expression, ...]:
        return tuple(exprs)

    def group(self, _lparen: LarkToken, expr: Expression) -> Expression:
        return expr

    # ---------------- literals ----------------

    def integer(self, tok: LarkToken) -> IntegerLiteral:
        converted = convert_token(tok)
        value = int(converted.literal)

        if value > INT64_MAX:
            raise ParseError(f"could not parse {converted.literal} as integer", converted)

        return IntegerLiteral(converted, value)

    def string(self, tok: LarkToken) -> StringLiteral:
        converted = convert_token(tok)
        return StringLiteral(converted, converted.literal)

    def true(self, tok: LarkToken) -> Boolean:
        return Boolean(convert_token(tok), True)

    def false(self, tok: LarkToken) -> Boolean:
        return Boolean(convert_token(tok), False)

    def identifier(self, tok: LarkToken) -> Identifier:
        converted = convert_token(tok)
        return Identifier(converted, converted.literal)

    def if_expr(self, if_tok: LarkToken, _lparen: LarkToken, condition: Expression, consequence: BlockStatement,
                _else_tok: Optional[LarkToken]=None, alternative: Optional[BlockStatement]=None) -> IfExpression:
        return IfExpression(convert_token(if_tok), condition, consequence, alternative)

    def function(self, fn_tok: LarkToken, _lparen: LarkToken, *rest: Any) -> FunctionLiteral:
        if len(rest) == 2:
            params, body = rest
        else:
            params, body = (), rest[0]

        return FunctionLiteral(convert_token(fn_tok), params, body)

    def params(self, *idents: LarkToken) -> Tuple[Identifier, ...]:
        out = []

        for tok in idents:
            converted = convert_token(tok)
            out.append(Identifier(converted, converted.literal))

        return tuple(out)

    def array(self, lbracket: LarkToken, elements: Tuple[Expression, ...]=()) -> ArrayLiteral:
        return ArrayLiteral(convert_token(lbracket), elements)

    def hash(self, lbrace: LarkToken, *pairs: Tuple[Expression, Expression]) -> HashLiteral:
        return HashLiteral(convert_token(lbrace), tuple(pairs))

    def pair(self, key: Expression, value: Expression) -> Tuple[Expression, Expression]:
        return (key, value)

def parse_with_lark(source: str) -> Program:
    """
    Parse Monkey source with the reference grammar.

    Raises lark.exceptions.UnexpectedInput on syntax errors and ParseError for
    integer literals that do not fit in 64 bits.
    """
    tree = get_parser().parse(source)

    try:
        return AstBuilder().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ParseError):
            raise exc.orig_exc from None
        raise
