"""AST node classes shared by the Pratt parser, the Lark frontend and the evaluator.

Nodes are frozen dataclasses: once a program is parsed nothing rewrites it.
`str(node)` renders canonical source text that lexes and parses back into a
tree with the same rendering.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator, Optional, Tuple, Union
from typing_extensions import TypeAlias

from .token_types import Token


class Node:
    """Mixin with the helpers every AST node shares."""
    __slots__ = ()

    def token_literal(self) -> str:
        return self.token.literal  # type: ignore[attr-defined]

    def pretty(self, indent: str = '  ') -> str:
        """Return pretty-printed tree representation."""
        def _pretty(node: object, level: int = 0) -> str:
            pad = indent * level
            if not isinstance(node, Node):
                return f'{pad}{node!r}\n'

            lines = [f'{pad}{type(node).__name__}\n']
            for f in fields(node):  # type: ignore[arg-type]
                if f.name == 'token':
                    continue
                value = getattr(node, f.name)
                if value is None:
                    continue
                if isinstance(value, Node):
                    lines.append(_pretty(value, level + 1))
                elif isinstance(value, tuple):
                    for item in _flatten(value):
                        lines.append(_pretty(item, level + 1))
                else:
                    lines.append(f'{pad}{indent}{f.name}\t{value!r}\n')
            return ''.join(lines)
        return _pretty(self)


def _flatten(items: tuple) -> Iterator[object]:
    for item in items:
        if isinstance(item, tuple):
            yield from _flatten(item)
        else:
            yield item


# ---------- Statements ----------

@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ''

    def __str__(self) -> str:
        return '; '.join(str(s) for s in self.statements)

@dataclass(frozen=True)
class LetStatement(Node):
    token: Token
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f'{self.token_literal()} {self.name} = {self.value}'

@dataclass(frozen=True)
class ReturnStatement(Node):
    token: Token
    return_value: Expression

    def __str__(self) -> str:
        return f'{self.token_literal()} {self.return_value}'

@dataclass(frozen=True)
class ExpressionStatement(Node):
    token: Token
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)

@dataclass(frozen=True)
class BlockStatement(Node):
    token: Token
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        if not self.statements:
            return '{ }'
        return '{ ' + '; '.join(str(s) for s in self.statements) + ' }'


# ---------- Expressions ----------

@dataclass(frozen=True)
class Identifier(Node):
    token: Token
    value: str

    def __str__(self) -> str:
        return self.value

@dataclass(frozen=True)
class IntegerLiteral(Node):
    token: Token
    value: int

    def __str__(self) -> str:
        return self.token.literal

@dataclass(frozen=True)
class Boolean(Node):
    token: Token
    value: bool

    def __str__(self) -> str:
        return self.token.literal

@dataclass(frozen=True)
class StringLiteral(Node):
    token: Token
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'

@dataclass(frozen=True)
class ArrayLiteral(Node):
    token: Token
    elements: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        return '[' + ', '.join(str(e) for e in self.elements) + ']'

@dataclass(frozen=True)
class HashLiteral(Node):
    token: Token
    pairs: Tuple[Tuple[Expression, Expression], ...] = ()

    def __str__(self) -> str:
        return '{' + ', '.join(f'{k}: {v}' for k, v in self.pairs) + '}'

@dataclass(frozen=True)
class FunctionLiteral(Node):
    token: Token
    parameters: Tuple[Identifier, ...]
    body: BlockStatement

    def __str__(self) -> str:
        params = ', '.join(str(p) for p in self.parameters)
        return f'{self.token_literal()}({params}) {self.body}'

@dataclass(frozen=True)
class PrefixExpression(Node):
    token: Token
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f'({self.operator}{self.right})'

@dataclass(frozen=True)
class InfixExpression(Node):
    token: Token
    left: Expression
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f'({self.left} {self.operator} {self.right})'

@dataclass(frozen=True)
class IfExpression(Node):
    token: Token
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None

    def __str__(self) -> str:
        out = f'if ({self.condition}) {self.consequence}'
        if self.alternative is not None:
            out += f' else {self.alternative}'
        return out

@dataclass(frozen=True)
class CallExpression(Node):
    token: Token
    function: Expression
    arguments: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        args = ', '.join(str(a) for a in self.arguments)
        return f'{self.function}({args})'

@dataclass(frozen=True)
class IndexExpression(Node):
    token: Token
    left: Expression
    index: Expression

    def __str__(self) -> str:
        return f'({self.left}[{self.index}])'


Statement: TypeAlias = Union[LetStatement, ReturnStatement, ExpressionStatement]

Expression: TypeAlias = Union[
    Identifier,
    IntegerLiteral,
    Boolean,
    StringLiteral,
    ArrayLiteral,
    HashLiteral,
    FunctionLiteral,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    CallExpression,
    IndexExpression,
]

AnyNode: TypeAlias = Union[Program, BlockStatement, Statement, Expression]


def walk(node: Node) -> Iterator[Node]:
    """Yield node and every node below it, depth first."""
    yield node
    for f in fields(node):  # type: ignore[arg-type]
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield from walk(value)
        elif isinstance(value, tuple):
            for item in _flatten(value):
                if isinstance(item, Node):
                    yield from walk(item)
