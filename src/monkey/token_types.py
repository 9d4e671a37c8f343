"""
Token Types for Monkey

Shared between lexer, parser and the REPL highlighter to avoid circular
dependencies.
"""

from dataclasses import dataclass
from enum import Enum


class TT(Enum):
    """Token Types. Values are the spellings used in parser diagnostics."""

    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers + literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"


KEYWORDS = {
    'fn': TT.FUNCTION,
    'let': TT.LET,
    'true': TT.TRUE,
    'false': TT.FALSE,
    'if': TT.IF,
    'else': TT.ELSE,
    'return': TT.RETURN,
}


def lookup_ident(ident: str) -> TT:
    """Map an identifier spelling to its keyword type, or IDENT."""
    return KEYWORDS.get(ident, TT.IDENT)


@dataclass(frozen=True)
class Token:
    """Token with position info"""

    type: TT
    literal: str
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Token({self.type.name}, {self.literal!r}, {self.line}:{self.column})"
