"""
Lexer for Monkey

Turns source text into a stream of tokens for the Pratt parser.

Features:
- On-demand tokenization through next_token(); EOF repeats once exhausted
- Position tracking (line, column)
- `//` line comments
- Unknown characters become ILLEGAL tokens so the parser reports them
- An unterminated string raises LexError; the parser records it as a syntax error
"""

from typing import Iterator, List

from .token_types import TT, Token, lookup_ident

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Monkey lexer.

    The parser pulls tokens one at a time with next_token(); iterating a
    Lexer yields every token up to and including the first EOF.
    """

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NOT_EQ),

        # Single-character operators
        ('=', TT.ASSIGN),
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('!', TT.BANG),
        ('*', TT.ASTERISK),
        ('/', TT.SLASH),
        ('<', TT.LT),
        ('>', TT.GT),
        (',', TT.COMMA),
        (';', TT.SEMICOLON),
        (':', TT.COLON),
        ('(', TT.LPAREN),
        (')', TT.RPAREN),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('[', TT.LBRACKET),
        (']', TT.RBRACKET),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

        # Start of the token being scanned
        self.tok_line = 1
        self.tok_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def next_token(self) -> Token:
        """Scan and return the next token"""
        self.skip_trivia()

        self.tok_line = self.line
        self.tok_column = self.column

        if self.pos >= len(self.source):
            return self.make(TT.EOF, '')

        ch = self.peek()

        if ch == '"':
            return self.scan_string()

        if is_digit(ch):
            return self.scan_number()

        if ch.isalpha() or ch == '_':
            return self.scan_identifier()

        return self.scan_operator()

    def tokenize(self) -> List[Token]:
        """Tokenize entire source, return token list ending in EOF"""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TT.EOF:
                return

    # ========================================================================
    # Scanners
    # ========================================================================

    def scan_string(self) -> Token:
        """Scan a double-quoted string; no escape sequences"""
        self.advance()  # Opening quote
        start = self.pos

        while self.pos < len(self.source) and self.peek() != '"':
            self.advance()

        if self.pos >= len(self.source):
            raise LexError(
                f"Unterminated string at line {self.tok_line}, col {self.tok_column}",
                self.tok_line,
                self.tok_column,
            )

        content = self.source[start:self.pos]
        self.advance()  # Closing quote
        return self.make(TT.STRING, content)

    def scan_number(self) -> Token:
        """Scan integer literal"""
        value = ''

        while is_digit(self.peek()):
            value += self.advance()

        return self.make(TT.INT, value)

    def scan_identifier(self) -> Token:
        """Scan identifier or keyword"""
        value = ''

        while self.peek().isalpha() or is_digit(self.peek()) or self.peek() == '_':
            value += self.advance()

        return self.make(lookup_ident(value), value)

    def scan_operator(self) -> Token:
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                return self.make(op_type, op_str)

        return self.make(TT.ILLEGAL, self.advance())

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            if self.pos >= len(self.source):
                break
            ch = self.source[self.pos]
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return result

    def skip_trivia(self) -> None:
        """Skip whitespace, newlines and `//` comments"""
        while self.pos < len(self.source):
            ch = self.peek()
            if ch in (' ', '\t', '\r', '\n'):
                self.advance()
            elif ch == '/' and self.peek(1) == '/':
                while self.pos < len(self.source) and self.peek() != '\n':
                    self.advance()
            else:
                return

    def make(self, token_type: TT, literal: str) -> Token:
        """Build a token positioned at the start of the current scan"""
        return Token(
            type=token_type,
            literal=literal,
            line=self.tok_line,
            column=self.tok_column,
        )

def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'

class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column

def tokenize(source: str) -> List[Token]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
