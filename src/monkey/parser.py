"""
Recursive Descent Parser for Monkey

Statements are parsed by plain recursive descent keyed on the leading token;
expressions use Pratt parsing driven by the PRECEDENCES table and the
prefix/infix rule tables built in Parser.__init__.

Structure:
- Lexer: Token stream from source (any iterable of Token works)
- Parser: one-token lookahead (cur_token / peek_token)
- AST: frozen dataclasses from monkey.tree

Errors do not abort the run: a failing statement is recorded in
Parser.errors and parsing resumes at the next statement boundary.
"""

from enum import IntEnum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .lexer import LexError
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
    Statement,
    StringLiteral,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# ============================================================================
# Precedence
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # ==
    LESSGREATER = 3  # > or <
    SUM = 4          # +
    PRODUCT = 5      # *
    PREFIX = 6       # -X or !X
    CALL = 7         # myFunction(X)
    INDEX = 8        # array[index]

PRECEDENCES: Dict[TT, Precedence] = {
    TT.EQ: Precedence.EQUALS,
    TT.NOT_EQ: Precedence.EQUALS,
    TT.LT: Precedence.LESSGREATER,
    TT.GT: Precedence.LESSGREATER,
    TT.PLUS: Precedence.SUM,
    TT.MINUS: Precedence.SUM,
    TT.SLASH: Precedence.PRODUCT,
    TT.ASTERISK: Precedence.PRODUCT,
    TT.LPAREN: Precedence.CALL,
    TT.LBRACKET: Precedence.INDEX,
}

_OPENERS = {TT.LPAREN, TT.LBRACE, TT.LBRACKET}
_CLOSERS = {TT.RPAREN, TT.RBRACE, TT.RBRACKET}

PrefixFn = Callable[[], Expression]
InfixFn = Callable[[Expression], Expression]

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Token] = None):
        self.message = message
        self.token = token
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

class ParseFailure(Exception):
    """Raised by callers that refuse to evaluate a program with syntax errors."""
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        count = len(self.errors)
        summary = f"{count} parse error" + ("" if count == 1 else "s")
        super().__init__(summary + ":\n" + "\n".join(f"\t{e}" for e in self.errors))

class Parser:
    """
    Pratt parser for Monkey.

    Expression precedence (lowest to highest):
    1. equality (==, !=)
    2. comparison (<, >)
    3. sum (+, -)
    4. product (*, /)
    5. prefix (-, !)
    6. call (f(x))
    7. index (a[i])
    """

    def __init__(self, tokens: Iterable[Token]):
        self._stream: Iterator[Token] = iter(tokens)
        self._last = Token(TT.EOF, '', 1, 1)
        self._exhausted = False
        self.errors: List[str] = []
        # Unclosed brackets up to and including cur_token; None marks a block body
        self._open: List[Optional[TT]] = []

        # EOF standing in for a stream cut short by a LexError
        self._lex_eof: Optional[Token] = None
        self._lex_error: Optional[str] = None

        self.prefix_fns: Dict[TT, PrefixFn] = {
            TT.IDENT: self.parse_identifier,
            TT.INT: self.parse_integer_literal,
            TT.STRING: self.parse_string_literal,
            TT.TRUE: self.parse_boolean,
            TT.FALSE: self.parse_boolean,
            TT.BANG: self.parse_prefix_expression,
            TT.MINUS: self.parse_prefix_expression,
            TT.LPAREN: self.parse_grouped_expression,
            TT.IF: self.parse_if_expression,
            TT.FUNCTION: self.parse_function_literal,
            TT.LBRACKET: self.parse_array_literal,
            TT.LBRACE: self.parse_hash_literal,
        }

        self.infix_fns: Dict[TT, InfixFn] = {
            TT.PLUS: self.parse_infix_expression,
            TT.MINUS: self.parse_infix_expression,
            TT.SLASH: self.parse_infix_expression,
            TT.ASTERISK: self.parse_infix_expression,
            TT.EQ: self.parse_infix_expression,
            TT.NOT_EQ: self.parse_infix_expression,
            TT.LT: self.parse_infix_expression,
            TT.GT: self.parse_infix_expression,
            TT.LPAREN: self.parse_call_expression,
            TT.LBRACKET: self.parse_index_expression,
        }

        self.cur_token = self._pull()
        self.peek_token = self._pull()
        self._track_depth()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _pull(self) -> Token:
        """Next token from the stream; a missing EOF is synthesized"""
        if self._exhausted:
            return self._last

        try:
            tok = next(self._stream, None)
        except LexError as exc:
            self._lex_error = str(exc)
            tok = Token(TT.EOF, '', exc.line, exc.column)
            self._lex_eof = tok
        if tok is None:
            tok = Token(TT.EOF, '', self._last.line, self._last.column)
        if tok.type == TT.EOF:
            self._exhausted = True
        self._last = tok
        return tok

    @property
    def depth(self) -> int:
        return len(self._open)

    def _track_depth(self) -> None:
        if self.cur_token.type in _OPENERS:
            self._open.append(self.cur_token.type)
        elif self.cur_token.type in _CLOSERS and self._open:
            self._open.pop()

    def _close_expression_brackets(self) -> None:
        """Drop unclosed ( [ and hash braces; only a block body can hold a statement"""
        while self._open and self._open[-1] is not None:
            self._open.pop()

    def advance(self) -> Token:
        """Consume current token and move to next"""
        prev = self.cur_token
        self.cur_token = self.peek_token
        self.peek_token = self._pull()
        self._track_depth()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.cur_token.type in types

    def peek_is(self, token_type: TT) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TT) -> Token:
        """Advance onto the peek token if it has the expected type, else raise"""
        if not self.peek_is(token_type):
            raise ParseError(
                f"expected next token to be {token_type.value}, "
                f"got {self.peek_token.type.value} instead",
                self.peek_token,
            )
        self.advance()
        return self.cur_token

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse_program(self) -> Program:
        """Parse entire program, collecting errors instead of stopping at the first"""
        statements: List[Statement] = []

        while not self.check(TT.EOF):
            try:
                statements.append(self.parse_statement())
            except ParseError as exc:
                # The lex error below already covers a stream that ended early
                if exc.token is None or exc.token is not self._lex_eof:
                    self.errors.append(str(exc))
                self.synchronize()
                continue
            self.advance()

        if self._lex_error is not None:
            self.errors.append(self._lex_error)

        return Program(tuple(statements))

    def synchronize(self) -> None:
        """Skip to the next top-level statement boundary after an error"""
        while not self.check(TT.EOF):
            if self.depth == 0 and self.check(TT.SEMICOLON):
                self.advance()
                return

            self.advance()

            if self.check(TT.LET, TT.RETURN):
                self._close_expression_brackets()
                if self.depth == 0:
                    return

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Statement:
        """Parse a single statement; leaves cur_token on its last token"""
        if self.check(TT.LET):
            return self.parse_let_statement()
        if self.check(TT.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement:
        """let <ident> = <expr> [;]"""
        tok = self.cur_token

        name_tok = self.expect_peek(TT.IDENT)
        name = Identifier(name_tok, name_tok.literal)

        self.expect_peek(TT.ASSIGN)
        self.advance()
        value = self.parse_expression(Precedence.LOWEST)

        if self.peek_is(TT.SEMICOLON):
            self.advance()

        return LetStatement(tok, name, value)

    def parse_return_statement(self) -> ReturnStatement:
        """return <expr> [;]"""
        tok = self.cur_token
        self.advance()
        value = self.parse_expression(Precedence.LOWEST)

        if self.peek_is(TT.SEMICOLON):
            self.advance()

        return ReturnStatement(tok, value)

    def parse_expression_statement(self) -> ExpressionStatement:
        tok = self.cur_token
        expr = self.parse_expression(Precedence.LOWEST)

        if self.peek_is(TT.SEMICOLON):
            self.advance()

        return ExpressionStatement(tok, expr)

    def parse_block_statement(self) -> BlockStatement:
        """{ <statement>* }; cur_token must be the opening brace"""
        tok = self.cur_token
        statements: List[Statement] = []
        if self._open:
            self._open[-1] = None
        self.advance()

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError("expected next token to be }, got EOF instead", self.cur_token)
            statements.append(self.parse_statement())
            self.advance()

        return BlockStatement(tok, tuple(statements))

    # ========================================================================
    # Expressions (Pratt)
    # ========================================================================

    def parse_expression(self, precedence: Precedence) -> Expression:
        prefix = self.prefix_fns.get(self.cur_token.type)
        if prefix is None:
            raise ParseError(
                f"no prefix parse function for {self.cur_token.type.value} found",
                self.cur_token,
            )
        left = prefix()

        while precedence < self.peek_precedence():
            infix = self.infix_fns.get(self.peek_token.type)
            if infix is None:
                return left

            self.advance()
            left = infix(left)

        return left

    # ---------------- prefix rules ----------------

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Expression:
        tok = self.cur_token
        try:
            value = int(tok.literal)
        except ValueError:
            value = None

        if value is None or not INT64_MIN <= value <= INT64_MAX:
            raise ParseError(f"could not parse {tok.literal} as integer", tok)

        return IntegerLiteral(tok, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self.check(TT.TRUE))

    def parse_prefix_expression(self) -> Expression:
        tok = self.cur_token
        self.advance()
        right = self.parse_expression(Precedence.PREFIX)
        return PrefixExpression(tok, tok.literal, right)

    def parse_grouped_expression(self) -> Expression:
        self.advance()
        expr = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TT.RPAREN)
        return expr

    def parse_if_expression(self) -> Expression:
        """if (<cond>) { ... } [else { ... }]"""
        tok = self.cur_token

        self.expect_peek(TT.LPAREN)
        self.advance()
        condition = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TT.RPAREN)

        self.expect_peek(TT.LBRACE)
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_is(TT.ELSE):
            self.advance()
            self.expect_peek(TT.LBRACE)
            alternative = self.parse_block_statement()

        return IfExpression(tok, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression:
        """fn(<params>) { ... }"""
        tok = self.cur_token
        self.expect_peek(TT.LPAREN)
        parameters = self.parse_function_parameters()
        self.expect_peek(TT.LBRACE)
        body = self.parse_block_statement()
        return FunctionLiteral(tok, parameters, body)

    def parse_function_parameters(self) -> Tuple[Identifier, ...]:
        if self.peek_is(TT.RPAREN):
            self.advance()
            return ()

        params: List[Identifier] = []
        ident = self.expect_peek(TT.IDENT)
        params.append(Identifier(ident, ident.literal))

        while self.peek_is(TT.COMMA):
            self.advance()
            ident = self.expect_peek(TT.IDENT)
            params.append(Identifier(ident, ident.literal))

        self.expect_peek(TT.RPAREN)
        return tuple(params)

    def parse_array_literal(self) -> Expression:
        tok = self.cur_token
        return ArrayLiteral(tok, self.parse_expression_list(TT.RBRACKET))

    def parse_hash_literal(self) -> Expression:
        """{<key>: <value>, ...}"""
        tok = self.cur_token
        pairs: List[Tuple[Expression, Expression]] = []

        while not self.peek_is(TT.RBRACE):
            self.advance()
            key = self.parse_expression(Precedence.LOWEST)
            self.expect_peek(TT.COLON)
            self.advance()
            value = self.parse_expression(Precedence.LOWEST)
            pairs.append((key, value))

            if not self.peek_is(TT.RBRACE):
                self.expect_peek(TT.COMMA)

        self.expect_peek(TT.RBRACE)
        return HashLiteral(tok, tuple(pairs))

    def parse_expression_list(self, end: TT) -> Tuple[Expression, ...]:
        """Comma-separated expressions up to the closing token `end`"""
        if self.peek_is(end):
            self.advance()
            return ()

        items: List[Expression] = []
        self.advance()
        items.append(self.parse_expression(Precedence.LOWEST))

        while self.peek_is(TT.COMMA):
            self.advance()
            self.advance()
            items.append(self.parse_expression(Precedence.LOWEST))

        self.expect_peek(end)
        return tuple(items)

    # ---------------- infix rules ----------------

    def parse_infix_expression(self, left: Expression) -> Expression:
        tok = self.cur_token
        precedence = self.cur_precedence()
        self.advance()
        right = self.parse_expression(precedence)
        return InfixExpression(tok, left, tok.literal, right)

    def parse_call_expression(self, function: Expression) -> Expression:
        tok = self.cur_token
        return CallExpression(tok, function, self.parse_expression_list(TT.RPAREN))

    def parse_index_expression(self, left: Expression) -> Expression:
        tok = self.cur_token
        self.advance()
        index = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TT.RBRACKET)
        return IndexExpression(tok, left, index)

# ============================================================================
# Convenience
# ============================================================================

def parse_source(source: str) -> Tuple[Program, List[str]]:
    """
    Parse Monkey source code to AST.

    Returns the program together with the accumulated syntax errors; a
    non-empty error list means the program must not be evaluated.
    """
    from .lexer import Lexer

    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors
