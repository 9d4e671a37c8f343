"""prompt_toolkit lexer for live Monkey syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer import Lexer as MonkeyTokenizer, LexError
from .stdlib import BUILTINS
from .token_types import TT, Token

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "builtin": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.LET: "keyword",
    TT.FUNCTION: "keyword",
    TT.IF: "keyword",
    TT.ELSE: "keyword",
    TT.RETURN: "keyword",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.INT: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.ILLEGAL: "error",
    TT.ASSIGN: "operator",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.BANG: "operator",
    TT.ASTERISK: "operator",
    TT.SLASH: "operator",
    TT.LT: "operator",
    TT.GT: "operator",
    TT.EQ: "operator",
    TT.NOT_EQ: "operator",
    TT.COMMA: "punctuation",
    TT.SEMICOLON: "punctuation",
    TT.COLON: "punctuation",
    TT.LPAREN: "punctuation",
    TT.RPAREN: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.LBRACKET: "punctuation",
    TT.RBRACKET: "punctuation",
}


def _token_text(tok: Token) -> str:
    if tok.type == TT.STRING:
        return f'"{tok.literal}"'
    return tok.literal


def _style_for(tok: Token) -> str:
    group = _TT_GROUP.get(tok.type, "")
    if tok.type == TT.IDENT and tok.literal in BUILTINS:
        group = "builtin"
    return GROUP_STYLE.get(group, "")


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = MonkeyTokenizer(text).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF:
            continue
        tok_text = _token_text(tok)
        if not tok_text:
            continue

        # Find actual position of this token text in the line from pos onwards.
        idx = text.find(tok_text, pos)
        if idx < 0:
            continue

        # Unstyled gap before token.
        if idx > pos:
            result.append(("", text[pos:idx]))

        result.append((_style_for(tok), tok_text))
        pos = idx + len(tok_text)

    # Trailing text: whitespace and possibly a `//` comment.
    if pos < len(text):
        trailing = text[pos:]
        comment_at = trailing.find("//")
        if comment_at < 0:
            result.append(("", trailing))
        else:
            if comment_at > 0:
                result.append(("", trailing[:comment_at]))
            result.append((GROUP_STYLE["comment"], trailing[comment_at:]))

    return result if result else [("", text)]


class MonkeyLexer(Lexer):
    """prompt_toolkit Lexer that highlights Monkey source using the Monkey lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
