"""Interactive REPL for Monkey, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .environment import Environment
from .lexer import LexError, tokenize
from .objects import Error
from .parser import ParseFailure
from .repl_highlight import MonkeyLexer
from .runner import repl_eval, report_internal_error
from .token_types import TT
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/ast": ("Echo the parsed program before evaluating", "[on|off]"),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_DEPTH_OPEN = {TT.LPAREN, TT.LBRACKET, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAREN, TT.RBRACKET, TT.RBRACE}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


@dataclass
class ReplState:
    env: Environment = field(default_factory=Environment)
    show_ast: bool = False


def needs_continuation(text: str) -> bool:
    """Return True while *text* has unclosed brackets or an open string literal."""
    try:
        tokens = tokenize(text)
    except LexError:
        return True

    depth = 0
    for tok in tokens:
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth -= 1

    return depth > 0


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _parse_switch(arg: str, current: bool) -> bool | None:
    """on/off/empty(toggle) => new value; anything else => None."""
    lowered = arg.lower()
    if lowered in _ON:
        return True
    if lowered in _OFF:
        return False
    if lowered == "":
        return not current
    return None


def handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1].strip() if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        enabled = _parse_switch(arg, debug_py_trace_enabled())
        if enabled is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        if enabled:
            os.environ[DEBUG_PY_TRACE_ENV] = "1"
        else:
            os.environ.pop(DEBUG_PY_TRACE_ENV, None)

        print(f"Python traceback: {'on' if enabled else 'off'}")
        return True

    if cmd == "/ast":
        enabled = _parse_switch(arg, state.show_ast)
        if enabled is None:
            print("Usage: /ast [on|off]", file=sys.stderr)
            return True

        state.show_ast = enabled
        print(f"AST echo: {'on' if enabled else 'off'}")
        return True

    if cmd == "/reset":
        state.env = Environment()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def eval_and_print(text: str, state: ReplState) -> None:
    """Evaluate one submitted input and echo the result (or error) like the REPL does."""
    try:
        outcome = repl_eval(text, state.env)
    except ParseFailure as exc:
        for msg in exc.errors:
            print(f"Error: {msg}", file=sys.stderr)
        return
    except RecursionError as exc:
        report_internal_error(exc)
        return

    if state.show_ast:
        print(outcome.program)

    if isinstance(outcome.value, Error):
        print(outcome.value.inspect(), file=sys.stderr)
        return

    if not outcome.quiet:
        print(outcome.value.inspect())


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    state = ReplState()

    history = InMemoryHistory()
    lexer = MonkeyLexer()

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.startswith("/") or not needs_continuation(text):
            buf.validate_and_handle()
            return

        # Open bracket or string: keep reading.
        last = text.split("\n")[-1]
        indent = len(last) - len(last.lstrip())
        if last.rstrip().endswith(("{", "(", "[")):
            indent += 4
        buf.insert_text("\n" + " " * indent)

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("monkey repl - Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, state):
            continue

        eval_and_print(text, state)
