from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .environment import Environment
from .evaluator import eval_program
from .objects import NULL, Error, Object
from .parser import ParseError, ParseFailure, parse_source
from .tree import LetStatement, Program
from .utils import debug_py_trace_enabled, recursion_limit

USAGE = """\
usage: monkey [--lark] [--ast] [FILE | SOURCE | -]

  FILE      run a Monkey source file
  SOURCE    run the argument itself as Monkey source
  -         read the program from stdin (default when stdin is not a tty)

  --lark    parse with the Lark reference grammar instead of the Pratt parser
  --ast     print the parsed program instead of evaluating it

With no argument and an interactive terminal, starts the REPL.
"""

PARSERS = ("pratt", "lark")

def parse(src: str, parser: str="pratt") -> Program:
    """Parse source text or raise ParseFailure with every collected error."""
    if parser == "lark":
        from lark.exceptions import UnexpectedInput
        from .lark_frontend import parse_with_lark

        try:
            return parse_with_lark(src)
        except UnexpectedInput as exc:
            raise ParseFailure([str(exc).strip()]) from exc
        except ParseError as exc:
            raise ParseFailure([str(exc)]) from exc

    if parser != "pratt":
        raise ValueError(f"unknown parser {parser!r}; expected one of {PARSERS}")

    program, errors = parse_source(src)
    if errors:
        raise ParseFailure(errors)

    return program

def run(src: str, env: Optional[Environment]=None, parser: str="pratt") -> Object:
    program = parse(src, parser)

    return eval_program(program, env if env is not None else Environment())

@dataclass
class ReplOutcome:
    program: Program
    value: Object

    @property
    def quiet(self) -> bool:
        """Nothing worth echoing: a trailing `let`, or a plain null."""
        if isinstance(self.value, Error):
            return False
        if self.value is NULL:
            return True

        statements = self.program.statements
        return bool(statements) and isinstance(statements[-1], LetStatement)

def repl_eval(src: str, env: Environment) -> ReplOutcome:
    """Evaluate one REPL input against the persistent environment."""
    program = parse(src)

    return ReplOutcome(program, eval_program(program, env))

def report_internal_error(exc: BaseException) -> None:
    """Print an interpreter failure (not a Monkey error value) to stderr."""
    if isinstance(exc, RecursionError):
        print("Error: maximum recursion depth exceeded", file=sys.stderr)
    else:
        print(f"Error: internal failure: {exc!r}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def main(argv: Optional[List[str]]=None) -> int:
    parser = "pratt"
    show_ast = False
    arg = None

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--lark":
            parser = "lark"
            continue

        if token == "--ast":
            show_ast = True
            continue

        if token in ("-h", "--help"):
            print(USAGE, end="")
            return 0

        if token.startswith("--"):
            raise SystemExit(f"Unknown option: {token}")

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    sys.setrecursionlimit(max(sys.getrecursionlimit(), recursion_limit()))

    if arg is None and sys.stdin.isatty():
        from .repl import repl
        repl()
        return 0

    source = _load_source(arg)

    try:
        program = parse(source, parser)
    except ParseFailure as exc:
        for msg in exc.errors:
            print(f"Error: {msg}", file=sys.stderr)
        return 1

    if show_ast:
        print(program)
        return 0

    try:
        result = eval_program(program, Environment())
    except RecursionError as exc:
        report_internal_error(exc)
        return 1

    if isinstance(result, Error):
        print(result.inspect(), file=sys.stderr)
        return 1

    if result is not NULL:
        print(result.inspect())

    return 0

if __name__ == "__main__":
    sys.exit(main())
