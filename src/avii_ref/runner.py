from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .config import configure_logging, debug_py_trace_enabled
from .evaluator import evaluate
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_tokens
from .runtime import AviiRuntimeError, AvValue, Environment, init_stdlib
from .tree import pretty
from .utils import stringify

logger = logging.getLogger(__name__)

def run(src: str, env: Optional[Environment] = None) -> AvValue:
    """Tokenize, parse and evaluate `src`; a fresh global scope unless `env` is given."""
    init_stdlib()

    tokens = tokenize(src)
    program = parse_tokens(tokens)

    if env is None:
        env = Environment.global_scope()

    return evaluate(program, env)

def repl_eval(src: str, env: Environment) -> AvValue:
    """Evaluate one REPL submission against the session's persistent scope."""
    return run(src, env)

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

def report_error(exc: BaseException) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="avii", description="Run an Avii program")
    ap.add_argument("source", nargs="?", help="File path, '-' for stdin, or literal code; omit for the REPL")
    ap.add_argument("--ast", action="store_true", help="Print the parsed tree instead of running")
    ap.add_argument("--tokens", action="store_true", help="Print the token stream instead of running")
    ap.add_argument("-p", "--print-result", action="store_true", help="Print the value of the last statement")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else None)

    if args.source is None and sys.stdin.isatty():
        from .repl import repl
        repl()
        return 0

    source = _load_source(args.source)

    try:
        if args.tokens:
            for tok in tokenize(source):
                print(tok)
            return 0

        if args.ast:
            print(pretty(parse_tokens(tokenize(source))))
            return 0

        result = run(source)
    except (LexError, ParseError, AviiRuntimeError, RecursionError) as exc:
        logger.debug("run failed", exc_info=True)
        report_error(exc)
        return 1

    if args.print_result:
        print(stringify(result))

    return 0

if __name__ == "__main__":
    sys.exit(main())
