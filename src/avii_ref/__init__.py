"""Reference lexer, parser and tree-walking evaluator for Avii."""

from .evaluator import evaluate
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_program, produce_ast
from .runner import run
from .runtime import AviiRuntimeError, Environment, create_global_env

__all__ = [
    "AviiRuntimeError",
    "Environment",
    "LexError",
    "ParseError",
    "create_global_env",
    "evaluate",
    "parse_program",
    "produce_ast",
    "run",
    "tokenize",
]
