"""Grammar-driven Avii parser built on Lark.

Loads ``grammar.lark`` (LALR) and lowers Lark's parse tree into the node
vocabulary of ``tree.py`` so its output can be compared node for node with
``parser_rd``. The evaluator only ever consumes the recursive-descent parser;
this module is the executable reference grammar.
"""
from __future__ import annotations

import argparse
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Transformer, Tree, UnexpectedInput
from lark.exceptions import VisitError

from . import tree as ast
from .lexer_rd import decode_string_body
from .parser_rd import ParseError

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_BINOPS = {'PLUS', 'MINUS', 'STAR', 'SLASH', 'PERCENT', 'CARET'}


def _op(tok: Token) -> Token:
    kind = 'BINOP' if tok.type in _BINOPS else 'CONDOP'
    return ast.mk_token(kind, str(tok), tok.line, tok.column)


class Lower(Transformer):
    """Map Lark parse-tree rules onto tree.py builders."""

    # ---------- terminals ----------

    def NUMBER(self, tok: Token) -> Token:
        return ast.mk_token('NUMBER', str(tok), tok.line, tok.column)

    def STRING(self, tok: Token) -> Token:
        return ast.mk_token('STRING', decode_string_body(str(tok)[1:-1], tok.line), tok.line, tok.column)

    def IDENT(self, tok: Token) -> Token:
        return ast.mk_token('IDENT', str(tok), tok.line, tok.column)

    # ---------- statements ----------

    def start(self, children: List) -> Tree:
        return ast.program(children)

    def vardecl_bare(self, children: List) -> Tree:
        keyword, name = children
        return ast.var_decl(keyword, name, None)

    def vardecl_init(self, children: List) -> Tree:
        keyword, name, init = children
        return ast.var_decl(keyword, name, init)

    def fndecl(self, children: List) -> Tree:
        _func, name, params, body = children
        return ast.fn_decl(name, params, body)

    def if_only(self, children: List) -> Tree:
        if_tok, test, consequent = children
        return ast.if_stmt(test, consequent, None, if_tok.line)

    def if_else(self, children: List) -> Tree:
        if_tok, test, consequent, _else, alternate = children
        return ast.if_stmt(test, consequent, alternate, if_tok.line)

    def if_elif(self, children: List) -> Tree:
        if_tok, test, consequent, _else, nested = children
        return ast.if_stmt(test, consequent, ast.body([nested]), if_tok.line)

    def block(self, children: List) -> Tree:
        return ast.body(children)

    def params(self, children: List) -> Tree:
        seen = set()
        for name in children:
            if str(name) in seen:
                raise ParseError(f"Duplicate parameter '{name}'", name)
            seen.add(str(name))
        return ast.params(children)

    # ---------- expressions ----------

    def assignment(self, children: List) -> Tree:
        # The grammar admits any expression on the left; only a bare name is assignable.
        target, value = children
        if not (isinstance(target, Token) and target.type == 'IDENT'):
            raise ParseError("Invalid assignment target", target if isinstance(target, Token) else None)
        return ast.assign(target, value, target.line)

    def condition(self, children: List) -> Tree:
        left, op, right = children
        return ast.condition(left, _op(op), right)

    def binary(self, children: List) -> Tree:
        left, op, right = children
        return ast.binary(left, _op(op), right)

    def field(self, children: List) -> Tree:
        target, name = children
        return ast.field(target, name)

    def index(self, children: List) -> Tree:
        target, key = children
        return ast.index(target, key)

    def call(self, children: List) -> Tree:
        callee, *rest = children
        args = rest[0] if rest else []
        return ast.call(callee, args)

    def arglist(self, children: List) -> List:
        return list(children)

    def object(self, children: List) -> Tree:
        return ast.obj(children)

    def prop(self, children: List) -> Tree:
        key, *rest = children
        return ast.prop(key, rest[0] if rest else None)

    def array(self, children: List) -> Tree:
        return ast.array(children)

    def fnliteral(self, children: List) -> Tree:
        func, params, body = children
        return ast.fn_literal(params, body, func.line)


def _read_grammar(grammar_path: Optional[str] = None) -> str:
    path = Path(grammar_path) if grammar_path else GRAMMAR_PATH
    return path.read_text(encoding="utf-8")

@lru_cache(maxsize=None)
def build_parser(grammar_path: Optional[str] = None) -> Lark:
    grammar = _read_grammar(grammar_path)
    logger.debug("building LALR parser from %s", grammar_path or GRAMMAR_PATH)
    return Lark(grammar, parser="lalr", start="start", propagate_positions=True)

def parse_lark(source: str, grammar_path: Optional[str] = None) -> Tree:
    """Parse source with the Lark grammar and lower it to tree.py nodes."""
    raw = build_parser(grammar_path).parse(source)

    try:
        return Lower().transform(raw)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ParseError):
            raise exc.orig_exc from None
        raise


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Parse Avii source with the Lark grammar")
    ap.add_argument("source", nargs="?", default="-", help="File path, '-' for stdin, or literal code")
    ap.add_argument("-g", "--grammar", default=None, help="Path to grammar.lark")
    args = ap.parse_args(argv)

    if args.source == "-":
        src = sys.stdin.read()
    elif Path(args.source).exists():
        src = Path(args.source).read_text(encoding="utf-8")
    else:
        src = args.source

    try:
        tree = parse_lark(src, args.grammar)
    except (UnexpectedInput, ParseError) as exc:
        print(f"Parse error: {exc}", file=sys.stderr)
        return 1

    print(ast.pretty(tree))
    return 0


if __name__ == "__main__":
    sys.exit(main())
