"""AST vocabulary shared by both parsers and the evaluator.

Nodes are Lark ``Tree`` objects labelled with one of the names below; leaves
are Lark ``Token`` objects (``NUMBER``, ``STRING``, ``IDENT`` and operator
tokens). Child layout per label:

    program     statements...
    vardecl     LET|CONST token, IDENT token, initializer | None
    fndecl      IDENT token, params, body
    ifstmt      test, body, body | None
    binary      left, BINOP token, right
    condition   left, CONDOP token, right
    assign      target, value
    object      prop...            (prop: IDENT token, value | None)
    array       elements...
    field       object, IDENT token          (non-computed member)
    index       object, expression           (computed member)
    call        callee, args
    fnliteral   params, body
    params      IDENT tokens
    args        expressions
    body        statements
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, TypeGuard, Union

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias

Node: TypeAlias = Union[Tree, Token]

STATEMENT_LABELS = frozenset({'program', 'vardecl', 'fndecl', 'ifstmt'})
EXPRESSION_LABELS = frozenset({
    'binary', 'condition', 'assign', 'object', 'array',
    'field', 'index', 'call', 'fnliteral',
})
LEAF_TYPES = frozenset({'NUMBER', 'STRING', 'IDENT'})


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def node_line(node: object) -> Optional[int]:
    """Source line of a node, if the parser recorded one."""
    if is_token(node):
        return getattr(node, 'line', None)

    if is_tree(node):
        meta = node._meta
        line = getattr(meta, 'line', None) if meta is not None else None
        if line is not None:
            return line

        for child in node.children:
            line = node_line(child)
            if line is not None:
                return line

    return None

# ---------- builders ----------

def mk_token(type_: str, value: str, line: Optional[int] = None, column: Optional[int] = None) -> Token:
    return Token(type_, value, line=line, column=column)

def mk_tree(label: str, children: Sequence[Optional[Node]], line: Optional[int] = None) -> Tree:
    meta = None
    if line is not None:
        meta = Meta()
        meta.line = line
        meta.empty = False

    return Tree(label, list(children), meta)

def program(body: Iterable[Node]) -> Tree:
    return mk_tree('program', list(body))

def var_decl(keyword: Token, name: Token, init: Optional[Node]) -> Tree:
    return mk_tree('vardecl', [keyword, name, init], keyword.line)

def fn_decl(name: Token, params: Tree, body: Tree) -> Tree:
    return mk_tree('fndecl', [name, params, body], name.line)

def if_stmt(test: Node, consequent: Tree, alternate: Optional[Tree], line: Optional[int] = None) -> Tree:
    return mk_tree('ifstmt', [test, consequent, alternate], line)

def binary(left: Node, op: Token, right: Node) -> Tree:
    return mk_tree('binary', [left, op, right], op.line)

def condition(left: Node, op: Token, right: Node) -> Tree:
    return mk_tree('condition', [left, op, right], op.line)

def assign(target: Node, value: Node, line: Optional[int] = None) -> Tree:
    return mk_tree('assign', [target, value], line)

def prop(key: Token, value: Optional[Node]) -> Tree:
    return mk_tree('prop', [key, value], key.line)

def obj(props: Iterable[Tree], line: Optional[int] = None) -> Tree:
    return mk_tree('object', list(props), line)

def array(elements: Iterable[Node], line: Optional[int] = None) -> Tree:
    return mk_tree('array', list(elements), line)

def field(target: Node, name: Token) -> Tree:
    return mk_tree('field', [target, name], name.line)

def index(target: Node, key: Node, line: Optional[int] = None) -> Tree:
    return mk_tree('index', [target, key], line)

def call(callee: Node, args: Iterable[Node], line: Optional[int] = None) -> Tree:
    return mk_tree('call', [callee, mk_tree('args', list(args))], line)

def fn_literal(params: Tree, body: Tree, line: Optional[int] = None) -> Tree:
    return mk_tree('fnliteral', [params, body], line)

def params(names: Iterable[Token]) -> Tree:
    return mk_tree('params', list(names))

def body(stmts: Iterable[Node]) -> Tree:
    return mk_tree('body', list(stmts))

# ---------- accessors ----------

def param_names(node: Tree) -> List[str]:
    return [str(tok) for tok in node.children]

def member_parts(node: Tree) -> Tuple[Node, Node, bool]:
    """(object, property, computed) for a field or index node."""
    target, key = node.children
    return target, key, node.data == 'index'

def pretty(node: Optional[Node], indent: str = '  ') -> str:
    """Indented outline of a tree; absent optional children print as '-'."""
    def _lines(n: Optional[Node], level: int) -> Iterable[str]:
        pad = indent * level
        if is_tree(n):
            yield f'{pad}{n.data}'
            for child in n.children:
                yield from _lines(child, level + 1)
        elif n is None:
            yield f'{pad}-'
        else:
            yield f'{pad}{n.type.lower()}\t{n}'

    return '\n'.join(_lines(node, 0))
