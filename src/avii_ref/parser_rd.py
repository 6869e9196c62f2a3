"""
Recursive Descent Parser for Avii

Turns the lexer's token list into the tree vocabulary of ``tree.py``.

Structure:
- Token buffer plus an advancing cursor (tokens are never removed)
- One method per precedence level, each descending to the next on no match
- Trees identical in shape to those built by the Lark grammar (parse_auto)
"""

import logging
from typing import List, Optional

from lark import Token, Tree

from . import tree as ast
from .lexer_rd import tokenize
from .token_types import TT, Tok

logger = logging.getLogger(__name__)

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None, expected: Optional[str] = None):
        self.message = message
        self.token = token
        self.expected = expected
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

def _leaf(tok: Tok) -> Token:
    return ast.mk_token(tok.type.name, tok.value, tok.line, tok.column)

class Parser:
    """
    Recursive descent parser for Avii.

    Expression precedence (lowest to highest):
    1. assignment (=), right associative, identifier targets only
    2. logical (and, or)
    3. equality (==, !=)
    4. additive (+, -)
    5. multiplicative (*, /, %)
    6. power (^), right associative
    7. call/member chains (f(x), a.b, a[b])
    8. primary (literals, identifiers, parens, object/array/function literals)
    """

    def __init__(self, tokens: List[Tok]):
        if not tokens or tokens[-1].type != TT.EOF:
            raise ParseError("Token stream must end with EOF")
        self.tokens = tokens
        self.pos = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token; clamps to the trailing EOF"""
        idx = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        tok = self.current
        if tok.type != TT.EOF:
            self.pos += 1
        return tok

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def check_op(self, kind: TT, *values: str) -> bool:
        return self.current.type == kind and self.current.value in values

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current, expected=token_type.name)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        stmts = []

        while not self.check(TT.EOF):
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        logger.debug("parsed %d top-level statements", len(stmts))
        return ast.program(stmts)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree | Token:
        """
        Parse a single statement.

        Statements include:
        - Declarations (let, const, func NAME)
        - if / else
        - Expressions (an anonymous `func (...)` is an expression)
        """
        if self.check(TT.LET, TT.CONST):
            return self.parse_var_decl()
        if self.check(TT.FUNC) and self.peek(1).type == TT.IDENT:
            return self.parse_fn_decl()
        if self.check(TT.IF):
            return self.parse_if_stmt()

        return self.parse_expr()

    def parse_var_decl(self) -> Tree:
        """Parse: (let | const) IDENT ('=' expr)? ';'"""
        keyword = self.advance()
        name = self.expect(TT.IDENT, "Expected identifier after " + keyword.value)

        if self.check(TT.SEMI):
            if keyword.type == TT.CONST:
                raise ParseError(
                    f"Constant '{name.value}' must have an initializer",
                    self.current,
                    expected=TT.EQUALS.name,
                )
            self.advance()
            return ast.var_decl(_leaf(keyword), _leaf(name), None)

        self.expect(TT.EQUALS, f"Expected '=' or ';' after '{name.value}', got {self.current.type.name}")
        init = self.parse_expr()
        self.expect(TT.SEMI, f"Expected ';' after declaration of '{name.value}', got {self.current.type.name}")
        return ast.var_decl(_leaf(keyword), _leaf(name), init)

    def parse_fn_decl(self) -> Tree:
        """Parse: func IDENT (params) { body }"""
        self.expect(TT.FUNC)
        name = self.expect(TT.IDENT)
        params = self.parse_param_list()
        body = self.parse_block()
        return ast.fn_decl(_leaf(name), params, body)

    def parse_if_stmt(self) -> Tree:
        """
        Parse if statement:
        if expr { body } [else if ... | else { body }]
        """
        if_tok = self.expect(TT.IF)
        test = self.parse_expr()
        consequent = self.parse_block()
        alternate = None

        if self.match(TT.ELSE):
            if self.check(TT.IF):
                alternate = ast.body([self.parse_if_stmt()])
            else:
                alternate = self.parse_block()

        return ast.if_stmt(test, consequent, alternate, if_tok.line)

    def parse_block(self) -> Tree:
        """Parse a brace-delimited statement list"""
        self.expect(TT.LBRACE, f"Expected '{{', got {self.current.type.name}")
        stmts = []

        while not self.check(TT.RBRACE, TT.EOF):
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        self.expect(TT.RBRACE, f"Expected '}}', got {self.current.type.name}")
        return ast.body(stmts)

    def parse_param_list(self) -> Tree:
        """Parse (a, b, c)"""
        self.expect(TT.LPAR)
        names: List[Token] = []

        if not self.check(TT.RPAR):
            names.append(self.parse_param(names))
            while self.match(TT.COMMA):
                names.append(self.parse_param(names))

        self.expect(TT.RPAR)
        return ast.params(names)

    def parse_param(self, seen: List[Token]) -> Token:
        tok = self.expect(TT.IDENT, f"Expected parameter name, got {self.current.type.name}")
        if any(str(name) == tok.value for name in seen):
            raise ParseError(f"Duplicate parameter '{tok.value}'", tok)
        return _leaf(tok)

    # ========================================================================
    # Expressions - Precedence Climbing
    # ========================================================================

    def parse_expr(self) -> Tree | Token:
        """Parse expression (top level)"""
        return self.parse_assignment_expr()

    def parse_assignment_expr(self) -> Tree | Token:
        """Parse assignment: IDENT = expr (right associative)"""
        left = self.parse_logical_expr()

        if self.check(TT.EQUALS):
            eq = self.advance()
            if not (isinstance(left, Token) and left.type == 'IDENT'):
                raise ParseError("Invalid assignment target", eq, expected=TT.IDENT.name)
            value = self.parse_assignment_expr()
            return ast.assign(left, value, eq.line)

        return left

    def parse_logical_expr(self) -> Tree | Token:
        """Parse logical and/or: expr and expr"""
        left = self.parse_equality_expr()

        while self.check_op(TT.CONDOP, 'and', 'or'):
            op = self.advance()
            right = self.parse_equality_expr()
            left = ast.condition(left, _leaf(op), right)

        return left

    def parse_equality_expr(self) -> Tree | Token:
        """Parse equality: expr == expr"""
        left = self.parse_add_expr()

        while self.check_op(TT.CONDOP, '==', '!='):
            op = self.advance()
            right = self.parse_add_expr()
            left = ast.condition(left, _leaf(op), right)

        return left

    def parse_add_expr(self) -> Tree | Token:
        """Parse addition/subtraction: expr + expr"""
        left = self.parse_mul_expr()

        while self.check_op(TT.BINOP, '+', '-'):
            op = self.advance()
            right = self.parse_mul_expr()
            left = ast.binary(left, _leaf(op), right)

        return left

    def parse_mul_expr(self) -> Tree | Token:
        """Parse multiplication/division/remainder: expr * expr"""
        left = self.parse_pow_expr()

        while self.check_op(TT.BINOP, '*', '/', '%'):
            op = self.advance()
            right = self.parse_pow_expr()
            left = ast.binary(left, _leaf(op), right)

        return left

    def parse_pow_expr(self) -> Tree | Token:
        """Parse exponentiation: expr ^ expr (right associative)"""
        base = self.parse_call_member_expr()

        if self.check_op(TT.BINOP, '^'):
            op = self.advance()
            exp = self.parse_pow_expr()
            return ast.binary(base, _leaf(op), exp)

        return base

    def parse_call_member_expr(self) -> Tree | Token:
        """
        Parse postfix chains, left to right:
        - field access: expr.field
        - indexing: expr[index]
        - calls: expr(args)
        """
        node = self.parse_primary_expr()

        while True:
            if self.check(TT.DOT):
                self.advance()
                name = self.expect(TT.IDENT, f"Expected property name after '.', got {self.current.type.name}")
                node = ast.field(node, _leaf(name))
            elif self.check(TT.LSQB):
                lsqb = self.advance()
                key = self.parse_expr()
                self.expect(TT.RSQB)
                node = ast.index(node, key, lsqb.line)
            elif self.check(TT.LPAR):
                lpar = self.advance()
                args = self.parse_arg_list()
                self.expect(TT.RPAR)
                node = ast.call(node, args, lpar.line)
            else:
                return node

    def parse_primary_expr(self) -> Tree | Token:
        """Parse primary: literals, identifiers, parens, object/array/function literals"""
        tok = self.current

        if tok.type in (TT.NUMBER, TT.STRING, TT.IDENT):
            self.advance()
            return _leaf(tok)

        if tok.type == TT.LPAR:
            self.advance()
            expr = self.parse_expr()
            self.expect(TT.RPAR)
            return expr

        if tok.type == TT.LBRACE:
            return self.parse_object_literal()

        if tok.type == TT.LSQB:
            return self.parse_array_literal()

        if tok.type == TT.FUNC:
            self.advance()
            params = self.parse_param_list()
            body = self.parse_block()
            return ast.fn_literal(params, body, tok.line)

        raise ParseError(f"Unexpected token {tok.type.name} {tok.value!r}", tok, expected="expression")

    def parse_arg_list(self) -> List[Tree | Token]:
        """Parse call arguments up to (not including) ')'"""
        args = []

        if self.check(TT.RPAR):
            return args

        args.append(self.parse_expr())
        while self.match(TT.COMMA):
            args.append(self.parse_expr())

        return args

    def parse_array_literal(self) -> Tree:
        """Parse [a, b, c]"""
        lsqb = self.expect(TT.LSQB)
        elements = []

        if not self.check(TT.RSQB):
            elements.append(self.parse_expr())
            while self.match(TT.COMMA):
                elements.append(self.parse_expr())

        self.expect(TT.RSQB, f"Expected ']' or ',', got {self.current.type.name}")
        return ast.array(elements, lsqb.line)

    def parse_object_literal(self) -> Tree:
        """
        Parse { key, key: expr, ... }

        A key with no ':' is shorthand for a variable of the same name.
        A trailing comma is allowed.
        """
        lbrace = self.expect(TT.LBRACE)
        props = []

        while not self.check(TT.RBRACE, TT.EOF):
            key = self.expect(TT.IDENT, f"Expected property key, got {self.current.type.name}")
            value = None
            if self.match(TT.COLON):
                value = self.parse_expr()
            props.append(ast.prop(_leaf(key), value))

            if not self.match(TT.COMMA):
                break

        self.expect(TT.RBRACE, f"Expected '}}' or ',', got {self.current.type.name}")
        return ast.obj(props, lbrace.line)


def parse_tokens(tokens: List[Tok]) -> Tree:
    """Parse an already-tokenized program"""
    return Parser(tokens).parse()

def parse_source(source: str) -> Tree:
    """Tokenize and parse source text into a program tree"""
    return Parser(tokenize(source)).parse()

def produce_ast(source: str) -> Tree:
    """Public entry point: source text -> program tree"""
    return parse_source(source)

parse_program = produce_ast

def parse_expr_fragment(source: str) -> Tree | Token:
    """Parse a single expression, requiring the whole input to be consumed"""
    parser = Parser(tokenize(source))
    expr = parser.parse_expr()
    if not parser.check(TT.EOF):
        raise ParseError(f"Unexpected trailing {parser.current.type.name}", parser.current)
    return expr
