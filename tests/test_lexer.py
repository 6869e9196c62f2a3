from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pytest

from tests.support.harness import lex_types
from avii_ref.lexer_rd import LexError, TT, decode_string_body, tokenize


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, object], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None
    expected_lines: Optional[Tuple[Tuple[str, int], ...]] = None
    exc: Optional[type[Exception]] = None
    msg: Optional[str] = None
    err_line: Optional[int] = None
    err_col: Optional[int] = None


BASIC_TOKEN_CASES: List[Case] = [
    Case("number-int", "123", expected=((TT.NUMBER, "123"),)),
    Case("number-float", "3.14", expected=((TT.NUMBER, "3.14"),)),
    Case("number-leading-zero", "007", expected=((TT.NUMBER, "007"),)),
    Case("ident-single", "x", expected=((TT.IDENT, "x"),)),
    Case("ident-snake", "foo_bar", expected=((TT.IDENT, "foo_bar"),)),
    Case("ident-underscore-digits", "_a1", expected=((TT.IDENT, "_a1"),)),
    Case("string-double", '"hello"', expected=((TT.STRING, "hello"),)),
    Case("string-empty", '""', expected=((TT.STRING, ""),)),
    Case("true-is-ident", "true", expected=((TT.IDENT, "true"),)),
    Case("null-is-ident", "null", expected=((TT.IDENT, "null"),)),
    Case("keyword-prefix-ident", "letter", expected=((TT.IDENT, "letter"),)),
    Case(
        "number-then-ident",
        "12ab",
        expected=((TT.NUMBER, "12"), (TT.IDENT, "ab")),
    ),
]

OPERATOR_CASES: List[Case] = [
    Case("plus", "+", expected_types=(TT.BINOP,)),
    Case("minus", "-", expected_types=(TT.BINOP,)),
    Case("star", "*", expected_types=(TT.BINOP,)),
    Case("slash", "/", expected_types=(TT.BINOP,)),
    Case("percent", "%", expected_types=(TT.BINOP,)),
    Case("caret", "^", expected_types=(TT.BINOP,)),
    Case("eq", "==", expected_types=(TT.CONDOP,)),
    Case("neq", "!=", expected_types=(TT.CONDOP,)),
    Case("assign", "=", expected_types=(TT.EQUALS,)),
    Case("eq-then-assign", "===", expected_types=(TT.CONDOP, TT.EQUALS)),
    Case(
        "punctuation",
        "(){}[],:;.",
        expected_types=(
            TT.LPAR,
            TT.RPAR,
            TT.LBRACE,
            TT.RBRACE,
            TT.LSQB,
            TT.RSQB,
            TT.COMMA,
            TT.COLON,
            TT.SEMI,
            TT.DOT,
        ),
    ),
]

KEYWORD_CASES: List[Case] = [
    Case("let", "let", expected_types=(TT.LET,)),
    Case("const", "const", expected_types=(TT.CONST,)),
    Case("func", "func", expected_types=(TT.FUNC,)),
    Case("if", "if", expected_types=(TT.IF,)),
    Case("else", "else", expected_types=(TT.ELSE,)),
    Case("and", "and", expected_types=(TT.CONDOP,)),
    Case("or", "or", expected_types=(TT.CONDOP,)),
]

STRING_ESCAPE_CASES: List[Case] = [
    Case("escape-newline", r'"a\nb"', expected=((TT.STRING, "a\nb"),)),
    Case("escape-tab", r'"a\tb"', expected=((TT.STRING, "a\tb"),)),
    Case("escape-quote", r'"say \"hi\""', expected=((TT.STRING, 'say "hi"'),)),
    Case("escape-backslash", r'"c:\\tmp"', expected=((TT.STRING, "c:\\tmp"),)),
    Case("escape-nul", r'"\0"', expected=((TT.STRING, "\0"),)),
    Case("raw-newline", '"a\nb"', expected=((TT.STRING, "a\nb"),)),
]

POSITION_CASES: List[Case] = [
    Case(
        "multi-line",
        "let a = 1\nlet b = 2\n\nlet c = 3",
        expected_lines=(("a", 1), ("b", 2), ("c", 4)),
    ),
    Case(
        "string-spans-lines",
        'let s = "x\ny"\nlet after = 1',
        expected_lines=(("s", 1), ("after", 3)),
    ),
]

LEX_ERROR_CASES: List[Case] = [
    Case(
        "unexpected-char",
        "x = @",
        exc=LexError,
        msg="Unexpected character '@'",
        err_line=1,
        err_col=5,
    ),
    Case(
        "unexpected-char-line-two",
        "let a = 1\n  #",
        exc=LexError,
        msg="Unexpected character '#'",
        err_line=2,
        err_col=3,
    ),
    Case("bang-alone", "!", exc=LexError, msg="Unexpected character '!'"),
    Case("unterminated-string", '"abc', exc=LexError, msg="Unterminated string", err_line=1),
    Case("invalid-escape", r'"\q"', exc=LexError, msg="Invalid escape sequence"),
    Case("trailing-dot-number", "1.", exc=LexError, msg="Malformed number"),
    Case("non-ascii-letter", "é", exc=LexError, msg="Unexpected character"),
]


def _non_eof_tokens(source: str) -> List[object]:
    return [token for token in tokenize(source) if token.type != TT.EOF]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda case: case.name)
def test_basic_tokens(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)

    assert case.expected is not None
    assert len(tokens) == len(case.expected)
    for token, (expected_type, expected_value) in zip(tokens, case.expected):
        assert token.type == expected_type
        assert token.value == expected_value


@pytest.mark.parametrize("case", OPERATOR_CASES, ids=lambda case: case.name)
def test_operators(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)
    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", KEYWORD_CASES, ids=lambda case: case.name)
def test_keywords(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)
    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", STRING_ESCAPE_CASES, ids=lambda case: case.name)
def test_string_escapes(case: Case) -> None:
    tokens = [token for token in tokenize(case.source) if token.type == TT.STRING]
    assert case.expected is not None
    assert len(tokens) == 1
    assert tokens[0].value == case.expected[0][1]


@pytest.mark.parametrize("case", POSITION_CASES, ids=lambda case: case.name)
def test_position_tracking(case: Case) -> None:
    assert case.expected_lines is not None
    tokens = tokenize(case.source)
    actual_lines: Dict[str, int] = {}
    for token in tokens:
        if token.value in dict(case.expected_lines):
            actual_lines[str(token.value)] = token.line

    for value, expected_line in case.expected_lines:
        assert value in actual_lines
        assert actual_lines[value] == expected_line


@pytest.mark.parametrize("case", LEX_ERROR_CASES, ids=lambda case: case.name)
def test_lex_errors(case: Case) -> None:
    assert case.exc is not None
    assert case.msg is not None
    with pytest.raises(case.exc) as exc_info:
        tokenize(case.source)

    err = exc_info.value
    assert case.msg in str(err)

    if case.err_line is not None:
        assert err.line == case.err_line, f"expected line {case.err_line}, got {err.line}"
    if case.err_col is not None:
        assert err.column == case.err_col, f"expected column {case.err_col}, got {err.column}"


def test_stream_ends_with_single_eof() -> None:
    for source in ["", "   \n\t", "let x = 1;"]:
        tokens = tokenize(source)
        assert tokens[-1].type == TT.EOF
        assert sum(1 for tok in tokens if tok.type == TT.EOF) == 1


def test_whitespace_emits_no_tokens() -> None:
    assert lex_types("let\n\tx\r\n=   1") == ["LET", "IDENT", "EQUALS", "NUMBER", "EOF"]


def test_columns_are_one_based() -> None:
    tokens = tokenize("let  xy = 10")
    assert [(tok.value, tok.column) for tok in tokens[:4]] == [
        ("let", 1),
        ("xy", 6),
        ("=", 9),
        ("10", 11),
    ]


def test_member_chain_tokens() -> None:
    assert lex_types("a.b[0](1, 2)") == [
        "IDENT",
        "DOT",
        "IDENT",
        "LSQB",
        "NUMBER",
        "RSQB",
        "LPAR",
        "NUMBER",
        "COMMA",
        "NUMBER",
        "RPAR",
        "EOF",
    ]


def test_decode_string_body_matches_lexer() -> None:
    assert decode_string_body(r"tab\there \"q\"") == 'tab\there "q"'
    with pytest.raises(LexError):
        decode_string_body("dangling\\")
