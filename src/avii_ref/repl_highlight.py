"""prompt_toolkit lexer for live Avii syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as AviiTokenizer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.LET: "keyword",
    TT.CONST: "keyword",
    TT.FUNC: "keyword",
    TT.IF: "keyword",
    TT.ELSE: "keyword",
    TT.CONDOP: "operator",
    TT.BINOP: "operator",
    TT.EQUALS: "operator",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.DOT: "punctuation",
    TT.COMMA: "punctuation",
    TT.COLON: "punctuation",
    TT.SEMI: "punctuation",
}

# and/or lex as CONDOP but read as keywords.
_WORD_OPS = {"and", "or"}
_CONSTANTS = {"true", "false", "null", "PI"}


def _string_end(text: str, start: int) -> int:
    """Index just past the closing quote of the literal opening at `start`."""
    i = start + 1
    while i < len(text):
        if text[i] == '\\':
            i += 2
            continue
        if text[i] == '"':
            return i + 1
        i += 1

    return len(text)


def _group_for(tokens: list[Tok], idx: int) -> str:
    tok = tokens[idx]
    if tok.type == TT.CONDOP and tok.value in _WORD_OPS:
        return "keyword"

    if tok.type == TT.IDENT:
        if tok.value in _CONSTANTS:
            return "constant"
        if idx + 1 < len(tokens) and tokens[idx + 1].type == TT.LPAR:
            return "function"

    return _TT_GROUP.get(tok.type, "")


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = AviiTokenizer(text).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF:
            break

        start = tok.column - 1
        if start < pos:
            continue

        # String values are decoded; take the raw span from the line itself.
        if tok.type == TT.STRING:
            end = _string_end(text, start)
        else:
            end = start + len(tok.value)

        if start > pos:
            result.append(("", text[pos:start]))

        result.append((GROUP_STYLE.get(_group_for(tokens, i), ""), text[start:end]))
        pos = end

    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class AviiLexer(Lexer):
    """prompt_toolkit Lexer that highlights Avii source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
