"""
Lexer for Avii - Recursive Descent Parser

Tokenizes Avii source code into a stream of tokens.

Features:
- Single-pass tokenization
- Line/column tracking (newlines emit no token)
- String literals with backslash escapes, decoded at lex time
- Every stream ends with exactly one EOF token
"""

import logging
from typing import List, Optional

from .token_types import TT, Tok

logger = logging.getLogger(__name__)

# Escape sequences recognized inside "..." literals.
ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '0': '\0',
    '"': '"',
    "'": "'",
    '\\': '\\',
}


class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, char: Optional[str] = None, line: int = 0, column: int = 0):
        self.message = message
        self.char = char
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}" if line else message)


def decode_escape(ch: str, line: int = 0) -> str:
    """Map the character after a backslash to the character it denotes."""
    try:
        return ESCAPES[ch]
    except KeyError:
        raise LexError(f"Invalid escape sequence '\\{ch}'", ch, line) from None


def decode_string_body(body: str, line: int = 0) -> str:
    """Decode the text between the quotes of a string literal."""
    out: List[str] = []
    it = iter(body)

    for ch in it:
        if ch != '\\':
            out.append(ch)
            continue

        nxt = next(it, None)
        if nxt is None:
            raise LexError("Unterminated escape sequence", '\\', line)
        out.append(decode_escape(nxt, line))

    return ''.join(out)


# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """Avii lexer: source text -> List[Tok]."""

    # Keyword mapping
    KEYWORDS = {
        'let': TT.LET,
        'const': TT.CONST,
        'func': TT.FUNC,
        'if': TT.IF,
        'else': TT.ELSE,
        'and': TT.CONDOP,
        'or': TT.CONDOP,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.CONDOP),
        ('!=', TT.CONDOP),

        # Single-character operators
        ('+', TT.BINOP),
        ('-', TT.BINOP),
        ('*', TT.BINOP),
        ('/', TT.BINOP),
        ('%', TT.BINOP),
        ('^', TT.BINOP),
        ('=', TT.EQUALS),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
        ('.', TT.DOT),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.emit(TT.EOF, '', self.line, self.column)
        logger.debug("tokenized %d chars into %d tokens", len(self.source), len(self.tokens))
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.peek()

        if ch == '\n':
            self.advance()
            self.line += 1
            self.column = 1
            return

        if ch in (' ', '\t', '\r'):
            self.advance()
            return

        if ch == '"':
            self.scan_string()
            return

        if ch.isascii() and ch.isdigit():
            self.scan_number()
            return

        if self.is_ident_start(ch):
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal "..." and decode its escapes"""
        start_line, start_col = self.line, self.column
        self.advance()  # opening quote
        chars: List[str] = []

        while True:
            if self.pos >= len(self.source):
                raise LexError("Unterminated string", '"', start_line, start_col)

            ch = self.advance()
            if ch == '"':
                break

            if ch == '\\':
                if self.pos >= len(self.source):
                    raise LexError("Unterminated string", '"', start_line, start_col)
                chars.append(decode_escape(self.advance(), self.line))
                continue

            if ch == '\n':
                self.line += 1
                self.column = 1
            chars.append(ch)

        self.emit(TT.STRING, ''.join(chars), start_line, start_col)

    def scan_number(self):
        """Scan number literal: digits, optionally '.' digits"""
        start_col = self.column
        value = ''

        while self.is_digit(self.peek()):
            value += self.advance()

        if self.peek() == '.':
            if not self.is_digit(self.peek(1)):
                raise LexError(f"Malformed number '{value}.'", '.', self.line, self.column)
            value += self.advance()
            while self.is_digit(self.peek()):
                value += self.advance()

        self.emit(TT.NUMBER, value, self.line, start_col)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        start_col = self.column
        value = ''

        while self.is_ident_char(self.peek()):
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value, self.line, start_col)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                start_col = self.column
                self.advance(len(op_str))
                self.emit(op_type, op_str, self.line, start_col)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", ch, self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    @staticmethod
    def is_digit(ch: str) -> bool:
        return '0' <= ch <= '9'

    @staticmethod
    def is_ident_start(ch: str) -> bool:
        return ch == '_' or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')

    @classmethod
    def is_ident_char(cls, ch: str) -> bool:
        return cls.is_ident_start(ch) or cls.is_digit(ch)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        self.column += n
        return result

    def emit(self, token_type: TT, value: str, line: int, column: int):
        """Emit a token"""
        self.tokens.append(Tok(type=token_type, value=value, line=line, column=column))


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
