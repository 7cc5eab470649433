"""
Lumos Lexer
===========
Tokenizes Lumos source code into a stream of typed tokens.
Handles identifiers/keywords, numbers, quoted strings, operators and punctuation.
Comments (`#` or `//` to end of line) are skipped, never tokenized.
"""
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .errors import LexError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """All token types in the Lumos language."""
    NUMBER      = auto()
    STRING      = auto()
    IDENTIFIER  = auto()
    KEYWORD     = auto()
    OPERATOR    = auto()   # + - * / % = < > ! & | and two-char forms
    SYMBOL      = auto()   # ( ) { } [ ] , . ; :
    EOF         = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the Lumos source."""
    type: TokenType
    value: str
    line: int
    col: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.col})"


KEYWORDS = frozenset({
    "let", "const", "var", "function", "def", "class", "extends",
    "if", "else", "elsif", "while", "for", "to",
    "return", "break", "continue", "try", "catch", "finally", "throw",
    "true", "false", "null", "undefined", "this", "new",
    "import", "export", "from", "as",
    "and", "or", "not",
})

OPERATOR_CHARS = frozenset("+-*/%=<>!&|")
PUNCTUATION_CHARS = frozenset("(){}[],.;:")
TWO_CHAR_OPERATORS = frozenset({
    "==", "!=", "<=", ">=", "&&", "||", "++", "--", "+=", "-=", "*=", "/=", "=>",
})

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_part(ch: str) -> bool:
    return _is_ident_start(ch) or _is_digit(ch)


class Lexer:
    """
    Tokenizes Lumos source code.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    A Lexer holds its cursor state; create a new one per source text.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1

    def _current(self) -> str | None:
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> str | None:
        idx = self.pos + offset
        if idx >= len(self.source):
            return None
        return self.source[idx]

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _skip_whitespace(self):
        while self.pos < len(self.source) and self.source[self.pos].isspace():
            self._advance()

    def _at_comment(self) -> bool:
        ch = self._current()
        return ch == "#" or (ch == "/" and self._peek() == "/")

    def _skip_comment(self):
        while self.pos < len(self.source) and self._current() != "\n":
            self._advance()

    def _read_string(self) -> Token:
        """Read a single- or double-quoted string literal.

        An unterminated string runs to end of input.
        """
        start_line, start_col = self.line, self.col
        quote = self._advance()
        chars = []
        while self.pos < len(self.source):
            ch = self._advance()
            if ch == quote:
                break
            if ch == "\\" and self.pos < len(self.source):
                next_ch = self._advance()
                if next_ch == quote:
                    chars.append(quote)
                else:
                    chars.append(ESCAPES.get(next_ch, next_ch))
            else:
                chars.append(ch)
        return Token(TokenType.STRING, "".join(chars), start_line, start_col)

    def _read_number(self) -> Token:
        """Read a numeric literal: digits with at most one dot."""
        start_line, start_col = self.line, self.col
        chars = []
        has_dot = False
        while self.pos < len(self.source):
            ch = self._current()
            if _is_digit(ch):
                chars.append(self._advance())
            elif ch == "." and not has_dot:
                has_dot = True
                chars.append(self._advance())
            else:
                break
        return Token(TokenType.NUMBER, "".join(chars), start_line, start_col)

    def _read_identifier(self) -> Token:
        """Read an identifier or keyword."""
        start_line, start_col = self.line, self.col
        chars = []
        while self.pos < len(self.source) and _is_ident_part(self._current()):
            chars.append(self._advance())
        word = "".join(chars)
        token_type = TokenType.KEYWORD if word in KEYWORDS else TokenType.IDENTIFIER
        return Token(token_type, word, start_line, start_col)

    def _read_operator(self) -> Token:
        """Read an operator, preferring the two-character form."""
        line, col = self.line, self.col
        op = self._advance()
        nxt = self._current()
        if nxt is not None and op + nxt in TWO_CHAR_OPERATORS:
            op += self._advance()
        return Token(TokenType.OPERATOR, op, line, col)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into a list of tokens ending with EOF."""
        tokens = list(self._iter_tokens())
        tokens.append(Token(TokenType.EOF, "", self.line, self.col))
        logger.debug("Tokenized %d characters into %d tokens", len(self.source), len(tokens))
        return tokens

    def _iter_tokens(self) -> Iterator[Token]:
        """Generate tokens one at a time."""
        while self.pos < len(self.source):
            self._skip_whitespace()

            if self.pos >= len(self.source):
                break

            if self._at_comment():
                self._skip_comment()
                continue

            ch = self._current()

            if _is_ident_start(ch):
                yield self._read_identifier()
                continue

            if _is_digit(ch):
                yield self._read_number()
                continue

            if ch in ('"', "'"):
                yield self._read_string()
                continue

            if ch in OPERATOR_CHARS:
                yield self._read_operator()
                continue

            if ch in PUNCTUATION_CHARS:
                yield Token(TokenType.SYMBOL, ch, self.line, self.col)
                self._advance()
                continue

            raise LexError(ch, self.line, self.col)


def tokenize(source: str) -> list[Token]:
    """Tokenize `source` with a fresh Lexer."""
    return Lexer(source).tokenize()
