"""
Tokenizer for provider definition files.

Whitespace is space, tab, CR and LF. Comments are ``/* ... */`` (not nested)
and ``// ...`` to the end of the line. Anything else that is not an
identifier or one of the punctuation characters ``{ } ( ) , ; *`` is
rejected; there is no lenient fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List

from ..model import SourcePosition
from ..utils.exceptions import UnexpectedToken, UnterminatedBlock


class TokenType(Enum):
    PROVIDER = "'provider'"
    PROBE = "'probe'"
    IDENTIFIER = "identifier"
    LBRACE = "'{'"
    RBRACE = "'}'"
    LPAREN = "'('"
    RPAREN = "')'"
    COMMA = "','"
    SEMICOLON = "';'"
    STAR = "'*'"
    EOF = "end of input"


KEYWORDS = {
    "provider": TokenType.PROVIDER,
    "probe": TokenType.PROBE,
}

PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}

WHITESPACE = " \t\r\n"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    position: SourcePosition

    def describe(self) -> str:
        if self.type is TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        return self.type.value


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or ("0" <= ch <= "9")


class Lexer:
    """Converts provider source text into tokens ending in EOF, one at a time."""

    def __init__(self, text: str):
        self.text = text
        self.offset = 0
        self.line = 1
        self.column = 1

    def position(self) -> SourcePosition:
        return SourcePosition(self.line, self.column, self.offset)

    def _peek(self, ahead: int = 0) -> str:
        index = self.offset + ahead
        return self.text[index] if index < len(self.text) else ""

    def _advance(self) -> str:
        ch = self.text[self.offset]
        self.offset += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _skip_block_comment(self) -> None:
        start = self.position()
        self._advance()
        self._advance()
        while self.offset < len(self.text):
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()
        raise UnterminatedBlock("comment", start)

    def _skip_line_comment(self) -> None:
        while self.offset < len(self.text) and self._peek() != "\n":
            self._advance()

    def next_token(self) -> Token:
        """Scan the next token; returns EOF once the input is exhausted."""
        while self.offset < len(self.text):
            ch = self._peek()

            if ch in WHITESPACE:
                self._advance()
                continue

            if ch == "/" and self._peek(1) == "*":
                self._skip_block_comment()
                continue
            if ch == "/" and self._peek(1) == "/":
                self._skip_line_comment()
                continue

            start = self.position()
            if ch in PUNCTUATION:
                self._advance()
                return Token(PUNCTUATION[ch], ch, start)

            if _is_ident_start(ch):
                begin = self.offset
                while self.offset < len(self.text) and _is_ident_char(self._peek()):
                    self._advance()
                word = self.text[begin:self.offset]
                return Token(KEYWORDS.get(word, TokenType.IDENTIFIER), word, start)

            raise UnexpectedToken(f"character {ch!r}", start)

        return Token(TokenType.EOF, "", self.position())

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens on demand, ending with a single EOF token."""
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    def tokenize(self) -> List[Token]:
        return list(self)


def decode_source(data: bytes) -> str:
    """
    Decode provider source bytes as UTF-8.

    Raises:
        UnexpectedToken: At the line and column of the first invalid byte
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        prefix = data[:e.start].decode("utf-8")
        line_start = prefix.rfind("\n") + 1
        position = SourcePosition(prefix.count("\n") + 1, len(prefix) - line_start + 1, len(prefix))
        raise UnexpectedToken(f"byte 0x{data[e.start]:02x}", position, "UTF-8 text")


def tokenize(text: str) -> List[Token]:
    """Tokenize provider source text."""
    return Lexer(text).tokenize()
