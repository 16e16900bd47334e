"""
Provider Definition Parser.

Converts the token stream from the lexer into a ProviderFile. Implements
recursive descent parsing for the grammar:

    file     := provider+ EOF
    provider := "provider" IDENT "{" probe* "}" ";"?
    probe    := "probe" IDENT "(" [ type ( "," type )* ","? ] ")" ";"
    type     := IDENT | "char" "*"

Parsing stops at the first error; there is no recovery.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..model import Argument, Probe, Provider, ProviderFile, SourcePosition
from ..utils.exceptions import UnexpectedToken, UnknownType, UnterminatedBlock
from ..utils.logging import UsdtLogger
from ..utils.type_mapping import TypeMapper, get_type_mapper
from .lexer import Lexer, Token, TokenType, decode_source

_log = UsdtLogger(__name__)


class Parser:
    """
    Recursive descent parser for provider definitions.

    Consumes tokens from the lexer and builds the immutable model.
    """

    def __init__(self, tokens: Iterable[Token], source_name: str = "<string>",
                 type_mapper: Optional[TypeMapper] = None):
        """
        Initialize parser.

        Args:
            tokens: Tokens ending with EOF; a Lexer is consumed lazily so a
                lexical error is only raised once parsing reaches it
            source_name: Source name recorded in the parsed file
            type_mapper: Closed type table used to resolve argument types
        """
        self._source = iter(tokens)
        self.tokens: List[Token] = []
        self.source_name = source_name
        self.type_mapper = type_mapper or get_type_mapper()
        self.pos = 0
        self._open_block: Optional[SourcePosition] = None

    def _fill(self, pos: int) -> Token:
        while len(self.tokens) <= pos:
            if self.tokens and self.tokens[-1].type is TokenType.EOF:
                return self.tokens[-1]
            self.tokens.append(next(self._source))
        return self.tokens[pos]

    def current_token(self) -> Token:
        """Get current token."""
        return self._fill(self.pos)

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        return self._fill(self.pos + offset)

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        return self.current_token().type in token_types

    def unexpected(self, expected: str) -> Union[UnexpectedToken, UnterminatedBlock]:
        """Build the error for the current token."""
        token = self.current_token()
        if token.type is TokenType.EOF and self._open_block is not None:
            return UnterminatedBlock("provider block", self._open_block)
        return UnexpectedToken(token.describe(), token.position, expected)

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            UnexpectedToken: If token doesn't match
            UnterminatedBlock: If input ends inside a provider block
        """
        if not self.match(token_type):
            raise self.unexpected(token_type.value)
        return self.advance()

    def parse_file(self) -> ProviderFile:
        if self.match(TokenType.EOF):
            raise self.unexpected(TokenType.PROVIDER.value)

        providers = []
        while not self.match(TokenType.EOF):
            providers.append(self.parse_provider())
        return ProviderFile(providers=tuple(providers), source_name=self.source_name)

    def parse_provider(self) -> Provider:
        self.expect(TokenType.PROVIDER)
        name = self.expect(TokenType.IDENTIFIER)
        self._open_block = self.expect(TokenType.LBRACE).position

        probes = []
        while True:
            if self.match(TokenType.PROBE):
                probes.append(self.parse_probe())
            elif self.match(TokenType.RBRACE):
                self.advance()
                break
            else:
                raise self.unexpected("'probe' or '}'")
        self._open_block = None

        if self.match(TokenType.SEMICOLON):
            self.advance()
        return Provider(name=name.value, probes=tuple(probes), position=name.position)

    def parse_probe(self) -> Probe:
        self.expect(TokenType.PROBE)
        name = self.expect(TokenType.IDENTIFIER)
        self.expect(TokenType.LPAREN)

        arguments: List[Argument] = []
        if not self.match(TokenType.RPAREN):
            while True:
                arguments.append(self.parse_argument(len(arguments)))
                if self.match(TokenType.RPAREN):
                    break
                if not self.match(TokenType.COMMA):
                    raise self.unexpected("',' or ')'")
                self.advance()
                # Trailing comma
                if self.match(TokenType.RPAREN):
                    break

        self.expect(TokenType.RPAREN)
        self.expect(TokenType.SEMICOLON)
        return Probe(name=name.value, arguments=tuple(arguments), position=name.position)

    def parse_argument(self, index: int) -> Argument:
        token = self.expect(TokenType.IDENTIFIER)
        type_name = token.value
        if self.match(TokenType.STAR):
            self.advance()
            type_name = f"{type_name} *"

        if not self.type_mapper.is_known(type_name):
            raise UnknownType(type_name, token.position)
        canonical = self.type_mapper.resolve(type_name).value
        return Argument(index=index, type_name=canonical, position=token.position)


def parse(text: str, source_name: str = "<string>",
          type_mapper: Optional[TypeMapper] = None) -> ProviderFile:
    """
    Parse provider source text.

    Args:
        text: Provider definition source
        source_name: Name recorded in the result and used in messages
        type_mapper: Closed type table, defaults to the global one

    Returns:
        Parsed (not yet validated) ProviderFile

    Raises:
        ProbeSyntaxError: On the first syntax error
    """
    provider_file = Parser(Lexer(text), source_name, type_mapper).parse_file()
    _log.log_parse_complete(source_name, len(provider_file.providers), provider_file.probe_count)
    return provider_file


def parse_file(path: Union[str, Path], type_mapper: Optional[TypeMapper] = None) -> ProviderFile:
    """Read and parse a provider definition file."""
    path = Path(path)
    return parse(decode_source(path.read_bytes()), str(path), type_mapper)
