"""
Provider definition frontend.

This package turns provider definition text into a validated model:
- lexer: tokenizer with the comment and whitespace rules
- parser: recursive descent parser producing a ProviderFile
- validator: exhaustive semantic checks
"""

from .lexer import Lexer, Token, TokenType, decode_source, tokenize
from .parser import Parser, parse, parse_file
from .validator import Validator, ensure_valid, validate

__all__ = [
    "Token",
    "TokenType",
    "Lexer",
    "decode_source",
    "tokenize",
    "Parser",
    "parse",
    "parse_file",
    "Validator",
    "validate",
    "ensure_valid",
]
