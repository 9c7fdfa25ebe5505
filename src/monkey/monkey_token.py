"""
Token model for the Monkey scripting language.

This module defines the vocabulary shared by the lexer and the parser:

Classes:
    TokenType: Closed enumeration of every token kind the lexer can produce.
    Token: A single token with its kind, exact source text, and location.

Tables:
    keywords: Reserved words mapped to their keyword token kind.
    operators: Operator and delimiter text mapped to its token kind.

Both tables are read-only views built once at import time.

Example:
    >>> lookup_ident("let")
    <TokenType.LET: 'LET'>
    >>> lookup_ident("letter")
    <TokenType.IDENT: 'IDENT'>

Exports:
    - TokenType
    - Token
    - keywords
    - operators
    - lookup_ident
"""

from enum import Enum
from types import MappingProxyType
from typing import Any


class TokenType(str, Enum):
    """Token kinds. The value is the text used when a kind appears in a diagnostic."""

    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers + literals
    IDENT = "IDENT"
    INT = "INT"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"

    def __str__(self) -> str:
        return self.value


keywords: MappingProxyType[str, TokenType] = MappingProxyType(
    {
        "fn": TokenType.FUNCTION,
        "let": TokenType.LET,
        "true": TokenType.TRUE,
        "false": TokenType.FALSE,
        "if": TokenType.IF,
        "else": TokenType.ELSE,
        "return": TokenType.RETURN,
    }
)

operators: MappingProxyType[str, TokenType] = MappingProxyType(
    {
        "=": TokenType.ASSIGN,
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "!": TokenType.BANG,
        "*": TokenType.ASTERISK,
        "/": TokenType.SLASH,
        "<": TokenType.LT,
        ">": TokenType.GT,
        "==": TokenType.EQ,
        "!=": TokenType.NOT_EQ,
        ",": TokenType.COMMA,
        ";": TokenType.SEMICOLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
    }
)


def lookup_ident(ident: str) -> TokenType:
    """Classifies an identifier run as a keyword kind or IDENT.

    Args:
        ident (str): The full identifier text read by the lexer.

    Returns:
        TokenType: The keyword kind on an exact match, otherwise IDENT.
    """
    return keywords.get(ident, TokenType.IDENT)


class Token:
    """A single lexical token.

    Attributes:
        type (TokenType): The token kind.
        literal (str): The exact source text of the token ("" for EOF).
        line (int): The 1-based line where the token starts (0 if synthetic).
        col (int): The 1-based column where the token starts (0 if synthetic).
    """

    __slots__ = ("type", "literal", "line", "col")

    def __init__(self, type_: TokenType, literal: str, line: int = 0, col: int = 0):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable, cannot set {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.literal!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.literal == other.literal
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.literal, self.line, self.col))


__all__ = ["Token", "TokenType", "keywords", "lookup_ident", "operators"]
