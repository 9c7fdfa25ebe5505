"""
Lexical analyzer for the Monkey scripting language.

This module converts raw source text into a pull-based stream of tokens:

Classes:
    Lexer: Reads the source one character at a time and produces tokens on demand.

Functions:
    tokenize: Drains a fresh Lexer into a list, EOF included.

Features:
    - Skips whitespace (space, tab, newline, carriage return)
    - Longest-match recognition of operators and delimiters (`==` before `=`)
    - Recognizes:
        * Identifiers and keywords (ASCII letters and underscores)
        * Integer literals (decimal digit runs)
        * Operators and punctuation

The lexer never raises on bad input. Unrecognized characters become ILLEGAL
tokens and the parser decides what to do with them. Once the input is
exhausted every further call returns an EOF token.

Example:
    >>> lexer = Lexer("let x = 5;")
    >>> lexer.next_token()
    Token(LET, 'let')

Exports:
    - Lexer
    - tokenize
"""

from collections.abc import Iterator

from monkey.monkey_token import Token, TokenType, lookup_ident, operators

_WHITESPACE = frozenset(" \t\n\r")
_MAX_OPERATOR_LEN = max(len(op) for op in operators)


def is_letter(ch: str) -> bool:
    """Returns True for ASCII letters and underscore, the identifier characters."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_digit(ch: str) -> bool:
    """Returns True for the decimal digits 0-9."""
    return "0" <= ch <= "9"


class Lexer:
    """Lexical analyzer for Monkey source text.

    The cursor always satisfies ``read_position == position + 1`` and ``ch`` is
    the character at ``position``, or "" once the input is exhausted.

    Attributes:
        input (str): The source text being scanned.
        position (int): Index of the current character.
        read_position (int): Index of the next character to read.
        ch (str): The current character, or "" at end of input.
        line (int): 1-based line of the current character.
        col (int): 1-based column of the current character.
    """

    def __init__(self, source: str) -> None:
        self.input = source
        self.position = 0
        self.read_position = 0
        self.ch = ""
        self.line = 1
        self.col = 0
        self.read_char()

    def __iter__(self) -> Iterator[Token]:
        """Yields tokens up to and including the first EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TokenType.EOF:
                return

    def read_char(self) -> None:
        """Advances the cursor by one character."""
        if self.ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1

        if self.read_position >= len(self.input):
            self.ch = ""
        else:
            self.ch = self.input[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def peek_char(self, offset: int = 0) -> str:
        """Returns the character ``offset`` places after the current one, or ""."""
        index = self.read_position + offset
        if index >= len(self.input):
            return ""
        return self.input[index]

    def at_end(self) -> bool:
        """Returns True once the cursor has moved past the last character."""
        return self.position >= len(self.input)

    def skip_whitespace(self) -> None:
        """Advances past spaces, tabs, newlines and carriage returns."""
        while not self.at_end() and self.ch in _WHITESPACE:
            self.read_char()

    def read_identifier(self) -> str:
        """Consumes the maximal run of identifier characters and returns it."""
        start = self.position
        while not self.at_end() and is_letter(self.ch):
            self.read_char()
        return self.input[start : self.position]

    def read_number(self) -> str:
        """Consumes the maximal run of decimal digits and returns it."""
        start = self.position
        while not self.at_end() and is_digit(self.ch):
            self.read_char()
        return self.input[start : self.position]

    def match_operator(self, line: int, col: int) -> Token | None:
        """Attempts to match the longest operator starting at the current character.

        Args:
            line (int): Line of the current character.
            col (int): Column of the current character.

        Returns:
            Token | None: The operator token with the cursor moved past it, or None.
        """
        candidate = self.ch
        best = candidate if candidate in operators else ""
        for offset in range(_MAX_OPERATOR_LEN - 1):
            nxt = self.peek_char(offset)
            if nxt == "":
                break
            candidate += nxt
            if candidate in operators:
                best = candidate

        if not best:
            return None
        for _ in range(len(best)):
            self.read_char()
        return Token(operators[best], best, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the input.

        Returns:
            Token: The next token. EOF is returned indefinitely once the input
            is exhausted.
        """
        self.skip_whitespace()
        line, col = self.line, self.col

        if self.at_end():
            return Token(TokenType.EOF, "", line, col)

        # Identifier or keyword; the cursor already sits past the run
        if is_letter(self.ch):
            ident = self.read_identifier()
            return Token(lookup_ident(ident), ident, line, col)

        if is_digit(self.ch):
            return Token(TokenType.INT, self.read_number(), line, col)

        tok = self.match_operator(line, col)
        if tok is not None:
            return tok

        tok = Token(TokenType.ILLEGAL, self.ch, line, col)
        self.read_char()
        return tok


def tokenize(source: str) -> list[Token]:
    """Lexes ``source`` completely and returns every token, EOF included."""
    return list(Lexer(source))


__all__ = ["Lexer", "tokenize"]
