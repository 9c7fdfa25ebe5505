"""
Monkey Language Parser

Parses a Monkey token stream into an abstract syntax tree (AST).

Statements are parsed by recursive descent; expressions use operator-precedence
(Pratt) parsing driven by two handler tables keyed by token kind. A prefix handler
knows how to begin an expression with the current token, an infix handler knows
how to extend an already-parsed left operand.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;` and bare `return;`
    * Expression statements, with an optional trailing `;`
    * Brace blocks inside `if` and `fn`

- Expressions:
    * Identifiers, integer literals, `true` / `false`
    * Prefix `!` and `-`
    * Binary `+ - * / < > == !=`, left-associative
    * Grouping with `( )`
    * `if (<cond>) { ... } else { ... }`
    * Function literals `fn(a, b) { ... }` and calls `f(1, 2)`

Parser Behavior
---------------
- Never raises on malformed input. Every problem is appended to `Parser.errors`
  and parsing continues with the next token.
- A statement that fails to parse is dropped from the Program; the diagnostics it
  produced are kept.
- A non-empty `errors` list means the Program is partial and must not be handed to
  later stages.

Entry Points
------------
- `Parser(lexer).parse_program()`: Parse a full program.
- `parse(source)`: Lex and parse a string, returning the Program and diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum
from types import MappingProxyType
from typing import ClassVar

from monkey.monkey_ast import (
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from monkey.monkey_lexer import Lexer
from monkey.monkey_token import Token, TokenType

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

DEFAULT_MAX_DEPTH = 128


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2  # ==
    LESSGREATER = 3  # > or <
    SUM = 4  # +
    PRODUCT = 5  # *
    PREFIX = 6  # -X or !X
    CALL = 7  # myFunction(X)


precedences: MappingProxyType[TokenType, Precedence] = MappingProxyType(
    {
        TokenType.EQ: Precedence.EQUALS,
        TokenType.NOT_EQ: Precedence.EQUALS,
        TokenType.LT: Precedence.LESSGREATER,
        TokenType.GT: Precedence.LESSGREATER,
        TokenType.PLUS: Precedence.SUM,
        TokenType.MINUS: Precedence.SUM,
        TokenType.SLASH: Precedence.PRODUCT,
        TokenType.ASTERISK: Precedence.PRODUCT,
        TokenType.LPAREN: Precedence.CALL,
    }
)

PrefixParseFn = Callable[["Parser"], "Expression | None"]
InfixParseFn = Callable[["Parser", Expression], "Expression | None"]


class Parser:
    """
    Monkey Parser Class

    Pulls tokens from a Lexer, keeping the current token and one token of lookahead,
    and builds a Program. Diagnostics accumulate in `errors` instead of being raised.

    Attributes
    ----------
    lexer : Lexer
        The token source. Any object with a `next_token()` method is accepted.
    errors : list[str]
        Diagnostics recorded so far, in the order they were found.
    cur_token : Token
        The token under examination.
    peek_token : Token
        The token after `cur_token`.
    max_depth : int
        Deepest expression nesting accepted before a diagnostic is recorded.
    prefix_parse_fns : dict[TokenType, PrefixParseFn]
        Prefix handlers. Shared by every parser until `register_prefix` is called.
    infix_parse_fns : dict[TokenType, InfixParseFn]
        Infix handlers. Shared by every parser until `register_infix` is called.

    Methods
    -------
    parse_program() -> Program
        Parse statements until EOF.
    parse_statement() -> Statement | None
        Dispatch on the current token to the matching statement parser.
    parse_expression(precedence) -> Expression | None
        Pratt loop: prefix handler, then infix handlers while they bind tighter.
    next_token() -> None
        Shift the lookahead into the current token and pull a new one.
    expect_peek(token_type) -> bool
        Advance if the lookahead has the given kind, otherwise record a diagnostic.
    register_prefix(token_type, fn) / register_infix(token_type, fn)
        Add or replace a handler on this parser only.
    """

    prefix_parse_fns: ClassVar[dict[TokenType, PrefixParseFn]]
    infix_parse_fns: ClassVar[dict[TokenType, InfixParseFn]]

    def __init__(self, lexer: Lexer, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if not callable(getattr(lexer, "next_token", None)):
            raise TypeError(f"Parser needs a token source with next_token(), got {lexer!r}")

        self.lexer = lexer
        self.errors: list[str] = []
        self.max_depth = max_depth
        self._depth = 0

        self.cur_token = Token(TokenType.EOF, "")
        self.peek_token = Token(TokenType.EOF, "")

        # Read two tokens so cur_token and peek_token are both set
        self.next_token()
        self.next_token()

    # ------------------------------------------------------------------
    # Handler registration
    # ------------------------------------------------------------------

    def register_prefix(self, token_type: TokenType, fn: PrefixParseFn) -> None:
        """Adds or replaces the prefix handler for `token_type` on this parser only.

        Args:
            token_type (TokenType): The token kind that starts the expression.
            fn (PrefixParseFn): Called with the parser positioned on that token.
        """
        self.prefix_parse_fns = {**self.prefix_parse_fns, token_type: fn}  # type: ignore[misc]

    def register_infix(self, token_type: TokenType, fn: InfixParseFn) -> None:
        """Adds or replaces the infix handler for `token_type` on this parser only.

        The handler only runs if `token_type` also has an entry in `precedences`.

        Args:
            token_type (TokenType): The operator token kind.
            fn (InfixParseFn): Called with the parser on the operator and the left operand.
        """
        self.infix_parse_fns = {**self.infix_parse_fns, token_type: fn}  # type: ignore[misc]

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def next_token(self) -> None:
        """Shifts the lookahead into the current token and pulls a new lookahead."""
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, token_type: TokenType) -> bool:
        """Returns True if the current token has kind `token_type`."""
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: TokenType) -> bool:
        """Returns True if the lookahead token has kind `token_type`."""
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TokenType) -> bool:
        """Advances only if the lookahead token has the expected kind.

        Args:
            token_type (TokenType): The kind the next token must have.

        Returns:
            bool: True if the parser advanced. False means a diagnostic was recorded
            and the current construct should be abandoned.
        """
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self.peek_error(token_type)
        return False

    def peek_precedence(self) -> int:
        """Returns the binding power of the lookahead token, LOWEST if it has none."""
        return precedences.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> int:
        """Returns the binding power of the current token, LOWEST if it has none."""
        return precedences.get(self.cur_token.type, Precedence.LOWEST)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def peek_error(self, token_type: TokenType) -> None:
        """Records that the lookahead token was not `token_type`."""
        self.unexpected_token(token_type, self.peek_token.type)

    def unexpected_token(self, expected: TokenType, actual: TokenType) -> None:
        """Records an unexpected-token diagnostic.

        Args:
            expected (TokenType): The kind the grammar required.
            actual (TokenType): The kind that was found instead.
        """
        self.errors.append(
            f"expected next token to be {expected.value}, got {actual.value} instead"
        )

    def no_prefix_parse_fn_error(self, token_type: TokenType) -> None:
        """Records that no expression can start with `token_type`."""
        self.errors.append(f"no prefix parse function for {token_type.value} found")

    def nesting_error(self) -> None:
        """Records that an expression is nested deeper than `max_depth`."""
        self.errors.append(
            f"expression nesting exceeds maximum depth of {self.max_depth}"
        )
        logger.debug("depth limit hit at line %d", self.cur_token.line)

    def too_tall(self, node: Expression) -> bool:
        """Checks the height of a freshly built expression against `max_depth`.

        Args:
            node (Expression): The expression just returned by a handler.

        Returns:
            bool: True if the tree is too tall; a diagnostic was recorded.
        """
        if node.height() <= self.max_depth:
            return False
        self.nesting_error()
        return True

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until EOF and return the Program."""
        program = Program()
        while not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                program.statements.append(stmt)
            self.next_token()
        return program

    def parse_statement(self) -> Statement | None:
        """Parse one statement, dispatching on the current token.

        Returns:
            Statement | None: The statement, or None if it failed to parse. The
            caller drops a None result; its diagnostics stay recorded.
        """
        start = self.cur_token
        stmt: Statement | None
        if start.type == TokenType.LET:
            stmt = self.parse_let_statement()
        elif start.type == TokenType.RETURN:
            stmt = self.parse_return_statement()
        else:
            stmt = self.parse_expression_statement()

        if stmt is None:
            logger.debug(
                "dropped statement starting at %r (line %d, col %d)",
                start.literal,
                start.line,
                start.col,
            )
        return stmt

    def parse_let_statement(self) -> LetStatement | None:
        """Parse `let <ident> = <expr>` with an optional trailing `;`."""
        token = self.cur_token

        if not self.expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)

        if not self.expect_peek(TokenType.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return LetStatement(token, name, value)

    def parse_return_statement(self) -> ReturnStatement | None:
        """Parse `return <expr>;`, or a bare `return` before `;`, `}` or EOF."""
        token = self.cur_token

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
            return ReturnStatement(token)
        if self.peek_token_is(TokenType.EOF) or self.peek_token_is(TokenType.RBRACE):
            return ReturnStatement(token)

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return ReturnStatement(token, value)

    def parse_expression_statement(self) -> ExpressionStatement | None:
        """Parse an expression at LOWEST precedence and wrap it as a statement."""
        token = self.cur_token

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        # Semicolons are optional terminators
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return ExpressionStatement(token, expression)

    def parse_block_statement(self) -> BlockStatement | None:
        """Parse statements from the current `{` up to the matching `}`.

        Returns:
            BlockStatement | None: The block with the parser on its `}`, or None if
            EOF came first.
        """
        block = BlockStatement(self.cur_token)
        self.next_token()

        while not self.cur_token_is(TokenType.RBRACE):
            if self.cur_token_is(TokenType.EOF):
                self.unexpected_token(TokenType.RBRACE, TokenType.EOF)
                return None
            stmt = self.parse_statement()
            if stmt is not None:
                block.statements.append(stmt)
            self.next_token()

        return block

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: int) -> Expression | None:
        """Parse one expression whose operators bind tighter than `precedence`.

        Args:
            precedence (int): Binding power of the operator to the left, or LOWEST.

        Returns:
            Expression | None: The expression, or None after a diagnostic was recorded.
        """
        if self._depth >= self.max_depth:
            self.nesting_error()
            return None

        self._depth += 1
        try:
            prefix = self.prefix_parse_fns.get(self.cur_token.type)
            if prefix is None:
                self.no_prefix_parse_fn_error(self.cur_token.type)
                return None

            left = prefix(self)
            if left is None or self.too_tall(left):
                return None

            # Each fold makes the tree one level taller without recursing here
            while not self.peek_token_is(TokenType.SEMICOLON) and precedence < self.peek_precedence():
                infix = self.infix_parse_fns.get(self.peek_token.type)
                if infix is None:
                    return left
                self.next_token()
                left = infix(self, left)
                if left is None or self.too_tall(left):
                    return None

            return left
        finally:
            self._depth -= 1

    def parse_identifier(self) -> Expression | None:
        """Build an Identifier from the current token without advancing."""
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Expression | None:
        """Parse the current INT token as a signed 64-bit base-10 integer.

        Returns:
            Expression | None: The IntegerLiteral, or None if the digits do not fit.
        """
        token = self.cur_token
        try:
            value = int(token.literal, 10)
        except ValueError:
            value = None
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            self.errors.append(f'could not parse "{token.literal}" as integer')
            return None
        return IntegerLiteral(token, value)

    def parse_boolean(self) -> Expression | None:
        """Build a BooleanLiteral from the current `true` or `false` token."""
        return BooleanLiteral(self.cur_token, self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> Expression | None:
        """Parse `!x` or `-x`; the operand is parsed at PREFIX precedence."""
        token = self.cur_token
        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(token, token.literal, right)

    def parse_infix_expression(self, left: Expression) -> Expression | None:
        """Parse the right operand of a binary operator.

        The right side is parsed at the operator's own precedence, which makes
        every binary operator left-associative.

        Args:
            left (Expression): The already-parsed left operand.

        Returns:
            Expression | None: The InfixExpression, or None if the right side failed.
        """
        token = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(token, left, token.literal, right)

    def parse_grouped_expression(self) -> Expression | None:
        """Parse `( <expr> )`. Grouping yields the inner node; no wrapper node is built."""
        self.next_token()
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None or not self.expect_peek(TokenType.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Expression | None:
        """Parse `if (<cond>) { ... }` with an optional `else { ... }`."""
        token = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None or not self.expect_peek(TokenType.RPAREN):
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None
        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if not self.expect_peek(TokenType.LBRACE):
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(token, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression | None:
        """Parse `fn(<params>) { <body> }`."""
        token = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None
        body = self.parse_block_statement()
        if body is None:
            return None

        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> list[Identifier] | None:
        """Parse a comma-separated identifier list through the closing `)`.

        Returns:
            list[Identifier] | None: The parameters, or None after a diagnostic.
        """
        identifiers: list[Identifier] = []

        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return identifiers

        if not self.expect_peek(TokenType.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: Expression) -> Expression | None:
        """Parse the argument list after `function(`; the callee is any expression."""
        token = self.cur_token
        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return CallExpression(token, function, arguments)

    def parse_call_arguments(self) -> list[Expression] | None:
        """Parse comma-separated argument expressions through the closing `)`.

        Returns:
            list[Expression] | None: The arguments, or None after a diagnostic.
        """
        args: list[Expression] = []

        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return args

        self.next_token()
        arg = self.parse_expression(Precedence.LOWEST)
        if arg is None:
            return None
        args.append(arg)

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            arg = self.parse_expression(Precedence.LOWEST)
            if arg is None:
                return None
            args.append(arg)

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return args

    # Built once; register_prefix/register_infix copy before changing them
    prefix_parse_fns = {
        TokenType.IDENT: parse_identifier,
        TokenType.INT: parse_integer_literal,
        TokenType.TRUE: parse_boolean,
        TokenType.FALSE: parse_boolean,
        TokenType.BANG: parse_prefix_expression,
        TokenType.MINUS: parse_prefix_expression,
        TokenType.LPAREN: parse_grouped_expression,
        TokenType.IF: parse_if_expression,
        TokenType.FUNCTION: parse_function_literal,
    }

    infix_parse_fns = {
        TokenType.PLUS: parse_infix_expression,
        TokenType.MINUS: parse_infix_expression,
        TokenType.ASTERISK: parse_infix_expression,
        TokenType.SLASH: parse_infix_expression,
        TokenType.EQ: parse_infix_expression,
        TokenType.NOT_EQ: parse_infix_expression,
        TokenType.LT: parse_infix_expression,
        TokenType.GT: parse_infix_expression,
        TokenType.LPAREN: parse_call_expression,
    }


def parse(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[Program, list[str]]:
    """Lex and parse `source` in one step.

    Returns
    -------
    tuple[Program, list[str]]
        The (possibly partial) Program and the diagnostics recorded while parsing it.
    """
    parser = Parser(Lexer(source), max_depth=max_depth)
    program = parser.parse_program()
    return program, parser.errors


__all__ = ["Parser", "Precedence", "parse", "precedences"]
