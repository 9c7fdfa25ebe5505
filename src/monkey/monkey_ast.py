"""
Defines the abstract syntax tree (AST) node structure for the Monkey scripting language.

Classes:
    Node:
        Base capability shared by every node. Exposes the canonical token literal,
        structural equality, dictionary serialization, and source reconstruction.

    Statement / Expression:
        The two node categories produced by the parser.

    Program:
        Root node holding the ordered statement sequence.

    ASTDict:
        TypedDict representation for serializing nodes to plain Python dictionaries,
        suitable for JSON output or debugging.

Every node owns its children exclusively; the tree has no sharing and no cycles.
Nodes are built by the parser and treated as read-only afterwards.

Rendering:
    ``str(node)`` reconstructs canonical source text. Operator expressions are fully
    parenthesized so precedence is visible, e.g. ``-a * b`` renders as ``((-a) * b)``.

Example:
    node = PrefixExpression(Token(TokenType.MINUS, "-"), "-", IntegerLiteral(tok, 5))
    str(node)  # "(-5)"
"""

from typing import Any, TypedDict

from monkey.monkey_token import Token


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of a Node used for serialization.

    Fields:
        kind (str): The node class name (e.g. "LetStatement", "Identifier").
        token (str): The literal of the token that started the node.
        line (int): Line number in the source code where the node originates.
        col (int): Column number in the source code where the node originates.
        Any other key is a node field, serialized recursively.
    """

    kind: str
    token: str
    line: int
    col: int


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


class Node:
    """
    Base class for every AST node.

    Subclasses store their originating token in ``self.token`` (except Program)
    and their children as plain attributes. Equality, ``repr`` and ``to_dict``
    are derived from those attributes, so new node kinds only need ``__init__``
    and ``__str__``.
    """

    token: Token

    def token_literal(self) -> str:
        """Returns the literal of the token this node was built from."""
        return self.token.literal

    def fields(self) -> dict[str, Any]:
        return {k: v for k, v in vars(self).items() if k != "token" and not k.startswith("_")}

    def children(self) -> list["Node"]:
        """Returns the direct child nodes in field order."""
        out: list[Node] = []
        for value in self.fields().values():
            if isinstance(value, Node):
                out.append(value)
            elif isinstance(value, list):
                out.extend(v for v in value if isinstance(v, Node))
        return out

    def height(self) -> int:
        """Returns the number of nodes on the longest downward path from this node.

        The result is cached on first use. Measuring a tree bottom-up, as the
        parser does while building it, keeps the recursion shallow.
        """
        cached = self.__dict__.get("_height")
        if cached is None:
            cached = 1 + max((c.height() for c in self.children()), default=0)
            self._height = cached
        return cached

    def __repr__(self) -> str:
        parts = ", ".join(f"{k}={v!r}" for k, v in self.fields().items())
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return self.fields() == other.fields() and self.token_literal() == other.token_literal()

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"kind": type(self).__name__}
        token = getattr(self, "token", None)
        if token is not None:
            data["token"] = token.literal
            data["line"] = token.line
            data["col"] = token.col
        for key, value in self.fields().items():
            data[key] = _serialize(value)
        return data  # type: ignore[return-value]


class Statement(Node):
    """A node that occupies a position in a statement sequence."""


class Expression(Node):
    """A node that produces a value."""


def _render(node: Node | None) -> str:
    return "" if node is None else str(node)


class Program(Node):
    """Root of every parse. Holds the statements in source order."""

    def __init__(self, statements: list[Statement] | None = None) -> None:
        self.statements: list[Statement] = statements if statements is not None else []

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Program) and self.statements == other.statements

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


class Identifier(Expression):
    def __init__(self, token: Token, value: str) -> None:
        self.token = token
        self.value = value

    def __str__(self) -> str:
        return self.value


class IntegerLiteral(Expression):
    def __init__(self, token: Token, value: int) -> None:
        self.token = token
        self.value = value

    def __str__(self) -> str:
        return self.token.literal


class BooleanLiteral(Expression):
    def __init__(self, token: Token, value: bool) -> None:
        self.token = token
        self.value = value

    def __str__(self) -> str:
        return self.token.literal


class LetStatement(Statement):
    """``let <name> = <value>;``"""

    def __init__(self, token: Token, name: Identifier, value: Expression | None = None) -> None:
        self.token = token
        self.name = name
        self.value = value

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.name} = {_render(self.value)};"


class ReturnStatement(Statement):
    """``return <value>;`` where the value may be absent."""

    def __init__(self, token: Token, value: Expression | None = None) -> None:
        self.token = token
        self.value = value

    def __str__(self) -> str:
        if self.value is None:
            return f"{self.token_literal()};"
        return f"{self.token_literal()} {self.value};"


class ExpressionStatement(Statement):
    """A bare expression used as a statement, e.g. ``x + 10;``."""

    def __init__(self, token: Token, expression: Expression | None = None) -> None:
        self.token = token
        self.expression = expression

    def __str__(self) -> str:
        return _render(self.expression)


class BlockStatement(Statement):
    """A brace-delimited statement sequence."""

    def __init__(self, token: Token, statements: list[Statement] | None = None) -> None:
        self.token = token
        self.statements: list[Statement] = statements if statements is not None else []

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


class PrefixExpression(Expression):
    def __init__(self, token: Token, operator: str, right: Expression | None = None) -> None:
        self.token = token
        self.operator = operator
        self.right = right

    def __str__(self) -> str:
        return f"({self.operator}{_render(self.right)})"


class InfixExpression(Expression):
    def __init__(
        self,
        token: Token,
        left: Expression,
        operator: str,
        right: Expression | None = None,
    ) -> None:
        self.token = token
        self.left = left
        self.operator = operator
        self.right = right

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {_render(self.right)})"


class IfExpression(Expression):
    """``if (<condition>) { ... } else { ... }``; the else block is optional."""

    def __init__(
        self,
        token: Token,
        condition: Expression | None = None,
        consequence: BlockStatement | None = None,
        alternative: BlockStatement | None = None,
    ) -> None:
        self.token = token
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    def __str__(self) -> str:
        out = f"if{_render(self.condition)} {_render(self.consequence)}"
        if self.alternative is not None:
            out += f"else {self.alternative}"
        return out


class FunctionLiteral(Expression):
    """``fn(<parameters>) { <body> }``"""

    def __init__(
        self,
        token: Token,
        parameters: list[Identifier] | None = None,
        body: BlockStatement | None = None,
    ) -> None:
        self.token = token
        self.parameters: list[Identifier] = parameters if parameters is not None else []
        self.body = body

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {_render(self.body)}"


class CallExpression(Expression):
    """``<function>(<arguments>)``; the callee is any expression."""

    def __init__(
        self,
        token: Token,
        function: Expression,
        arguments: list[Expression] | None = None,
    ) -> None:
        self.token = token
        self.function = function
        self.arguments: list[Expression] = arguments if arguments is not None else []

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


__all__ = [
    "ASTDict",
    "BlockStatement",
    "BooleanLiteral",
    "CallExpression",
    "Expression",
    "ExpressionStatement",
    "FunctionLiteral",
    "Identifier",
    "IfExpression",
    "InfixExpression",
    "IntegerLiteral",
    "LetStatement",
    "Node",
    "PrefixExpression",
    "Program",
    "ReturnStatement",
    "Statement",
]
