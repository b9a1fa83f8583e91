"""
Tamarin Abstract Syntax Tree
Immutable node definitions produced by the parser, with canonical source reconstruction
"""

from typing import Optional, Tuple
from dataclasses import dataclass, field

from tokens import Token


# ============================================================================
# BASE NODES
# ============================================================================

@dataclass(frozen=True)
class Node:
    """Base AST node. The leading token is kept for diagnostics but ignored by equality"""
    token: Token = field(compare=False, repr=False)

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class Statement(Node):
    pass


@dataclass(frozen=True)
class Expression(Node):
    pass


def _text(node: Optional[Node]) -> str:
    return str(node) if node is not None else ""


def join_statements(statements: Tuple[Statement, ...]) -> str:
    """Join statements so that the result parses back into the same statements.

    Expression statements carry no terminator of their own, so one is added
    whenever another statement follows (otherwise `f` followed by `(x)` would
    re-parse as the call `f(x)`).
    """
    parts = []
    for i, statement in enumerate(statements):
        text = str(statement)
        if isinstance(statement, ExpressionStatement) and i < len(statements) - 1:
            text += ";"
        parts.append(text)
    return " ".join(parts)


# ============================================================================
# PROGRAM
# ============================================================================

@dataclass(frozen=True)
class Program:
    """Root of a parsed source text"""
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return join_statements(self.statements)


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    value: str = ""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int = 0

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str = ""

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool = False

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str = ""
    right: Optional[Expression] = None

    def __str__(self) -> str:
        return f"({self.operator}{_text(self.right)})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    left: Optional[Expression] = None
    operator: str = ""
    right: Optional[Expression] = None

    def __str__(self) -> str:
        return f"({_text(self.left)} {self.operator} {_text(self.right)})"


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Optional[Expression] = None
    consequence: Optional['BlockStatement'] = None
    alternative: Optional['BlockStatement'] = None

    def __str__(self) -> str:
        result = f"if ({_text(self.condition)}) {{ {_text(self.consequence)} }}"
        if self.alternative is not None:
            result += f" else {{ {_text(self.alternative)} }}"
        return result


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: Tuple[Identifier, ...] = ()
    body: Optional['BlockStatement'] = None

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {{ {_text(self.body)} }}"


@dataclass(frozen=True)
class CallExpression(Expression):
    function: Optional[Expression] = None
    arguments: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(_text(a) for a in self.arguments)
        return f"{_text(self.function)}({args})"


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        return "[" + ", ".join(_text(e) for e in self.elements) + "]"


@dataclass(frozen=True)
class IndexExpression(Expression):
    left: Optional[Expression] = None
    index: Optional[Expression] = None

    def __str__(self) -> str:
        return f"({_text(self.left)}[{_text(self.index)}])"


@dataclass(frozen=True)
class HashLiteral(Expression):
    # Source order is kept for printing only
    pairs: Tuple[Tuple[Expression, Expression], ...] = ()

    def __str__(self) -> str:
        items = ", ".join(f"{_text(k)}: {_text(v)}" for k, v in self.pairs)
        return "{" + items + "}"


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    name: Optional[Identifier] = None
    value: Optional[Expression] = None

    def __str__(self) -> str:
        return f"{self.token_literal()} {_text(self.name)} = {_text(self.value)};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Optional[Expression] = None

    def __str__(self) -> str:
        return f"{self.token_literal()} {_text(self.value)};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Optional[Expression] = None

    def __str__(self) -> str:
        return _text(self.expression)


@dataclass(frozen=True)
class BlockStatement(Statement):
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return join_statements(self.statements)
