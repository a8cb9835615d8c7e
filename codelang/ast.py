"""Abstract Syntax Tree (AST) definitions for the CODE language.

Every node keeps the token it was built from and renders a canonical string
form through `__str__`. Those string forms are what the parser tests compare
against, so operator nodes always parenthesize (`(a + b)`, `(-a)`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .token import Token


@dataclass
class Node:
    """Base class for all AST nodes."""
    token: Token

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return self.token.literal


class Statement(Node):
    pass


class Expression(Node):
    pass


@dataclass
class Program:
    statements: List[Statement] = field(default_factory=list)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ''

    def __str__(self) -> str:
        return ''.join(str(s) for s in self.statements)


###############################################################################
# Expressions
###############################################################################


@dataclass
class Identifier(Expression):
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class IntegerLiteral(Expression):
    value: int


@dataclass
class FloatLiteral(Expression):
    value: float


@dataclass
class BooleanLiteral(Expression):
    value: bool


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class CharLiteral(Expression):
    value: str


@dataclass
class EscapeLiteral(Expression):
    """A character written in brackets, e.g. `[#]` or `[$]`."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class PrefixExpression(Expression):
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass
class InfixExpression(Expression):
    left: Expression
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class IncrementExpression(Expression):
    name: Identifier
    prefix: bool

    def __str__(self) -> str:
        return f"(++{self.name})" if self.prefix else f"({self.name}++)"


@dataclass
class DecrementExpression(Expression):
    name: Identifier
    prefix: bool

    def __str__(self) -> str:
        return f"(--{self.name})" if self.prefix else f"({self.name}--)"


@dataclass
class IfExpression(Expression):
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None

    def __str__(self) -> str:
        out = f"{self.condition} {self.consequence}"
        if self.alternative is not None:
            out += f"ELSE {self.alternative}"
        return out


@dataclass
class FunctionLiteral(Expression):
    parameters: List[Identifier]
    body: BlockStatement

    def __str__(self) -> str:
        params = ', '.join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {self.body}"


@dataclass
class CallExpression(Expression):
    function: Expression
    arguments: List[Expression]

    def __str__(self) -> str:
        args = ', '.join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


@dataclass
class IndexExpression(Expression):
    """`x[i]`, `x[i:]`, `x[:j]` or `x[i:j]`."""
    left: Expression
    index: Optional[Expression]
    has_colon: bool = False
    right_index: Optional[Expression] = None

    def __str__(self) -> str:
        start = '' if self.index is None else str(self.index)
        if not self.has_colon:
            return f"({self.left}[{start}])"
        end = '' if self.right_index is None else str(self.right_index)
        return f"({self.left}[{start}:{end}])"


###############################################################################
# Statements
###############################################################################


@dataclass
class Binding:
    identifier: Identifier
    value: Expression


@dataclass
class VarDeclaration(Statement):
    """INT/FLOAT/BOOL/CHAR declaration with one or more bindings."""
    bindings: List[Binding]

    def __str__(self) -> str:
        parts = ', '.join(f"{b.identifier} = {b.value}" for b in self.bindings)
        return f"{self.token_literal()} {parts};"


@dataclass
class ReturnStatement(Statement):
    return_value: Optional[Expression]

    def __str__(self) -> str:
        value = '' if self.return_value is None else str(self.return_value)
        return f"{self.token_literal()} = {value};"


@dataclass
class ExpressionStatement(Statement):
    expression: Optional[Expression]

    def __str__(self) -> str:
        return '' if self.expression is None else str(self.expression)


@dataclass
class BlockStatement(Statement):
    statements: List[Statement] = field(default_factory=list)

    def __str__(self) -> str:
        return ''.join(str(s) for s in self.statements)


@dataclass
class DisplayStatement(Statement):
    arguments: List[Expression]

    def __str__(self) -> str:
        return 'DISPLAY: ' + ', '.join(str(a) for a in self.arguments)


@dataclass
class ScanStatement(Statement):
    names: List[Identifier]

    def __str__(self) -> str:
        return f"{self.token_literal()} " + ', '.join(str(n) for n in self.names) + ';'


@dataclass
class AssignmentStatement(Statement):
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f"{self.name} = {self.value};"


@dataclass
class WhileLoop(Statement):
    condition: Expression
    body: BlockStatement

    def __str__(self) -> str:
        return f"{self.token_literal()}({self.condition})"


@dataclass
class Comment(Statement, Expression):
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class NewLine(Statement, Expression):
    """The `$` marker inside a DISPLAY argument list."""
    value: str = '\n'

    def __str__(self) -> str:
        return self.value
