"""
Abstract Syntax Tree node definitions for Monkey.

Every node keeps the token it was built from, a source span and a link to
its parent. ``str(node)`` renders the node back as normalized source text,
with infix and prefix expressions fully parenthesized.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Any, Sequence, Tuple
from dataclasses import dataclass
from enum import Enum
import uuid

from ..lexer.tokens import SourceLocation, Token


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"

    # Statements
    LET_STATEMENT = "LetStatement"
    RETURN_STATEMENT = "ReturnStatement"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    BLOCK_STATEMENT = "BlockStatement"

    # Expressions
    IDENTIFIER = "Identifier"
    INTEGER_LITERAL = "IntegerLiteral"
    BOOLEAN = "Boolean"
    PREFIX_EXPRESSION = "PrefixExpression"
    INFIX_EXPRESSION = "InfixExpression"
    IF_EXPRESSION = "IfExpression"
    FUNCTION_LITERAL = "FunctionLiteral"
    CALL_EXPRESSION = "CallExpression"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    @classmethod
    def of(cls, token: Token) -> 'SourceSpan':
        return cls(token.location, token.location)

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


class ASTNode(ABC):
    """Base class for all AST nodes."""

    def __init__(self, node_type: ASTNodeType, token: Token, span: Optional[SourceSpan] = None):
        self.node_type = node_type
        self.token = token
        self.span = span if span is not None else SourceSpan.of(token)
        self.parent: Optional['ASTNode'] = None
        # Generate unique ID for hashability
        self._id = uuid.uuid4()

    def token_literal(self) -> str:
        """Literal text of the token this node was built from."""
        return self.token.lexeme

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        pass

    def set_parent(self, parent: 'ASTNode'):
        """Set the parent node."""
        self.parent = parent

    def _adopt(self, *nodes: Optional['ASTNode']):
        for node in nodes:
            if node is not None:
                node.set_parent(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self)!r}, span={self.span})"

    def __hash__(self) -> int:
        """Hash based on unique ID for use in dictionaries."""
        return hash(self._id)

    def __eq__(self, other) -> bool:
        """Equality based on unique ID."""
        if not isinstance(other, ASTNode):
            return False
        return self._id == other._id


class Statement(ASTNode):
    """Base class for statements."""
    pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Top-level nodes
# ============================================================================

class Program:
    """
    Root of the tree: the top-level statements in source order.

    The parser appends to it while parsing; ``freeze()`` is called once the
    token stream is exhausted and turns the statement list into a tuple.
    """

    def __init__(self, statements: Optional[List[Statement]] = None):
        self._statements: List[Statement] = list(statements or [])
        self._frozen: Optional[Tuple[Statement, ...]] = None

    @property
    def statements(self) -> Sequence[Statement]:
        if self._frozen is not None:
            return self._frozen
        return self._statements

    def append(self, statement: Statement):
        if self._frozen is not None:
            raise RuntimeError("Program is complete; statements can no longer be added")
        self._statements.append(statement)

    def freeze(self) -> 'Program':
        self._frozen = tuple(self._statements)
        return self

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def children(self) -> List[ASTNode]:
        return list(self.statements)

    def __len__(self) -> int:
        return len(self.statements)

    def __str__(self) -> str:
        return "".join(str(stmt) for stmt in self.statements)

    def __repr__(self) -> str:
        return f"Program({len(self.statements)} statements)"


# ============================================================================
# Statements
# ============================================================================

class LetStatement(Statement):
    """Binding declaration: ``let <name> = <value>;``."""
    name: 'Identifier'
    value: Optional['Expression']

    def __init__(self, token: Token, name: 'Identifier', value: Optional['Expression'],
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.LET_STATEMENT, token, span)
        self.name = name
        self.value = value
        self._adopt(name, value)

    def children(self) -> List[ASTNode]:
        return [self.name, self.value] if self.value else [self.name]

    def __str__(self) -> str:
        value = str(self.value) if self.value is not None else ""
        return f"{self.token_literal()} {self.name} = {value};"


class ReturnStatement(Statement):
    """Return statement with optional value."""
    return_value: Optional['Expression']

    def __init__(self, token: Token, return_value: Optional['Expression'],
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.RETURN_STATEMENT, token, span)
        self.return_value = return_value
        self._adopt(return_value)

    def children(self) -> List[ASTNode]:
        return [self.return_value] if self.return_value else []

    def __str__(self) -> str:
        if self.return_value is None:
            return f"{self.token_literal()};"
        return f"{self.token_literal()} {self.return_value};"


class ExpressionStatement(Statement):
    """An expression evaluated for its effect, e.g. ``x + 10;``."""
    expression: 'Expression'

    def __init__(self, token: Token, expression: 'Expression',
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.EXPRESSION_STATEMENT, token, span)
        self.expression = expression
        self._adopt(expression)

    def children(self) -> List[ASTNode]:
        return [self.expression]

    def __str__(self) -> str:
        return str(self.expression)


class BlockStatement(Statement):
    """Braced statement list used by if-expressions and function bodies."""
    statements: Tuple[Statement, ...]

    def __init__(self, token: Token, statements: Sequence[Statement],
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.BLOCK_STATEMENT, token, span)
        self.statements = tuple(statements)
        self._adopt(*self.statements)

    def children(self) -> List[ASTNode]:
        return list(self.statements)

    def __str__(self) -> str:
        return "".join(str(stmt) for stmt in self.statements)


# ============================================================================
# Expressions
# ============================================================================

class Identifier(Expression):
    value: str

    def __init__(self, token: Token, value: str, span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.IDENTIFIER, token, span)
        self.value = value

    def children(self) -> List[ASTNode]:
        return []

    def __str__(self) -> str:
        return self.value


class IntegerLiteral(Expression):
    value: int

    def __init__(self, token: Token, value: int, span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.INTEGER_LITERAL, token, span)
        self.value = value

    def children(self) -> List[ASTNode]:
        return []

    def __str__(self) -> str:
        return self.token_literal()


class Boolean(Expression):
    value: bool

    def __init__(self, token: Token, value: bool, span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.BOOLEAN, token, span)
        self.value = value

    def children(self) -> List[ASTNode]:
        return []

    def __str__(self) -> str:
        return self.token_literal()


class PrefixExpression(Expression):
    """Unary operation expression, e.g. ``-5`` or ``!ok``."""
    operator: str
    right: Expression

    def __init__(self, token: Token, operator: str, right: Expression,
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.PREFIX_EXPRESSION, token, span)
        self.operator = operator
        self.right = right
        self._adopt(right)

    def children(self) -> List[ASTNode]:
        return [self.right]

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


class InfixExpression(Expression):
    """Binary operation expression."""
    left: Expression
    operator: str
    right: Expression

    def __init__(self, token: Token, left: Expression, operator: str, right: Expression,
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.INFIX_EXPRESSION, token, span)
        self.left = left
        self.operator = operator
        self.right = right
        self._adopt(left, right)

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


class IfExpression(Expression):
    """If expression with optional else block."""
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement]

    def __init__(self, token: Token, condition: Expression, consequence: BlockStatement,
                 alternative: Optional[BlockStatement], span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.IF_EXPRESSION, token, span)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative
        self._adopt(condition, consequence, alternative)

    def children(self) -> List[ASTNode]:
        children = [self.condition, self.consequence]
        if self.alternative:
            children.append(self.alternative)
        return children

    def __str__(self) -> str:
        result = f"if{self.condition} {self.consequence}"
        if self.alternative is not None:
            result += f"else {self.alternative}"
        return result


class FunctionLiteral(Expression):
    """Function literal: ``fn(<parameters>) { <body> }``."""
    parameters: Tuple[Identifier, ...]
    body: BlockStatement

    def __init__(self, token: Token, parameters: Sequence[Identifier], body: BlockStatement,
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.FUNCTION_LITERAL, token, span)
        self.parameters = tuple(parameters)
        self.body = body
        self._adopt(*self.parameters)
        self._adopt(body)

    def children(self) -> List[ASTNode]:
        return [*self.parameters, self.body]

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {self.body}"


class CallExpression(Expression):
    """Function call; ``function`` is an Identifier or a FunctionLiteral."""
    function: Expression
    arguments: Tuple[Expression, ...]

    def __init__(self, token: Token, function: Expression, arguments: Sequence[Expression],
                 span: Optional[SourceSpan] = None):
        super().__init__(ASTNodeType.CALL_EXPRESSION, token, span)
        self.function = function
        self.arguments = tuple(arguments)
        self._adopt(function)
        self._adopt(*self.arguments)

    def children(self) -> List[ASTNode]:
        return [self.function, *self.arguments]

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


def walk(node: Any):
    """Yield ``node`` and all of its descendants, depth first."""
    yield node
    for child in node.children():
        yield from walk(child)
