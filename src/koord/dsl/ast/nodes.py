"""AST node dataclasses for the Koord language.

Define typed syntax-tree nodes with source position metadata for the
constructs the semantic analyzer consumes. Nodes are plain dataclasses built
by the transformer from a Lark parse tree, or directly in tests.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from enum import Enum, auto
from typing import Any

from koord.log import get_logger

logger = get_logger(__name__)


# =============================================================================
# Base Types and Type Aliases
# =============================================================================


@dataclass
class SourcePosition:
    """Source position information for error reporting."""

    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None


# Type alias for any AST node
AstNode = Any


class DeclGroupKind(Enum):
    """Declaration group a variable is declared under."""

    SENSORS = auto()
    ACTUATORS = auto()
    ALLREAD = auto()
    ALLWRITE = auto()
    LOCAL = auto()


class ConstantKind(Enum):
    """Kind of numeric literal."""

    FLOAT = auto()
    INT = auto()
    PID = auto()
    """The current process's own identifier."""
    NUMAGENTS = auto()
    """The number of participating agents."""


# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass
class Constant:
    """Numeric literal node (e.g., 1, 2.5, pid, numAgents)."""

    kind: ConstantKind
    text: str = ""
    meta: SourcePosition | None = None
    parenthesised: bool = field(default=False, compare=False, kw_only=True)
    """Written inside parentheses, so not a bare literal."""


@dataclass
class StringLiteral:
    """String literal node."""

    value: str
    meta: SourcePosition | None = None


@dataclass
class VarExpr:
    """Variable use in a value expression (e.g., x, Motion.target, path[i])."""

    name: str
    index: AstNode | None = None
    meta: SourcePosition | None = None


@dataclass
class FuncCall:
    """Function call node, usable as an expression or a statement."""

    name: str
    args: list[AstNode] = field(default_factory=list)
    meta: SourcePosition | None = None


@dataclass
class BinaryExpr:
    """Binary arithmetic expression (e.g., a + b)."""

    op: str
    left: AstNode
    right: AstNode
    meta: SourcePosition | None = None


@dataclass
class BoolExpr:
    """Composite boolean expression (e.g., a < b, not done, x and y, true)."""

    op: str
    operands: list[AstNode] = field(default_factory=list)
    meta: SourcePosition | None = None


@dataclass
class BoolVar:
    """Boolean expression that is a bare variable."""

    name: str
    meta: SourcePosition | None = None


# =============================================================================
# Statement Nodes
# =============================================================================


@dataclass
class Assign:
    """Assignment statement (e.g., x = 1, path[i] = p)."""

    target: str
    # Declared ahead of value so traversal visits the index first
    index: AstNode | None = field(default=None, kw_only=True)
    value: AstNode
    meta: SourcePosition | None = None


@dataclass
class IoStream:
    """Stream input/output statement, optionally naming a stream variable."""

    var: str | None = None
    meta: SourcePosition | None = None


@dataclass
class IfStmt:
    """Conditional statement."""

    condition: AstNode
    then_body: list[AstNode] = field(default_factory=list)
    else_body: list[AstNode] = field(default_factory=list)
    meta: SourcePosition | None = None


# =============================================================================
# Declaration Nodes
# =============================================================================


@dataclass
class Decl:
    """Variable or record field declaration (e.g., int tries = 1, pos[] path)."""

    name: str
    type_name: str
    is_custom: bool = False
    array_dims: int = 0
    initializer: AstNode | None = None
    meta: SourcePosition | None = None


@dataclass
class DeclGroup:
    """A block of declarations sharing one scope (sensors, local, ...)."""

    kind: DeclGroupKind
    decls: list[Decl] = field(default_factory=list)
    meta: SourcePosition | None = None


@dataclass
class ModuleBlock:
    """Named module whose declarations are namespaced by its name."""

    name: str
    groups: list[DeclGroup] = field(default_factory=list)
    meta: SourcePosition | None = None


@dataclass
class AdtDef:
    """Record type definition with named fields."""

    name: str
    fields: list[Decl] = field(default_factory=list)
    meta: SourcePosition | None = None


@dataclass
class EventDef:
    """Event with a precondition and a list of effect statements."""

    name: str
    precondition: AstNode | None = None
    effects: list[AstNode] = field(default_factory=list)
    meta: SourcePosition | None = None


@dataclass
class Program:
    """Root node of a Koord program."""

    name: str
    items: list[AstNode] = field(default_factory=list)
    meta: SourcePosition | None = None


# =============================================================================
# Traversal
# =============================================================================


def iter_children(node: AstNode) -> Iterator[AstNode]:
    """Yield the child nodes of a node in source order.

    Args:
        node: Any AST node.

    Yields:
        Child nodes, flattening list-valued fields.

    """
    for f in fields(node):
        if f.name == "meta":
            continue
        value = getattr(node, f.name)
        if isinstance(value, list):
            yield from (item for item in value if _is_node(item))
        elif _is_node(value):
            yield value


def _is_node(value: object) -> bool:
    """Check whether a field value is an AST node."""
    return hasattr(value, "__dataclass_fields__") and not isinstance(
        value,
        SourcePosition,
    )
