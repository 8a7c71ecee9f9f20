"""Scopes, symbols, and the symbol table for Koord semantic analysis.

Provide the five declaration scopes with the write policy each implies, the
immutable Symbol entry, and the SymbolTable that owns the symbols, the record
type registry, and the categorized diagnostics of one analysis run.
"""

from dataclasses import dataclass, field
from enum import Enum, auto

from koord.dsl.ast.nodes import AstNode, DeclGroupKind, SourcePosition
from koord.dsl.errors.codes import ErrorCode
from koord.dsl.errors.diagnostics import Diagnostic
from koord.dsl.semantic.types import KoordType, TypeRegistry
from koord.log import get_logger

logger = get_logger(__name__)


class WritePolicy(Enum):
    """What an assignment to a variable of a scope is allowed to do."""

    FREE = auto()
    """Any well-typed assignment is allowed."""

    READ_ONLY = auto()
    """The variable may never be assigned."""

    OWN_IDENTITY = auto()
    """The variable may only be assigned the writing process's pid."""


class Scope(Enum):
    """Declaration context of a variable."""

    LOCAL = auto()
    SENSOR = auto()
    ACTUATOR = auto()
    ALLREAD = auto()
    ALLWRITE = auto()

    @property
    def write_policy(self) -> WritePolicy:
        """Write policy implied by this scope."""
        return _WRITE_POLICIES[self]

    @classmethod
    def from_group(cls, kind: DeclGroupKind) -> "Scope":
        """Scope of variables declared in a declaration group."""
        return _GROUP_SCOPES[kind]


_WRITE_POLICIES: dict[Scope, WritePolicy] = {
    Scope.LOCAL: WritePolicy.FREE,
    Scope.SENSOR: WritePolicy.READ_ONLY,
    # Actuator write discipline belongs to a later stage
    Scope.ACTUATOR: WritePolicy.FREE,
    Scope.ALLREAD: WritePolicy.OWN_IDENTITY,
    Scope.ALLWRITE: WritePolicy.FREE,
}

_GROUP_SCOPES: dict[DeclGroupKind, Scope] = {
    DeclGroupKind.SENSORS: Scope.SENSOR,
    DeclGroupKind.ACTUATORS: Scope.ACTUATOR,
    DeclGroupKind.ALLREAD: Scope.ALLREAD,
    DeclGroupKind.ALLWRITE: Scope.ALLWRITE,
    DeclGroupKind.LOCAL: Scope.LOCAL,
}


def _position(node: AstNode | None) -> SourcePosition | None:
    return getattr(node, "meta", None)


@dataclass(frozen=True)
class Symbol:
    """Symbol entry in the symbol table.

    Represents a declared variable. Symbols are never modified after the
    build phase creates them.
    """

    name: str
    """Qualified name (module prefix and '.' for module declarations)."""

    type: KoordType
    """Declared type, with array dimensions applied."""

    scope: Scope
    """Scope the variable was declared in."""

    defined_at: AstNode | None = field(default=None, compare=False, hash=False)
    """Declaration node, left out of equality and hashing."""

    def __str__(self) -> str:
        return f"{{name: {self.name}, type: {self.type}, scope: {self.scope.name}}}"


class SymbolTable:
    """Symbols and diagnostics produced by one analysis run.

    The six diagnostic lists are append-only. The table is valid only when
    all of them are empty.
    """

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        """Initialize an empty table.

        Args:
            registry: Record type registry; a fresh one by default.

        """
        self.registry = registry if registry is not None else TypeRegistry()
        self._symbols: dict[str, Symbol] = {}

        self.unresolved_symbols: list[str] = []
        self.multiple_declarations: list[str] = []
        self.type_mismatches: list[AstNode] = []
        self.assign_to_sensor: list[str] = []
        self.assign_to_stream: list[str] = []
        self.assign_to_read_only: list[str] = []

        self._diagnostics: list[Diagnostic] = []

    # -------------------------------------------------------------------------
    # Symbols
    # -------------------------------------------------------------------------

    def define(self, symbol: Symbol) -> bool:
        """Insert a symbol unless its qualified name is already taken.

        Args:
            symbol: The symbol to insert.

        Returns:
            True if inserted, False if the name already existed. The existing
            entry is never overwritten.

        """
        if symbol.name in self._symbols:
            return False
        self._symbols[symbol.name] = symbol
        logger.debug(
            "Defined symbol %s of type %s in %s scope",
            symbol.name,
            symbol.type,
            symbol.scope.name,
        )
        return True

    def lookup(self, name: str) -> Symbol | None:
        """Look up a symbol by its qualified name."""
        return self._symbols.get(name)

    @property
    def symbols(self) -> dict[str, Symbol]:
        """Copy of the qualified name to symbol mapping."""
        return dict(self._symbols)

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def _add(
        self,
        code: ErrorCode,
        node: AstNode | None,
        *,
        subject: str | None = None,
        help_text: str | None = None,
        **params: str,
    ) -> None:
        self._diagnostics.append(
            Diagnostic.for_code(
                code,
                subject=subject,
                position=_position(node),
                help_text=help_text,
                **params,
            ),
        )

    def report_unresolved(
        self,
        name: str,
        node: AstNode | None = None,
        *,
        help_text: str | None = None,
    ) -> None:
        """Record a reference that does not resolve to a symbol or field."""
        self.unresolved_symbols.append(name)
        self._add(ErrorCode.E0001, node, subject=name, help_text=help_text, name=name)

    def report_multiple_declaration(
        self,
        name: str,
        node: AstNode | None = None,
    ) -> None:
        """Record a name declared more than once."""
        self.multiple_declarations.append(name)
        self._add(ErrorCode.E0003, node, subject=name, name=name)

    def report_type_mismatch(
        self,
        node: AstNode,
        *,
        construct: str,
        expected: KoordType | str,
        actual: KoordType | str,
    ) -> None:
        """Record a type incompatibility at an expression or statement node."""
        self.type_mismatches.append(node)
        self._add(
            ErrorCode.E0004,
            node,
            construct=construct,
            expected=str(expected),
            actual=str(actual),
        )

    def report_assign_to_sensor(self, name: str, node: AstNode | None = None) -> None:
        """Record an assignment to a sensor variable."""
        self.assign_to_sensor.append(name)
        self._add(
            ErrorCode.E0101,
            node,
            subject=name,
            help_text="sensors are read-only inputs",
            name=name,
        )

    def report_assign_to_stream(self, name: str, node: AstNode | None = None) -> None:
        """Record an ordinary assignment to a stream variable."""
        self.assign_to_stream.append(name)
        self._add(
            ErrorCode.E0102,
            node,
            subject=name,
            help_text="write streams with a stream statement",
            name=name,
        )

    def report_assign_to_read_only(
        self,
        name: str,
        node: AstNode | None = None,
    ) -> None:
        """Record an allread assignment whose value is not pid."""
        self.assign_to_read_only.append(name)
        self._add(ErrorCode.E0103, node, subject=name, name=name)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics for every recorded problem, in the order found."""
        return list(self._diagnostics)

    @property
    def is_valid(self) -> bool:
        """Whether every diagnostic list is empty."""
        return not (
            self.unresolved_symbols
            or self.multiple_declarations
            or self.type_mismatches
            or self.assign_to_sensor
            or self.assign_to_stream
            or self.assign_to_read_only
        )

    # -------------------------------------------------------------------------
    # Debugging
    # -------------------------------------------------------------------------

    def dump(self) -> str:
        """Human-readable listing of all symbols, sorted by name."""
        return "\n".join(str(self._symbols[name]) for name in sorted(self._symbols))

    def __str__(self) -> str:
        return self.dump()
