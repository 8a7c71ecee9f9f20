"""Reference resolver for Koord semantic analysis.

Verify that every variable reference resolves to a declared symbol or to a
field reachable from one. Resolution proves existence only; types are
checked by the next phase.
"""

from koord.dsl.ast.nodes import (
    Assign,
    AstNode,
    BoolVar,
    IoStream,
    Program,
    VarExpr,
    iter_children,
)
from koord.dsl.semantic.phases import Blocked, Passed, Phase, PhaseResult
from koord.dsl.semantic.resolution import resolve_chain
from koord.dsl.semantic.scope import SymbolTable
from koord.log import get_logger

logger = get_logger(__name__)

_SIMILAR_PREFIX = 3
"""Number of leading characters compared when suggesting a similar name."""


def _reference_text(node: AstNode) -> str | None:
    """Return the variable reference a node makes, if it makes one."""
    if isinstance(node, (VarExpr, BoolVar)):
        return node.name
    if isinstance(node, Assign):
        return node.target
    if isinstance(node, IoStream):
        return node.var
    return None


class ReferenceResolver:
    """Check every reference site in a program against the symbol table."""

    def __init__(self, table: SymbolTable) -> None:
        """Initialize the resolver.

        Args:
            table: Table populated by the build phase.

        """
        self._table = table

    def resolve(self, program: Program) -> None:
        """Record every reference in the program that does not resolve."""
        self._visit(program)

    def _visit(self, node: AstNode) -> None:
        text = _reference_text(node)
        if text is not None:
            self._check(text, node)
        for child in iter_children(node):
            self._visit(child)

    def _check(self, text: str, node: AstNode) -> None:
        if resolve_chain(self._table, text) is not None:
            return
        logger.debug("Unresolved reference %s", text)
        self._table.report_unresolved(
            text,
            node,
            help_text=self._suggest_similar(text),
        )

    def _suggest_similar(self, text: str) -> str | None:
        """Suggest a declared name close to an unresolved reference.

        Args:
            text: Reference that was not found.

        Returns:
            Suggestion string or None.

        """
        root = text.split(".")[0].lower()
        for candidate in sorted(self._table.symbols):
            if candidate.lower().startswith(root[:_SIMILAR_PREFIX]):
                return f"did you mean '{candidate}'?"
        return None


def resolve_references(program: Program, table: SymbolTable) -> PhaseResult:
    """Run the reference resolution phase.

    Args:
        program: Program to analyze.
        table: Table produced by the build phase.

    Returns:
        Blocked if any reference did not resolve.

    """
    ReferenceResolver(table).resolve(program)
    logger.debug("Resolved references: %d unresolved", len(table.unresolved_symbols))
    if table.unresolved_symbols:
        return Blocked(phase=Phase.RESOLVE, errors=len(table.unresolved_symbols))
    return Passed(phase=Phase.RESOLVE, table=table)
