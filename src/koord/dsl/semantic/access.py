"""Write-access checker for Koord semantic analysis.

Enforce which scopes may appear on the left side of an assignment: sensors
are never written, streams are only written by stream statements, and an
allread variable may only be set to the writing process's own pid.
"""

from koord.dsl.ast.nodes import (
    Assign,
    AstNode,
    Constant,
    ConstantKind,
    Program,
    iter_children,
)
from koord.dsl.errors.exceptions import KoordInternalError
from koord.dsl.semantic.phases import Blocked, Passed, Phase, PhaseResult
from koord.dsl.semantic.resolution import resolve_chain
from koord.dsl.semantic.scope import SymbolTable, WritePolicy
from koord.dsl.semantic.types import STREAM, inner_type, is_array, types_equal
from koord.log import get_logger

logger = get_logger(__name__)


def is_own_identity(value: AstNode) -> bool:
    """Check whether an expression is exactly the bare pid literal."""
    return (
        isinstance(value, Constant)
        and value.kind == ConstantKind.PID
        and not value.parenthesised
    )


class WriteAccessChecker:
    """Check every assignment against the write policy of its target."""

    def __init__(self, table: SymbolTable) -> None:
        """Initialize the checker.

        Args:
            table: Table of a program that resolved and type checked cleanly.

        """
        self._table = table

    def check(self, program: Program) -> None:
        """Record every write-access violation in the program."""
        self._visit(program)

    def _visit(self, node: AstNode) -> None:
        if isinstance(node, Assign):
            self._check_assign(node)
        for child in iter_children(node):
            self._visit(child)

    def _check_assign(self, node: Assign) -> None:
        resolution = resolve_chain(self._table, node.target)
        if resolution is None:
            msg = f"assignment target '{node.target}' was not resolved"
            raise KoordInternalError(msg)

        # Field writes inherit the scope of the variable they start from
        policy = resolution.symbol.scope.write_policy
        written = resolution.type
        if node.index is not None and is_array(written):
            written = inner_type(written)

        if policy == WritePolicy.READ_ONLY:
            logger.debug("Assignment to sensor %s", node.target)
            self._table.report_assign_to_sensor(node.target, node)

        if types_equal(written, STREAM):
            logger.debug("Assignment to stream %s", node.target)
            self._table.report_assign_to_stream(node.target, node)

        if policy == WritePolicy.OWN_IDENTITY and not is_own_identity(node.value):
            logger.debug("Non-pid assignment to allread %s", node.target)
            self._table.report_assign_to_read_only(node.target, node)


def check_write_access(program: Program, table: SymbolTable) -> PhaseResult:
    """Run the write-access phase.

    Args:
        program: Program to analyze.
        table: Table of a program with no type mismatches.

    Returns:
        Blocked if any write-access violation was found.

    """
    WriteAccessChecker(table).check(program)
    errors = (
        len(table.assign_to_sensor)
        + len(table.assign_to_stream)
        + len(table.assign_to_read_only)
    )
    logger.debug("Checked write access: %d violations", errors)
    if errors:
        return Blocked(phase=Phase.ACCESS, errors=errors)
    return Passed(phase=Phase.ACCESS, table=table)
