"""Type checker for Koord semantic analysis.

Infer expression types bottom-up with an explicit stack: every node's
children are visited, in source order, before the node itself, and each
expression leaves exactly one type on the stack for its parent to consume.
The stack is cleared at every statement boundary.
"""

from koord.dsl.ast.nodes import (
    Assign,
    AstNode,
    BinaryExpr,
    BoolExpr,
    BoolVar,
    Constant,
    ConstantKind,
    Decl,
    EventDef,
    FuncCall,
    IfStmt,
    IoStream,
    Program,
    StringLiteral,
    VarExpr,
    iter_children,
)
from koord.dsl.errors.exceptions import KoordInternalError
from koord.dsl.semantic.builder import declared_type
from koord.dsl.semantic.phases import Blocked, Passed, Phase, PhaseResult
from koord.dsl.semantic.resolution import resolve_chain
from koord.dsl.semantic.scope import SymbolTable
from koord.dsl.semantic.types import (
    BOOL,
    FLOAT,
    INT,
    STREAM,
    STRING,
    UNKNOWN,
    KoordType,
    inner_type,
    is_array,
    is_unknown,
    types_equal,
)
from koord.log import get_logger

logger = get_logger(__name__)

CONSTANT_TYPES: dict[ConstantKind, KoordType] = {
    ConstantKind.FLOAT: FLOAT,
    ConstantKind.INT: INT,
    ConstantKind.PID: INT,
    ConstantKind.NUMAGENTS: INT,
}
"""Type of each kind of numeric literal."""

CONCAT_OPERATOR = "+"
"""Operator that concatenates when either operand is a string."""


class TypeChecker:
    """Infer expression types and check assignments and stream usage."""

    def __init__(self, table: SymbolTable) -> None:
        """Initialize the type checker.

        Args:
            table: Table whose references have all been resolved.

        """
        self._table = table
        self._stack: list[KoordType] = []

    def check(self, program: Program) -> None:
        """Record every type mismatch in the program."""
        self._stack.clear()
        self._visit(program)

    # =========================================================================
    # Traversal
    # =========================================================================

    def _visit(self, node: AstNode) -> None:
        if isinstance(node, EventDef):
            self._visit_event(node)
            return
        if isinstance(node, IfStmt):
            self._visit_if(node)
            return

        for child in iter_children(node):
            self._visit(child)

        handler = getattr(self, f"_exit_{type(node).__name__}", None)
        if handler is not None:
            handler(node)

        if isinstance(node, Decl):
            # Declarations are statement boundaries too
            self._stack.clear()

    def _visit_statement(self, node: AstNode) -> None:
        self._visit(node)
        self._stack.clear()

    def _visit_event(self, node: EventDef) -> None:
        if node.precondition is not None:
            self._visit_statement(node.precondition)
        for stmt in node.effects:
            self._visit_statement(stmt)

    def _visit_if(self, node: IfStmt) -> None:
        # The condition is a statement boundary of its own
        self._visit_statement(node.condition)
        for stmt in [*node.then_body, *node.else_body]:
            self._visit_statement(stmt)

    # =========================================================================
    # Stack helpers
    # =========================================================================

    def _push(self, t: KoordType) -> None:
        self._stack.append(t)

    def _pop(self) -> KoordType:
        if not self._stack:
            logger.debug("Type stack empty, treating operand as unknown")
            return UNKNOWN
        return self._stack.pop()

    def _resolve(self, text: str) -> KoordType:
        resolution = resolve_chain(self._table, text)
        if resolution is None:
            msg = f"reference '{text}' was not resolved before type checking"
            raise KoordInternalError(msg)
        return resolution.type

    def _mismatch(
        self,
        node: AstNode,
        construct: str,
        expected: KoordType | str,
        actual: KoordType | str,
    ) -> None:
        logger.debug("Type mismatch in %s: %s vs %s", construct, expected, actual)
        self._table.report_type_mismatch(
            node,
            construct=construct,
            expected=expected,
            actual=actual,
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def _exit_Constant(self, node: Constant) -> None:  # noqa: N802
        self._push(CONSTANT_TYPES[node.kind])

    def _exit_StringLiteral(self, _node: StringLiteral) -> None:  # noqa: N802
        self._push(STRING)

    def _exit_FuncCall(self, node: FuncCall) -> None:  # noqa: N802
        # Return types are not modelled; argument types are consumed
        for _ in node.args:
            self._pop()
        self._push(UNKNOWN)

    def _exit_BinaryExpr(self, node: BinaryExpr) -> None:  # noqa: N802
        right = self._pop()
        left = self._pop()
        if is_unknown(left) or is_unknown(right):
            self._push(UNKNOWN)
            return
        if node.op == CONCAT_OPERATOR and STRING in (left, right):
            self._push(STRING)
            return
        if not types_equal(left, right):
            self._mismatch(node, f"'{node.op}' expression", left, right)
        self._push(left)

    def _exit_VarExpr(self, node: VarExpr) -> None:  # noqa: N802
        var_type = self._resolve(node.name)
        if node.index is None:
            self._push(var_type)
            return

        index = self._pop()
        if not is_unknown(index) and not types_equal(index, INT):
            self._mismatch(node, "array index", INT, index)

        if is_array(var_type):
            self._push(inner_type(var_type))
        else:
            self._mismatch(node, f"indexing '{node.name}'", "array", var_type)
            self._push(UNKNOWN)

    def _exit_BoolExpr(self, node: BoolExpr) -> None:  # noqa: N802
        for _ in node.operands:
            self._pop()
        self._push(BOOL)

    def _exit_BoolVar(self, node: BoolVar) -> None:  # noqa: N802
        self._push(self._resolve(node.name))

    # =========================================================================
    # Statements and declarations
    # =========================================================================

    def _exit_Assign(self, node: Assign) -> None:  # noqa: N802
        actual = self._pop()
        if node.index is not None:
            index = self._pop()
            if not is_unknown(index) and not types_equal(index, INT):
                self._mismatch(node, "array index", INT, index)

        if is_unknown(actual):
            # Not yet determinable, e.g. a function call result
            return

        target_type = self._resolve(node.target)
        if node.index is None:
            if not types_equal(target_type, actual):
                self._mismatch(
                    node,
                    f"assignment to '{node.target}'",
                    target_type,
                    actual,
                )
            return

        if not is_array(target_type):
            self._mismatch(node, f"indexing '{node.target}'", "array", target_type)
        elif not types_equal(inner_type(target_type), actual):
            self._mismatch(
                node,
                f"assignment to '{node.target}[...]'",
                inner_type(target_type),
                actual,
            )

    def _exit_IoStream(self, node: IoStream) -> None:  # noqa: N802
        if node.var is None:
            return
        var_type = self._resolve(node.var)
        if not types_equal(var_type, STREAM):
            self._mismatch(node, f"stream statement on '{node.var}'", STREAM, var_type)

    def _exit_Decl(self, node: Decl) -> None:  # noqa: N802
        if node.initializer is None:
            return
        actual = self._pop()
        if is_unknown(actual):
            return
        expected = declared_type(node)
        if not types_equal(expected, actual):
            self._mismatch(node, f"initializer of '{node.name}'", expected, actual)


def check_types(program: Program, table: SymbolTable) -> PhaseResult:
    """Run the type checking phase.

    Args:
        program: Program to analyze.
        table: Table whose references have all been resolved.

    Returns:
        Blocked if any type mismatch was found.

    """
    TypeChecker(table).check(program)
    logger.debug("Checked types: %d mismatches", len(table.type_mismatches))
    if table.type_mismatches:
        return Blocked(phase=Phase.TYPES, errors=len(table.type_mismatches))
    return Passed(phase=Phase.TYPES, table=table)
