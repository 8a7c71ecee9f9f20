"""Symbol table builder for Koord semantic analysis.

Walk the tree once, registering every variable declaration (module-qualified
inside module blocks) with its resolved type and scope, and every record type
with its fields.
"""

from dataclasses import dataclass, replace

from koord.config_loader import RedefinitionPolicy
from koord.dsl.ast.nodes import (
    AdtDef,
    AstNode,
    Decl,
    DeclGroup,
    ModuleBlock,
    Program,
    iter_children,
)
from koord.dsl.errors.exceptions import KoordInternalError, UnknownTypeError
from koord.dsl.semantic.phases import Blocked, Passed, Phase, PhaseResult
from koord.dsl.semantic.scope import Scope, Symbol, SymbolTable
from koord.dsl.semantic.types import (
    PRIMITIVE_TYPES,
    CustomType,
    KoordType,
    array_of,
)
from koord.log import get_logger

logger = get_logger(__name__)


def declared_type(decl: Decl) -> KoordType:
    """Resolve the type a declaration names, with its array dimensions.

    Args:
        decl: Variable or field declaration.

    Returns:
        The declared type, wrapped once per array dimension.

    Raises:
        UnknownTypeError: If the primitive type name is not recognized.

    """
    if decl.is_custom:
        base: KoordType = CustomType(decl.type_name)
    else:
        primitive = PRIMITIVE_TYPES.get(decl.type_name)
        if primitive is None:
            raise UnknownTypeError(decl.type_name)
        base = primitive
    return array_of(base, decl.array_dims)


def qualified_name(name: str, module: str | None) -> str:
    """Prefix a declared name with its enclosing module, if any."""
    return f"{module}.{name}" if module else name


@dataclass(frozen=True)
class BuildContext:
    """Declaration context passed down the tree."""

    module: str | None = None
    """Enclosing module name."""

    scope: Scope | None = None
    """Scope of the enclosing declaration group."""

    record_name: str | None = None
    """Name of the enclosing record type definition."""

    record_fields: dict[str, KoordType] | None = None
    """Field accumulator of the enclosing record type definition."""


class SymbolTableBuilder:
    """Populate a symbol table and its type registry from a program."""

    def __init__(
        self,
        table: SymbolTable,
        *,
        record_redefinition: RedefinitionPolicy = RedefinitionPolicy.REJECT,
    ) -> None:
        """Initialize the builder.

        Args:
            table: Table to populate.
            record_redefinition: How to treat a record type defined twice.

        """
        self._table = table
        self._record_redefinition = record_redefinition

    def build(self, program: Program) -> None:
        """Register every declaration and record type in the program."""
        self._visit(program, BuildContext())

    def _visit(self, node: AstNode, ctx: BuildContext) -> None:
        handler = getattr(self, f"_build_{type(node).__name__}", None)
        if handler is not None:
            handler(node, ctx)
            return
        for child in iter_children(node):
            self._visit(child, ctx)

    def _build_ModuleBlock(self, node: ModuleBlock, ctx: BuildContext) -> None:  # noqa: N802
        inner = replace(ctx, module=node.name)
        for group in node.groups:
            self._visit(group, inner)

    def _build_DeclGroup(self, node: DeclGroup, ctx: BuildContext) -> None:  # noqa: N802
        inner = replace(ctx, scope=Scope.from_group(node.kind))
        for decl in node.decls:
            self._visit(decl, inner)

    def _build_AdtDef(self, node: AdtDef, ctx: BuildContext) -> None:  # noqa: N802
        fields: dict[str, KoordType] = {}
        inner = replace(ctx, record_name=node.name, record_fields=fields)
        for decl in node.fields:
            self._visit(decl, inner)

        replace_existing = self._record_redefinition == RedefinitionPolicy.REPLACE
        registered = self._table.registry.define_custom_type(
            node.name,
            fields,
            replace=replace_existing,
        )
        if not registered:
            self._table.report_multiple_declaration(node.name, node)

    def _build_Decl(self, node: Decl, ctx: BuildContext) -> None:  # noqa: N802
        decl_type = declared_type(node)

        if ctx.record_fields is not None:
            # Record field: goes to the type registry, not the symbol table
            if node.name in ctx.record_fields:
                self._table.report_multiple_declaration(
                    f"{ctx.record_name}.{node.name}",
                    node,
                )
                return
            ctx.record_fields[node.name] = decl_type
            return

        if ctx.scope is None:
            msg = f"declaration of '{node.name}' outside a declaration group"
            raise KoordInternalError(msg)

        name = qualified_name(node.name, ctx.module)
        symbol = Symbol(name=name, type=decl_type, scope=ctx.scope, defined_at=node)
        if not self._table.define(symbol):
            self._table.report_multiple_declaration(name, node)


def build_symbol_table(
    program: Program,
    table: SymbolTable,
    *,
    record_redefinition: RedefinitionPolicy = RedefinitionPolicy.REJECT,
) -> PhaseResult:
    """Run the build phase.

    Args:
        program: Program to analyze.
        table: Fresh table to populate.
        record_redefinition: How to treat a record type defined twice.

    Returns:
        Blocked if any name was declared more than once.

    """
    SymbolTableBuilder(table, record_redefinition=record_redefinition).build(program)
    logger.debug(
        "Built symbol table: %d symbols, %d record types",
        len(table),
        len(table.registry.names()),
    )
    if table.multiple_declarations:
        return Blocked(phase=Phase.BUILD, errors=len(table.multiple_declarations))
    return Passed(phase=Phase.BUILD, table=table)
