"""AST transformer for Koord.

Transform Lark parse trees produced by the Koord grammar into typed AST
node structures.
"""

# mypy: disable-error-code="type-arg,no-any-return"
# Note: Lark transformers receive heterogeneous children, making strict typing
# impractical. The type-arg and no-any-return errors are suppressed for this file.

from dataclasses import replace
from typing import Any

from lark import Token, Transformer, Tree, v_args
from lark.exceptions import VisitError

from koord.dsl.ast.nodes import (
    AdtDef,
    Assign,
    AstNode,
    BinaryExpr,
    BoolExpr,
    BoolVar,
    Constant,
    ConstantKind,
    Decl,
    DeclGroup,
    DeclGroupKind,
    EventDef,
    FuncCall,
    IfStmt,
    IoStream,
    ModuleBlock,
    Program,
    SourcePosition,
    StringLiteral,
    VarExpr,
)
from koord.dsl.errors.exceptions import (
    KoordError,
    KoordInternalError,
    UnknownTypeError,
)
from koord.log import get_logger

logger = get_logger(__name__)

TransformerItems = list[Any]
"""Children handed to transformer callbacks (tokens and transformed nodes)."""

PRIMITIVE_TYPE_TOKENS: dict[str, str] = {
    "INT": "int",
    "FLOAT": "float",
    "BOOL": "bool",
    "POS": "pos",
    "STRINGTYPE": "string",
    "STREAM": "stream",
}
"""Declaration type tokens mapped to primitive type names."""

CONSTANT_TOKENS: dict[str, ConstantKind] = {
    "FNUM": ConstantKind.FLOAT,
    "INUM": ConstantKind.INT,
    "PID": ConstantKind.PID,
    "NUMAGENTS": ConstantKind.NUMAGENTS,
}
"""Literal tokens mapped to constant kinds."""

_STRUCTURAL_TOKENS = frozenset({
    "VARNAME",
    "UPPER",
    "STRING",
    "LBRACE",
    "RBRACE",
    "LPAR",
    "RPAR",
    "ASGN",
    "COMMA",
    "COLON",
})
"""Token types that are never operators."""


def _meta_to_position(meta: object) -> SourcePosition | None:
    """Convert Lark meta object to SourcePosition.

    Args:
        meta: Lark meta object with line/column attributes.

    Returns:
        SourcePosition or None if meta has no line info.

    """
    line = getattr(meta, "line", None)
    if meta is not None and line is not None:
        return SourcePosition(
            line=line,
            column=getattr(meta, "column", 0),
            end_line=getattr(meta, "end_line", None),
            end_column=getattr(meta, "end_column", None),
        )
    return None


def _tokens(items: TransformerItems, *types: str) -> list[Token]:
    """Select tokens of the given types, or all tokens if none given."""
    return [
        item
        for item in items
        if isinstance(item, Token) and (not types or item.type in types)
    ]


def _first_token(items: TransformerItems, *types: str) -> Token | None:
    """Return the first token of the given types, if any."""
    found = _tokens(items, *types)
    return found[0] if found else None


def _nodes(items: TransformerItems) -> list[AstNode]:
    """Select transformed child nodes, dropping tokens and markers."""
    return [
        item
        for item in items
        if not isinstance(item, (Token, _ArrayDim, _ElseBody))
    ]


def _operator(items: TransformerItems) -> str | None:
    """Return the text of the operator token among the children, if any."""
    for token in _tokens(items):
        if token.type not in _STRUCTURAL_TOKENS:
            return str(token)
    return None


def _unquote(value: str) -> str:
    """Remove surrounding quotes from a string literal."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":  # noqa: PLR2004
        return value[1:-1]
    return value


class _ArrayDim:
    """Marker for one array dimension suffix on a declaration."""


class _ElseBody:
    """Wrapper carrying the statements of an else branch."""

    def __init__(self, statements: list[AstNode]) -> None:
        self.statements = statements


class AstTransformer(Transformer):
    """Transform a Koord Lark parse tree into AST nodes."""

    def __default__(
        self,
        data: str,
        _children: TransformerItems,
        _meta: object,
    ) -> None:
        """Refuse grammar rules the analyzer does not understand."""
        msg = f"unrecognized grammar rule '{data}'"
        raise KoordInternalError(msg)

    # =========================================================================
    # Program structure
    # =========================================================================

    @v_args(meta=True)
    def program(self, meta: object, items: TransformerItems) -> Program:
        """Transform the program root."""
        name = _first_token(items, "VARNAME", "UPPER")
        return Program(
            name=str(name) if name is not None else "",
            items=_nodes(items),
            meta=_meta_to_position(meta),
        )

    @v_args(meta=True)
    def module(self, meta: object, items: TransformerItems) -> ModuleBlock:
        """Transform a named module block."""
        name = _first_token(items, "UPPER", "VARNAME")
        if name is None:
            msg = "module block without a name"
            raise KoordInternalError(msg)
        groups = [n for n in _nodes(items) if isinstance(n, DeclGroup)]
        return ModuleBlock(name=str(name), groups=groups, meta=_meta_to_position(meta))

    def _group(
        self,
        kind: DeclGroupKind,
        meta: object,
        items: TransformerItems,
    ) -> DeclGroup:
        decls = [n for n in _nodes(items) if isinstance(n, Decl)]
        return DeclGroup(kind=kind, decls=decls, meta=_meta_to_position(meta))

    @v_args(meta=True)
    def sensordecls(self, meta: object, items: TransformerItems) -> DeclGroup:
        """Transform a sensors block."""
        return self._group(DeclGroupKind.SENSORS, meta, items)

    @v_args(meta=True)
    def actuatordecls(self, meta: object, items: TransformerItems) -> DeclGroup:
        """Transform an actuators block."""
        return self._group(DeclGroupKind.ACTUATORS, meta, items)

    @v_args(meta=True)
    def allreadvars(self, meta: object, items: TransformerItems) -> DeclGroup:
        """Transform an allread block."""
        return self._group(DeclGroupKind.ALLREAD, meta, items)

    @v_args(meta=True)
    def allwritevars(self, meta: object, items: TransformerItems) -> DeclGroup:
        """Transform an allwrite block."""
        return self._group(DeclGroupKind.ALLWRITE, meta, items)

    @v_args(meta=True)
    def localvars(self, meta: object, items: TransformerItems) -> DeclGroup:
        """Transform a local block."""
        return self._group(DeclGroupKind.LOCAL, meta, items)

    # =========================================================================
    # Declarations
    # =========================================================================

    def arraydec(self, _items: TransformerItems) -> _ArrayDim:
        """Transform one array dimension suffix."""
        return _ArrayDim()

    @v_args(meta=True)
    def decl(self, meta: object, items: TransformerItems) -> Decl:
        """Transform a variable or field declaration.

        The declared type is either one of the primitive type tokens or an
        UPPER custom type name; anything else is an analyzer fault.
        """
        name = _first_token(items, "VARNAME")
        if name is None:
            msg = "declaration without a variable name"
            raise KoordInternalError(msg)

        custom = _first_token(items, "UPPER")
        primitive = _first_token(items, *PRIMITIVE_TYPE_TOKENS)
        if custom is not None:
            type_name, is_custom = str(custom), True
        elif primitive is not None:
            type_name, is_custom = PRIMITIVE_TYPE_TOKENS[primitive.type], False
        else:
            others = [str(t) for t in _tokens(items) if t is not name]
            raise UnknownTypeError(others[0] if others else "")

        nodes = _nodes(items)
        return Decl(
            name=str(name),
            type_name=type_name,
            is_custom=is_custom,
            array_dims=sum(1 for item in items if isinstance(item, _ArrayDim)),
            initializer=nodes[0] if nodes else None,
            meta=_meta_to_position(meta),
        )

    @v_args(meta=True)
    def adtdef(self, meta: object, items: TransformerItems) -> AdtDef:
        """Transform a record type definition."""
        name = _first_token(items, "UPPER")
        if name is None:
            msg = "record type definition without a name"
            raise KoordInternalError(msg)
        fields = [n for n in _nodes(items) if isinstance(n, Decl)]
        return AdtDef(name=str(name), fields=fields, meta=_meta_to_position(meta))

    # =========================================================================
    # Events and statements
    # =========================================================================

    @v_args(meta=True)
    def event(self, meta: object, items: TransformerItems) -> EventDef:
        """Transform an event with its precondition and effects."""
        name = _first_token(items, "VARNAME", "UPPER")
        nodes = _nodes(items)
        precondition = None
        if nodes and isinstance(nodes[0], (BoolExpr, BoolVar)):
            precondition = nodes.pop(0)
        return EventDef(
            name=str(name) if name is not None else "",
            precondition=precondition,
            effects=nodes,
            meta=_meta_to_position(meta),
        )

    def stmt(self, items: TransformerItems) -> AstNode:
        """Unwrap a statement to the statement it holds."""
        nodes = _nodes(items)
        if len(nodes) != 1:
            msg = f"statement with {len(nodes)} parts"
            raise KoordInternalError(msg)
        return nodes[0]

    @v_args(meta=True)
    def assign(self, meta: object, items: TransformerItems) -> Assign:
        """Transform an assignment, with an optional index on the target."""
        target = _first_token(items, "VARNAME")
        nodes = _nodes(items)
        if target is None or not nodes:
            msg = "malformed assignment"
            raise KoordInternalError(msg)
        index = nodes[0] if len(nodes) > 1 else None
        return Assign(
            target=str(target),
            index=index,
            value=nodes[-1],
            meta=_meta_to_position(meta),
        )

    @v_args(meta=True)
    def iostream(self, meta: object, items: TransformerItems) -> IoStream:
        """Transform a stream input/output statement."""
        var = _first_token(items, "VARNAME")
        return IoStream(
            var=str(var) if var is not None else None,
            meta=_meta_to_position(meta),
        )

    def elseblock(self, items: TransformerItems) -> _ElseBody:
        """Transform the else branch of a conditional."""
        return _ElseBody(_nodes(items))

    @v_args(meta=True)
    def ifblock(self, meta: object, items: TransformerItems) -> IfStmt:
        """Transform a conditional statement."""
        nodes = _nodes(items)
        if not nodes:
            msg = "conditional without a condition"
            raise KoordInternalError(msg)
        else_body: list[AstNode] = []
        for item in items:
            if isinstance(item, _ElseBody):
                else_body = item.statements
        return IfStmt(
            condition=nodes[0],
            then_body=nodes[1:],
            else_body=else_body,
            meta=_meta_to_position(meta),
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    @v_args(meta=True)
    def constant(self, meta: object, items: TransformerItems) -> Constant:
        """Transform a numeric literal."""
        token = _first_token(items, *CONSTANT_TOKENS)
        if token is None:
            msg = f"unable to recognize number {items!r}"
            raise KoordInternalError(msg)
        return Constant(
            kind=CONSTANT_TOKENS[token.type],
            text=str(token),
            meta=_meta_to_position(meta),
        )

    @v_args(meta=True)
    def funccall(self, meta: object, items: TransformerItems) -> FuncCall:
        """Transform a function call."""
        name = _first_token(items, "VARNAME", "UPPER")
        return FuncCall(
            name=str(name) if name is not None else "",
            args=_nodes(items),
            meta=_meta_to_position(meta),
        )

    @v_args(meta=True)
    def aexpr(self, meta: object, items: TransformerItems) -> AstNode:
        """Transform an arithmetic/value expression.

        Parenthesised expressions collapse to the expression they wrap.
        """
        position = _meta_to_position(meta)
        nodes = _nodes(items)
        varname = _first_token(items, "VARNAME")
        string = _first_token(items, "STRING")

        if len(nodes) == 2:  # noqa: PLR2004
            op = _operator(items)
            if op is None:
                msg = "binary expression without an operator"
                raise KoordInternalError(msg)
            return BinaryExpr(op=op, left=nodes[0], right=nodes[1], meta=position)
        if varname is not None:
            index = nodes[0] if nodes else None
            return VarExpr(name=str(varname), index=index, meta=position)
        if string is not None:
            return StringLiteral(value=_unquote(str(string)), meta=position)
        if len(nodes) == 1:
            inner = nodes[0]
            if isinstance(inner, Constant) and _first_token(items, "LPAR"):
                return replace(inner, parenthesised=True)
            return inner

        msg = f"unrecognized value expression {items!r}"
        raise KoordInternalError(msg)

    @v_args(meta=True)
    def bexpr(self, meta: object, items: TransformerItems) -> AstNode:
        """Transform a boolean expression."""
        position = _meta_to_position(meta)
        nodes = _nodes(items)
        varname = _first_token(items, "VARNAME")
        literal = _first_token(items, "TRUE", "FALSE")

        if varname is not None and not nodes:
            return BoolVar(name=str(varname), meta=position)
        if literal is not None and not nodes:
            return BoolExpr(op=str(literal).lower(), meta=position)

        op = _operator(items)
        if op is None and len(nodes) == 1 and isinstance(nodes[0], (BoolExpr, BoolVar)):
            return nodes[0]
        return BoolExpr(op=op or "", operands=nodes, meta=position)


def transform(tree: Tree[Token]) -> Program:
    """Transform a Lark parse tree into an AST.

    Args:
        tree: Lark parse tree of a Koord program.

    Returns:
        Root Program AST node.

    """
    transformer = AstTransformer()
    try:
        return transformer.transform(tree)
    except VisitError as e:
        # Lark wraps callback exceptions; surface analyzer faults unwrapped
        if isinstance(e.orig_exc, KoordError):
            raise e.orig_exc from e
        raise
