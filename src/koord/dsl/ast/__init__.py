"""Typed syntax tree for Koord programs.

Provide the AST node dataclasses and the transformer that builds them from
a Lark parse tree.
"""

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
    iter_children,
)
from koord.dsl.ast.transformer import AstTransformer, transform

__all__ = [
    "AdtDef",
    "Assign",
    "AstNode",
    "AstTransformer",
    "BinaryExpr",
    "BoolExpr",
    "BoolVar",
    "Constant",
    "ConstantKind",
    "Decl",
    "DeclGroup",
    "DeclGroupKind",
    "EventDef",
    "FuncCall",
    "IfStmt",
    "IoStream",
    "ModuleBlock",
    "Program",
    "SourcePosition",
    "StringLiteral",
    "VarExpr",
    "iter_children",
    "transform",
]
