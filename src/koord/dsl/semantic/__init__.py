"""Semantic analysis module for Koord.

Provide the type registry, scope model, symbol table, and the four analysis
phases run in order by the SemanticAnalyzer.
"""

from koord.dsl.semantic.analyzer import SemanticAnalyzer
from koord.dsl.semantic.phases import Blocked, Passed, Phase, PhaseResult
from koord.dsl.semantic.resolution import Resolution, resolve_chain
from koord.dsl.semantic.scope import Scope, Symbol, SymbolTable, WritePolicy
from koord.dsl.semantic.types import (
    ArrayType,
    CustomType,
    KoordType,
    PrimitiveType,
    TypeRegistry,
    UnknownType,
)

__all__ = [
    "ArrayType",
    "Blocked",
    "CustomType",
    "KoordType",
    "Passed",
    "Phase",
    "PhaseResult",
    "PrimitiveType",
    "Resolution",
    "Scope",
    "SemanticAnalyzer",
    "Symbol",
    "SymbolTable",
    "TypeRegistry",
    "UnknownType",
    "WritePolicy",
    "resolve_chain",
]
