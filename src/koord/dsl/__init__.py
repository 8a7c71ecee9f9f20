"""Koord DSL semantic analysis package.

Provide the typed syntax tree, semantic analysis, and diagnostics for the
Koord language for coordinated sensing and actuation processes.
"""

from koord.dsl.compiler import analyze_tree, check_tree, validate_tree
from koord.dsl.errors import (
    Diagnostic,
    ErrorCode,
    KoordError,
    KoordInternalError,
    KoordSemanticError,
    Severity,
)
from koord.dsl.semantic import SemanticAnalyzer, SymbolTable

__all__ = [
    "Diagnostic",
    "ErrorCode",
    "KoordError",
    "KoordInternalError",
    "KoordSemanticError",
    "SemanticAnalyzer",
    "Severity",
    "SymbolTable",
    "analyze_tree",
    "check_tree",
    "validate_tree",
]
