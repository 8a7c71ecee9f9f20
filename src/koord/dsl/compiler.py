"""Entry points for analyzing Koord parse trees.

Take the Lark parse tree produced by the Koord grammar, transform it to the
typed AST, and run semantic analysis over it.
"""

from lark import Token, Tree

from koord.config_loader import AnalysisConfig
from koord.dsl.ast.transformer import transform
from koord.dsl.errors.diagnostics import Diagnostic
from koord.dsl.errors.exceptions import KoordSemanticError
from koord.dsl.semantic.analyzer import SemanticAnalyzer
from koord.dsl.semantic.scope import SymbolTable
from koord.log import get_logger

logger = get_logger(__name__)


def analyze_tree(
    tree: Tree[Token],
    *,
    filename: str | None = None,
    config: AnalysisConfig | None = None,
) -> SymbolTable:
    """Analyze a parse tree and return the populated symbol table.

    Args:
        tree: Lark parse tree of a Koord program.
        filename: Name of the source file (for log messages).
        config: Analysis options; defaults when not given.

    Returns:
        Symbol table holding the symbols and all diagnostic lists.

    Raises:
        KoordInternalError: If the tree does not match the Koord grammar.

    """
    logger.debug("Analyzing Koord file: %s", filename or "<tree>")
    program = transform(tree)
    return SemanticAnalyzer(config).analyze(program)


def validate_tree(
    tree: Tree[Token],
    *,
    filename: str | None = None,
    config: AnalysisConfig | None = None,
) -> list[Diagnostic]:
    """Validate a parse tree and return its diagnostics.

    Args:
        tree: Lark parse tree of a Koord program.
        filename: Name of the source file.
        config: Analysis options; defaults when not given.

    Returns:
        List of diagnostics, empty when the program is valid.

    """
    table = analyze_tree(tree, filename=filename, config=config)
    diagnostics = table.diagnostics
    if diagnostics:
        logger.debug(
            "Semantic errors in %s: %d diagnostics",
            filename or "<tree>",
            len(diagnostics),
        )
    return diagnostics


def check_tree(
    tree: Tree[Token],
    *,
    filename: str | None = None,
    config: AnalysisConfig | None = None,
) -> SymbolTable:
    """Analyze a parse tree, raising if the program is not valid.

    Args:
        tree: Lark parse tree of a Koord program.
        filename: Name of the source file (for error messages).
        config: Analysis options; defaults when not given.

    Returns:
        The valid symbol table, ready for a downstream code generator.

    Raises:
        KoordSemanticError: If analysis reported any diagnostic.

    """
    table = analyze_tree(tree, filename=filename, config=config)
    if not table.is_valid:
        msg = "semantic analysis failed"
        raise KoordSemanticError(
            msg,
            filename=filename,
            diagnostics=table.diagnostics,
        )
    return table
