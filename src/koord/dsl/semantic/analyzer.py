"""Semantic analyzer for Koord.

Run the four analysis phases in order over a fresh symbol table: build,
reference resolution, type checking, and write access. Each phase runs only
when the previous one passed, so a later phase never sees a program an
earlier phase already found malformed.
"""

from collections.abc import Callable

from koord.config_loader import AnalysisConfig
from koord.dsl.ast.nodes import Program
from koord.dsl.semantic.access import check_write_access
from koord.dsl.semantic.builder import build_symbol_table
from koord.dsl.semantic.phases import Blocked, Passed, PhaseResult
from koord.dsl.semantic.resolver import resolve_references
from koord.dsl.semantic.scope import SymbolTable
from koord.dsl.semantic.type_checker import check_types
from koord.log import get_logger

logger = get_logger(__name__)

PhaseFn = Callable[[Program, SymbolTable], PhaseResult]
"""A phase taking the program and the previous phase's table."""


class SemanticAnalyzer:
    """Run the analysis phases over Koord programs.

    One analyzer can check many programs. Every call to `analyze` starts from
    an empty symbol table, so runs never share state.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        """Initialize the semantic analyzer.

        Args:
            config: Analysis options; defaults when not given.

        """
        self._config = config if config is not None else AnalysisConfig()

    def _build(self, program: Program, table: SymbolTable) -> PhaseResult:
        return build_symbol_table(
            program,
            table,
            record_redefinition=self._config.record_redefinition,
        )

    def _phases(self) -> list[PhaseFn]:
        return [self._build, resolve_references, check_types, check_write_access]

    def analyze(self, program: Program) -> SymbolTable:
        """Analyze a program for semantic correctness.

        Args:
            program: Root of the typed syntax tree.

        Returns:
            A fresh symbol table holding every symbol and every diagnostic.
            The table is valid only if no phase reported a problem.

        Raises:
            KoordInternalError: If the tree does not match what the analyzer
                understands, such as an unknown primitive type.

        """
        logger.debug("Analyzing program %s", program.name)
        table = SymbolTable()

        for phase in self._phases():
            match phase(program, table):
                case Passed(phase=done, table=table):
                    logger.debug("Phase %s passed", done.value)
                case Blocked(phase=done, errors=errors):
                    logger.debug(
                        "Phase %s blocked with %d errors, skipping later phases",
                        done.value,
                        errors,
                    )
                    break

        logger.debug(
            "Analysis of %s finished: %d symbols, valid=%s",
            program.name,
            len(table),
            table.is_valid,
        )
        if self._config.verbose:
            logger.info("Symbol table of %s:\n%s", program.name, table.dump())
        return table
