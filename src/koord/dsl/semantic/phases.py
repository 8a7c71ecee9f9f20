"""Phase outcomes for the Koord analysis pipeline.

Each phase returns Passed, carrying the table the next phase works on, or
Blocked, which stops the pipeline before any later phase runs.
"""

from dataclasses import dataclass
from enum import Enum

from koord.dsl.semantic.scope import SymbolTable


class Phase(str, Enum):
    """Analysis phases, in the order they run."""

    BUILD = "build"
    RESOLVE = "resolve"
    TYPES = "types"
    ACCESS = "access"


@dataclass(frozen=True)
class Passed:
    """The phase found no blocking problems."""

    phase: Phase
    table: SymbolTable


@dataclass(frozen=True)
class Blocked:
    """The phase recorded problems that make later phases meaningless."""

    phase: Phase
    errors: int


PhaseResult = Passed | Blocked
"""Outcome of one analysis phase."""
