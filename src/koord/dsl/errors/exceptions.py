"""Exception hierarchy for the Koord semantic analyzer.

User-facing problems never raise; they are collected as diagnostics. These
exceptions signal faults in the analyzer or in the tree handed to it.
"""

from koord.dsl.errors.diagnostics import Diagnostic


class KoordError(Exception):
    """Base exception for Koord analyzer errors."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        """Initialize Koord error.

        Args:
            message: Error message.
            filename: Optional source filename.

        """
        super().__init__(message)
        self.filename = filename


class KoordInternalError(KoordError):
    """The tree does not match what the analyzer understands."""


class UnknownTypeError(KoordInternalError):
    """A declaration names a primitive type the analyzer does not know."""

    def __init__(self, type_name: str, *, filename: str | None = None) -> None:
        """Initialize unknown type error.

        Args:
            type_name: The unrecognized type token.
            filename: Optional source filename.

        """
        super().__init__(f"unable to determine type '{type_name}'", filename=filename)
        self.type_name = type_name


class KoordSemanticError(KoordError):
    """Raised by strict entry points when analysis reports diagnostics."""

    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ) -> None:
        """Initialize semantic error.

        Args:
            message: Error message.
            filename: Source filename.
            diagnostics: Diagnostics produced by the analysis.

        """
        super().__init__(message, filename=filename)
        self.diagnostics = diagnostics or []

    def __str__(self) -> str:
        """Format error with every collected diagnostic.

        Returns:
            User-friendly error message including all diagnostics.

        """
        if not self.diagnostics:
            return super().__str__()

        error_lines = []
        for diag in self.diagnostics:
            location = ""
            if diag.line is not None:
                location = f" at line {diag.line}"
            error_lines.append(f"  - [{diag.code.value}] {diag.message}{location}")

        details = "\n".join(error_lines)
        return f"semantic analysis failed:\n{details}"
