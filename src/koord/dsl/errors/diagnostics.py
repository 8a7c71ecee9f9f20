"""Diagnostics reported by the Koord semantic analyzer.

A diagnostic pairs an error code with the rendered message, the name it is
about and, when the tree came from a parser, where in the source it was found.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from koord.dsl.errors.codes import ErrorCode, format_error_message
from koord.log import get_logger

if TYPE_CHECKING:
    from koord.dsl.ast.nodes import SourcePosition

logger = get_logger(__name__)


class Severity(str, Enum):
    """How serious a diagnostic is."""

    ERROR = "error"
    """The program is rejected."""


@dataclass(frozen=True)
class Diagnostic:
    """One problem found in a Koord program."""

    code: ErrorCode
    message: str
    subject: str | None = None
    """Qualified name the problem is about."""

    position: SourcePosition | None = None
    """Missing for hand-built trees."""

    help_text: str | None = None
    severity: Severity = Severity.ERROR

    @classmethod
    def for_code(
        cls,
        code: ErrorCode,
        *,
        subject: str | None = None,
        position: SourcePosition | None = None,
        help_text: str | None = None,
        **params: str,
    ) -> Diagnostic:
        """Build a diagnostic whose message is rendered from the code's template.

        Args:
            code: Error code of the problem.
            subject: Name the problem is about.
            position: Where the offending node starts.
            help_text: Suggestion shown under the message.
            **params: Values for the message template.

        Returns:
            The diagnostic.

        """
        return cls(
            code=code,
            message=format_error_message(code, **params),
            subject=subject,
            position=position,
            help_text=help_text,
        )

    @property
    def line(self) -> int | None:
        """1-indexed line of the offending node."""
        return None if self.position is None else self.position.line

    @property
    def column(self) -> int | None:
        """Column of the offending node."""
        return None if self.position is None else self.position.column

    def format(self) -> str:
        """Render the diagnostic the way a compiler prints it.

        Returns:
            The header line followed by optional location and help lines.

        """
        lines = [f"{self.severity.value}[{self.code.value}]: {self.message}"]
        if self.position is not None:
            lines.append(f"  --> line {self.position.line}:{self.position.column}")
        if self.help_text is not None:
            lines.append(f"  = help: {self.help_text}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Plain data form for external reporters.

        Optional keys are left out when the diagnostic has no value for them.

        Returns:
            A JSON-serializable mapping.

        """
        optional = {
            "subject": self.subject,
            "location": None
            if self.position is None
            else {"line": self.position.line, "column": self.position.column},
            "help": self.help_text,
        }
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "category": self.code.category,
            "message": self.message,
        } | {key: value for key, value in optional.items() if value is not None}
