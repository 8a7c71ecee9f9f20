"""Error codes for the Koord semantic analyzer.

Each diagnostic list of the symbol table has one code. Codes below E0100
report problems with names and types, codes from E0100 report writes that a
variable's scope does not permit.
"""

from enum import Enum

from koord.log import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """Koord analyzer error codes."""

    E0001 = "E0001"
    """Reference to an undeclared variable or unknown field."""

    E0003 = "E0003"
    """Name declared more than once under the same qualified name."""

    E0004 = "E0004"
    """Type mismatch in expression, index, assignment, or stream usage."""

    E0101 = "E0101"
    """Assignment to a sensor variable."""

    E0102 = "E0102"
    """Assignment to a stream variable."""

    E0103 = "E0103"
    """Assignment to an allread variable with something other than pid."""

    @property
    def category(self) -> str:
        """Analysis concern the code belongs to: reference, type, or scope."""
        return _CATEGORIES[self]

    @property
    def template(self) -> str:
        """Message template with named placeholders."""
        return ERROR_MESSAGES[self]


_CATEGORIES: dict[ErrorCode, str] = {
    ErrorCode.E0001: "reference",
    ErrorCode.E0003: "reference",
    ErrorCode.E0004: "type",
    ErrorCode.E0101: "scope",
    ErrorCode.E0102: "scope",
    ErrorCode.E0103: "scope",
}

ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.E0001: "unresolved symbol '{name}'",
    ErrorCode.E0003: "'{name}' is declared more than once",
    ErrorCode.E0004: "type mismatch in {construct}: expected {expected}, got {actual}",
    ErrorCode.E0101: "cannot assign to sensor '{name}'",
    ErrorCode.E0102: "cannot assign to stream '{name}'",
    ErrorCode.E0103: "allread variable '{name}' may only be assigned pid",
}
"""Message template of each code."""


class _Placeholders(dict[str, str]):
    """Template parameters that leave unknown placeholders in place."""

    def __missing__(self, key: str) -> str:
        logger.warning("Missing parameter for error message: %s", key)
        return f"{{{key}}}"


def format_error_message(code: ErrorCode, **params: str) -> str:
    """Render the message of an error code.

    Args:
        code: The error code.
        **params: Values for the placeholders of the code's template.

    Returns:
        The message. Placeholders without a value are kept verbatim.

    """
    return code.template.format_map(_Placeholders(params))
