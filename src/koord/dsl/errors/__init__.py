"""Error handling and diagnostics for the Koord semantic analyzer.

Provide error codes, diagnostic records, and the exception hierarchy for
internal analyzer faults.
"""

from koord.dsl.errors.codes import ErrorCode, format_error_message
from koord.dsl.errors.diagnostics import Diagnostic, Severity
from koord.dsl.errors.exceptions import (
    KoordError,
    KoordInternalError,
    KoordSemanticError,
    UnknownTypeError,
)

__all__ = [
    "Diagnostic",
    "ErrorCode",
    "KoordError",
    "KoordInternalError",
    "KoordSemanticError",
    "Severity",
    "UnknownTypeError",
    "format_error_message",
]
