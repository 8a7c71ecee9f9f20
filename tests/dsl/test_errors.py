"""Tests for Koord error codes, diagnostics, and exceptions.

Test error code categories, message templates, diagnostic formatting, and
the exception hierarchy.
"""

import json

from koord.dsl.ast import SourcePosition
from koord.dsl.errors import (
    Diagnostic,
    ErrorCode,
    KoordError,
    KoordInternalError,
    KoordSemanticError,
    Severity,
    UnknownTypeError,
    format_error_message,
)

# =============================================================================
# ErrorCode Tests
# =============================================================================


class TestErrorCode:
    """Test ErrorCode enumeration."""

    def test_error_codes_are_strings(self) -> None:
        """Error codes are string values."""
        assert ErrorCode.E0001.value == "E0001"
        assert ErrorCode.E0103 == "E0103"

    def test_error_codes_have_categories(self) -> None:
        """Error codes have category property."""
        assert ErrorCode.E0001.category == "reference"
        assert ErrorCode.E0003.category == "reference"
        assert ErrorCode.E0004.category == "type"
        assert ErrorCode.E0101.category == "scope"
        assert ErrorCode.E0102.category == "scope"
        assert ErrorCode.E0103.category == "scope"


class TestFormatErrorMessage:
    """Test error message formatting."""

    def test_format_unresolved(self) -> None:
        """Format unresolved symbol error."""
        msg = format_error_message(ErrorCode.E0001, name="speed")
        assert msg == "unresolved symbol 'speed'"

    def test_format_read_only(self) -> None:
        """Format allread assignment error."""
        msg = format_error_message(ErrorCode.E0103, name="leader")
        assert "leader" in msg
        assert "pid" in msg

    def test_missing_parameter_keeps_placeholder(self) -> None:
        """Placeholders without a value stay in the message."""
        msg = format_error_message(ErrorCode.E0004, construct="assignment")
        assert msg == (
            "type mismatch in assignment: expected {expected}, got {actual}"
        )


# =============================================================================
# Diagnostic Tests
# =============================================================================


class TestDiagnostic:
    """Test Diagnostic records."""

    def test_for_code_renders_message(self) -> None:
        """The message comes from the code's template."""
        diag = Diagnostic.for_code(ErrorCode.E0101, subject="x", name="x")
        assert diag.severity == Severity.ERROR
        assert diag.message == "cannot assign to sensor 'x'"
        assert diag.subject == "x"
        assert diag.line is None
        assert diag.column is None

    def test_position_properties(self) -> None:
        """Line and column come from the position."""
        diag = Diagnostic.for_code(
            ErrorCode.E0001,
            position=SourcePosition(line=3, column=7),
            name="triez",
        )
        assert diag.line == 3
        assert diag.column == 7

    def test_format_without_location(self) -> None:
        """Diagnostics without a position render on one line."""
        diag = Diagnostic.for_code(ErrorCode.E0001, name="speed")
        assert diag.format() == "error[E0001]: unresolved symbol 'speed'"

    def test_format_with_location_and_help(self) -> None:
        """Position and help text are rendered below the message."""
        diag = Diagnostic.for_code(
            ErrorCode.E0001,
            position=SourcePosition(line=3, column=7),
            help_text="did you mean 'tries'?",
            name="triez",
        )
        assert diag.format() == (
            "error[E0001]: unresolved symbol 'triez'\n"
            "  --> line 3:7\n"
            "  = help: did you mean 'tries'?"
        )

    def test_to_dict_is_json_serializable(self) -> None:
        """The dictionary form serializes to JSON."""
        diag = Diagnostic.for_code(
            ErrorCode.E0004,
            position=SourcePosition(line=2, column=1),
            construct="assignment to 'a'",
            expected="int",
            actual="float",
        )
        data = json.loads(json.dumps(diag.to_dict()))

        assert data == {
            "severity": "error",
            "code": "E0004",
            "category": "type",
            "message": "type mismatch in assignment to 'a': expected int, got float",
            "location": {"line": 2, "column": 1},
        }

    def test_to_dict_includes_subject_and_help(self) -> None:
        """Subject and help appear when set."""
        diag = Diagnostic.for_code(
            ErrorCode.E0102,
            subject="out",
            help_text="streams are written with <<",
            name="out",
        )
        data = diag.to_dict()

        assert data["subject"] == "out"
        assert data["help"] == "streams are written with <<"
        assert "location" not in data


# =============================================================================
# Exception Tests
# =============================================================================


class TestExceptions:
    """Test the exception hierarchy."""

    def test_hierarchy(self) -> None:
        """Internal faults and semantic failures are Koord errors."""
        assert issubclass(KoordInternalError, KoordError)
        assert issubclass(UnknownTypeError, KoordInternalError)
        assert issubclass(KoordSemanticError, KoordError)

    def test_unknown_type_error(self) -> None:
        """Unknown type errors keep the type name."""
        error = UnknownTypeError("quaternion", filename="walker.koord")
        assert error.type_name == "quaternion"
        assert error.filename == "walker.koord"
        assert str(error) == "unable to determine type 'quaternion'"

    def test_semantic_error_lists_diagnostics(self) -> None:
        """Semantic errors list every diagnostic."""
        error = KoordSemanticError(
            "semantic analysis failed",
            diagnostics=[
                Diagnostic.for_code(
                    ErrorCode.E0001,
                    position=SourcePosition(line=2, column=4),
                    name="a",
                ),
                Diagnostic.for_code(ErrorCode.E0101, name="b"),
            ],
        )
        assert str(error) == (
            "semantic analysis failed:\n"
            "  - [E0001] unresolved symbol 'a' at line 2\n"
            "  - [E0101] cannot assign to sensor 'b'"
        )

    def test_semantic_error_without_diagnostics(self) -> None:
        """Without diagnostics the message is used as is."""
        assert str(KoordSemanticError("failed")) == "failed"
