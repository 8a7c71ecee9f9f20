"""Tests for Koord scopes, symbols, and the symbol table.

Test write policies, symbol insertion without overwrite, the diagnostic
lists, and the debug dump.
"""

from koord.dsl.ast import (
    Assign,
    Constant,
    ConstantKind,
    Decl,
    DeclGroupKind,
    SourcePosition,
)
from koord.dsl.errors import ErrorCode
from koord.dsl.semantic.scope import Scope, Symbol, SymbolTable, WritePolicy
from koord.dsl.semantic.types import FLOAT, INT, POS, ArrayType

# =============================================================================
# Scope Tests
# =============================================================================


class TestScope:
    """Test scope write policies."""

    def test_write_policies(self) -> None:
        """Only sensor and allread scopes restrict writes."""
        assert Scope.SENSOR.write_policy == WritePolicy.READ_ONLY
        assert Scope.ALLREAD.write_policy == WritePolicy.OWN_IDENTITY
        assert Scope.LOCAL.write_policy == WritePolicy.FREE
        assert Scope.ALLWRITE.write_policy == WritePolicy.FREE
        assert Scope.ACTUATOR.write_policy == WritePolicy.FREE

    def test_from_group(self) -> None:
        """Each declaration group maps to its scope."""
        assert Scope.from_group(DeclGroupKind.SENSORS) == Scope.SENSOR
        assert Scope.from_group(DeclGroupKind.ACTUATORS) == Scope.ACTUATOR
        assert Scope.from_group(DeclGroupKind.ALLREAD) == Scope.ALLREAD
        assert Scope.from_group(DeclGroupKind.ALLWRITE) == Scope.ALLWRITE
        assert Scope.from_group(DeclGroupKind.LOCAL) == Scope.LOCAL


class TestSymbol:
    """Test Symbol dataclass."""

    def test_str(self) -> None:
        """Symbols render name, type, and scope."""
        symbol = Symbol(
            name="Motion.path",
            type=ArrayType(POS),
            scope=Scope.ACTUATOR,
        )
        assert str(symbol) == "{name: Motion.path, type: pos[], scope: ACTUATOR}"

    def test_hashable_with_declaration(self) -> None:
        """Symbols hash and compare without their declaration node."""
        decl = Decl(name="tries", type_name="int")
        symbol = Symbol(name="tries", type=INT, scope=Scope.LOCAL, defined_at=decl)
        bare = Symbol(name="tries", type=INT, scope=Scope.LOCAL)

        assert symbol == bare
        assert {symbol, bare} == {bare}


# =============================================================================
# Symbol Table Tests
# =============================================================================


class TestSymbolTable:
    """Test SymbolTable symbols and diagnostics."""

    def test_empty_table_is_valid(self) -> None:
        """A fresh table has no symbols and no problems."""
        table = SymbolTable()
        assert len(table) == 0
        assert table.is_valid
        assert table.diagnostics == []

    def test_define_and_lookup(self) -> None:
        """Defined symbols can be looked up by qualified name."""
        table = SymbolTable()
        symbol = Symbol(name="tries", type=INT, scope=Scope.LOCAL)

        assert table.define(symbol)
        assert table.lookup("tries") is symbol
        assert "tries" in table
        assert table.lookup("other") is None

    def test_define_does_not_overwrite(self) -> None:
        """A second symbol under the same name is refused."""
        table = SymbolTable()
        first = Symbol(name="tries", type=INT, scope=Scope.LOCAL)
        second = Symbol(name="tries", type=FLOAT, scope=Scope.ALLWRITE)

        table.define(first)
        assert not table.define(second)
        assert table.lookup("tries") is first
        assert len(table) == 1

    def test_symbols_is_a_copy(self) -> None:
        """Mutating the symbols mapping does not change the table."""
        table = SymbolTable()
        table.define(Symbol(name="tries", type=INT, scope=Scope.LOCAL))

        symbols = table.symbols
        symbols.clear()

        assert len(table) == 1

    def test_each_report_invalidates(self) -> None:
        """Every diagnostic list on its own makes the table invalid."""
        node = Assign(target="x", value=Constant(kind=ConstantKind.INT, text="1"))
        reports = [
            lambda t: t.report_unresolved("x"),
            lambda t: t.report_multiple_declaration("x"),
            lambda t: t.report_type_mismatch(
                node,
                construct="assignment",
                expected=INT,
                actual=FLOAT,
            ),
            lambda t: t.report_assign_to_sensor("x"),
            lambda t: t.report_assign_to_stream("x"),
            lambda t: t.report_assign_to_read_only("x"),
        ]
        for report in reports:
            table = SymbolTable()
            report(table)
            assert not table.is_valid
            assert len(table.diagnostics) == 1

    def test_reports_fill_their_lists(self) -> None:
        """Reports land in the matching list with the matching code."""
        table = SymbolTable()
        node = Assign(target="x", value=Constant(kind=ConstantKind.INT, text="1"))

        table.report_unresolved("a")
        table.report_multiple_declaration("b")
        table.report_type_mismatch(
            node,
            construct="assignment",
            expected=INT,
            actual=FLOAT,
        )
        table.report_assign_to_sensor("c")
        table.report_assign_to_stream("d")
        table.report_assign_to_read_only("e")

        assert table.unresolved_symbols == ["a"]
        assert table.multiple_declarations == ["b"]
        assert table.type_mismatches == [node]
        assert table.assign_to_sensor == ["c"]
        assert table.assign_to_stream == ["d"]
        assert table.assign_to_read_only == ["e"]
        assert [d.code for d in table.diagnostics] == [
            ErrorCode.E0001,
            ErrorCode.E0003,
            ErrorCode.E0004,
            ErrorCode.E0101,
            ErrorCode.E0102,
            ErrorCode.E0103,
        ]

    def test_diagnostic_position_from_node(self) -> None:
        """Diagnostics carry the line and column of the offending node."""
        table = SymbolTable()
        node = Assign(
            target="x",
            value=Constant(kind=ConstantKind.INT, text="1"),
            meta=SourcePosition(line=7, column=5),
        )

        table.report_assign_to_sensor("x", node)

        diagnostic = table.diagnostics[0]
        assert diagnostic.line == 7
        assert diagnostic.column == 5
        assert diagnostic.subject == "x"
        assert "sensor 'x'" in diagnostic.message

    def test_type_mismatch_message(self) -> None:
        """Type mismatch messages name both types."""
        table = SymbolTable()
        node = Assign(target="x", value=Constant(kind=ConstantKind.FLOAT, text="1.5"))

        table.report_type_mismatch(
            node,
            construct="assignment to 'x'",
            expected=INT,
            actual=FLOAT,
        )

        message = table.diagnostics[0].message
        assert message == (
            "type mismatch in assignment to 'x': expected int, got float"
        )

    def test_dump_sorted(self) -> None:
        """The dump lists every symbol sorted by name."""
        table = SymbolTable()
        table.define(Symbol(name="tries", type=INT, scope=Scope.LOCAL))
        table.define(Symbol(name="Motion.target", type=POS, scope=Scope.ACTUATOR))

        assert table.dump() == (
            "{name: Motion.target, type: pos, scope: ACTUATOR}\n"
            "{name: tries, type: int, scope: LOCAL}"
        )
        assert str(table) == table.dump()
