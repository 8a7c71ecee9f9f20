"""Reference resolution shared by the Koord analysis phases.

A reference is either a declared (possibly module-qualified) name or a dotted
chain of field accesses starting from one, such as ``Motion.target.x``.
"""

from dataclasses import dataclass

from koord.dsl.semantic.scope import Symbol, SymbolTable
from koord.dsl.semantic.types import CustomType, KoordType
from koord.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """A successfully resolved reference."""

    symbol: Symbol
    """Symbol the reference starts from."""

    type: KoordType
    """Type of the whole reference, after walking any field accesses."""

    fields: tuple[str, ...] = ()
    """Field names walked after the symbol."""


def _root_symbol(table: SymbolTable, segments: list[str]) -> tuple[Symbol, int] | None:
    """Find the longest dotted prefix that names a declared symbol.

    Returns:
        The symbol and the number of segments it consumed, or None.

    """
    for length in range(len(segments), 0, -1):
        symbol = table.lookup(".".join(segments[:length]))
        if symbol is not None:
            return symbol, length
    return None


def resolve_chain(table: SymbolTable, text: str) -> Resolution | None:
    """Resolve a variable reference to its symbol and type.

    The full text is looked up first. Otherwise the longest dotted prefix that
    is a declared symbol is taken and the remaining segments are walked as
    record fields through the table's type registry.

    Args:
        table: Symbol table with a populated type registry.
        text: Reference text as written.

    Returns:
        The resolution, or None if the leading symbol is unknown, a field is
        accessed on a non-record type, or a field name is unknown.

    """
    symbol = table.lookup(text)
    if symbol is not None:
        return Resolution(symbol=symbol, type=symbol.type)

    segments = text.split(".")
    root = _root_symbol(table, segments)
    if root is None:
        return None
    symbol, consumed = root

    current: KoordType = symbol.type
    walked = segments[consumed:]
    for field_name in walked:
        if not isinstance(current, CustomType):
            logger.debug("Field %s accessed on non-record type %s", field_name, current)
            return None
        if not table.registry.is_defined(current.name):
            logger.debug("Record type %s is not defined", current.name)
            return None
        field_type = table.registry.field_type(current.name, field_name)
        if field_type is None:
            logger.debug("Record type %s has no field %s", current.name, field_name)
            return None
        current = field_type

    return Resolution(symbol=symbol, type=current, fields=tuple(walked))
