"""Type system for Koord semantic analysis.

Define the closed type taxonomy (primitives, arrays, record types, and the
unknown type of unmodelled call results) and the registry holding record
type definitions for one analysis run.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from koord.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PrimitiveType:
    """Primitive leaf type (int, float, bool, pos, string, stream)."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayType:
    """Homogeneous array of an inner type; nesting is permitted."""

    inner: "KoordType"

    def __str__(self) -> str:
        return f"{self.inner}[]"


@dataclass(frozen=True)
class CustomType:
    """Named record type.

    Equality is by name only. The fields live in the TypeRegistry, so a
    reference to a record type may be created before its definition is seen.
    """

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnknownType:
    """Type that cannot be determined yet, such as a function call result."""

    def __str__(self) -> str:
        return "?"


KoordType = PrimitiveType | ArrayType | CustomType | UnknownType
"""Any Koord type."""

INT = PrimitiveType("int")
FLOAT = PrimitiveType("float")
BOOL = PrimitiveType("bool")
POS = PrimitiveType("pos")
STRING = PrimitiveType("string")
STREAM = PrimitiveType("stream")
UNKNOWN = UnknownType()

PRIMITIVE_TYPES: dict[str, PrimitiveType] = {
    t.name: t for t in (INT, FLOAT, BOOL, POS, STRING, STREAM)
}
"""Primitive types by the name used in declarations."""


def is_array(t: KoordType) -> bool:
    """Check whether a type is an array type."""
    return isinstance(t, ArrayType)


def inner_type(t: KoordType) -> KoordType:
    """Return the element type of an array type.

    Raises:
        TypeError: If the type is not an array.

    """
    if not isinstance(t, ArrayType):
        msg = f"type '{t}' is not an array"
        raise TypeError(msg)
    return t.inner


def is_unknown(t: KoordType) -> bool:
    """Check whether a type is the unknown type."""
    return isinstance(t, UnknownType)


def types_equal(left: KoordType, right: KoordType) -> bool:
    """Structural type equality; record types compare by name."""
    return left == right


def array_of(base: KoordType, dims: int) -> KoordType:
    """Wrap a base type once per array dimension."""
    result = base
    for _ in range(dims):
        result = ArrayType(result)
    return result


class TypeRegistry:
    """Record type definitions for one analysis run.

    Must be fully populated before any field lookup, since a record type may
    be used before or after its textual definition.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._records: dict[str, dict[str, KoordType]] = {}

    def define_custom_type(
        self,
        name: str,
        fields: Mapping[str, KoordType],
        *,
        replace: bool = False,
    ) -> bool:
        """Register a record type.

        Args:
            name: Record type name.
            fields: Field names mapped to their declared types.
            replace: Overwrite an existing definition instead of rejecting it.

        Returns:
            True if the definition was registered, False if a definition with
            that name already existed and was kept.

        """
        if name in self._records and not replace:
            return False
        if name in self._records:
            logger.warning("Record type %s redefined, later definition wins", name)
        self._records[name] = dict(fields)
        logger.debug("Registered record type %s with %d fields", name, len(fields))
        return True

    def is_defined(self, name: str) -> bool:
        """Check whether a record type has been registered."""
        return name in self._records

    def fields_of(self, name: str) -> dict[str, KoordType] | None:
        """Return a copy of a record type's fields, or None if undefined."""
        record = self._records.get(name)
        return dict(record) if record is not None else None

    def field_type(self, type_name: str, field_name: str) -> KoordType | None:
        """Look up the declared type of a record field.

        Args:
            type_name: Record type name.
            field_name: Field name.

        Returns:
            The field type, or None if the type or the field does not exist.

        """
        record = self._records.get(type_name)
        if record is None:
            return None
        return record.get(field_name)

    def names(self) -> list[str]:
        """Return the registered record type names."""
        return list(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeRegistry):
            return NotImplemented
        return self._records == other._records
