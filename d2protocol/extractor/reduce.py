"""Reduce declared ActionScript types and write calls to wire types and codecs."""

from .errors import UnknownWriteMethodError
from .types import Field

ANY_TYPE = "*"

# (declared type, write call) -> (wire type, codec)
WRITE_METHODS: dict[tuple[str, str], tuple[str, str]] = {
    ("uint", "writeByte"): ("uint8", "UInt8"),
    ("int", "writeByte"): ("int8", "Int8"),
    ("uint", "writeShort"): ("uint16", "UInt16"),
    ("int", "writeShort"): ("int16", "Int16"),
    ("uint", "writeVarShort"): ("uint16", "VarUInt16"),
    ("int", "writeVarShort"): ("int16", "VarInt16"),
    ("uint", "writeInt"): ("uint32", "UInt32"),
    ("int", "writeInt"): ("int32", "Int32"),
    ("uint", "writeVarInt"): ("uint32", "VarUInt32"),
    ("int", "writeVarInt"): ("int32", "VarInt32"),
    (ANY_TYPE, "writeVarLong"): ("int64", "VarInt64"),
    ("Number", "writeDouble"): ("float64", "Double"),
    ("Number", "writeFloat"): ("float32", "Float"),
    ("Boolean", "writeBoolean"): ("bool", "Boolean"),
    ("String", "writeUTF"): ("string", "String"),
}

# Length prefixes are always unsigned
LENGTH_METHODS: dict[str, str] = {
    "writeByte": "UInt8",
    "writeShort": "UInt16",
    "writeVarShort": "VarUInt16",
    "writeInt": "UInt32",
    "writeVarInt": "VarUInt32",
}

# Declared types that keep a wire name even without a write call
BARE_TYPES: dict[str, str] = {
    "Boolean": "bool",
}


def reduce_method(declared: str, write_method: str) -> tuple[str, str]:
    """Return the ``(wire type, codec)`` pair for a declared type and write call."""
    reduced = WRITE_METHODS.get((declared, write_method))
    if reduced is None:
        reduced = WRITE_METHODS.get((ANY_TYPE, write_method))
    if reduced is None:
        raise UnknownWriteMethodError(f"unknown write method {write_method} for type {declared}")
    return reduced


def reduce_length_method(write_method: str) -> str:
    """Return the codec of a vector length prefix."""
    try:
        return LENGTH_METHODS[write_method]
    except KeyError:
        raise UnknownWriteMethodError(f"unknown length write method {write_method}") from None


def reduce_field(field: Field) -> None:
    """Rewrite ``field.type``/``field.method`` (and the length codec) in place.

    Fields without a write call are nested types encoded by their own
    serializer, or packed booleans; they keep their declared type name.
    """
    if field.write_method:
        try:
            field.type, field.method = reduce_method(field.type, field.write_method)
        except UnknownWriteMethodError as err:
            raise UnknownWriteMethodError(f"{field.name}: {err}") from None
    else:
        field.type = BARE_TYPES.get(field.type, field.type)

    if field.write_length_method:
        field.length_method = reduce_length_method(field.write_length_method)
