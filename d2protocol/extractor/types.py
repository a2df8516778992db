"""Reconstructed protocol schema types."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin


@dataclass
class Field(DataClassJsonMixin):
    """Represents a serialized field of a message or type.

    ``type`` is the canonical wire type (``uint16``, ``string``...) for scalar
    fields, or the declared class name for nested and type-manager fields.
    ``method`` is the scalar codec used to encode/decode a single value.

    For vectors:
    - is_dynamic_length: a length prefix written with ``write_length_method``
    - otherwise ``length`` holds the fixed element count
    """

    name: str
    type: str
    write_method: str = ""
    method: str = ""

    is_vector: bool = False
    is_dynamic_length: bool = False
    length: int = 0
    write_length_method: str = ""
    length_method: str = ""

    use_type_manager: bool = False
    type_manager_method: str = ""

    use_bbw: bool = False  # packed in a BooleanByteWrapper byte
    bbw_position: int = 0


@dataclass
class Class(DataClassJsonMixin):
    """Represents a message or type class."""

    name: str
    namespace: str
    parent: str
    fields: list[Field]
    protocol_id: int
    use_hash_func: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}"


@dataclass
class EnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    value: int


@dataclass
class Enum(DataClassJsonMixin):
    """Represents an enumeration class."""

    name: str
    values: list[EnumValue] = field(default_factory=list)


@dataclass
class Version(DataClassJsonMixin):
    """Represents a client version.

    ``revision`` and ``patch`` are build counters; only the first three
    components appear in the public version string.
    """

    major: int
    minor: int
    release: int
    revision: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.release}"


@dataclass
class Protocol(DataClassJsonMixin):
    """Represents a complete reconstructed protocol."""

    messages: list[Class]
    types: list[Class]
    enums: list[Enum]
    version: Version


PRIMITIVE_TYPES = frozenset(
    [
        "bool",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint8",
        "uint16",
        "uint32",
        "float32",
        "float64",
        "string",
    ]
)


def is_primitive(type_name: str) -> bool:
    """Check if a field type is a primitive wire type."""
    return type_name in PRIMITIVE_TYPES
