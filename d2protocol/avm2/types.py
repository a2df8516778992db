"""Raw ABC (ActionScript Byte Code) file structures.

These dataclasses mirror the on-disk layout described in the AVM2 overview.
Indices into the constant pool are kept as plain integers; the linker
resolves them into names.
"""

from dataclasses import dataclass, field
from enum import IntEnum


class NamespaceKind(IntEnum):
    """Namespace kinds stored in the constant pool."""

    PRIVATE = 0x05
    NAMESPACE = 0x08
    PACKAGE = 0x16
    PACKAGE_INTERNAL = 0x17
    PROTECTED = 0x18
    EXPLICIT = 0x19
    STATIC_PROTECTED = 0x1A


class MultinameKind(IntEnum):
    """Multiname kinds stored in the constant pool."""

    QNAME = 0x07
    QNAME_A = 0x0D
    RTQNAME = 0x0F
    RTQNAME_A = 0x10
    RTQNAME_L = 0x11
    RTQNAME_LA = 0x12
    MULTINAME = 0x09
    MULTINAME_A = 0x0E
    MULTINAME_L = 0x1B
    MULTINAME_LA = 0x1C
    TYPENAME = 0x1D


class TraitKind(IntEnum):
    """Low nibble of a trait's kind byte."""

    SLOT = 0
    METHOD = 1
    GETTER = 2
    SETTER = 3
    CLASS = 4
    FUNCTION = 5
    CONST = 6


class SlotKind(IntEnum):
    """Value kind of a slot/const default value."""

    UNDEFINED = 0x00
    UTF8 = 0x01
    INT = 0x03
    UINT = 0x04
    PRIVATE_NS = 0x05
    DOUBLE = 0x06
    NAMESPACE = 0x08
    FALSE = 0x0A
    TRUE = 0x0B
    NULL = 0x0C
    PACKAGE_NS = 0x16
    PACKAGE_INTERNAL_NS = 0x17
    PROTECTED_NS = 0x18
    EXPLICIT_NS = 0x19
    STATIC_PROTECTED_NS = 0x1A


# Trait attribute bits (upper nibble of the kind byte)
TRAIT_ATTR_FINAL = 0x1
TRAIT_ATTR_OVERRIDE = 0x2
TRAIT_ATTR_METADATA = 0x4

# method_info flags
METHOD_HAS_OPTIONAL = 0x08
METHOD_HAS_PARAM_NAMES = 0x80

# instance_info flags
CLASS_PROTECTED_NS = 0x08


@dataclass(frozen=True, slots=True)
class Namespace:
    """A namespace entry: kind plus a string index."""

    kind: int
    name: int


@dataclass(frozen=True, slots=True)
class Multiname:
    """A multiname entry.

    Only the fields relevant to the entry's kind are meaningful; ``params``
    is set for parametrized type names such as ``Vector.<int>``.
    """

    kind: int
    name: int = 0
    namespace: int = 0
    ns_set: int = 0
    qname: int = 0
    params: tuple[int, ...] = ()


@dataclass
class ConstantPool:
    """Constant pool. Index 0 of every table is the implicit default entry."""

    integers: list[int] = field(default_factory=lambda: [0])
    uintegers: list[int] = field(default_factory=lambda: [0])
    doubles: list[float] = field(default_factory=lambda: [float("nan")])
    strings: list[str] = field(default_factory=lambda: [""])
    namespaces: list[Namespace] = field(default_factory=lambda: [Namespace(0, 0)])
    ns_sets: list[tuple[int, ...]] = field(default_factory=lambda: [()])
    multinames: list[Multiname] = field(default_factory=lambda: [Multiname(0)])


@dataclass(frozen=True, slots=True)
class OptionDetail:
    value: int
    kind: int


@dataclass
class MethodInfo:
    """Method signature."""

    param_types: list[int]
    return_type: int
    name: int
    flags: int
    options: list[OptionDetail] = field(default_factory=list)
    param_names: list[int] = field(default_factory=list)


@dataclass
class MetadataInfo:
    name: int
    items: list[tuple[int, int]]


@dataclass
class TraitInfo:
    """A trait. ``vindex``/``vkind`` only apply to slot and const traits."""

    name: int
    kind: int
    attributes: int = 0
    slot_id: int = 0
    type_name: int = 0
    vindex: int = 0
    vkind: int = 0
    index: int = 0
    metadata: list[int] = field(default_factory=list)


@dataclass
class InstanceInfo:
    name: int
    super_name: int
    flags: int
    protected_ns: int
    interfaces: list[int]
    iinit: int
    traits: list[TraitInfo]


@dataclass
class ClassInfo:
    cinit: int
    traits: list[TraitInfo]


@dataclass
class ScriptInfo:
    init: int
    traits: list[TraitInfo]


@dataclass
class ExceptionInfo:
    start: int
    end: int
    target: int
    exc_type: int
    var_name: int


@dataclass
class MethodBody:
    """Method body. ``code`` holds raw, undisassembled bytecode."""

    method: int
    max_stack: int
    local_count: int
    init_scope_depth: int
    max_scope_depth: int
    code: bytes
    exceptions: list[ExceptionInfo] = field(default_factory=list)
    traits: list[TraitInfo] = field(default_factory=list)


@dataclass
class AbcFile:
    """A parsed ABC file."""

    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    methods: list[MethodInfo] = field(default_factory=list)
    metadata: list[MetadataInfo] = field(default_factory=list)
    instances: list[InstanceInfo] = field(default_factory=list)
    classes: list[ClassInfo] = field(default_factory=list)
    scripts: list[ScriptInfo] = field(default_factory=list)
    bodies: list[MethodBody] = field(default_factory=list)
