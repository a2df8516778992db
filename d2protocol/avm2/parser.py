"""ABC file parser."""

import logging

from .reader import ByteReader, ReadError
from .types import (
    CLASS_PROTECTED_NS,
    METHOD_HAS_OPTIONAL,
    METHOD_HAS_PARAM_NAMES,
    TRAIT_ATTR_METADATA,
    AbcFile,
    ClassInfo,
    ConstantPool,
    ExceptionInfo,
    InstanceInfo,
    MetadataInfo,
    MethodBody,
    MethodInfo,
    Multiname,
    MultinameKind,
    Namespace,
    OptionDetail,
    ScriptInfo,
    TraitInfo,
    TraitKind,
)

logger = logging.getLogger(__name__)


class AbcParseError(RuntimeError):
    """Raised when an ABC file is malformed."""


def _counted(reader: ByteReader) -> range:
    """Range over pool entries 1..count-1; a zero count means no entries."""
    count = reader.u30()
    return range(1, count) if count else range(0)


def _parse_multiname(reader: ByteReader) -> Multiname:
    kind = reader.u8()
    match kind:
        case MultinameKind.QNAME | MultinameKind.QNAME_A:
            namespace = reader.u30()
            return Multiname(kind, name=reader.u30(), namespace=namespace)
        case MultinameKind.RTQNAME | MultinameKind.RTQNAME_A:
            return Multiname(kind, name=reader.u30())
        case MultinameKind.RTQNAME_L | MultinameKind.RTQNAME_LA:
            return Multiname(kind)
        case MultinameKind.MULTINAME | MultinameKind.MULTINAME_A:
            name = reader.u30()
            return Multiname(kind, name=name, ns_set=reader.u30())
        case MultinameKind.MULTINAME_L | MultinameKind.MULTINAME_LA:
            return Multiname(kind, ns_set=reader.u30())
        case MultinameKind.TYPENAME:
            qname = reader.u30()
            params = tuple(reader.u30() for _ in range(reader.u30()))
            return Multiname(kind, qname=qname, params=params)
    raise AbcParseError(f"unknown multiname kind 0x{kind:02x} at offset {reader.offset - 1}")


def _parse_constant_pool(reader: ByteReader) -> ConstantPool:
    pool = ConstantPool()
    pool.integers.extend(reader.s32() for _ in _counted(reader))
    pool.uintegers.extend(reader.u30() for _ in _counted(reader))
    pool.doubles.extend(reader.d64() for _ in _counted(reader))
    pool.strings.extend(reader.string() for _ in _counted(reader))
    for _ in _counted(reader):
        kind = reader.u8()
        pool.namespaces.append(Namespace(kind, reader.u30()))
    for _ in _counted(reader):
        pool.ns_sets.append(tuple(reader.u30() for _ in range(reader.u30())))
    pool.multinames.extend(_parse_multiname(reader) for _ in _counted(reader))
    return pool


def _parse_method(reader: ByteReader) -> MethodInfo:
    param_count = reader.u30()
    return_type = reader.u30()
    param_types = [reader.u30() for _ in range(param_count)]
    name = reader.u30()
    flags = reader.u8()
    method = MethodInfo(param_types, return_type, name, flags)
    if flags & METHOD_HAS_OPTIONAL:
        for _ in range(reader.u30()):
            value = reader.u30()
            method.options.append(OptionDetail(value, reader.u8()))
    if flags & METHOD_HAS_PARAM_NAMES:
        method.param_names = [reader.u30() for _ in range(param_count)]
    return method


def _parse_metadata(reader: ByteReader) -> MetadataInfo:
    name = reader.u30()
    count = reader.u30()
    keys = [reader.u30() for _ in range(count)]
    values = [reader.u30() for _ in range(count)]
    return MetadataInfo(name, list(zip(keys, values)))


def _parse_trait(reader: ByteReader) -> TraitInfo:
    name = reader.u30()
    kind_byte = reader.u8()
    trait = TraitInfo(name=name, kind=kind_byte & 0x0F, attributes=kind_byte >> 4)
    match trait.kind:
        case TraitKind.SLOT | TraitKind.CONST:
            trait.slot_id = reader.u30()
            trait.type_name = reader.u30()
            trait.vindex = reader.u30()
            if trait.vindex:
                trait.vkind = reader.u8()
        case TraitKind.METHOD | TraitKind.GETTER | TraitKind.SETTER:
            trait.slot_id = reader.u30()
            trait.index = reader.u30()
        case TraitKind.CLASS | TraitKind.FUNCTION:
            trait.slot_id = reader.u30()
            trait.index = reader.u30()
        case _:
            raise AbcParseError(f"unknown trait kind {trait.kind} at offset {reader.offset - 1}")
    if trait.attributes & TRAIT_ATTR_METADATA:
        trait.metadata = [reader.u30() for _ in range(reader.u30())]
    return trait


def _parse_traits(reader: ByteReader) -> list[TraitInfo]:
    return [_parse_trait(reader) for _ in range(reader.u30())]


def _parse_instance(reader: ByteReader) -> InstanceInfo:
    name = reader.u30()
    super_name = reader.u30()
    flags = reader.u8()
    protected_ns = reader.u30() if flags & CLASS_PROTECTED_NS else 0
    interfaces = [reader.u30() for _ in range(reader.u30())]
    iinit = reader.u30()
    traits = _parse_traits(reader)
    return InstanceInfo(name, super_name, flags, protected_ns, interfaces, iinit, traits)


def _parse_body(reader: ByteReader) -> MethodBody:
    method = reader.u30()
    max_stack = reader.u30()
    local_count = reader.u30()
    init_scope_depth = reader.u30()
    max_scope_depth = reader.u30()
    code = reader.read(reader.u30())
    exceptions = []
    for _ in range(reader.u30()):
        exceptions.append(
            ExceptionInfo(reader.u30(), reader.u30(), reader.u30(), reader.u30(), reader.u30())
        )
    return MethodBody(
        method,
        max_stack,
        local_count,
        init_scope_depth,
        max_scope_depth,
        code,
        exceptions,
        _parse_traits(reader),
    )


def parse(data: bytes) -> AbcFile:
    """Parse raw ABC bytes into an :class:`AbcFile`."""
    reader = ByteReader(data)
    try:
        minor = reader.u16()
        major = reader.u16()
        abc = AbcFile(minor, major, _parse_constant_pool(reader))
        abc.methods = [_parse_method(reader) for _ in range(reader.u30())]
        abc.metadata = [_parse_metadata(reader) for _ in range(reader.u30())]
        class_count = reader.u30()
        abc.instances = [_parse_instance(reader) for _ in range(class_count)]
        abc.classes = [ClassInfo(reader.u30(), _parse_traits(reader)) for _ in range(class_count)]
        abc.scripts = [ScriptInfo(reader.u30(), _parse_traits(reader)) for _ in range(reader.u30())]
        abc.bodies = [_parse_body(reader) for _ in range(reader.u30())]
    except ReadError as err:
        raise AbcParseError(f"truncated abc data: {err}") from err

    logger.debug(
        "parsed abc %d.%d: %d strings, %d multinames, %d methods, %d classes",
        major,
        minor,
        len(abc.constant_pool.strings),
        len(abc.constant_pool.multinames),
        len(abc.methods),
        len(abc.instances),
    )
    return abc
