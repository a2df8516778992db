"""Extract message/type classes and enumerations."""

import logging

from d2protocol.avm2 import Class as AbcClass
from d2protocol.avm2 import DisassemblyError, Instr, Method, Program, Trait
from d2protocol.avm2.types import MultinameKind, SlotKind

from .config import DEFAULT_SETTINGS, Settings
from .errors import (
    DisassemblyFailedError,
    EnumValueError,
    MissingProtocolIdError,
    MissingSerializeMethodError,
    ProtocolIdNotConstError,
    ProtocolIdNotIntError,
    UnknownWriteMethodError,
)
from .fields import collect_fields
from .idioms import MatchContext, match_serialize
from .reduce import reduce_field
from .types import Class, Enum, EnumValue

logger = logging.getLogger(__name__)


def _disassemble(method: Method, what: str) -> list[Instr]:
    try:
        return method.disassemble()
    except DisassemblyError as err:
        raise DisassemblyFailedError(f"failed to disassemble {what}: {err}") from err


def _serialize_trait(cls: AbcClass, settings: Settings) -> Trait:
    candidates: list[Trait] = [
        t for t in cls.instance_traits.methods if t.name.startswith(settings.serialize_prefix)
    ]
    if not candidates:
        raise MissingSerializeMethodError(f"serialize method not found in class {cls.name}")
    if len(candidates) > 1:
        names = ", ".join(t.name for t in candidates)
        raise MissingSerializeMethodError(f"several serialize methods in class {cls.name}: {names}")
    return candidates[0]


def find_serialize_method(
    program: Program, cls: AbcClass, settings: Settings = DEFAULT_SETTINGS
) -> Method:
    """Return the single ``serializeAs_*`` method of ``cls``."""
    return program.method(_serialize_trait(cls, settings).info.index)


def extract_protocol_id(
    program: Program, cls: AbcClass, settings: Settings = DEFAULT_SETTINGS
) -> int:
    """Read the constant ``protocolId`` class slot."""
    for trait in cls.class_traits.slots:
        if trait.name != settings.protocol_id_trait:
            continue
        if not trait.is_const:
            raise ProtocolIdNotConstError(f"{cls.name}: {trait.name} is not a const trait")
        if trait.info.vkind != SlotKind.INT:
            raise ProtocolIdNotIntError(f"{cls.name}: {trait.name} is not an int trait")
        return program.integer(trait.info.vindex) & 0xFFFF
    raise MissingProtocolIdError(f"{cls.name}: no {settings.protocol_id_trait} found")


def extract_use_hash_func(
    program: Program, cls: AbcClass, settings: Settings = DEFAULT_SETTINGS
) -> bool:
    """Check whether the ``pack`` method references the hash function constant."""
    pack = next((t for t in cls.instance_traits.methods if t.name == settings.pack_method), None)
    if pack is None:
        return False

    for instr in _disassemble(program.method(pack.info.index), f"{cls.name}.{pack.name}"):
        if instr.name != "getlex":
            continue
        multiname = program.multiname(instr.operands[0])
        if multiname.kind != MultinameKind.QNAME:
            continue
        if program.string(multiname.name) == settings.hash_function:
            return True
    return False


def extract_class(program: Program, cls: AbcClass, settings: Settings = DEFAULT_SETTINGS) -> Class:
    """Reconstruct the fields and identifiers of a message or type class."""
    serialize = _serialize_trait(cls, settings)
    instrs = _disassemble(program.method(serialize.info.index), f"{cls.name}.{serialize.name}")

    fields = collect_fields(program, cls)
    ctx = MatchContext(program, cls, {f.name: f for f in fields}, settings)
    match_serialize(ctx, instrs)

    for field in fields:
        try:
            reduce_field(field)
        except UnknownWriteMethodError as err:
            raise UnknownWriteMethodError(f"{cls.namespace}.{cls.name}.{err}") from err

    protocol_id = extract_protocol_id(program, cls, settings)
    use_hash_func = extract_use_hash_func(program, cls, settings)

    parent = "" if cls.super_name in settings.root_parents else cls.super_name
    logger.debug("extracted %s (id %d, %d fields)", cls.name, protocol_id, len(fields))
    return Class(cls.name, cls.namespace, parent, fields, protocol_id, use_hash_func)


def extract_enum(program: Program, cls: AbcClass) -> Enum:
    """Read the integer constants of an enumeration class, in declaration order."""
    values = []
    for trait in cls.class_traits.slots:
        if not trait.is_const:
            raise EnumValueError(f"enumeration value {trait.name} of {cls.name} is not a const")
        if trait.info.vkind != SlotKind.INT:
            raise EnumValueError(f"enumeration value {trait.name} of {cls.name} is not an int")
        values.append(EnumValue(trait.name, program.integer(trait.info.vindex)))
    return Enum(cls.name, values)
