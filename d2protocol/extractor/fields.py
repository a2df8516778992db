"""Collect the candidate fields of a message or type class."""

from dataclasses import dataclass

from d2protocol.avm2 import Class, Program
from d2protocol.avm2.types import TraitKind

from .types import Field

VECTOR_PREFIX = "Vector<"
BYTE_ARRAY = "ByteArray"


@dataclass
class _Accessor:
    getter: bool = False
    setter: bool = False
    getter_type: int = 0


def create_field(program: Program, name: str, type_index: int) -> Field:
    """Build a field from a declared type multiname.

    ``Vector<T>`` unwraps to a vector of ``T``; ``ByteArray`` is a vector of
    ``uint`` (reduced to ``uint8`` once its write call is known).
    """
    type_name = program.multiname_string(type_index)
    if type_name.startswith(VECTOR_PREFIX):
        param = program.multiname(type_index).params[0]
        return Field(name=name, type=program.multiname_string(param), is_vector=True)
    if type_name == BYTE_ARRAY:
        return Field(name=name, type="uint", is_vector=True)
    return Field(name=name, type=type_name)


def collect_fields(program: Program, cls: Class) -> list[Field]:
    """Return the public instance slots and getter/setter pairs of ``cls``."""
    fields: list[Field] = []
    for slot in cls.instance_traits.slots:
        multiname = program.multiname(slot.info.name)
        if not program.is_public_namespace(multiname.namespace):
            continue
        fields.append(create_field(program, slot.name, slot.info.type_name))

    # Some containers expose their payload through an accessor pair
    # instead of a slot.
    accessors: dict[str, _Accessor] = {}
    for method in cls.instance_traits.methods:
        is_getter = method.kind == TraitKind.GETTER
        is_setter = method.kind == TraitKind.SETTER
        multiname = program.multiname(method.info.name)
        if not (is_getter or is_setter) or not program.is_public_namespace(multiname.namespace):
            continue
        accessor = accessors.setdefault(method.name, _Accessor())
        accessor.getter = accessor.getter or is_getter
        accessor.setter = accessor.setter or is_setter
        if is_getter:
            accessor.getter_type = program.method(method.info.index).info.return_type

    known = {f.name for f in fields}
    for name, accessor in accessors.items():
        if accessor.getter and accessor.setter and name not in known:
            fields.append(create_field(program, name, accessor.getter_type))
    return fields
