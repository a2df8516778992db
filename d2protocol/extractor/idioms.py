"""Serialize-method idiom catalogue and matcher.

The compiler emits a small set of fixed instruction shapes for each kind of
field write. The catalogue lists them as mnemonic-prefix patterns bound to a
handler; the matcher scans a flat instruction list once and lets handlers
update the matching :class:`Field` in place.

Matching is greedy and does not backtrack: at each scan step every idiom is
tried in catalogue order at the current position, and each one that matches
consumes its window before the next idiom is tried.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from d2protocol.avm2 import Class, Instr, Program
from d2protocol.avm2.types import Multiname, MultinameKind

from .config import DEFAULT_SETTINGS, Settings
from .errors import (
    BitfieldTypeError,
    FieldNotFoundError,
    IdiomError,
    NotAVectorError,
    UnknownWriteMethodError,
)
from .types import Field

logger = logging.getLogger(__name__)

WRITE_PREFIX = "write"
TYPE_ID_WRITE = "writeShort"
LENGTH_PROPERTY = "length"


@dataclass
class MatchContext:
    """Per-class state shared by the idiom handlers."""

    program: Program
    cls: Class
    fields: dict[str, Field]
    settings: Settings = DEFAULT_SETTINGS

    def multiname(self, instr: Instr, operand: int = 0) -> Multiname:
        return self.program.multiname(instr.operands[operand])

    def name(self, instr: Instr, operand: int = 0) -> str:
        return self.program.multiname_name(instr.operands[operand])

    def is_public(self, instr: Instr) -> bool:
        return self.program.is_public_qname(self.multiname(instr))

    def where(self, prop: str = "") -> str:
        where = f"{self.cls.namespace}.{self.cls.name}"
        return f"{where}.{prop}" if prop else where

    def field(self, prop: str) -> Field:
        try:
            return self.fields[prop]
        except KeyError:
            raise FieldNotFoundError(f"{self.where(prop)}: field not found") from None

    def vector(self, prop: str) -> Field:
        field = self.field(prop)
        if not field.is_vector:
            raise NotAVectorError(f"{self.where(prop)}: vector write on non-vector field")
        return field


Handler = Callable[[MatchContext, Sequence[Instr], Field | None], Field | None]


@dataclass(frozen=True)
class Idiom:
    """An instruction shape: one mnemonic prefix per instruction."""

    name: str
    pattern: tuple[str, ...]
    handler: Handler

    def __len__(self) -> int:
        return len(self.pattern)

    def matches(self, instrs: Sequence[Instr], start: int) -> bool:
        if start + len(self.pattern) > len(instrs):
            return False
        return all(
            instrs[start + i].name.startswith(prefix) for i, prefix in enumerate(self.pattern)
        )


def handle_fixed_length(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``for (i = 0; i < N; i++)``: N is the length of the previous vector."""
    length = window[5].operands[0]
    if last is None:
        raise IdiomError(f"{ctx.where()}: vector length {length} found but no vector")
    if not last.is_vector:
        raise NotAVectorError(f"{ctx.where(last.name)}: vector length {length} on non-vector field")
    if last.is_dynamic_length:
        raise IdiomError(f"{ctx.where(last.name)}: fixed length {length} on dynamic-length vector")
    last.length = length
    return last


def handle_vector_type_manager(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``(this.prop[i] as SomeType).getTypeId()``."""
    get, lex, call = window[0], window[3], window[5]
    if not ctx.is_public(get):
        return None

    lex_multiname = ctx.multiname(lex)
    if lex_multiname.kind != MultinameKind.QNAME:
        return None
    lex_namespace = ctx.program.namespace_name(lex_multiname.namespace)
    if not lex_namespace.startswith(ctx.settings.types_namespace):
        return None
    prop = ctx.name(get)
    call_name = ctx.name(call)
    if call_name != ctx.settings.type_id_method:
        raise IdiomError(f"{ctx.where(prop)}: {call_name} on vector of delegated types")

    field = ctx.vector(prop)
    field.use_type_manager = True
    field.type_manager_method = ctx.settings.type_id_method
    return field


def handle_boolean_byte_wrapper(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``box = BooleanByteWrapper.setFlag(box, N, this.prop)``."""
    if ctx.name(window[0]) != ctx.settings.boolean_byte_wrapper:
        return None

    position = window[2].operands[0]
    prop = ctx.name(window[4])
    field = ctx.field(prop)
    if field.type != "Boolean":
        raise BitfieldTypeError(
            f"{ctx.where(prop)}: {ctx.settings.boolean_byte_wrapper} on {field.type} field"
        )
    field.use_bbw = True
    field.bbw_position = position
    return field


def handle_vector_scalar(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``output.writeX(this.prop[i])``."""
    get, index, call = window[0], window[2], window[3]
    if not ctx.is_public(get) or ctx.multiname(index).kind != MultinameKind.MULTINAME_L:
        return None
    if ctx.multiname(call).kind != MultinameKind.QNAME:
        return None

    prop = ctx.name(get)
    write_method = ctx.name(call)
    if not write_method.startswith(WRITE_PREFIX):
        raise UnknownWriteMethodError(f"{ctx.where(prop)}: {write_method} on vector of scalars")

    field = ctx.vector(prop)
    field.write_method = write_method
    return field


def handle_vector_length(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``output.writeX(this.prop.length)``."""
    get, get_length, call = window
    if not ctx.is_public(get) or not ctx.is_public(get_length):
        return None
    if ctx.name(get_length) != LENGTH_PROPERTY:
        return None

    field = ctx.vector(ctx.name(get))
    write_method = ctx.name(call)
    if not write_method.startswith(WRITE_PREFIX):
        return None

    field.is_dynamic_length = True
    field.write_length_method = write_method
    return field


def handle_scalar(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``output.writeX(this.prop)``."""
    get, call = window
    if not ctx.is_public(get):
        return None

    write_method = ctx.name(call)
    if not write_method.startswith(WRITE_PREFIX):
        return None

    field = ctx.field(ctx.name(get))
    field.write_method = write_method
    return field


def handle_type_manager(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """``output.writeShort(this.prop.getTypeId())``."""
    get, get_type, call = window
    if not ctx.is_public(get) or not ctx.is_public(get_type):
        return None
    if ctx.name(get_type) != ctx.settings.type_id_method:
        return None

    prop = ctx.name(get)
    field = ctx.field(prop)
    write_method = ctx.name(call)
    if write_method != TYPE_ID_WRITE:
        raise IdiomError(
            f"{ctx.where(prop)}: invalid {write_method} for {ctx.settings.type_id_method}"
        )

    field.use_type_manager = True
    field.type_manager_method = ctx.settings.type_id_method
    return field


def handle_property(
    ctx: MatchContext, window: Sequence[Instr], last: Field | None
) -> Field | None:
    """A bare read of ``this.prop``, kept as context for the next idiom."""
    if not ctx.is_public(window[0]):
        return None
    return ctx.fields.get(ctx.name(window[0]))


# Declared order matters: all idioms are tried at each step, in this order.
CATALOGUE: tuple[Idiom, ...] = (
    Idiom(
        "fixed_length",
        ("getlocal", "increment", "convert", "setlocal", "getlocal", "pushbyte", "iflt"),
        handle_fixed_length,
    ),
    Idiom(
        "vector_type_manager",
        ("getproperty", "getlocal", "getproperty", "getlex", "astypelate", "callproperty"),
        handle_vector_type_manager,
    ),
    Idiom(
        "boolean_byte_wrapper",
        ("getlex", "getlocal", "pushbyte", "getlocal", "getproperty", "callproperty"),
        handle_boolean_byte_wrapper,
    ),
    Idiom(
        "vector_scalar",
        ("getproperty", "getlocal", "getproperty", "callpropvoid"),
        handle_vector_scalar,
    ),
    Idiom("vector_length", ("getproperty", "getproperty", "callpropvoid"), handle_vector_length),
    Idiom("scalar", ("getproperty", "callpropvoid"), handle_scalar),
    Idiom("type_manager", ("getproperty", "callproperty", "callpropvoid"), handle_type_manager),
    Idiom("property", ("getproperty",), handle_property),
)


def match_serialize(
    ctx: MatchContext,
    instrs: Sequence[Instr],
    catalogue: Sequence[Idiom] = CATALOGUE,
) -> None:
    """Run the catalogue over ``instrs``, updating ``ctx.fields`` in place.

    A step whose last matching handler identified no field (or where nothing
    matched) moves one extra instruction forward.
    """
    last: Field | None = None
    i = 0
    while i < len(instrs):
        found: Field | None = None
        for idiom in catalogue:
            if idiom.matches(instrs, i):
                found = idiom.handler(ctx, instrs[i : i + len(idiom)], last)
                if found is not None:
                    logger.debug("%s: %s at %d -> %s", ctx.where(), idiom.name, i, found.name)
                i += len(idiom)
        if found is None:
            i += 1
        else:
            last = found
