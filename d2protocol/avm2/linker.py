"""Resolve a parsed ABC file into a class table.

The linker turns constant pool indices into names and attaches method bodies
to their signatures. The resulting :class:`Program` is read-only from the
point of view of its consumers; the only state it mutates is the lazily
filled instruction cache of each :class:`Method`.
"""

import logging
from dataclasses import dataclass, field

from .disassembler import DisassemblyError, Instr, disassemble
from .types import (
    AbcFile,
    ClassInfo,
    ConstantPool,
    InstanceInfo,
    MethodBody,
    MethodInfo,
    Multiname,
    MultinameKind,
    NamespaceKind,
    TraitInfo,
    TraitKind,
)

logger = logging.getLogger(__name__)

_NAMED_KINDS = frozenset(
    [
        MultinameKind.QNAME,
        MultinameKind.QNAME_A,
        MultinameKind.RTQNAME,
        MultinameKind.RTQNAME_A,
        MultinameKind.MULTINAME,
        MultinameKind.MULTINAME_A,
    ]
)


class LinkError(RuntimeError):
    """Raised when the class table references missing pool entries."""


@dataclass
class Trait:
    """A trait with its name resolved."""

    name: str
    info: TraitInfo

    @property
    def kind(self) -> int:
        return self.info.kind

    @property
    def is_const(self) -> bool:
        return self.info.kind == TraitKind.CONST


@dataclass
class Traits:
    """Traits split into value slots (slot/const) and methods (method/getter/setter)."""

    slots: list[Trait] = field(default_factory=list)
    methods: list[Trait] = field(default_factory=list)


@dataclass
class Method:
    """A method signature with its body, disassembled on demand."""

    index: int
    info: MethodInfo
    body: MethodBody | None = None
    _instructions: list[Instr] | None = field(default=None, repr=False)

    def disassemble(self) -> list[Instr]:
        if self._instructions is None:
            if self.body is None:
                raise DisassemblyError(f"method {self.index} has no body")
            self._instructions = disassemble(self.body.code)
        return self._instructions

    @property
    def instructions(self) -> list[Instr]:
        return self.disassemble()


@dataclass
class Class:
    """A linked class."""

    name: str
    namespace: str
    super_name: str
    instance_traits: Traits
    class_traits: Traits
    instance: InstanceInfo
    info: ClassInfo

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def cinit(self) -> int:
        return self.info.cinit


class Program:
    """A linked ABC program: constant pool, class table and method table."""

    def __init__(self, abc: AbcFile) -> None:
        self.abc = abc
        self.methods: list[Method] = [Method(i, info) for i, info in enumerate(abc.methods)]
        self.classes: list[Class] = []

    @property
    def constant_pool(self) -> ConstantPool:
        return self.abc.constant_pool

    def string(self, index: int) -> str:
        try:
            return self.constant_pool.strings[index]
        except IndexError:
            raise LinkError(f"string index {index} out of range") from None

    def integer(self, index: int) -> int:
        try:
            return self.constant_pool.integers[index]
        except IndexError:
            raise LinkError(f"integer index {index} out of range") from None

    def multiname(self, index: int) -> Multiname:
        try:
            return self.constant_pool.multinames[index]
        except IndexError:
            raise LinkError(f"multiname index {index} out of range") from None

    def namespace_name(self, index: int) -> str:
        try:
            namespace = self.constant_pool.namespaces[index]
        except IndexError:
            raise LinkError(f"namespace index {index} out of range") from None
        return self.string(namespace.name)

    def is_public_namespace(self, index: int) -> bool:
        try:
            return self.constant_pool.namespaces[index].kind == NamespaceKind.PACKAGE
        except IndexError:
            raise LinkError(f"namespace index {index} out of range") from None

    def is_public_qname(self, multiname: Multiname) -> bool:
        if multiname.kind != MultinameKind.QNAME:
            return False
        return self.is_public_namespace(multiname.namespace)

    def multiname_name(self, index: int) -> str:
        """Return the bare name of a multiname, without namespace or parameters."""
        multiname = self.multiname(index)
        if multiname.kind in _NAMED_KINDS:
            return self.string(multiname.name)
        if multiname.kind == MultinameKind.TYPENAME:
            return self.multiname_name(multiname.qname)
        return ""

    def multiname_string(self, index: int) -> str:
        """Render a type multiname, e.g. ``uint`` or ``Vector<String>``. Index 0 is ``*``."""
        if index == 0:
            return "*"
        multiname = self.multiname(index)
        if multiname.kind == MultinameKind.TYPENAME:
            params = ", ".join(self.multiname_string(p) for p in multiname.params)
            return f"{self.multiname_string(multiname.qname)}<{params}>"
        return self.multiname_name(index)

    def method(self, index: int) -> Method:
        try:
            return self.methods[index]
        except IndexError:
            raise LinkError(f"method index {index} out of range") from None

    def get_class_by_name(self, name: str) -> Class | None:
        for cls in self.classes:
            if cls.name == name:
                return cls
        return None

    def find_class(self, namespace: str, name: str) -> Class | None:
        for cls in self.classes:
            if cls.namespace == namespace and cls.name == name:
                return cls
        return None


def _link_traits(program: Program, infos: list[TraitInfo]) -> Traits:
    traits = Traits()
    for info in infos:
        trait = Trait(program.multiname_name(info.name), info)
        if info.kind in (TraitKind.SLOT, TraitKind.CONST):
            traits.slots.append(trait)
        elif info.kind in (TraitKind.METHOD, TraitKind.GETTER, TraitKind.SETTER):
            traits.methods.append(trait)
    return traits


def link(abc: AbcFile) -> Program:
    """Link ``abc`` into a :class:`Program`."""
    if len(abc.instances) != len(abc.classes):
        raise LinkError(f"{len(abc.instances)} instance infos for {len(abc.classes)} class infos")

    program = Program(abc)
    for body in abc.bodies:
        program.method(body.method).body = body

    for instance, info in zip(abc.instances, abc.classes):
        name = program.multiname(instance.name)
        if name.kind not in (MultinameKind.QNAME, MultinameKind.QNAME_A):
            raise LinkError(f"class name multiname {instance.name} is not a QName")
        super_name = program.multiname_name(instance.super_name) if instance.super_name else ""
        program.classes.append(
            Class(
                name=program.string(name.name),
                namespace=program.namespace_name(name.namespace),
                super_name=super_name,
                instance_traits=_link_traits(program, instance.traits),
                class_traits=_link_traits(program, info.traits),
                instance=instance,
                info=info,
            )
        )

    logger.debug("linked %d classes, %d methods", len(program.classes), len(program.methods))
    return program
