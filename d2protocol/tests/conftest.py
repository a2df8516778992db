"""Unit tests configuration file."""

import pytest

from d2protocol.avm2 import Program, link
from d2protocol.avm2.opcodes import OPCODES_BY_NAME
from d2protocol.avm2.types import (
    AbcFile,
    ClassInfo,
    ConstantPool,
    InstanceInfo,
    MethodBody,
    MethodInfo,
    Multiname,
    MultinameKind,
    Namespace,
    NamespaceKind,
    SlotKind,
    TraitInfo,
    TraitKind,
)

MESSAGES_NS = "com.ankamagames.dofus.network.messages.game"
TYPES_NS = "com.ankamagames.dofus.network.types.game"
ENUMS_NS = "com.ankamagames.dofus.network.enums"


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def encode_u30(value):
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def assemble(code):
    """Assemble ``[(mnemonic, *operands), ...]`` into bytecode."""
    out = bytearray()
    for name, *operands in code:
        opcode = OPCODES_BY_NAME[name]
        out.append(opcode.code)
        for kind, operand in zip(opcode.operands, operands):
            if kind == "u8":
                out.append(operand & 0xFF)
            elif kind == "u30":
                out += encode_u30(operand)
            elif kind == "s24":
                out += operand.to_bytes(3, byteorder="little", signed=True)
    return bytes(out)


class ProgramBuilder:
    """Build in-memory ABC programs with real bytecode bodies."""

    def __init__(self):
        self.pool = ConstantPool()
        self.abc = AbcFile(16, 46, self.pool)
        self.program = None

    # Constant pool

    def string(self, value):
        if value in self.pool.strings:
            return self.pool.strings.index(value)
        self.pool.strings.append(value)
        return len(self.pool.strings) - 1

    def integer(self, value):
        self.pool.integers.append(value)
        return len(self.pool.integers) - 1

    def namespace(self, name="", kind=NamespaceKind.PACKAGE):
        entry = Namespace(kind, self.string(name))
        if entry in self.pool.namespaces[1:]:
            return self.pool.namespaces.index(entry, 1)
        self.pool.namespaces.append(entry)
        return len(self.pool.namespaces) - 1

    def _multiname(self, entry):
        if entry in self.pool.multinames[1:]:
            return self.pool.multinames.index(entry, 1)
        self.pool.multinames.append(entry)
        return len(self.pool.multinames) - 1

    def qname(self, name, ns="", kind=NamespaceKind.PACKAGE):
        namespace = self.namespace(ns, kind)
        multiname = Multiname(MultinameKind.QNAME, name=self.string(name), namespace=namespace)
        return self._multiname(multiname)

    def private(self, name):
        return self.qname(name, ns="", kind=NamespaceKind.PRIVATE)

    def runtime_name(self):
        """``MultinameL`` used for ``vector[index]`` reads."""
        if len(self.pool.ns_sets) == 1:
            self.pool.ns_sets.append((self.namespace(),))
        return self._multiname(Multiname(MultinameKind.MULTINAME_L, ns_set=1))

    def vector(self, param):
        vector = self.qname("Vector", "__AS3__.vec")
        return self._multiname(
            Multiname(MultinameKind.TYPENAME, qname=vector, params=(self.qname(param),))
        )

    def type(self, name):
        if name.startswith("Vector<"):
            return self.vector(name[len("Vector<") : -1])
        if name == "*":
            return 0
        return self.qname(name)

    # Methods and traits

    def method(self, code=None, return_type=0, name="", raw=None):
        self.abc.methods.append(MethodInfo([], return_type, self.string(name), 0))
        index = len(self.abc.methods) - 1
        if code is not None or raw is not None:
            body = raw if raw is not None else assemble(code)
            self.abc.bodies.append(MethodBody(index, 4, 4, 0, 1, body))
        return index

    def slot(self, name, type_name, public=True):
        multiname = self.qname(name) if public else self.private(name)
        return TraitInfo(multiname, TraitKind.SLOT, type_name=self.type(type_name))

    def const(self, name, value, kind=TraitKind.CONST, vkind=SlotKind.INT):
        vindex = self.integer(value) if vkind == SlotKind.INT else self.string(str(value))
        return TraitInfo(self.qname(name), kind, vindex=vindex, vkind=vkind)

    def method_trait(
        self, name, code=None, kind=TraitKind.METHOD, return_type="*", public=True, raw=None
    ):
        multiname = self.qname(name) if public else self.private(name)
        index = self.method(code, return_type=self.type(return_type), raw=raw)
        return TraitInfo(multiname, kind, index=index)

    def add_class(
        self,
        name,
        namespace=MESSAGES_NS,
        super_name="NetworkMessage",
        instance_traits=(),
        class_traits=(),
        cinit=None,
    ):
        self.abc.instances.append(
            InstanceInfo(
                name=self.qname(name, namespace),
                super_name=self.qname(super_name) if super_name else 0,
                flags=0,
                protected_ns=0,
                interfaces=[],
                iinit=self.method([("returnvoid",)]),
                traits=list(instance_traits),
            )
        )
        cinit_index = self.method(cinit or [("returnvoid",)])
        self.abc.classes.append(ClassInfo(cinit_index, list(class_traits)))

    def add_message(
        self, name, slots=(), serialize=(), protocol_id=1, namespace=MESSAGES_NS, **kwargs
    ):
        """Add a class with public slots, a ``protocolId`` and a serialize method."""
        instance_traits = [self.slot(slot_name, type_name) for slot_name, type_name in slots]
        serialize_code = list(serialize) + [("returnvoid",)]
        instance_traits.append(self.method_trait(f"serializeAs_{name}", serialize_code))
        instance_traits.extend(kwargs.pop("extra_traits", ()))
        class_traits = [self.const("protocolId", protocol_id)]
        self.add_class(
            name,
            namespace=namespace,
            instance_traits=instance_traits,
            class_traits=class_traits,
            **kwargs,
        )

    def link(self) -> Program:
        self.program = link(self.abc)
        return self.program

    def get(self, name):
        program = self.program or self.link()
        return program.get_class_by_name(name)

    # Serialize idioms, as emitted by the compiler

    def write(self, prop, method):
        """``output.writeX(this.prop)``."""
        return [
            ("getlocal_1",),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("callpropvoid", self.qname(method), 1),
        ]

    def write_length(self, prop, method):
        """``output.writeX(this.prop.length)``."""
        return [
            ("getlocal_1",),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("getproperty", self.qname("length")),
            ("callpropvoid", self.qname(method), 1),
        ]

    def loop_start(self):
        return [("pushbyte", 0), ("setlocal_2",), ("jump", 0), ("label",)]

    def loop_end(self, prop=None, bound=None):
        """``_i++`` then ``_i < this.prop.length`` or ``_i < bound``."""
        code = [
            ("getlocal_2",),
            ("increment",),
            ("convert_u",),
            ("setlocal_2",),
            ("getlocal_2",),
        ]
        if bound is not None:
            code.append(("pushbyte", bound))
        else:
            code += [
                ("getlocal_0",),
                ("getproperty", self.qname(prop)),
                ("getproperty", self.qname("length")),
            ]
        code.append(("iflt", -20))
        return code

    def write_each(self, prop, method):
        """``output.writeX(this.prop[_i])``."""
        return [
            ("getlocal_1",),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("getlocal_2",),
            ("getproperty", self.runtime_name()),
            ("callpropvoid", self.qname(method), 1),
        ]

    def write_vector(self, prop, length_method, method):
        return (
            self.write_length(prop, length_method)
            + self.loop_start()
            + self.write_each(prop, method)
            + self.loop_end(prop)
        )

    def write_fixed_vector(self, prop, length, method):
        return self.loop_start() + self.write_each(prop, method) + self.loop_end(bound=length)

    def write_type_id(self, prop):
        """``output.writeShort(this.prop.getTypeId()); this.prop.serialize(output)``."""
        return [
            ("getlocal_1",),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("callproperty", self.qname("getTypeId"), 0),
            ("callpropvoid", self.qname("writeShort"), 1),
        ] + self.serialize_nested(prop, "serialize")

    def write_each_type_id(self, prop, type_name, namespace=TYPES_NS):
        """``output.writeShort((this.prop[_i] as T).getTypeId())``."""
        return [
            ("getlocal_1",),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("getlocal_2",),
            ("getproperty", self.runtime_name()),
            ("getlex", self.qname(type_name, namespace)),
            ("astypelate",),
            ("callproperty", self.qname("getTypeId"), 0),
            ("callpropvoid", self.qname("writeShort"), 1),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("getlocal_2",),
            ("getproperty", self.runtime_name()),
            ("getlex", self.qname(type_name, namespace)),
            ("astypelate",),
            ("callpropvoid", self.qname("serialize"), 1),
        ]

    def serialize_nested(self, prop, method):
        """``this.prop.serializeAs_T(output)``."""
        return [
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("getlocal_1",),
            ("callpropvoid", self.qname(method), 1),
        ]

    def set_flag(self, prop, position):
        """``_box0 = BooleanByteWrapper.setFlag(_box0, position, this.prop)``."""
        return [
            ("getlex", self.qname("BooleanByteWrapper", "com.ankamagames.jerakine.network.utils")),
            ("getlocal_2",),
            ("pushbyte", position),
            ("getlocal_0",),
            ("getproperty", self.qname(prop)),
            ("callproperty", self.qname("setFlag"), 3),
            ("convert_u",),
            ("setlocal_2",),
        ]

    def write_box(self):
        return [("getlocal_1",), ("getlocal_2",), ("callpropvoid", self.qname("writeByte"), 1)]

    # BuildInfos static initializers

    def version_code(self, version, revision, patch, debug=False):
        """``VERSION = new Version("M.m.r", BuildTypeEnum.RELEASE, revision, patch)``."""
        code = [("getlocal_0",), ("pushscope",)]
        if debug:
            code.append(("debug", 1, self.string("VERSION"), 0, 0))
        code += [
            ("findproperty", self.qname("VERSION")),
            ("findpropstrict", self.qname("Version")),
            ("pushstring", self.string(version)),
            ("getlex", self.qname("BuildTypeEnum")),
            ("getproperty", self.qname("RELEASE")),
            ("pushint", self.integer(revision)),
            ("pushbyte", patch),
            ("constructprop", self.qname("Version"), 4),
            ("initproperty", self.qname("VERSION")),
            ("returnvoid",),
        ]
        return code

    def legacy_version_code(self, major, minor, release, revision, patch):
        """``VERSION = new Version(major, minor, release, ...)`` then revision and patch."""
        return [
            ("getlocal_0",),
            ("pushscope",),
            ("findproperty", self.qname("VERSION")),
            ("findpropstrict", self.qname("Version")),
            ("pushbyte", major),
            ("pushbyte", minor),
            ("pushbyte", release),
            ("getlex", self.qname("BuildTypeEnum")),
            ("getproperty", self.qname("RELEASE")),
            ("constructprop", self.qname("Version"), 4),
            ("initproperty", self.qname("VERSION")),
            ("getlex", self.qname("VERSION")),
            ("dup",),
            ("pop",),
            ("pushint", self.integer(revision)),
            ("setproperty", self.qname("revision")),
            ("getlex", self.qname("VERSION")),
            ("pushbyte", patch),
            ("setproperty", self.qname("patch")),
            ("returnvoid",),
        ]

    def add_build_info(self, cinit):
        self.add_class(
            "BuildInfos", namespace="com.ankamagames.dofus", super_name="Object", cinit=cinit
        )


@pytest.fixture
def builder():
    return ProgramBuilder()


def build_client(b):
    """A small but complete client: two types, one message, one enum and BuildInfos."""
    b.add_message(
        "EntityLook",
        namespace=TYPES_NS,
        super_name="Object",
        protocol_id=55,
        slots=[("bonesId", "uint"), ("skins", "Vector<uint>")],
        serialize=b.write("bonesId", "writeVarShort")
        + b.write_vector("skins", "writeShort", "writeVarShort"),
    )
    b.add_message(
        "CharacterBaseInformations",
        namespace=TYPES_NS,
        super_name="Object",
        protocol_id=45,
        slots=[("id", "Number"), ("name", "String"), ("entityLook", "EntityLook")],
        serialize=b.write("id", "writeVarLong")
        + b.write("name", "writeUTF")
        + b.serialize_nested("entityLook", "serializeAs_EntityLook"),
    )
    b.add_message(
        "CharactersListMessage",
        protocol_id=151,
        slots=[
            ("characters", "Vector<CharacterBaseInformations>"),
            ("hasStartupActions", "Boolean"),
        ],
        serialize=b.write_length("characters", "writeShort")
        + b.loop_start()
        + b.write_each_type_id("characters", "CharacterBaseInformations")
        + b.loop_end("characters")
        + b.write("hasStartupActions", "writeBoolean"),
    )
    b.add_class(
        "PlayerStatusEnum",
        namespace=ENUMS_NS,
        super_name="Object",
        class_traits=[b.const("AVAILABLE", 10), b.const("IDLE", 20), b.const("AFK", 21)],
    )
    b.add_class("Kernel", namespace="com.ankamagames.dofus.kernel", super_name="Object")
    b.add_build_info(b.version_code("2.42.0", 1027565, 3))
    return b.link()


@pytest.fixture
def client(builder):
    return build_client(builder)
