"""Tests for client version extraction."""

import pytest

from d2protocol.avm2 import Instr
from d2protocol.extractor.errors import (
    DisassemblyFailedError,
    MissingBuildInfoError,
    VersionLiteralError,
)
from d2protocol.extractor.types import Version
from d2protocol.extractor.version import (
    LAYOUTS,
    VersionLayout,
    extract_version,
    literal_value,
    parse_dotted,
)


def describe_extract_version():
    def reads_release_initializers(builder, expect):
        builder.add_build_info(builder.version_code("2.42.0", 1027565, 3))
        expect(extract_version(builder.link())) == Version(2, 42, 0, 1027565, 3)

    def reads_debug_initializers(builder, expect):
        builder.add_build_info(builder.version_code("2.46.12", 1104220, 0, debug=True))
        expect(extract_version(builder.link())) == Version(2, 46, 12, 1104220, 0)

    def reads_legacy_initializers(builder, expect):
        builder.add_build_info(builder.legacy_version_code(2, 10, 0, 91204, 1))
        expect(extract_version(builder.link())) == Version(2, 10, 0, 91204, 1)

    def formats_public_version(builder, expect):
        builder.add_build_info(builder.version_code("2.42.0", 1027565, 3))
        expect(str(extract_version(builder.link()))) == "2.42.0"

    def requires_build_infos(builder, expect):
        builder.add_class("BuildInfos", namespace="com.other", super_name="Object")
        with pytest.raises(MissingBuildInfoError) as exinfo:
            extract_version(builder.link())
        expect(str(exinfo.value)).includes("no com.ankamagames.dofus.BuildInfos found")

    def rejects_unexpected_literals(builder, expect):
        code = builder.version_code("2.42.0", 1027565, 3)
        code[7] = ("pushnull",)
        builder.add_build_info(code)
        with pytest.raises(VersionLiteralError) as exinfo:
            extract_version(builder.link())
        expect(str(exinfo.value)).includes("pushnull instruction detected when extracting version")

    def rejects_short_initializers(builder, expect):
        builder.add_build_info([("returnvoid",)])
        with pytest.raises(VersionLiteralError) as exinfo:
            extract_version(builder.link())
        expect(str(exinfo.value)).includes("version initializer too short")

    def wraps_disassembly_failures(builder, expect):
        builder.add_build_info(None)
        builder.abc.bodies[-1].code = b"\xff"
        with pytest.raises(DisassemblyFailedError) as exinfo:
            extract_version(builder.link())
        expect(str(exinfo.value)).includes("could not disassemble BuildInfos")

    def accepts_extra_layouts(builder, expect):
        shifted = VersionLayout("shifted", probe=(0, "nop"), string_offset=1, revision=2, patch=3)
        builder.add_build_info(
            [
                ("nop",),
                ("pushstring", builder.string("3.0.1")),
                ("pushbyte", 9),
                ("pushbyte", 2),
                ("returnvoid",),
            ]
        )
        version = extract_version(builder.link(), layouts=(shifted, *LAYOUTS))
        expect(version) == Version(3, 0, 1, 9, 2)


def describe_literal_value():
    def reads_push_byte_operands(builder, expect):
        expect(literal_value(builder.link(), Instr(0, "pushbyte", (42,)))) == 42

    def reads_push_int_from_the_pool(builder, expect):
        index = builder.integer(1027565)
        expect(literal_value(builder.link(), Instr(0, "pushint", (index,)))) == 1027565

    def rejects_other_instructions(builder, expect):
        with pytest.raises(VersionLiteralError):
            literal_value(builder.link(), Instr(0, "pushdouble", (1,)))


def describe_parse_dotted():
    def parses_three_components(expect):
        expect(parse_dotted("2.61.10")) == (2, 61, 10)

    def ignores_extra_components(expect):
        expect(parse_dotted("2.61.10.4")) == (2, 61, 10)

    def rejects_malformed_strings(expect):
        with pytest.raises(VersionLiteralError):
            parse_dotted("2.61")
        with pytest.raises(VersionLiteralError):
            parse_dotted("2.x.0")
