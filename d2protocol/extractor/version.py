"""Client version extraction from the build metadata class initializer.

The static initializer of ``BuildInfos`` has taken three shapes over the
client's history. Since 2.42 it reads::

    public static var VERSION:Version = new Version("2.42.0", BuildTypeEnum.RELEASE, 1027565, 0);

and 2.46 added debug instructions in front of it. Older clients push major,
minor and release as separate integers. Each shape is a :class:`VersionLayout`
probed in order; the first whose probe instruction matches is used.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from d2protocol.avm2 import DisassemblyError, Instr, Program

from .config import DEFAULT_SETTINGS, Settings
from .errors import DisassemblyFailedError, MissingBuildInfoError, VersionLiteralError
from .types import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionLayout:
    """Fixed instruction offsets of one initializer shape.

    When ``string_offset`` is set, major/minor/release come from a dotted
    string literal; otherwise from the integer literals at
    ``major``/``minor``/``release``. A layout without ``probe`` always applies.
    """

    name: str
    probe: tuple[int, str] | None
    revision: int
    patch: int
    string_offset: int | None = None
    major: int = 0
    minor: int = 0
    release: int = 0

    def applies(self, instrs: Sequence[Instr]) -> bool:
        if self.probe is None:
            return True
        offset, mnemonic = self.probe
        return offset < len(instrs) and instrs[offset].name == mnemonic


LAYOUTS: tuple[VersionLayout, ...] = (
    VersionLayout("debug", probe=(2, "debug"), string_offset=5, revision=8, patch=9),
    VersionLayout("release", probe=(4, "pushstring"), string_offset=4, revision=7, patch=8),
    VersionLayout("legacy", probe=None, major=4, minor=5, release=6, revision=14, patch=17),
)


def _instr(instrs: Sequence[Instr], offset: int) -> Instr:
    if offset >= len(instrs):
        raise VersionLiteralError(f"version initializer too short for offset {offset}")
    return instrs[offset]


def literal_value(program: Program, instr: Instr) -> int:
    """Read an integer pushed by ``pushbyte`` or ``pushint``."""
    if instr.name == "pushbyte":
        return instr.operands[0]
    if instr.name == "pushint":
        return program.integer(instr.operands[0]) & 0xFFFFFFFF
    raise VersionLiteralError(f"{instr.name} instruction detected when extracting version")


def parse_dotted(text: str) -> tuple[int, int, int]:
    """Parse ``MAJOR.MINOR.RELEASE``."""
    parts = text.split(".")
    if len(parts) < 3:
        raise VersionLiteralError(f"malformed version string {text!r}")
    try:
        return int(parts[0]), int(parts[1]), int(parts[2])
    except ValueError:
        raise VersionLiteralError(f"malformed version string {text!r}") from None


def read_version(program: Program, instrs: Sequence[Instr], layout: VersionLayout) -> Version:
    """Read a :class:`Version` from ``instrs`` using ``layout``'s offsets."""
    if layout.string_offset is not None:
        string_instr = _instr(instrs, layout.string_offset)
        if string_instr.name != "pushstring":
            raise VersionLiteralError(
                f"{string_instr.name} instruction detected when extracting version"
            )
        major, minor, release = parse_dotted(program.string(string_instr.operands[0]))
    else:
        major, minor, release = (
            literal_value(program, _instr(instrs, offset))
            for offset in (layout.major, layout.minor, layout.release)
        )
    revision = literal_value(program, _instr(instrs, layout.revision))
    patch = literal_value(program, _instr(instrs, layout.patch))
    return Version(major, minor, release, revision, patch)


def extract_version(
    program: Program,
    settings: Settings = DEFAULT_SETTINGS,
    layouts: Sequence[VersionLayout] = LAYOUTS,
) -> Version:
    """Extract the client version from the build metadata class."""
    build_info = program.find_class(settings.build_info_namespace, settings.build_info_class)
    if build_info is None:
        raise MissingBuildInfoError(
            f"no {settings.build_info_namespace}.{settings.build_info_class} found"
        )

    try:
        instrs = program.method(build_info.cinit).disassemble()
    except DisassemblyError as err:
        raise DisassemblyFailedError(f"could not disassemble {build_info.name}: {err}") from err

    for layout in layouts:
        if layout.applies(instrs):
            version = read_version(program, instrs, layout)
            logger.debug("version %s read with %s layout", version, layout.name)
            return version
    raise VersionLiteralError(f"no version layout matches {build_info.name} initializer")
