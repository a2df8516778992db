"""Protocol builder: walk the class table and assemble the schema."""

import logging
from pathlib import Path

from d2protocol.avm2 import (
    AbcParseError,
    LinkError,
    Program,
    ReadError,
    SwfError,
    link,
    parse_abc,
    parse_swf_file,
)

from .classes import extract_class, extract_enum
from .config import DEFAULT_SETTINGS, Settings
from .errors import BuildError, ExtractionError
from .types import Class, Enum, Protocol
from .verify import ValidationError, verify
from .version import extract_version

logger = logging.getLogger(__name__)


class ProtocolBuilder:
    """Build a :class:`Protocol` from a linked program."""

    def __init__(self, program: Program, settings: Settings = DEFAULT_SETTINGS) -> None:
        self.program = program
        self.settings = settings

    def build(self) -> Protocol:
        messages: list[Class] = []
        types: list[Class] = []
        enums: list[Enum] = []
        for cls in self.program.classes:
            is_message = cls.namespace.startswith(self.settings.message_prefix)
            is_type = cls.namespace.startswith(self.settings.type_prefix)
            if is_message or is_type:
                extracted = extract_class(self.program, cls, self.settings)
                (types if is_type else messages).append(extracted)
            elif cls.namespace.startswith(self.settings.enum_prefix):
                enums.append(extract_enum(self.program, cls))

        version = extract_version(self.program, self.settings)
        logger.info(
            "built protocol %s: %d messages, %d types, %d enums",
            version,
            len(messages),
            len(types),
            len(enums),
        )
        return Protocol(messages, types, enums, version)


def load_program(path: str | Path, settings: Settings = DEFAULT_SETTINGS) -> Program:
    """Read the SWF at ``path`` and link its entry point bytecode."""
    try:
        swf = parse_swf_file(path)
        abc_data = swf.find_abc(settings.entry_tag)
    except (OSError, SwfError) as err:
        raise BuildError("swf parsing", str(err)) from err

    try:
        return link(parse_abc(abc_data))
    except (AbcParseError, LinkError, ReadError) as err:
        raise BuildError("abc parsing", str(err)) from err


def build(path: str | Path, settings: Settings | None = None) -> Protocol:
    """Read the client SWF at ``path`` and build its verified protocol."""
    settings = settings or DEFAULT_SETTINGS
    logger.info("reading %s", path)
    program = load_program(path, settings)

    try:
        protocol = ProtocolBuilder(program, settings).build()
    except (ExtractionError, LinkError) as err:
        raise BuildError("protocol build", str(err)) from err

    try:
        verify(protocol)
    except ValidationError as err:
        raise BuildError("verification", str(err)) from err
    return protocol
