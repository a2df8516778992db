"""SWF container and AVM2 bytecode reading."""

from .disassembler import DisassemblyError as DisassemblyError
from .disassembler import Instr as Instr
from .disassembler import disassemble as disassemble
from .linker import Class as Class
from .linker import LinkError as LinkError
from .linker import Method as Method
from .linker import Program as Program
from .linker import Trait as Trait
from .linker import Traits as Traits
from .linker import link as link
from .parser import AbcParseError as AbcParseError
from .parser import parse as parse_abc
from .reader import ReadError as ReadError
from .swf import MissingEntryTagError as MissingEntryTagError
from .swf import SwfError as SwfError
from .swf import parse as parse_swf
from .swf import parse_file as parse_swf_file
