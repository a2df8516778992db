"""Method body disassembler."""

from dataclasses import dataclass

from .opcodes import OPCODES
from .reader import ByteReader, ReadError


class DisassemblyError(RuntimeError):
    """Raised when a method body cannot be decoded."""


@dataclass(frozen=True, slots=True)
class Instr:
    """A decoded instruction.

    ``operands`` holds integers only; for ``lookupswitch`` they are the default
    offset followed by every case offset.
    """

    offset: int
    name: str
    operands: tuple[int, ...] = ()

    def __str__(self) -> str:
        if not self.operands:
            return self.name
        return f"{self.name} {', '.join(str(o) for o in self.operands)}"


def _read_operand(reader: ByteReader, kind: str) -> list[int]:
    match kind:
        case "u8":
            return [reader.u8()]
        case "u30":
            return [reader.u30()]
        case "s24":
            return [reader.s24()]
        case "switch":
            default = reader.s24()
            case_count = reader.u30()
            return [default, *(reader.s24() for _ in range(case_count + 1))]
    raise DisassemblyError(f"unknown operand kind {kind}")


def disassemble(code: bytes) -> list[Instr]:
    """Decode ``code`` into a flat instruction list."""
    reader = ByteReader(code)
    instrs: list[Instr] = []
    while not reader.at_end():
        offset = reader.offset
        opcode = OPCODES.get(reader.u8())
        if opcode is None:
            raise DisassemblyError(f"unknown opcode 0x{code[offset]:02x} at offset {offset}")
        operands: list[int] = []
        try:
            for kind in opcode.operands:
                operands.extend(_read_operand(reader, kind))
        except ReadError as err:
            raise DisassemblyError(f"truncated {opcode.name} at offset {offset}") from err
        instrs.append(Instr(offset, opcode.name, tuple(operands)))
    return instrs
