"""Little-endian primitive reader for SWF and ABC data."""

import struct


class ReadError(RuntimeError):
    """Raised when the input ends before a value could be read."""


class ByteReader:
    """Sequential reader over a bytes buffer.

    Variable-length integers follow the AVM2 encoding: 7 bits per byte,
    least significant group first, at most 5 bytes.
    """

    def __init__(self, data: bytes | memoryview, offset: int = 0) -> None:
        self._data = memoryview(data)
        self.offset = offset

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def at_end(self) -> bool:
        return self.offset >= len(self._data)

    def read(self, size: int) -> bytes:
        if size < 0 or self.offset + size > len(self._data):
            raise ReadError(f"cannot read {size} bytes at offset {self.offset}")
        chunk = bytes(self._data[self.offset : self.offset + size])
        self.offset += size
        return chunk

    def _unpack(self, fmt: str, size: int) -> int | float:
        return struct.unpack(fmt, self.read(size))[0]

    def u8(self) -> int:
        return int(self._unpack("<B", 1))

    def u16(self) -> int:
        return int(self._unpack("<H", 2))

    def u32(self) -> int:
        return int(self._unpack("<I", 4))

    def d64(self) -> float:
        return float(self._unpack("<d", 8))

    def s24(self) -> int:
        raw = self.read(3)
        return int.from_bytes(raw, byteorder="little", signed=True)

    def _varint(self) -> tuple[int, int]:
        result = 0
        for count in range(5):
            byte = self.u8()
            result |= (byte & 0x7F) << (7 * count)
            if not byte & 0x80:
                return result, count + 1
        return result, 5

    def u30(self) -> int:
        value, _ = self._varint()
        return value & 0xFFFFFFFF

    def s32(self) -> int:
        value, count = self._varint()
        if count == 5:
            value &= 0xFFFFFFFF
            return value - (1 << 32) if value & 0x80000000 else value
        bits = 7 * count
        return value - (1 << bits) if value & (1 << (bits - 1)) else value

    def string(self) -> str:
        """Read a u30 length-prefixed UTF-8 string."""
        size = self.u30()
        return self.read(size).decode("utf-8", errors="replace")

    def cstring(self) -> str:
        """Read a null-terminated UTF-8 string."""
        end = bytes(self._data[self.offset :]).find(b"\x00")
        if end < 0:
            raise ReadError(f"unterminated string at offset {self.offset}")
        value = self.read(end).decode("utf-8", errors="replace")
        self.offset += 1
        return value
