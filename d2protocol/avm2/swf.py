"""SWF container reader.

Only the parts needed to reach embedded bytecode are decoded: the header,
the (possibly compressed) body and the tag list. ``DoABC`` tags are exposed
with their name and raw ABC bytes.
"""

import logging
import lzma
import struct
import zlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .reader import ByteReader, ReadError

logger = logging.getLogger(__name__)

TAG_END = 0
TAG_DO_ABC_DEFINE = 72  # DoABC without flags or name
TAG_DO_ABC = 82


class SwfError(RuntimeError):
    """Raised when a SWF file is malformed."""


class MissingEntryTagError(SwfError):
    """Raised when no DoABC tag carries the requested entry point name."""


@dataclass(frozen=True)
class Tag:
    code: int
    data: bytes


@dataclass(frozen=True)
class DoAbcTag:
    flags: int
    name: str
    abc_data: bytes


@dataclass
class Swf:
    signature: str
    version: int
    file_length: int
    frame_rate: int
    frame_count: int
    tags: list[Tag] = field(default_factory=list)

    def abc_tags(self) -> Iterator[DoAbcTag]:
        """Yield every bytecode tag in file order."""
        for tag in self.tags:
            if tag.code == TAG_DO_ABC:
                reader = ByteReader(tag.data)
                try:
                    flags = reader.u32()
                    name = reader.cstring()
                except ReadError as err:
                    raise SwfError(f"malformed DoABC tag: {err}") from err
                yield DoAbcTag(flags, name, tag.data[reader.offset :])
            elif tag.code == TAG_DO_ABC_DEFINE:
                yield DoAbcTag(0, "", tag.data)

    def find_abc(self, name: str) -> bytes:
        """Return the ABC bytes of the ``DoABC`` tag called ``name``."""
        for tag in self.abc_tags():
            if tag.name == name:
                return tag.abc_data
        raise MissingEntryTagError(f"swf file does not contain {name} tag")


def _decompress(signature: bytes, file_length: int, body: bytes) -> bytes:
    if signature == b"FWS":
        return body
    if signature == b"CWS":
        try:
            return zlib.decompress(body)
        except zlib.error as err:
            raise SwfError(f"zlib decompression failed: {err}") from err
    if signature == b"ZWS":
        if len(body) < 9:
            raise SwfError("truncated lzma header")
        # Rebuild an lzma "alone" header: 5 property bytes + uncompressed size
        props = body[4:9]
        alone = props + struct.pack("<Q", file_length - 8) + body[9:]
        try:
            return lzma.decompress(alone, format=lzma.FORMAT_ALONE)
        except lzma.LZMAError as err:
            raise SwfError(f"lzma decompression failed: {err}") from err
    raise SwfError(f"unknown swf signature {signature!r}")


def _skip_rect(reader: ByteReader) -> None:
    nbits = reader.u8() >> 3
    total_bits = 5 + 4 * nbits
    reader.read((total_bits + 7) // 8 - 1)


def parse(data: bytes) -> Swf:
    """Parse a SWF file held in memory."""
    if len(data) < 8:
        raise SwfError("file too short for a swf header")
    signature = data[:3]
    version = data[3]
    file_length = struct.unpack("<I", data[4:8])[0]
    body = _decompress(signature, file_length, data[8:])

    reader = ByteReader(body)
    try:
        _skip_rect(reader)
        frame_rate = reader.u16()
        frame_count = reader.u16()
        swf = Swf(signature.decode("ascii"), version, file_length, frame_rate, frame_count)
        while not reader.at_end():
            header = reader.u16()
            code, length = header >> 6, header & 0x3F
            if length == 0x3F:
                length = reader.u32()
            swf.tags.append(Tag(code, reader.read(length)))
            if code == TAG_END:
                break
    except ReadError as err:
        raise SwfError(f"truncated swf data: {err}") from err

    logger.debug("parsed %s swf v%d with %d tags", swf.signature, version, len(swf.tags))
    return swf


def parse_file(path: str | Path) -> Swf:
    """Read and parse the SWF file at ``path``."""
    with open(path, "rb") as f:
        return parse(f.read())
