# nnue_forensics/formats/leb128.py
"""
Signed LEB128 frames used for compressed NNUE parameter blocks.

Frame layout (little-endian):
    17 bytes  ASCII magic "COMPRESSED_LEB128"
     4 bytes  uint32 count of compressed bytes that follow
     N bytes  signed base-128 groups, 7 data bits per byte, bit 7 = continuation
"""
from __future__ import annotations

import struct
from typing import BinaryIO, Iterable, List, Optional, Tuple

from nnue_forensics.errors import FormatError, InvalidArgumentError

MAGIC = b"COMPRESSED_LEB128"
MAGIC_SIZE = len(MAGIC)
LENGTH_SIZE = 4
FRAME_HEADER_SIZE = MAGIC_SIZE + LENGTH_SIZE
BUFFER_SIZE = 4096

INT16_MIN = -32768
INT16_MAX = 32767


def _to_int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _read_exact(source: BinaryIO, n: int, what: str) -> bytes:
    data = source.read(n)
    if len(data) != n:
        raise FormatError(f"Unexpected end of stream reading {what}", expected=n, actual=len(data))
    return data


def _read_frame_header(source: BinaryIO) -> int:
    magic = _read_exact(source, MAGIC_SIZE, "LEB128 magic string")
    if magic != MAGIC:
        raise FormatError(
            f"Invalid LEB128 magic string: {magic.decode('ascii', 'replace')!r}",
            expected=MAGIC,
            actual=magic,
        )
    (total,) = struct.unpack("<I", _read_exact(source, LENGTH_SIZE, "LEB128 byte count"))
    return total


def decode(source: BinaryIO, count: Optional[int] = None) -> List[int]:
    """Decode one frame from ``source`` into signed 16-bit integers.

    With ``count=None`` every value in the frame is returned and the declared
    byte count must end exactly on a value boundary. Otherwise exactly
    ``count`` values are decoded and the frame running dry first is an error.
    The source is left positioned just past the frame in both modes.
    """
    if count is not None and count < 0:
        raise InvalidArgumentError("count must be non-negative", count=count)

    bytes_left = _read_frame_header(source)
    unread = bytes_left
    buffer = b""
    pos = 0
    values: List[int] = []

    while (count is None and bytes_left > 0) or (count is not None and len(values) < count):
        value = 0
        shift = 0
        while True:
            if bytes_left == 0:
                if count is None:
                    raise FormatError("LEB128 frame ends inside a value", index=len(values))
                raise FormatError(
                    f"LEB128 compressed data exhausted at index {len(values)}/{count}",
                    index=len(values),
                    expected=count,
                )

            if pos >= len(buffer):
                to_read = min(unread, BUFFER_SIZE)
                buffer = source.read(to_read)
                if not buffer:
                    raise FormatError(
                        f"Unexpected end of stream at index {len(values)}",
                        index=len(values),
                        missing=unread,
                    )
                unread -= len(buffer)
                pos = 0

            b = buffer[pos]
            pos += 1
            bytes_left -= 1

            value |= (b & 0x7F) << shift
            shift += 7

            if not b & 0x80:
                if shift < 16 and b & 0x40:
                    value |= -1 << shift
                values.append(_to_int16(value))
                break

            if shift >= 16:
                raise FormatError(f"LEB128 value too large at index {len(values)}", index=len(values))

    # Skip whatever part of the frame was not needed for ``count`` values.
    while unread > 0:
        skipped = source.read(min(unread, BUFFER_SIZE))
        if not skipped:
            raise FormatError("Unexpected end of stream after LEB128 values", missing=unread)
        unread -= len(skipped)

    return values


def _encode_groups(values: Iterable[int]) -> bytearray:
    out = bytearray()
    for i, value in enumerate(values):
        if not INT16_MIN <= value <= INT16_MAX:
            raise InvalidArgumentError(
                f"Value {value} at index {i} is outside the signed 16-bit range",
                index=i,
                actual=value,
            )
        v = value
        while True:
            b = v & 0x7F
            v >>= 7
            if (v == 0 and not b & 0x40) or (v == -1 and b & 0x40):
                out.append(b)
                break
            out.append(b | 0x80)
    return out


def encode(values: Iterable[int]) -> bytes:
    """Encode signed 16-bit integers as a complete frame (magic, length, groups)."""
    body = _encode_groups(values)
    return MAGIC + struct.pack("<I", len(body)) + bytes(body)


def write_leb128(sink: BinaryIO, values: Iterable[int]) -> int:
    """Write a frame to ``sink``; returns the number of bytes written."""
    frame = encode(values)
    sink.write(frame)
    return len(frame)


def is_compressed(data: bytes, offset: int = 0) -> bool:
    """True when a LEB128 magic string starts at ``offset``."""
    if len(data) - offset < MAGIC_SIZE:
        return False
    return bytes(data[offset : offset + MAGIC_SIZE]) == MAGIC


def read_frame_span(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Validate frame framing inside ``data`` without decoding it.

    Returns ``(groups_offset, end_offset)``: where the encoded groups start
    and the offset just past the frame.
    """
    if not is_compressed(data, offset):
        raise FormatError("No LEB128 magic string at offset", offset=offset)
    if len(data) - offset < FRAME_HEADER_SIZE:
        raise FormatError("LEB128 frame header truncated", offset=offset)
    (total,) = struct.unpack_from("<I", data, offset + MAGIC_SIZE)
    start = offset + FRAME_HEADER_SIZE
    end = start + total
    if end > len(data):
        raise FormatError(
            "LEB128 frame extends beyond end of data",
            offset=offset,
            expected=end,
            actual=len(data),
        )
    return start, end
