# nnue_forensics/formats/nnue.py
"""
NNUE file header codec.

Layout (little-endian):
    offset 0    uint32 version
    offset 4    uint32 architecture hash
    offset 8    uint32 description length L
    offset 12   L bytes UTF-8 description
    offset 12+L payload, kept verbatim (raw weights or embedded LEB128 frames)
"""
from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import BinaryIO, Tuple

from loguru import logger

from nnue_forensics.errors import FormatError, InvalidArgumentError, NetworkIOError

NNUE_VERSION = 0x7AF32F20
FIXED_HEADER_SIZE = 12
_PREFIX = struct.Struct("<III")
_UINT32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class NetworkFile:
    """A fully loaded network: header fields plus the opaque payload."""

    version: int
    architecture_hash: int
    description: str = ""
    payload: bytes = b""

    def __post_init__(self) -> None:
        for field_name in ("version", "architecture_hash"):
            value = getattr(self, field_name)
            if not 0 <= value <= _UINT32_MAX:
                raise InvalidArgumentError(
                    f"{field_name} does not fit in 32 bits", field=field_name, actual=value
                )
        if not isinstance(self.payload, bytes):
            object.__setattr__(self, "payload", bytes(self.payload))

    @property
    def header_size(self) -> int:
        return FIXED_HEADER_SIZE + len(self.description.encode("utf-8"))


@dataclass(frozen=True)
class NetworkInfo:
    """Header metadata of a network file; the payload is only measured."""

    file_path: str
    version: int
    architecture_hash: int
    description: str
    payload_bytes: int

    @property
    def header_size(self) -> int:
        return FIXED_HEADER_SIZE + len(self.description.encode("utf-8"))


def _decode_description(raw: bytes) -> str:
    try:
        return raw.decode("utf-8", "strict")
    except UnicodeDecodeError as e:
        raise FormatError(f"Description is not valid UTF-8: {e}", length=len(raw)) from e


def _read_prefix(source: BinaryIO) -> Tuple[int, int, str]:
    prefix = source.read(FIXED_HEADER_SIZE)
    if len(prefix) < FIXED_HEADER_SIZE:
        raise FormatError(
            "File too small for NNUE header", expected=FIXED_HEADER_SIZE, actual=len(prefix)
        )
    version, arch_hash, desc_len = _PREFIX.unpack(prefix)
    raw = source.read(desc_len) if desc_len else b""
    if len(raw) < desc_len:
        raise FormatError(
            "Description truncated: stream ended before the declared length",
            expected=desc_len,
            actual=len(raw),
        )
    return version, arch_hash, _decode_description(raw)


def read_header(source: BinaryIO) -> NetworkFile:
    """Read a header and treat every remaining byte as payload."""
    version, arch_hash, description = _read_prefix(source)
    payload = source.read()
    return NetworkFile(
        version=version, architecture_hash=arch_hash, description=description, payload=payload
    )


def write_header(sink: BinaryIO, network: NetworkFile) -> None:
    """Write header fields followed by the payload, in file order."""
    desc = network.description.encode("utf-8")
    sink.write(_PREFIX.pack(network.version, network.architecture_hash, len(desc)))
    if desc:
        sink.write(desc)
    sink.write(network.payload)


def parse_header(buf) -> Tuple[int, int, str, int]:
    """Parse the header from a bytes-like buffer.

    Returns ``(version, architecture_hash, description, header_size)``.
    """
    if len(buf) < FIXED_HEADER_SIZE:
        raise FormatError(
            "File too small for NNUE header", expected=FIXED_HEADER_SIZE, actual=len(buf)
        )
    version, arch_hash, desc_len = _PREFIX.unpack_from(buf, 0)
    header_size = FIXED_HEADER_SIZE + desc_len
    if header_size > len(buf):
        raise FormatError(
            "Description truncated: stream ended before the declared length",
            expected=desc_len,
            actual=len(buf) - FIXED_HEADER_SIZE,
        )
    description = _decode_description(bytes(buf[FIXED_HEADER_SIZE:header_size]))
    return version, arch_hash, description, header_size


def read_info(path: str) -> NetworkInfo:
    """Read only the header of ``path``; the payload is measured, not loaded."""
    try:
        with open(path, "rb") as f:
            version, arch_hash, description = _read_prefix(f)
            payload_bytes = os.fstat(f.fileno()).st_size - f.tell()
    except FormatError as e:
        e.context.setdefault("path", path)
        raise
    except OSError as e:
        raise NetworkIOError(f"Cannot read network file: {e.strerror or e}", path=path) from e

    logger.debug(
        "Read header of {path}: hash=0x{hash:08X} payload={n} bytes",
        path=path,
        hash=arch_hash,
        n=payload_bytes,
    )
    return NetworkInfo(
        file_path=path,
        version=version,
        architecture_hash=arch_hash,
        description=description,
        payload_bytes=payload_bytes,
    )


def read_full(path: str) -> NetworkFile:
    """Load a network file with its payload kept byte-for-byte."""
    try:
        with open(path, "rb") as f:
            return read_header(f)
    except FormatError as e:
        e.context.setdefault("path", path)
        raise
    except OSError as e:
        raise NetworkIOError(f"Cannot read network file: {e.strerror or e}", path=path) from e


def write_network(path: str, network: NetworkFile) -> None:
    """Write ``network`` to ``path`` directly (not atomic, see io.file_writer)."""
    try:
        with open(path, "wb") as f:
            write_header(f, network)
    except OSError as e:
        raise NetworkIOError(f"Cannot write network file: {e.strerror or e}", path=path) from e
