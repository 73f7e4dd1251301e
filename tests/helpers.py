from __future__ import annotations

import struct

from nnue_forensics.formats.nnue import NNUE_VERSION


def build_network_bytes(
    payload: bytes = b"",
    *,
    version: int = NNUE_VERSION,
    arch_hash: int = 0x12345678,
    description: str = "",
) -> bytes:
    desc = description.encode("utf-8")
    return struct.pack("<III", version, arch_hash, len(desc)) + desc + payload


def int16_payload(*values: int) -> bytes:
    return struct.pack(f"<{len(values)}h", *values)
