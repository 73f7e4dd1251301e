# nnue_forensics/analysis/combiner.py
"""
Combine several NNUE networks into one by merging payloads position-wise.

Limitation: the default merge treats every payload byte as an unsigned
magnitude 0-255, whatever the payload actually holds. Payloads of raw
little-endian int16 weights or LEB128 frames are therefore merged as bytes,
not as weights, which is an approximation and not a faithful weight average.
``decompress=True`` is the alternative mode that decodes single-frame LEB128
payloads to int16 values, merges those, and re-encodes them.
"""
from __future__ import annotations

import io
import math
from enum import Enum
from typing import List, Sequence

from loguru import logger

from nnue_forensics.errors import (
    ArchitectureMismatchError,
    FormatError,
    InvalidArgumentError,
    SizeMismatchError,
)
from nnue_forensics.formats import leb128
from nnue_forensics.formats.nnue import NNUE_VERSION, NetworkFile, read_full, write_header
from nnue_forensics.io.file_writer import atomic_writer
from nnue_forensics.observability import Timer

BYTE_MIN, BYTE_MAX = 0, 255

# 1/x for every byte value; index 0 is never used (zero short-circuits).
_RECIPROCALS = [0.0] + [1.0 / x for x in range(1, 256)]


class CombinationMethod(str, Enum):
    """How values at one position are merged."""

    HARMONIC_MEAN = "harmonic"
    ARITHMETIC_MEAN = "arithmetic"


def round_half_away(x: float) -> int:
    """Round to nearest, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _clamp(value: int, lo: int, hi: int) -> int:
    return lo if value < lo else hi if value > hi else value


def harmonic_mean(values: Sequence[int]) -> float:
    """N / sum(1/x), with any zero (or a zero reciprocal sum) giving 0."""
    total = 0.0
    for x in values:
        if x == 0:
            return 0.0
        total += 1.0 / x
    if total == 0.0:
        return 0.0
    return len(values) / total


def _merge_values(columns, method: CombinationMethod, lo: int, hi: int) -> List[int]:
    if method is CombinationMethod.HARMONIC_MEAN:
        return [_clamp(round_half_away(harmonic_mean(col)), lo, hi) for col in columns]
    return [_clamp(round_half_away(sum(col) / len(col)), lo, hi) for col in columns]


def combine_payloads(
    payloads: Sequence[bytes], method: CombinationMethod = CombinationMethod.HARMONIC_MEAN
) -> bytes:
    """Merge equally sized payloads byte by byte.

    For the harmonic mean, a 0 at any input forces 0 at that position;
    otherwise H = N / sum(1/x) is rounded half away from zero and clamped
    to [0, 255].
    """
    if not payloads:
        raise InvalidArgumentError("Must provide at least one payload")
    length = len(payloads[0])
    for i, p in enumerate(payloads[1:], start=1):
        if len(p) != length:
            raise SizeMismatchError(i, length, len(p))

    n = len(payloads)
    if method is not CombinationMethod.HARMONIC_MEAN:
        return bytes(_merge_values(zip(*payloads), method, BYTE_MIN, BYTE_MAX))

    out = bytearray(length)
    recip = _RECIPROCALS
    for pos, column in enumerate(zip(*payloads)):
        if 0 in column:
            continue
        total = 0.0
        for x in column:
            total += recip[x]
        out[pos] = _clamp(round_half_away(n / total), BYTE_MIN, BYTE_MAX)
    return bytes(out)


def _decode_single_frame(payload: bytes, index: int) -> List[int]:
    if not leb128.is_compressed(payload):
        raise FormatError(
            f"Network {index} payload is not a LEB128 frame; decompressed merge needs one",
            index=index,
        )
    _, end = leb128.read_frame_span(payload)
    if end != len(payload):
        raise FormatError(
            f"Network {index} payload holds {len(payload) - end} bytes after its LEB128 frame",
            index=index,
            expected=end,
            actual=len(payload),
        )
    return leb128.decode(io.BytesIO(payload))


def combine_decompressed(
    payloads: Sequence[bytes], method: CombinationMethod = CombinationMethod.HARMONIC_MEAN
) -> bytes:
    """Decode single-frame LEB128 payloads, merge the int16 values, re-encode."""
    if not payloads:
        raise InvalidArgumentError("Must provide at least one payload")
    decoded = [_decode_single_frame(p, i) for i, p in enumerate(payloads)]
    count = len(decoded[0])
    for i, values in enumerate(decoded[1:], start=1):
        if len(values) != count:
            raise SizeMismatchError(i, count, len(values), unit="values")
    merged = _merge_values(zip(*decoded), method, leb128.INT16_MIN, leb128.INT16_MAX)
    return leb128.encode(merged)


def _check_compatible(
    networks: Sequence[NetworkFile], paths: Sequence[str], *, check_size: bool = True
) -> None:
    ref = networks[0]
    for i in range(1, len(networks)):
        net = networks[i]
        if net.architecture_hash != ref.architecture_hash:
            raise ArchitectureMismatchError(
                i, ref.architecture_hash, net.architecture_hash, path=paths[i]
            )
        if check_size and len(net.payload) != len(ref.payload):
            raise SizeMismatchError(i, len(ref.payload), len(net.payload), path=paths[i])


def combine(
    paths: Sequence[str],
    output_path: str,
    description: str,
    *,
    method: CombinationMethod = CombinationMethod.HARMONIC_MEAN,
    decompress: bool = False,
) -> NetworkFile:
    """Combine the networks at ``paths`` and write the result to ``output_path``.

    A single input is passed through with only its description replaced.
    The output is written atomically; nothing is left at ``output_path``
    when any step fails.
    """
    if not paths:
        raise InvalidArgumentError("Must provide at least one network", paths=list(paths))

    try:
        method = CombinationMethod(method)
    except ValueError as e:
        raise InvalidArgumentError(f"Unknown combination method: {method!r}", method=method) from e
    networks = [read_full(p) for p in paths]

    if len(networks) == 1:
        single = networks[0]
        combined = NetworkFile(
            version=single.version,
            architecture_hash=single.architecture_hash,
            description=description,
            payload=single.payload,
        )
        logger.info("Single network given; copying {path} with new description", path=paths[0])
    else:
        # Decoded value counts are compared after decompression, not frame lengths.
        _check_compatible(networks, paths, check_size=not decompress)
        payloads = [n.payload for n in networks]
        with Timer("combine") as t:
            if decompress:
                merged = combine_decompressed(payloads, method)
            else:
                merged = combine_payloads(payloads, method)
        logger.info(
            "Combined {n} networks ({mode}, {method}) in {ms:.2f}ms",
            n=len(networks),
            mode="decompressed" if decompress else "byte-wise",
            method=method.value,
            ms=t.duration_ms,
        )
        combined = NetworkFile(
            version=NNUE_VERSION,
            architecture_hash=networks[0].architecture_hash,
            description=description,
            payload=merged,
        )

    with atomic_writer(output_path) as f:
        write_header(f, combined)
    logger.debug("Wrote {path} ({n} payload bytes)", path=output_path, n=len(combined.payload))
    return combined
