# nnue_forensics/analysis/format_analyzer.py
"""
Binary format analysis of a single NNUE file: header sizes, value samples
and a weight distribution over the start of the payload.
"""
from __future__ import annotations

import os
import struct
from collections import Counter
from dataclasses import dataclass
from typing import Tuple

from loguru import logger

from nnue_forensics.config import DEFAULT_SETTINGS, AnalysisSettings
from nnue_forensics.errors import FormatError
from nnue_forensics.formats.nnue import parse_header
from nnue_forensics.io.file_reader import MappedFile


@dataclass(frozen=True)
class WeightDistribution:
    """Statistics over the first ``sample_size`` int16 payload values."""

    sample_size: int
    min: int
    max: int
    unique_values: int
    mean: float


@dataclass(frozen=True)
class AnalysisResult:
    file_name: str
    version: int
    architecture_hash: int
    description: str
    header_size: int
    data_size: int
    sample_int16: Tuple[int, ...]
    sample_int8: Tuple[int, ...]
    distribution: WeightDistribution


def weight_distribution(payload, limit: int = DEFAULT_SETTINGS.distribution_sample_limit) -> WeightDistribution:
    """Frequency statistics over up to ``limit`` little-endian int16 values."""
    sample_size = min(limit, len(payload) // 2)
    if sample_size == 0:
        return WeightDistribution(sample_size=0, min=0, max=0, unique_values=0, mean=0.0)

    counts = Counter(struct.unpack_from(f"<{sample_size}h", payload, 0))
    weighted = sum(value * n for value, n in counts.items())
    return WeightDistribution(
        sample_size=sample_size,
        min=min(counts),
        max=max(counts),
        unique_values=len(counts),
        mean=weighted / sample_size,
    )


def analyze_file(path: str, settings: AnalysisSettings = DEFAULT_SETTINGS) -> AnalysisResult:
    """Analyze the header and the start of the payload of ``path``."""
    with MappedFile(path) as mf:
        mv = mf.view
        try:
            version, arch_hash, description, header_size = parse_header(mv)
        except FormatError as e:
            e.context.setdefault("path", path)
            raise

        data_size = mf.size - header_size
        payload = mv[header_size:]
        try:
            n16 = min(settings.int16_sample_count, data_size // 2)
            sample_int16 = struct.unpack_from(f"<{n16}h", payload, 0)
            # Second, independent pass over the same starting bytes.
            n8 = min(settings.int8_sample_count, data_size)
            sample_int8 = struct.unpack_from(f"<{n8}b", payload, 0)
            distribution = weight_distribution(payload, settings.distribution_sample_limit)
        finally:
            payload.release()

    logger.debug(
        "Analyzed {name}: header={h} data={d} unique={u}",
        name=os.path.basename(path),
        h=header_size,
        d=data_size,
        u=distribution.unique_values,
    )
    return AnalysisResult(
        file_name=os.path.basename(path),
        version=version,
        architecture_hash=arch_hash,
        description=description,
        header_size=header_size,
        data_size=data_size,
        sample_int16=sample_int16,
        sample_int8=sample_int8,
        distribution=distribution,
    )
