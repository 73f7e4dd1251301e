# nnue_forensics/analysis/layers.py
"""
Coarse per-layer weight statistics.

The payload is split by 16-bit value count into a "FeatureTransformer"
range (first 98%) and a "HiddenLayers" range (the rest). The ratio is a
fixed heuristic; NNUE files carry no layer boundary metadata.
"""
from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import List

from nnue_forensics.config import DEFAULT_SETTINGS, AnalysisSettings


@dataclass(frozen=True)
class LayerInfo:
    """A contiguous byte range of the payload and its int16 statistics."""

    name: str
    start_offset: int
    end_offset: int
    mean: float = 0.0
    std_dev: float = 0.0
    min: int = 0
    max: int = 0

    @property
    def size(self) -> int:
        return self.end_offset - self.start_offset


def _layer_stats(payload: bytes, name: str, start: int, end: int) -> LayerInfo:
    count = (end - start) // 2
    if count == 0:
        return LayerInfo(name=name, start_offset=start, end_offset=end)

    values = struct.unpack_from(f"<{count}h", payload, start)

    total = 0
    lo = values[0]
    hi = values[0]
    for v in values:
        total += v
        if v < lo:
            lo = v
        if v > hi:
            hi = v
    mean = total / count

    # Population standard deviation, second pass.
    squared = 0.0
    for v in values:
        diff = v - mean
        squared += diff * diff

    return LayerInfo(
        name=name,
        start_offset=start,
        end_offset=end,
        mean=mean,
        std_dev=math.sqrt(squared / count),
        min=lo,
        max=hi,
    )


def analyze_network(payload: bytes, settings: AnalysisSettings = DEFAULT_SETTINGS) -> List[LayerInfo]:
    """Split ``payload`` into feature-transformer and hidden-layer ranges."""
    num_weights = len(payload) // 2
    ft_weights = int(num_weights * settings.feature_transformer_ratio)
    boundary = ft_weights * 2
    return [
        _layer_stats(payload, "FeatureTransformer", 0, boundary),
        _layer_stats(payload, "HiddenLayers", boundary, len(payload)),
    ]
