# nnue_forensics/config.py
"""
Defaults for sampling and layer statistics, plus CLI-facing constants.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from nnue_forensics.errors import InvalidArgumentError

# File extensions a discovery layer should treat as network files.
NETWORK_EXTENSIONS: Tuple[str, ...] = (".nnue", ".bin")

# Stages understood by NNUEAnalyzer.run().
AVAILABLE_STAGES: List[str] = ["sha256", "structure", "layers"]


@dataclass(frozen=True)
class AnalysisSettings:
    """Tunable limits for the format and layer analyzers."""

    int16_sample_count: int = 20
    int8_sample_count: int = 20
    distribution_sample_limit: int = 10000
    # Fixed heuristic: nothing in the file marks where the feature transformer ends.
    feature_transformer_ratio: float = 0.98

    def __post_init__(self) -> None:
        counts = (self.int16_sample_count, self.int8_sample_count, self.distribution_sample_limit)
        if any(c < 0 for c in counts):
            raise InvalidArgumentError("Sample counts must be non-negative", counts=counts)
        if not 0.0 <= self.feature_transformer_ratio <= 1.0:
            raise InvalidArgumentError(
                "feature_transformer_ratio must lie in [0, 1]",
                ratio=self.feature_transformer_ratio,
            )


DEFAULT_SETTINGS = AnalysisSettings()
