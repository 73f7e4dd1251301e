# nnue_forensics/analysis/nnue_analyzer.py
"""
NNUE analyzer: header verification, embedded LEB128 frame checks and
layer statistics, reported as findings instead of exceptions.
"""

from __future__ import annotations

import io
from dataclasses import asdict
from typing import List, Optional

from loguru import logger

from nnue_forensics.analysis.analyzer import Analyzer
from nnue_forensics.analysis.base import AnalysisReport
from nnue_forensics.analysis.layers import analyze_network
from nnue_forensics.config import AVAILABLE_STAGES, DEFAULT_SETTINGS, AnalysisSettings
from nnue_forensics.errors import FormatError
from nnue_forensics.formats import leb128
from nnue_forensics.formats.nnue import NNUE_VERSION, parse_header


class NNUEAnalyzer(Analyzer):
    """Analyzer implementation for NNUE network files."""

    def __init__(self, path: str, settings: AnalysisSettings = DEFAULT_SETTINGS):
        super().__init__(path)
        self.settings = settings

    def get_format_name(self) -> str:
        return "nnue"

    def stages(self) -> List[str]:
        return list(AVAILABLE_STAGES)

    def _perform_stage(self, stage: str, mv: memoryview, report: AnalysisReport) -> None:
        if stage == "structure":
            self._check_structure(mv, report)
        elif stage == "layers":
            self._layer_statistics(mv, report)

    def _header_size(self, mv: memoryview, report: AnalysisReport) -> Optional[int]:
        try:
            return parse_header(mv)[3]
        except FormatError as e:
            report.add("structural_integrity:header", False, f"NNUE header error: {e}")
            return None

    def _check_structure(self, mv: memoryview, report: AnalysisReport) -> None:
        file_size = report.file_size
        try:
            version, arch_hash, description, header_size = parse_header(mv)
        except FormatError as e:
            report.add("structural_integrity:header", False, f"NNUE header error: {e}")
            logger.warning("Header of {path} is malformed: {error}", path=self.path, error=e)
            return

        data_size = file_size - header_size
        report.metadata.update(
            {
                "version": f"0x{version:08X}",
                "architecture_hash": f"0x{arch_hash:08X}",
                "description": description,
                "header_size": header_size,
                "data_size": data_size,
            }
        )
        report.add(
            "structural_integrity:header",
            True,
            f"Header region: [0, {header_size})",
            start=0,
            end=header_size,
        )
        report.add(
            "structural_integrity:version",
            version == NNUE_VERSION,
            f"version=0x{version:08X}, expected 0x{NNUE_VERSION:08X}",
        )
        report.add(
            "structural_integrity:payload_present",
            data_size > 0,
            f"Payload region: [{header_size}, {file_size})",
            start=header_size,
            end=file_size,
        )

        payload = mv[header_size:]
        try:
            compressed = leb128.is_compressed(payload)
            report.metadata["compressed"] = compressed
            if compressed:
                self._check_frame(payload, header_size, report)
        finally:
            payload.release()

    def _check_frame(self, payload: memoryview, header_size: int, report: AnalysisReport) -> None:
        try:
            start, end = leb128.read_frame_span(payload)
            values = leb128.decode(io.BytesIO(payload[:end]))
        except FormatError as e:
            report.add("compression:leb128_frame", False, f"LEB128 frame error: {e}")
            return
        report.metadata["leb128_values"] = len(values)
        report.add(
            "compression:leb128_frame",
            True,
            f"{len(values)} values in {end - start} compressed bytes",
            start=header_size + start,
            end=header_size + end,
        )
        if end != len(payload):
            report.metadata["trailing_bytes"] = len(payload) - end

    def _layer_statistics(self, mv: memoryview, report: AnalysisReport) -> None:
        header_size = self._header_size(mv, report)
        if header_size is None:
            return
        layers = analyze_network(bytes(mv[header_size:]), self.settings)
        report.metadata["layers"] = [dict(asdict(layer), size=layer.size) for layer in layers]
        for layer in layers:
            report.add(
                f"layers:{layer.name}",
                True,
                f"mean={layer.mean:.4f} std={layer.std_dev:.4f} min={layer.min} max={layer.max}",
                start=header_size + layer.start_offset,
                end=header_size + layer.end_offset,
            )
