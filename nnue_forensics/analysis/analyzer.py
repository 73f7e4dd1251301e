# nnue_forensics/analysis/analyzer.py
"""
Base Analyzer class: maps the file once and runs the requested stages.
"""
from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import List

from loguru import logger

from nnue_forensics.analysis.base import AnalysisReport
from nnue_forensics.errors import InvalidArgumentError
from nnue_forensics.io.file_reader import MappedFile
from nnue_forensics.observability import Timer


class Analyzer(ABC):
    """Abstract base class for file format analyzers."""

    def __init__(self, path: str):
        self.path = path

    def run(self, stages: List[str]) -> AnalysisReport:
        """
        Orchestrates the analysis process, running only the specified stages.

        Args:
            stages: Stage names from ``self.stages()``, run in that order.
        """
        unknown = [s for s in stages if s not in self.stages()]
        if unknown:
            raise InvalidArgumentError(f"Unknown stage(s): {', '.join(unknown)}", stages=unknown)

        with MappedFile(self.path) as mf:
            mv = mf.view
            report = AnalysisReport(
                file_path=self.path,
                file_size=mf.size,
                sha256_hex="not_run",
                format=self.get_format_name(),
                metadata={},
            )

            if "sha256" in stages:
                with Timer("sha256") as t_hash:
                    h = hashlib.sha256()
                    h.update(mv)
                    report.sha256_hex = h.hexdigest()
                report.stages_run.append("sha256")
                logger.debug("SHA256 computed in {ms:.2f}ms", ms=t_hash.duration_ms)

            for stage in self.stages():
                if stage == "sha256" or stage not in stages:
                    continue
                with Timer(stage) as t_stage:
                    self._perform_stage(stage, mv, report)
                report.stages_run.append(stage)
                logger.debug(
                    "{format} stage {stage} completed in {ms:.2f}ms",
                    format=self.get_format_name().upper(),
                    stage=stage,
                    ms=t_stage.duration_ms,
                )

            return report

    def stages(self) -> List[str]:
        """Stage names this analyzer understands, in execution order."""
        return ["sha256"]

    @abstractmethod
    def _perform_stage(self, stage: str, mv: memoryview, report: AnalysisReport) -> None:
        """
        Format-specific logic for one stage; populates ``report`` in place.
        """
        raise NotImplementedError

    @abstractmethod
    def get_format_name(self) -> str:
        """Return the string name of the format (e.g., 'nnue')."""
        raise NotImplementedError
