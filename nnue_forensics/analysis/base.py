# nnue_forensics/analysis/base.py
"""
Report models for staged inspections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Finding:
    """Single check result."""

    name: str
    ok: bool
    details: str = ""
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AnalysisReport:
    """Aggregate result of one inspection run."""

    file_path: str
    file_size: int
    sha256_hex: str
    format: str
    metadata: Dict[str, Any]
    findings: List[Finding] = field(default_factory=list)
    stages_run: List[str] = field(default_factory=list)

    def add(self, name: str, ok: bool, details: str = "", **context: Any) -> None:
        self.findings.append(Finding(name=name, ok=ok, details=details, context=context))

    @property
    def ok(self) -> bool:
        return all(f.ok for f in self.findings) if self.findings else True
