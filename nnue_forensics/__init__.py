# nnue_forensics/__init__.py
"""
nnue_forensics
==============

Pure-Python tooling for NNUE chess-engine network files: header and LEB128
codecs, harmonic-mean network combination, and binary format analysis with
rich console reporting.
"""
from __future__ import annotations

from importlib.metadata import version as _pkg_version

__all__ = ["__version__"]

try:
    # Read version dynamically from installed package metadata
    __version__: str = _pkg_version("nnue-forensics")
except Exception:  # pragma: no cover - fallback for development environments
    __version__ = "0.0.0-dev"
