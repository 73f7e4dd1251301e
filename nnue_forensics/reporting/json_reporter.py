# nnue_forensics/reporting/json_reporter.py
"""
JSON reporting utilities.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from nnue_forensics.errors import NetworkIOError
from nnue_forensics.observability import to_dict


def to_json_dict(record) -> Dict[str, Any]:
    """Convert any report record (dataclass or list of them) to plain data."""
    return to_dict(record)


def write_json(record, path: str) -> None:
    """Write a record to a file as pretty JSON."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(to_json_dict(record), f, indent=2)
    except OSError as e:
        raise NetworkIOError(f"Cannot write JSON report: {e.strerror or e}", path=path) from e
