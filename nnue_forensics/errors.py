# nnue_forensics/errors.py
"""
Error taxonomy shared by the codecs, the combiner and the analyzers.

Every error carries a ``context`` dict (path, index, expected and actual values)
so a failure can be diagnosed from the exception alone.
"""
from __future__ import annotations

from typing import Any, Dict


class NNUEError(Exception):
    """Base class for all nnue_forensics errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        path = self.context.get("path")
        return f"{self.message} ({path})" if path else self.message


class FormatError(NNUEError):
    """Malformed bytes in a network header or a LEB128 frame."""


class InvalidArgumentError(NNUEError, ValueError):
    """A caller supplied an unusable argument (empty input list, out-of-range value)."""


class NetworkIOError(NNUEError):
    """A file could not be opened, read or written."""


class ArchitectureMismatchError(NNUEError):
    """Combine inputs declare different architecture hashes."""

    def __init__(self, index: int, expected: int, actual: int, **context: Any):
        super().__init__(
            f"Network {index} has different architecture: 0x{actual:08X} vs 0x{expected:08X}",
            index=index,
            expected=expected,
            actual=actual,
            **context,
        )
        self.index = index
        self.expected = expected
        self.actual = actual


class SizeMismatchError(NNUEError):
    """Combine inputs carry payloads of different length."""

    def __init__(self, index: int, expected: int, actual: int, unit: str = "bytes", **context: Any):
        super().__init__(
            f"Network {index} has different data size: {actual} vs {expected} {unit}",
            index=index,
            expected=expected,
            actual=actual,
            unit=unit,
            **context,
        )
        self.index = index
        self.expected = expected
        self.actual = actual
