# nnue_forensics/io/file_reader.py
"""
Read-only memory-mapped access to network files.
"""

from __future__ import annotations

import mmap
import os
from typing import Optional

from nnue_forensics.errors import NetworkIOError


class MappedFile:
    """Context manager exposing a zero-copy memoryview over a file.

    Empty files cannot be mapped, so they get an empty view instead.
    """

    __slots__ = ("_fd", "_m", "_mv", "size", "path")

    def __init__(self, path: str):
        self.path = path
        self._fd: Optional[int] = None
        self._m: Optional[mmap.mmap] = None
        self._mv: Optional[memoryview] = None
        self.size: int = 0

    def __enter__(self) -> "MappedFile":
        try:
            self._fd = os.open(self.path, os.O_RDONLY | getattr(os, "O_BINARY", 0))
            self.size = os.fstat(self._fd).st_size
            if self.size:
                self._m = mmap.mmap(self._fd, self.size, access=mmap.ACCESS_READ)
                self._mv = memoryview(self._m)
            else:
                self._mv = memoryview(b"")
        except OSError as e:
            self._close()
            raise NetworkIOError(f"Cannot open network file: {e.strerror or e}", path=self.path) from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._close()

    def _close(self) -> None:
        if self._mv is not None:
            self._mv.release()
            self._mv = None
        if self._m is not None:
            self._m.close()
            self._m = None
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    @property
    def view(self) -> memoryview:
        """Zero-copy memoryview over the file bytes."""
        if self._mv is None:
            raise RuntimeError("MappedFile is not entered")
        return self._mv
