# nnue_forensics/io/file_writer.py
"""
Atomic file output: write to a sibling temp file, then rename over the target.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from loguru import logger

from nnue_forensics.errors import NetworkIOError


@contextmanager
def atomic_writer(path: str) -> Iterator[BinaryIO]:
    """Yield a binary file whose contents replace ``path`` only on success.

    On any exception the temp file is removed and ``path`` is left untouched.
    """
    directory = os.path.dirname(os.path.abspath(path))
    if os.path.isdir(path):
        raise NetworkIOError("Output path is a directory", path=path)
    try:
        fd, tmp = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory
        )
    except OSError as e:
        raise NetworkIOError(f"Cannot create temp file: {e.strerror or e}", path=path) from e

    try:
        with os.fdopen(fd, "wb") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, 0o666 & ~_current_umask())
        os.replace(tmp, path)
    except OSError as e:
        _discard(tmp)
        raise NetworkIOError(f"Cannot write output file: {e.strerror or e}", path=path) from e
    except BaseException:
        _discard(tmp)
        raise
    logger.debug("Atomically wrote {path}", path=path)


def _current_umask() -> int:
    # The umask can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _discard(tmp: str) -> None:
    try:
        os.unlink(tmp)
    except FileNotFoundError:
        pass
