from __future__ import annotations

import pytest

from .helpers import build_network_bytes


@pytest.fixture
def make_network(tmp_path):
    """Factory writing a network file under tmp_path and returning its path."""
    counter = {"n": 0}

    def _make(payload: bytes = b"", *, name: str = None, **header) -> str:
        counter["n"] += 1
        path = tmp_path / (name or f"net{counter['n']}.nnue")
        path.write_bytes(build_network_bytes(payload, **header))
        return str(path)

    return _make
