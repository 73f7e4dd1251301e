from __future__ import annotations

import pytest

from nnue_forensics.analysis.combiner import combine
from nnue_forensics.errors import ArchitectureMismatchError, InvalidArgumentError
from nnue_forensics.formats.nnue import read_info
from nnue_forensics.result import Outcome, attempt


def test_attempt_success(make_network):
    outcome = attempt(read_info, make_network(b"\x00" * 3))
    assert outcome.ok
    assert outcome.kind == "ok"
    assert outcome.unwrap().payload_bytes == 3


def test_attempt_captures_domain_error(tmp_path, make_network):
    a = make_network(b"\x01", arch_hash=1)
    b = make_network(b"\x01", arch_hash=2)
    outcome = attempt(combine, [a, b], str(tmp_path / "o.nnue"), "x")
    assert not outcome.ok
    assert outcome.kind == "ArchitectureMismatchError"
    assert outcome.error.context["index"] == 1
    with pytest.raises(ArchitectureMismatchError):
        outcome.unwrap()


def test_attempt_does_not_swallow_programming_errors():
    def boom():
        raise KeyError("x")

    with pytest.raises(KeyError):
        attempt(boom)


def test_outcome_defaults():
    assert Outcome(value=1).ok
    assert not Outcome(error=InvalidArgumentError("bad")).ok
