from __future__ import annotations

import io
import os

import pytest

from nnue_forensics.analysis.combiner import (
    CombinationMethod,
    combine,
    combine_decompressed,
    combine_payloads,
    harmonic_mean,
    round_half_away,
)
from nnue_forensics.errors import (
    ArchitectureMismatchError,
    FormatError,
    InvalidArgumentError,
    NetworkIOError,
    SizeMismatchError,
)
from nnue_forensics.formats import leb128
from nnue_forensics.formats.nnue import NNUE_VERSION, read_full


def test_harmonic_merge_literal_scenario():
    assert combine_payloads([bytes([100, 150, 200]), bytes([50, 100, 150])]) == bytes(
        [67, 120, 171]
    )


def test_zero_at_any_input_forces_zero():
    out = combine_payloads([bytes([0, 255, 7]), bytes([255, 0, 7]), bytes([9, 9, 0])])
    assert out == bytes([0, 0, 0])


def test_identical_payloads_merge_to_themselves():
    payload = bytes(range(1, 256))
    assert combine_payloads([payload, payload, payload]) == payload


def test_arithmetic_method():
    out = combine_payloads([bytes([1, 0, 255]), bytes([2, 4, 254])], CombinationMethod.ARITHMETIC_MEAN)
    assert out == bytes([2, 2, 255])


def test_round_half_away_from_zero():
    assert round_half_away(2.5) == 3
    assert round_half_away(-2.5) == -3
    assert round_half_away(66.666) == 67
    assert round_half_away(0.49) == 0


def test_harmonic_mean_handles_signed_values():
    assert harmonic_mean([2, -2]) == 0.0
    assert harmonic_mean([4, 0, 4]) == 0.0
    assert harmonic_mean([-4, -4]) == pytest.approx(-4.0)


def test_combine_payloads_requires_input():
    with pytest.raises(InvalidArgumentError):
        combine_payloads([])


def test_combine_single_is_passthrough(tmp_path, make_network):
    src = make_network(bytes([9, 8, 7]), version=1, arch_hash=0xDEADBEEF, description="orig")
    out = str(tmp_path / "out.nnue")
    result = combine([src], out, "d")
    loaded = read_full(out)
    assert loaded == result
    assert loaded.architecture_hash == 0xDEADBEEF
    assert loaded.payload == bytes([9, 8, 7])
    assert loaded.description == "d"


def test_combine_two_networks(tmp_path, make_network):
    a = make_network(bytes([100, 150, 200]), version=5, arch_hash=0x1111)
    b = make_network(bytes([50, 100, 150]), version=6, arch_hash=0x1111)
    out = str(tmp_path / "combined.nnue")
    combine([a, b], out, "merged")
    loaded = read_full(out)
    assert loaded.version == NNUE_VERSION
    assert loaded.architecture_hash == 0x1111
    assert loaded.description == "merged"
    assert loaded.payload == bytes([67, 120, 171])


def test_combine_empty_list(tmp_path):
    with pytest.raises(InvalidArgumentError):
        combine([], str(tmp_path / "out.nnue"), "x")


def test_architecture_mismatch_names_first_index(tmp_path, make_network):
    a = make_network(bytes(50), arch_hash=0x11111111)
    b = make_network(bytes(50), arch_hash=0x11111111)
    c = make_network(bytes(50), arch_hash=0x22222222)
    d = make_network(bytes(50), arch_hash=0x33333333)
    out = tmp_path / "out.nnue"
    with pytest.raises(ArchitectureMismatchError) as exc:
        combine([a, b, c, d], str(out), "x")
    assert exc.value.index == 2
    assert exc.value.expected == 0x11111111
    assert exc.value.actual == 0x22222222
    assert "different architecture" in str(exc.value)
    assert not out.exists()


def test_size_mismatch(tmp_path, make_network):
    a = make_network(bytes(50))
    b = make_network(bytes(60))
    out = tmp_path / "out.nnue"
    with pytest.raises(SizeMismatchError) as exc:
        combine([a, b], str(out), "x")
    assert exc.value.index == 1
    assert (exc.value.expected, exc.value.actual) == (50, 60)
    assert not out.exists()


def test_missing_input_leaves_no_output(tmp_path, make_network):
    a = make_network(bytes(5))
    out = tmp_path / "out.nnue"
    with pytest.raises(NetworkIOError):
        combine([a, str(tmp_path / "missing.nnue")], str(out), "x")
    assert not out.exists()
    assert os.listdir(tmp_path) == [os.path.basename(a)]


def test_failed_combine_keeps_existing_output(tmp_path, make_network):
    a = make_network(bytes(4), arch_hash=1)
    b = make_network(bytes(4), arch_hash=2)
    out = tmp_path / "out.nnue"
    out.write_bytes(b"previous")
    with pytest.raises(ArchitectureMismatchError):
        combine([a, b], str(out), "x")
    assert out.read_bytes() == b"previous"


def test_method_accepts_string(tmp_path, make_network):
    a = make_network(bytes([10, 20]))
    b = make_network(bytes([20, 40]))
    out = str(tmp_path / "out.nnue")
    assert combine([a, b], out, "x", method="arithmetic").payload == bytes([15, 30])


def test_decompressed_mode(tmp_path, make_network):
    a = make_network(leb128.encode([100, -300, 0, 32767]))
    b = make_network(leb128.encode([80, -200, 12, 32767]))
    out = str(tmp_path / "out.nnue")
    result = combine([a, b], out, "x", decompress=True)
    assert leb128.is_compressed(result.payload)
    assert leb128.decode(io.BytesIO(result.payload)) == [89, -240, 0, 32767]


def test_decompressed_mode_rejects_raw_payload():
    with pytest.raises(FormatError) as exc:
        combine_decompressed([leb128.encode([1]), b"\x01\x02"])
    assert exc.value.context["index"] == 1


def test_decompressed_mode_rejects_trailing_bytes():
    with pytest.raises(FormatError):
        combine_decompressed([leb128.encode([1]) + b"\x00"])


def test_decompressed_mode_value_count_mismatch():
    with pytest.raises(SizeMismatchError):
        combine_decompressed([leb128.encode([1, 2]), leb128.encode([1000])])


def test_decompressed_mode_accepts_frames_of_different_length(tmp_path, make_network):
    small = leb128.encode([1, 2])
    large = leb128.encode([1000, 2000])
    assert len(small) != len(large)
    a = make_network(small)
    b = make_network(large)
    out = str(tmp_path / "out.nnue")
    result = combine([a, b], out, "x", decompress=True)
    assert leb128.decode(io.BytesIO(result.payload)) == [2, 4]
    assert read_full(out).payload == result.payload


def test_decompressed_mode_still_checks_architecture(tmp_path, make_network):
    a = make_network(leb128.encode([1]), arch_hash=1)
    b = make_network(leb128.encode([300]), arch_hash=2)
    with pytest.raises(ArchitectureMismatchError):
        combine([a, b], str(tmp_path / "out.nnue"), "x", decompress=True)


def test_decompressed_mode_value_count_mismatch_from_files(tmp_path, make_network):
    a = make_network(leb128.encode([1, 2]))
    b = make_network(leb128.encode([1]))
    out = tmp_path / "out.nnue"
    with pytest.raises(SizeMismatchError) as exc:
        combine([a, b], str(out), "x", decompress=True)
    assert exc.value.context["unit"] == "values"
    assert not out.exists()


def test_unknown_method_is_invalid_argument(tmp_path, make_network):
    a = make_network(bytes([1, 2]))
    out = tmp_path / "out.nnue"
    with pytest.raises(InvalidArgumentError) as exc:
        combine([a, a], str(out), "x", method="median")
    assert exc.value.context["method"] == "median"
    assert not out.exists()
