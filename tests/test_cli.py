from __future__ import annotations

import json
import os

from nnue_forensics.cli import find_networks, main
from nnue_forensics.formats.nnue import read_full

from .helpers import int16_payload


def test_no_command_prints_help(capsys):
    assert main([]) == 0


def test_version():
    assert main(["version"]) == 0


def test_info(make_network):
    assert main(["info", make_network(b"\x00" * 4, description="x")]) == 0


def test_info_missing_file(tmp_path):
    assert main(["info", str(tmp_path / "missing.nnue")]) == 2


def test_list_filters_extensions(tmp_path, make_network):
    make_network(b"", name="a.nnue")
    make_network(b"", name="b.BIN")
    (tmp_path / "notes.txt").write_text("x")
    found = find_networks(str(tmp_path))
    assert [os.path.basename(p) for p in found] == ["a.nnue", "b.BIN"]
    assert main(["list", str(tmp_path)]) == 0
    assert main(["list", str(tmp_path / "nope")]) == 2


def test_analyze_with_json(tmp_path, make_network):
    out = tmp_path / "analysis.json"
    path = make_network(int16_payload(1, -1, 2))
    assert main(["analyze", path, "--json-out", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["analysis"]["distribution"]["sample_size"] == 3
    assert len(data["layers"]) == 2


def test_scan(tmp_path, make_network):
    out = tmp_path / "scan.json"
    assert main(["scan", make_network(b"\x01\x02"), "--stage", "structure", "--json-out", str(out)]) == 0
    assert json.loads(out.read_text(encoding="utf-8"))["stages_run"] == ["structure"]


def test_combine(tmp_path, make_network):
    a = make_network(bytes([100, 150, 200]))
    b = make_network(bytes([50, 100, 150]))
    out = str(tmp_path / "combined.nnue")
    assert main(["combine", out, a, b, "--description", "cli"]) == 0
    net = read_full(out)
    assert net.payload == bytes([67, 120, 171])
    assert net.description == "cli"


def test_combine_mismatch_exit_code(tmp_path, make_network):
    a = make_network(bytes(3), arch_hash=1)
    b = make_network(bytes(3), arch_hash=2)
    assert main(["combine", str(tmp_path / "o.nnue"), a, b]) == 2
    assert not (tmp_path / "o.nnue").exists()


def test_list_unreadable_directory_exit_code(tmp_path, monkeypatch):
    def denied(path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr(os, "listdir", denied)
    assert main(["list", str(tmp_path)]) == 2
