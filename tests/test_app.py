import asyncio
import json
from pathlib import Path

from app import dump_layout, main


SAMPLE = Path(__file__).resolve().parent.parent / "sample_configs" / "room.yml"


def test_dump_layout_sample():
    out = asyncio.run(dump_layout(str(SAMPLE)))
    assert out["status"] == "rendered"
    assert out["error"] is None
    lanes = out["lanes"]
    assert [l["label"] for l in lanes] == ["Channel 0", "Channel 1"]
    assert [len(l["nodes"]) for l in lanes] == [6, 5]
    assert [len(l["wires"]) for l in lanes] == [5, 4]
    assert lanes[0]["nodes"][1]["detail_lines"] == ["Low Shelf", "Lowshelf", "100 Hz", "3 dB"]


def test_main_dump_prints_json(capsys):
    assert main(["--dump", str(SAMPLE)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["lanes"][1]["nodes"][0]["header_text"] == "INPUT"


def test_main_dump_missing_file(tmp_path, capsys):
    assert main(["--dump", str(tmp_path / "missing.yml")]) == 1
    data = json.loads(capsys.readouterr().out)
    assert data["status"] == "errored"
    assert data["lanes"] == []


def test_main_dump_needs_config():
    assert main(["--dump"]) == 2
