"""
Tests for the command-line entry point.
"""

import io
import json

from PIL import Image

import main


def test_list_vendors(capsys):
    exit_code = main.main(["--list-vendors", "--quiet"])

    out = capsys.readouterr().out
    vendor_lines = [line for line in out.splitlines() if "parser=" in line]
    assert exit_code == 0
    assert len(vendor_lines) > 50
    assert "stephens-pipe-steel" in vendor_lines[0]
    assert vendor_lines[0].startswith("*")


def test_missing_input_fails(tmp_path):
    exit_code = main.main(["--input", str(tmp_path / "missing.pdf"), "--db", ":memory:", "--quiet"])

    assert exit_code == 1


def test_process_directory_writes_report(tmp_path):
    slips = tmp_path / "slips"
    slips.mkdir()
    buffer = io.BytesIO()
    Image.new("RGB", (200, 100), "white").save(buffer, format="PNG")
    (slips / "blank.png").write_bytes(buffer.getvalue())
    (slips / "readme.txt").write_text("not a slip")
    report = tmp_path / "out" / "report.json"

    exit_code = main.main([
        "--input", str(slips),
        "--output", str(report),
        "--db", str(tmp_path / "packslips.db"),
        "--quiet",
    ])

    data = json.loads(report.read_text(encoding="utf-8"))
    assert exit_code == 0
    assert data["count"] == 1
    record = data["records"][0]
    assert record["file_name"] == "blank.png"
    assert record["status"] == "review"
    assert record["extraction"]["page_count"] == 1
