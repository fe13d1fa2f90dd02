import json
import sys

import pytest

import batch_hash
from hash_utils import compute_hash


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["batch_hash.py", *args])
    batch_hash.main()


def test_csv_output(monkeypatch, capsys, tmp_path):
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("hello\n\nworld\n", encoding="utf-8")

    run_cli(monkeypatch, "md5", str(inputs))

    out, err = capsys.readouterr()
    lines = out.strip().splitlines()
    assert lines[0] == "line,input,hash"
    assert lines[1] == f'1,"hello",{compute_hash("hello", "md5")}'
    assert lines[2] == f'2,"world",{compute_hash("world", "md5")}'
    assert "Processed 2 lines." in err


def test_json_output(monkeypatch, capsys, tmp_path):
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("hello", encoding="utf-8")

    run_cli(monkeypatch, "SHA256", str(inputs), "json")

    out, _ = capsys.readouterr()
    assert json.loads(out) == [{"line": 1, "input": "hello", "hash": compute_hash("hello", "sha256")}]


@pytest.mark.parametrize("args", [
    (),
    ("md5",),
    ("crc32", "inputs.txt"),
    ("md5", "inputs.txt", "xml"),
])
def test_usage_errors_exit_with_status_one(monkeypatch, capsys, args):
    with pytest.raises(SystemExit) as exc:
        run_cli(monkeypatch, *args)
    assert exc.value.code == 1


def test_bom_is_stripped_and_invalid_bytes_replaced(monkeypatch, capsys, tmp_path):
    inputs = tmp_path / "inputs.txt"
    inputs.write_bytes(b"\xef\xbb\xbfhello\nwor\xffld\n")

    run_cli(monkeypatch, "md5", str(inputs))

    out, _ = capsys.readouterr()
    lines = out.strip().splitlines()
    assert lines[1] == '1,"hello",5d41402abc4b2a76b9719d911017c592'
    expected_digest = compute_hash("wor\ufffdld", "md5")
    assert lines[2] == f'2,"wor\ufffdld",{expected_digest}'
