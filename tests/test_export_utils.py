import json
from datetime import datetime, timezone

import export_utils


def test_hash_to_json_without_salt():
    payload = json.loads(export_utils.hash_to_json("hello", "md5", "abc"))
    assert payload == {"text": "hello", "algorithm": "md5", "hash": "abc"}


def test_hash_to_json_with_salt():
    payload = json.loads(export_utils.hash_to_json("hello", "sha256", "abc", salt="s", salt_position="postfix"))
    assert payload["salt"] == "s"
    assert payload["saltPosition"] == "postfix"


def test_hash_to_json_keeps_empty_salt_when_salting_enabled():
    payload = json.loads(export_utils.hash_to_json("hello", "sha256", "abc", salt="", salt_position="prefix"))
    assert payload["salt"] == ""


def test_batch_to_csv_quotes_inputs():
    results = [
        {"line": 1, "input": "plain", "hash": "aa"},
        {"line": 2, "input": 'say "hi", ok', "hash": "bb"},
    ]
    assert export_utils.batch_to_csv(results) == (
        'line,input,hash\n'
        '1,"plain",aa\n'
        '2,"say ""hi"", ok",bb'
    )


def test_batch_to_csv_empty():
    assert export_utils.batch_to_csv([]) == "line,input,hash\n"


def test_batch_and_history_json_are_indented_arrays():
    results = [{"line": 1, "input": "x", "hash": "y"}]
    text = export_utils.batch_to_json(results)
    assert json.loads(text) == results
    assert '\n  {' in text
    assert json.loads(export_utils.history_to_json([])) == []


def test_filenames():
    assert export_utils.single_filename("sha512", "txt") == "sha512_hash.txt"
    assert export_utils.batch_filename("md5", "csv") == "batch_hashes_md5.csv"
    now = datetime(2026, 10, 17, 9, 30, 5, tzinfo=timezone.utc)
    assert export_utils.history_filename(now) == "hash_history_2026-10-17T09-30-05Z.json"


def test_hash_to_qr_png_is_png():
    png = export_utils.hash_to_qr_png("5d41402abc4b2a76b9719d911017c592")
    assert png.startswith(b"\x89PNG\r\n\x1a\n")
    # a full SHA-512 digest still fits
    assert export_utils.hash_to_qr_png("ab" * 64).startswith(b"\x89PNG")
