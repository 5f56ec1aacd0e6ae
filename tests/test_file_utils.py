"""Tests for file helpers."""

from tasklink.utils.file import read_json, safe_read_file, write_json


def test_safe_read_file(temp_dir):
    path = temp_dir / "notes.md"
    path.write_text("# Payments\n", encoding="utf-8")
    assert safe_read_file(path) == "# Payments\n"


def test_safe_read_missing_file(temp_dir):
    assert safe_read_file(temp_dir / "missing.txt") == ""


def test_safe_read_directory(temp_dir):
    assert safe_read_file(temp_dir) == ""


def test_safe_read_large_file(temp_dir):
    path = temp_dir / "big.txt"
    path.write_text("x" * 100)
    assert safe_read_file(path, max_bytes=10) == ""


def test_safe_read_undecodable_bytes(temp_dir):
    path = temp_dir / "mixed.txt"
    path.write_bytes(b"Invoice \xff\xfe Export")
    assert safe_read_file(path) == "Invoice  Export"


def test_json_round_trip(temp_dir):
    path = temp_dir / "nested" / "data.json"
    write_json(path, {"ids": [1, 2]})
    assert read_json(path) == {"ids": [1, 2]}
    assert path.read_text().endswith("\n")


def test_read_json_missing_and_corrupt(temp_dir):
    assert read_json(temp_dir / "missing.json") is None
    corrupt = temp_dir / "corrupt.json"
    corrupt.write_text("{")
    assert read_json(corrupt) is None
