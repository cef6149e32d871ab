import json

import pytest

from foundersync.domain.exceptions import SourceFileUnreadableError
from foundersync.infra.artifacts.records_file import readRecordsJson, writeRecordsJson
from foundersync.infra.sources.csv_source import CsvTextSource


def test_csv_source_strips_bom(tmp_path):
    path = tmp_path / "export.csv"
    path.write_bytes("\ufeffname,score\nΝίκος,9\n".encode("utf-8"))

    assert CsvTextSource(str(path)).read_rows() == [["name", "score"], ["Νίκος", "9"]]


def test_csv_source_missing_file(tmp_path):
    with pytest.raises(SourceFileUnreadableError) as exc:
        CsvTextSource(str(tmp_path / "nope.csv")).read_rows()

    assert exc.value.code == "SOURCE_FILE_UNREADABLE"
    assert exc.value.path.endswith("nope.csv")


def test_csv_source_directory_is_unreadable(tmp_path):
    with pytest.raises(SourceFileUnreadableError):
        CsvTextSource(str(tmp_path)).read_rows()


def test_csv_source_invalid_encoding(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes(b"name\n\xff\xfe\xfa\n")

    with pytest.raises(SourceFileUnreadableError):
        CsvTextSource(str(path)).read_rows()


def test_records_file_keeps_unicode_and_nulls(tmp_path):
    records = [{"founder_name": "Νίκος Π", "product_score": None}]

    path = writeRecordsJson(records, str(tmp_path / "out"), "greek_founders.json")

    text = (tmp_path / "out" / "greek_founders.json").read_text(encoding="utf-8")
    assert "Νίκος Π" in text
    assert json.loads(text) == records
    assert readRecordsJson(path) == records


def test_read_records_rejects_non_array(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"a": 1}', encoding="utf-8")

    with pytest.raises(ValueError):
        readRecordsJson(str(path))
