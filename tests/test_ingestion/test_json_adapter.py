"""Tests for the JSON record adapter."""

import json

import pytest

from yieldbook.exceptions import ExtractionError
from yieldbook.ingestion.manual import JSONRecordAdapter


@pytest.fixture
def write_json(tmp_path):
    def _write(payload, name="records.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return path
    return _write


class TestJSONRecordAdapter:
    def test_bare_array(self, write_json):
        path = write_json([
            {"date": "2024-03-01", "amount": 12.5, "type": "earning", "productName": "易方达蓝筹精选"},
        ])
        [record] = JSONRecordAdapter().extract(path)
        assert record.product_name == "易方达蓝筹精选"
        assert record.amount == 12.5

    def test_records_envelope(self, write_json):
        path = write_json({"records": [{"date": "2024-03-01", "amount": 1}, {"date": "2024-03-02", "amount": 2}]})
        assert len(JSONRecordAdapter().extract(path)) == 2

    def test_empty_envelope(self, write_json):
        assert JSONRecordAdapter().extract(write_json({"records": []})) == []

    def test_non_object_entries_skipped(self, write_json):
        path = write_json([{"date": "2024-03-01", "amount": 1}, "noise", 42])
        assert len(JSONRecordAdapter().extract(path)) == 1

    def test_partial_records_kept_for_normalizer(self, write_json):
        [record] = JSONRecordAdapter().extract(write_json([{"productName": "余额宝"}]))
        assert record.date is None
        assert record.amount is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ExtractionError, match="invalid JSON"):
            JSONRecordAdapter().extract(path)

    def test_wrong_shape(self, write_json):
        with pytest.raises(ExtractionError):
            JSONRecordAdapter().extract(write_json(3))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JSONRecordAdapter().extract(tmp_path / "missing.json")
