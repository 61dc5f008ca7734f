"""JSON adapter for record files produced by the screenshot collaborator or by hand."""

import json
from pathlib import Path

from yieldbook.exceptions import ExtractionError
from yieldbook.ingestion.base import BaseAdapter
from yieldbook.models.ledger import ExtractedRecord


class JSONRecordAdapter(BaseAdapter):
    """Imports ``[...]`` or ``{"records": [...]}`` JSON files of extracted records."""

    def extract(self, file_path: Path) -> list[ExtractedRecord]:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ExtractionError(str(file_path), f"invalid JSON: {exc}") from exc
        return self.unwrap_records(file_path, raw)
