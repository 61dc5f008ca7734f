"""Base adapter interface for record extraction."""

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from yieldbook.exceptions import ExtractionError
from yieldbook.models.ledger import ExtractedRecord


class BaseAdapter(ABC):
    """Abstract base class for all extraction adapters."""

    @abstractmethod
    def extract(self, file_path: Path) -> list[ExtractedRecord]:
        """Read a source file and return the raw record candidates it holds."""
        ...

    @staticmethod
    def unwrap_records(file_path: Path, payload: object) -> list[ExtractedRecord]:
        """Accept a bare array or a ``{"records": [...]}`` envelope.

        Non-object entries are skipped; field-level problems are left for the
        normalizer so that one bad row never sinks a whole file.
        """
        if isinstance(payload, dict):
            payload = payload.get("records", [])
        if not isinstance(payload, list):
            raise ExtractionError(str(file_path), "expected a JSON array or an object with a 'records' array")

        records = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            try:
                records.append(ExtractedRecord.model_validate(item))
            except ValidationError as exc:
                raise ExtractionError(str(file_path), f"unreadable record {item!r}: {exc}") from exc
        return records
