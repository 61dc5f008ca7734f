"""Extraction adapters that turn source files into raw record candidates."""

from yieldbook.ingestion.base import BaseAdapter
from yieldbook.ingestion.manual import JSONRecordAdapter
from yieldbook.ingestion.vision import ScreenshotAdapter

__all__ = ["BaseAdapter", "JSONRecordAdapter", "ScreenshotAdapter"]
