"""Normalization layer for extracted records and record grouping."""

from yieldbook.normalization.grouper import RecordGrouper
from yieldbook.normalization.records import RecordNormalizer

__all__ = ["RecordGrouper", "RecordNormalizer"]
