"""Database layer for yieldbook."""

from yieldbook.db.repository import LedgerRepository
from yieldbook.db.schema import create_schema

__all__ = ["LedgerRepository", "create_schema"]
