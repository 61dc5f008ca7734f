"""Data models for yieldbook."""

from yieldbook.models.enums import (
    ASSET_CLASS_LABELS,
    CURRENCY_SYMBOLS,
    AssetClass,
    Currency,
    MatchKind,
    TransactionType,
)
from yieldbook.models.ledger import (
    UNNAMED_INSTITUTION,
    UNNAMED_PRODUCT,
    ExtractedRecord,
    Ledger,
    LedgerPatch,
    NormalizedRecord,
    RecordGroup,
    Transaction,
)
from yieldbook.models.reports import (
    AllocationSlice,
    CalendarDay,
    IngestionSummary,
    InstitutionGroup,
    PortfolioSummary,
    StatementLine,
    StatementMonth,
    YieldReport,
)

__all__ = [
    "ASSET_CLASS_LABELS",
    "AllocationSlice",
    "AssetClass",
    "CURRENCY_SYMBOLS",
    "CalendarDay",
    "Currency",
    "ExtractedRecord",
    "IngestionSummary",
    "InstitutionGroup",
    "Ledger",
    "LedgerPatch",
    "MatchKind",
    "NormalizedRecord",
    "PortfolioSummary",
    "RecordGroup",
    "StatementLine",
    "StatementMonth",
    "Transaction",
    "TransactionType",
    "UNNAMED_INSTITUTION",
    "UNNAMED_PRODUCT",
    "YieldReport",
]
