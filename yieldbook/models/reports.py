"""Report and summary output models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from yieldbook.models.enums import AssetClass, Currency, TransactionType


class IngestionSummary(BaseModel):
    """Counts surfaced to the caller after one ingestion batch."""

    records_received: int = 0
    records_processed: int = 0
    records_dropped: int = 0
    unknown_currency: int = 0
    new_records: int = 0
    duplicates_skipped: int = 0
    ledgers_created: int = 0
    ledgers_updated: int = 0
    ledgers_merged: int = 0
    ambiguous_matches: int = 0

    def describe(self) -> str:
        return (
            f"{self.records_processed} records processed, "
            f"{self.new_records} new, {self.duplicates_skipped} duplicates skipped, "
            f"{self.ledgers_created} ledgers created, {self.ledgers_updated} ledgers updated"
        )


class YieldReport(BaseModel):
    ledger_id: str
    principal_base: Decimal
    earnings_base: Decimal
    holding_yield: Decimal
    seven_day_annualized: Decimal
    overall_annualized: Decimal
    days_held: int


class AllocationSlice(BaseModel):
    asset_class: AssetClass
    label: str
    value: Decimal


class InstitutionGroup(BaseModel):
    institution: str
    ledger_ids: list[str] = Field(default_factory=list)
    total: Decimal = Decimal("0")


class PortfolioSummary(BaseModel):
    """Dashboard totals for every ledger, expressed in one display currency."""

    display_currency: Currency
    total_assets: Decimal
    total_earnings: Decimal
    total_principal: Decimal
    total_yield: Decimal
    annualized_yield: Decimal
    days_invested: int
    allocation: list[AllocationSlice] = Field(default_factory=list)
    institutions: list[InstitutionGroup] = Field(default_factory=list)


class StatementLine(BaseModel):
    date: date
    type: TransactionType
    amount: Decimal
    currency: Currency
    description: str = ""
    ledger_id: str
    product_name: str


class StatementMonth(BaseModel):
    month: str  # YYYY-MM
    lines: list[StatementLine] = Field(default_factory=list)


class CalendarDay(BaseModel):
    day: date
    earning: Decimal = Decimal("0")
    deposits: Decimal = Decimal("0")
