"""Core transaction, ledger, and extracted-record models."""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from yieldbook.models.enums import AssetClass, Currency, TransactionType

UNNAMED_PRODUCT = "未命名资产"
UNNAMED_INSTITUTION = "未命名渠道"


def new_id() -> str:
    return str(uuid4())


class _WireModel(BaseModel):
    """Snake-case fields in Python, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Transaction(_WireModel):
    id: str = Field(default_factory=new_id)
    date: date
    type: TransactionType
    amount: Decimal
    currency: Currency | None = None
    description: str = ""

    def resolved_currency(self, principal: Currency, earnings: Currency) -> Currency:
        """Currency the amount is denominated in, falling back to the ledger's."""
        if self.currency is not None:
            return self.currency
        return principal if self.type == TransactionType.DEPOSIT else earnings


class Ledger(_WireModel):
    id: str = Field(default_factory=new_id)
    institution: str = ""
    product_name: str
    asset_class: AssetClass = Field(
        default=AssetClass.FUND,
        validation_alias=AliasChoices("assetClass", "asset_class", "type"),
    )
    currency: Currency
    earnings_currency: Currency
    remark: str = ""
    history: list[Transaction] = Field(default_factory=list)
    current_amount: Decimal = Decimal("0")
    total_earnings: Decimal = Decimal("0")
    daily_earnings: dict[date, Decimal] = Field(default_factory=dict)
    seven_day_yield: Decimal = Decimal("0")

    @model_validator(mode="before")
    @classmethod
    def _default_earnings_currency(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("earnings_currency") or data.get("earningsCurrency"):
            return data
        data = dict(data)
        data.pop("earningsCurrency", None)
        data["earnings_currency"] = data.get("currency")
        return data

    @property
    def earliest_date(self) -> date | None:
        if not self.history:
            return None
        return min(tx.date for tx in self.history)

    def find_transaction(self, transaction_id: str) -> Transaction | None:
        for tx in self.history:
            if tx.id == transaction_id:
                return tx
        return None

    def to_create_payload(self) -> dict:
        """Document handed to persistence when this ledger is first created.

        Derived caches are emitted zeroed; they are recomputed from history.
        """
        payload = self.model_dump(by_alias=True, mode="json", exclude={"id"})
        payload["currentAmount"] = 0
        payload["totalEarnings"] = 0
        payload["dailyEarnings"] = {}
        return payload


class LedgerPatch(_WireModel):
    """Partial update for an existing ledger after ingestion."""

    ledger_id: str
    history: list[Transaction]
    earnings_currency: Currency | None = None

    def to_payload(self) -> dict:
        return self.model_dump(
            by_alias=True, mode="json", exclude={"ledger_id"}, exclude_none=True
        )


class ExtractedRecord(_WireModel):
    """A raw transaction candidate from the OCR/AI collaborator.

    Every field may be absent; validation happens in RecordNormalizer.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    date: Any = None
    amount: Any = None
    type: str | None = None
    product_name: str | None = None
    institution: str | None = None
    currency: str | None = None
    asset_class: str | None = Field(
        default=None,
        validation_alias=AliasChoices("assetClass", "assetType", "asset_class"),
    )

    @field_validator("type", "product_name", "institution", "currency", "asset_class", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class NormalizedRecord(_WireModel):
    """An extracted record with every structural default applied."""

    date: date
    type: TransactionType
    amount: Decimal
    currency: Currency
    product_name: str = UNNAMED_PRODUCT
    named: bool = False
    institution: str = ""
    asset_class: AssetClass | None = None


class RecordGroup(_WireModel):
    """Normalized records sharing one (product, currency) key."""

    product_name: str
    currency: Currency
    named: bool = True
    institution: str = ""
    asset_class: AssetClass = AssetClass.FUND
    records: list[NormalizedRecord] = Field(default_factory=list)
