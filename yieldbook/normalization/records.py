"""Record normalization: structural defaults for OCR-extracted records.

Each default is a named rule so it can be exercised on its own. Rules run
in this order:

1. reject_malformed         -- no usable date or non-zero numeric amount: drop
2. reject_unknown_currency  -- currency code outside the rate table: drop
3. default_type             -- missing/unrecognised type: earning
4. default_currency_for     -- missing currency: target ledger's principal
                               (deposit) or earnings (earning) currency, else
                               the global default
5. mark_unnamed             -- missing/placeholder product name: explicit
                               UNNAMED_PRODUCT sentinel, named=False
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from yieldbook.engines.currency import CurrencyConverter, parse_currency
from yieldbook.exceptions import MalformedRecordError, UnknownCurrencyError
from yieldbook.models.enums import Currency, TransactionType
from yieldbook.models.ledger import UNNAMED_PRODUCT, ExtractedRecord, Ledger, NormalizedRecord
from yieldbook.normalization.labels import is_placeholder_name, parse_asset_class

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = Currency.CNY

_DATE_PATTERN = re.compile(r"(\d{4})\D{1,2}(\d{1,2})\D{1,2}(\d{1,2})")
_AMOUNT_NOISE = re.compile(r"CNY|USD|HKD|RMB|HK|[,\s¥$＄￥元]", re.IGNORECASE)

_TYPE_HINTS: dict[str, TransactionType] = {
    "deposit": TransactionType.DEPOSIT,
    "buy": TransactionType.DEPOSIT,
    "买入": TransactionType.DEPOSIT,
    "申购": TransactionType.DEPOSIT,
    "earning": TransactionType.EARNING,
    "earnings": TransactionType.EARNING,
    "收益": TransactionType.EARNING,
    "盈亏": TransactionType.EARNING,
}


def parse_record_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    match = _DATE_PATTERN.search(str(value or ""))
    if not match:
        raise MalformedRecordError("date", value)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        raise MalformedRecordError("date", value) from None


def parse_record_amount(value: object) -> Decimal:
    if value is None or isinstance(value, bool):
        raise MalformedRecordError("amount", value)
    text = _AMOUNT_NOISE.sub("", str(value))
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise MalformedRecordError("amount", value) from None
    if not amount.is_finite() or amount == 0:
        raise MalformedRecordError("amount", value)
    return amount


@dataclass
class NormalizationReport:
    records: list[NormalizedRecord] = field(default_factory=list)
    malformed: int = 0
    unknown_currency: int = 0

    @property
    def dropped(self) -> int:
        return self.malformed + self.unknown_currency


class RecordNormalizer:
    """Applies structural defaults to extracted records and drops unusable ones."""

    def __init__(
        self,
        converter: CurrencyConverter | None = None,
        default_currency: Currency = DEFAULT_CURRENCY,
    ):
        self.converter = converter or CurrencyConverter()
        self.default_currency = default_currency

    def normalize_batch(
        self, raw_records: list[dict | ExtractedRecord], target: Ledger | None = None
    ) -> NormalizationReport:
        """Normalize a batch, counting and logging every dropped record."""
        report = NormalizationReport()
        for raw in raw_records:
            try:
                record = raw if isinstance(raw, ExtractedRecord) else ExtractedRecord.model_validate(raw)
                report.records.append(self.normalize(record, target))
            except (MalformedRecordError, ValidationError) as exc:
                logger.warning("Dropping malformed record %r: %s", raw, exc)
                report.malformed += 1
            except UnknownCurrencyError as exc:
                logger.warning("Dropping record with unsupported currency %r: %s", raw, exc)
                report.unknown_currency += 1
        return report

    def normalize(self, record: ExtractedRecord, target: Ledger | None = None) -> NormalizedRecord:
        record_date, amount = self.reject_malformed(record)
        currency = self.reject_unknown_currency(record)
        tx_type = self.default_type(record)
        product_name, named = self.mark_unnamed(record)
        return NormalizedRecord(
            date=record_date,
            type=tx_type,
            amount=amount,
            currency=currency or self.default_currency_for(tx_type, target),
            product_name=product_name,
            named=named,
            institution=record.institution or "",
            asset_class=parse_asset_class(record.asset_class),
        )

    # --- Rules ---

    @staticmethod
    def reject_malformed(record: ExtractedRecord) -> tuple[date, Decimal]:
        return parse_record_date(record.date), parse_record_amount(record.amount)

    def reject_unknown_currency(self, record: ExtractedRecord) -> Currency | None:
        """Return the record's currency, None when absent; raise when unsupported."""
        if record.currency is None:
            return None
        if not self.converter.supports(record.currency):
            raise UnknownCurrencyError(record.currency)
        return parse_currency(record.currency)

    @staticmethod
    def default_type(record: ExtractedRecord) -> TransactionType:
        if record.type is None:
            return TransactionType.EARNING
        return _TYPE_HINTS.get(record.type.lower(), TransactionType.EARNING)

    def default_currency_for(self, tx_type: TransactionType, target: Ledger | None) -> Currency:
        if target is None:
            return self.default_currency
        if tx_type == TransactionType.DEPOSIT:
            return target.currency
        return target.earnings_currency

    @staticmethod
    def mark_unnamed(record: ExtractedRecord) -> tuple[str, bool]:
        if is_placeholder_name(record.product_name):
            return UNNAMED_PRODUCT, False
        return record.product_name.strip(), True
