"""Tests for transaction duplicate detection."""

from datetime import date
from decimal import Decimal

from yieldbook.engines.dedup import Deduplicator
from yieldbook.models.enums import Currency, TransactionType
from yieldbook.models.ledger import Transaction


def _tx(day: int, amount: str, tx_type=TransactionType.EARNING, currency=None) -> Transaction:
    return Transaction(date=date(2024, 3, day), type=tx_type, amount=Decimal(amount), currency=currency)


class TestIsDuplicate:
    def test_same_date_type_amount(self):
        assert Deduplicator().is_duplicate(_tx(1, "12.50"), _tx(1, "12.50"))

    def test_amount_within_tolerance(self):
        assert Deduplicator().is_duplicate(_tx(1, "12.505"), _tx(1, "12.50"))

    def test_amount_at_tolerance_is_distinct(self):
        assert not Deduplicator().is_duplicate(_tx(1, "12.51"), _tx(1, "12.50"))

    def test_different_date(self):
        assert not Deduplicator().is_duplicate(_tx(2, "12.50"), _tx(1, "12.50"))

    def test_different_type(self):
        assert not Deduplicator().is_duplicate(
            _tx(1, "12.50", TransactionType.DEPOSIT), _tx(1, "12.50")
        )

    def test_currency_is_ignored(self):
        assert Deduplicator().is_duplicate(_tx(1, "12.50", currency=Currency.USD), _tx(1, "12.50"))


class TestFilterNew:
    def test_splits_unique_and_skipped(self):
        history = [_tx(1, "12.50")]
        unique, skipped = Deduplicator().filter_new([_tx(1, "12.50"), _tx(2, "8.00")], history)
        assert [tx.date for tx in unique] == [date(2024, 3, 2)]
        assert len(skipped) == 1

    def test_in_batch_repeat_inserted_once(self):
        first, second = _tx(3, "4.00"), _tx(3, "4.00")
        unique, skipped = Deduplicator().filter_new([first, second], [])
        assert unique == [first]
        assert skipped == [second]

    def test_empty_candidates(self):
        assert Deduplicator().filter_new([], [_tx(1, "1")]) == ([], [])
