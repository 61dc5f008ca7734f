"""Ledger builder: turn record groups into transactions and apply manual edits.

Every operation takes a snapshot (list of ledgers) and returns a new one;
nothing is mutated in place.
"""

from datetime import date
from decimal import Decimal

from yieldbook.engines.consolidator import LedgerConsolidator
from yieldbook.exceptions import LedgerNotFoundError, TransactionNotFoundError
from yieldbook.models.enums import AssetClass, Currency, TransactionType
from yieldbook.models.ledger import Ledger, RecordGroup, Transaction

AI_DEPOSIT_DESCRIPTION = "AI 识别买入"
AI_EARNING_DESCRIPTION = "AI 识别收益"
MANUAL_DESCRIPTION = "手动记录"

EDITABLE_METADATA = {
    "institution",
    "product_name",
    "asset_class",
    "currency",
    "earnings_currency",
    "seven_day_yield",
    "remark",
}


class LedgerBuilder:
    """Builds transactions from extracted groups and applies manual ledger edits."""

    def __init__(self, consolidator: LedgerConsolidator | None = None):
        self.consolidator = consolidator or LedgerConsolidator()

    @staticmethod
    def build_transactions(group: RecordGroup) -> list[Transaction]:
        """Convert a group's normalized records into transactions."""
        transactions: list[Transaction] = []
        for record in group.records:
            description = (
                AI_DEPOSIT_DESCRIPTION if record.type == TransactionType.DEPOSIT else AI_EARNING_DESCRIPTION
            )
            transactions.append(Transaction(
                date=record.date,
                type=record.type,
                amount=record.amount,
                currency=record.currency,
                description=description,
            ))
        return transactions

    # --- Manual operations ---

    def add_holding(
        self,
        ledgers: list[Ledger],
        institution: str,
        product_name: str,
        currency: Currency,
        amount: Decimal,
        on_date: date,
        asset_class: AssetClass = AssetClass.FUND,
        seven_day_yield: Decimal | None = None,
        remark: str = "",
    ) -> tuple[list[Ledger], Ledger]:
        """Record a manual deposit, creating the ledger when no strict match exists.

        Returns the new snapshot and the affected ledger.
        """
        deposit = Transaction(
            date=on_date,
            type=TransactionType.DEPOSIT,
            amount=amount,
            currency=currency,
            description=remark or MANUAL_DESCRIPTION,
        )
        for ledger in ledgers:
            if (
                ledger.institution == institution
                and ledger.product_name == product_name
                and ledger.currency == currency
            ):
                updated = ledger.model_copy(update={
                    "history": [deposit, *ledger.history],
                    "seven_day_yield": seven_day_yield or ledger.seven_day_yield,
                })
                updated = self.consolidator.recompute(updated)
                return _swap(ledgers, updated), updated

        created = self.consolidator.recompute(Ledger(
            institution=institution,
            product_name=product_name,
            asset_class=asset_class,
            currency=currency,
            earnings_currency=currency,
            remark=remark,
            seven_day_yield=seven_day_yield or Decimal("0"),
            history=[deposit],
        ))
        return [*ledgers, created], created

    def add_transaction(self, ledgers: list[Ledger], ledger_id: str, tx: Transaction) -> list[Ledger]:
        ledger = _find(ledgers, ledger_id)
        updated = ledger.model_copy(update={"history": [tx, *ledger.history]})
        return _swap(ledgers, self.consolidator.recompute(updated))

    def replace_transaction(self, ledgers: list[Ledger], ledger_id: str, tx: Transaction) -> list[Ledger]:
        """Swap the transaction with the same id for ``tx`` (edits replace, never patch)."""
        ledger = _find(ledgers, ledger_id)
        if ledger.find_transaction(tx.id) is None:
            raise TransactionNotFoundError(ledger_id, tx.id)
        history = [tx if existing.id == tx.id else existing for existing in ledger.history]
        return _swap(ledgers, self.consolidator.recompute(ledger.model_copy(update={"history": history})))

    def remove_transaction(self, ledgers: list[Ledger], ledger_id: str, transaction_id: str) -> list[Ledger]:
        ledger = _find(ledgers, ledger_id)
        if ledger.find_transaction(transaction_id) is None:
            raise TransactionNotFoundError(ledger_id, transaction_id)
        history = [tx for tx in ledger.history if tx.id != transaction_id]
        return _swap(ledgers, self.consolidator.recompute(ledger.model_copy(update={"history": history})))

    @staticmethod
    def update_metadata(ledgers: list[Ledger], ledger_id: str, **changes: object) -> list[Ledger]:
        """Edit descriptive fields. History and derived totals are left untouched."""
        unknown = set(changes) - EDITABLE_METADATA
        if unknown:
            raise ValueError(f"Not editable metadata: {', '.join(sorted(unknown))}")
        ledger = _find(ledgers, ledger_id)
        data = ledger.model_dump()
        data.update(changes)
        return _swap(ledgers, Ledger.model_validate(data))

    @staticmethod
    def delete_ledger(ledgers: list[Ledger], ledger_id: str) -> list[Ledger]:
        """Drop a ledger and its entire history."""
        _find(ledgers, ledger_id)
        return [ledger for ledger in ledgers if ledger.id != ledger_id]


def _find(ledgers: list[Ledger], ledger_id: str) -> Ledger:
    for ledger in ledgers:
        if ledger.id == ledger_id:
            return ledger
    raise LedgerNotFoundError(ledger_id)


def _swap(ledgers: list[Ledger], updated: Ledger) -> list[Ledger]:
    return [updated if ledger.id == updated.id else ledger for ledger in ledgers]
