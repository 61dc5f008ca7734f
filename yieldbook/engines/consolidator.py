"""Ledger consolidation: cross-ledger merges and derived-total recomputation.

current_amount, total_earnings and daily_earnings are caches over a
ledger's history. Every pass recomputes them from history alone, folding
in (date, id) order so repeated passes accumulate identically.
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from yieldbook.engines.currency import CurrencyConverter
from yieldbook.models.enums import Currency, TransactionType
from yieldbook.models.ledger import Ledger, Transaction
from yieldbook.normalization.labels import is_generic_institution, normalize_name

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def identity_key(ledger: Ledger) -> tuple[str, Currency]:
    """(normalized product name, principal currency); institution is not identity."""
    return normalize_name(ledger.product_name) or ledger.product_name, ledger.currency


def transaction_signature(tx: Transaction) -> tuple:
    return tx.date, tx.type, tx.amount.quantize(CENT, rounding=ROUND_HALF_UP)


def pick_institution(existing: str, incoming: str) -> str:
    """A specific institution beats a generic placeholder; ties keep the existing one."""
    if is_generic_institution(existing) and not is_generic_institution(incoming):
        return incoming
    return existing


class LedgerConsolidator:
    """Merges ledgers sharing an identity key and recomputes their derived fields."""

    def __init__(self, converter: CurrencyConverter | None = None):
        self.converter = converter or CurrencyConverter()

    def consolidate(self, ledgers: list[Ledger]) -> list[Ledger]:
        return [self.recompute(ledger) for ledger in self.merge_duplicates(ledgers)]

    def merge_duplicates(self, ledgers: list[Ledger]) -> list[Ledger]:
        """Fold ledgers with the same identity key into the first one seen."""
        survivors: dict[tuple[str, Currency], Ledger] = {}
        for ledger in ledgers:
            key = identity_key(ledger)
            existing = survivors.get(key)
            if existing is None:
                survivors[key] = ledger
                continue
            logger.info(
                "Merging ledger %s into %s (%s, %s)",
                ledger.id, existing.id, existing.product_name, existing.currency,
            )
            survivors[key] = self.merge_pair(existing, ledger)
        return list(survivors.values())

    @staticmethod
    def merge_pair(existing: Ledger, incoming: Ledger) -> Ledger:
        history: list[Transaction] = []
        seen: set[tuple] = set()
        for tx in [*existing.history, *incoming.history]:
            signature = transaction_signature(tx)
            if signature in seen:
                continue
            seen.add(signature)
            history.append(tx)
        return existing.model_copy(
            update={
                "history": history,
                "institution": pick_institution(existing.institution, incoming.institution),
            }
        )

    def recompute(self, ledger: Ledger) -> Ledger:
        """Rebuild derived totals from history; history comes back newest first."""
        ordered = sorted(ledger.history, key=lambda tx: (tx.date, tx.id))
        principal_base = Decimal("0")
        earnings_base = Decimal("0")
        earnings_display = Decimal("0")
        daily: dict[date, Decimal] = {}

        for tx in ordered:
            tx_currency = tx.resolved_currency(ledger.currency, ledger.earnings_currency)
            if tx.type == TransactionType.DEPOSIT:
                principal_base += self.converter.convert(tx.amount, tx_currency, ledger.currency)
                continue
            display = self.converter.convert(tx.amount, tx_currency, ledger.earnings_currency)
            earnings_display += display
            daily[tx.date] = daily.get(tx.date, Decimal("0")) + display
            earnings_base += self.converter.convert(tx.amount, tx_currency, ledger.currency)

        return ledger.model_copy(
            update={
                "current_amount": principal_base + earnings_base,
                "total_earnings": earnings_display,
                "daily_earnings": daily,
                "history": list(reversed(ordered)),
            }
        )
