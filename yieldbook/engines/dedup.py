"""Duplicate detection for incoming transactions."""

from decimal import Decimal

from yieldbook.models.ledger import Transaction

AMOUNT_TOLERANCE = Decimal("0.01")


class Deduplicator:
    """Filters candidates already present in a history or earlier in the same batch.

    The duplicate key is (date, type, amount within AMOUNT_TOLERANCE).
    Currency is not part of it: a row re-extracted with a corrected currency
    is still treated as the same row.
    """

    def __init__(self, tolerance: Decimal = AMOUNT_TOLERANCE):
        self.tolerance = tolerance

    def is_duplicate(self, candidate: Transaction, existing: Transaction) -> bool:
        return (
            candidate.date == existing.date
            and candidate.type == existing.type
            and abs(existing.amount - candidate.amount) < self.tolerance
        )

    def contains(self, history: list[Transaction], candidate: Transaction) -> bool:
        return any(self.is_duplicate(candidate, existing) for existing in history)

    def filter_new(
        self, candidates: list[Transaction], history: list[Transaction]
    ) -> tuple[list[Transaction], list[Transaction]]:
        """Split candidates into (unique, skipped).

        Each accepted candidate joins the comparison set, so a row that
        appears twice in one upload is only inserted once.
        """
        seen = list(history)
        unique: list[Transaction] = []
        skipped: list[Transaction] = []
        for candidate in candidates:
            if self.contains(seen, candidate):
                skipped.append(candidate)
                continue
            unique.append(candidate)
            seen.append(candidate)
        return unique, skipped
