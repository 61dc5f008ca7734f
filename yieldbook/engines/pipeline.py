"""Ingestion engine: raw extracted records in, consolidated ledger snapshot out.

normalize -> group -> match-or-create -> dedup -> consolidate

The engine is a pure function of (snapshot, records). It does not make
match-then-create atomic across callers: two batches run concurrently
against the same snapshot can each create a ledger for one product.
Callers serialize per user (see LedgerRepository.writer); any duplicate
that still slips through is merged on the next consolidation pass.
"""

import logging
from dataclasses import dataclass, field

from yieldbook.engines.consolidator import LedgerConsolidator
from yieldbook.engines.currency import CurrencyConverter
from yieldbook.engines.dedup import Deduplicator
from yieldbook.engines.matcher import AssetMatcher
from yieldbook.models.enums import Currency, TransactionType
from yieldbook.models.ledger import ExtractedRecord, Ledger, LedgerPatch, Transaction
from yieldbook.models.reports import IngestionSummary
from yieldbook.normalization.grouper import RecordGrouper
from yieldbook.normalization.ledger import LedgerBuilder
from yieldbook.normalization.records import RecordNormalizer

logger = logging.getLogger(__name__)

AI_CREATED_REMARK = "AI 自动创建"


@dataclass
class IngestionOverrides:
    """Values the user forces onto every record of an upload."""

    currency: Currency | None = None
    product_name: str | None = None
    institution: str | None = None

    def apply(self, raw: dict | ExtractedRecord) -> dict | ExtractedRecord:
        updates = {
            key: value
            for key, value in (
                ("currency", self.currency.value if self.currency else None),
                ("product_name", self.product_name),
                ("institution", self.institution),
            )
            if value
        }
        if not updates:
            return raw
        if isinstance(raw, ExtractedRecord):
            return raw.model_copy(update=updates)
        if not isinstance(raw, dict):
            return raw
        merged = dict(raw)
        for key, value in updates.items():
            merged.pop(_CAMEL_KEYS[key], None)
            merged[key] = value
        return merged


_CAMEL_KEYS = {"currency": "currency", "product_name": "productName", "institution": "institution"}


@dataclass
class IngestionResult:
    """New snapshot plus the documents that bring persistence in line with it.

    ``removed`` lists ids of pre-existing ledgers merged into another one.
    """

    snapshot: list[Ledger]
    created: list[Ledger] = field(default_factory=list)
    updated: list[LedgerPatch] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    summary: IngestionSummary = field(default_factory=IngestionSummary)


class IngestionEngine:
    """Orchestrates normalization, grouping, matching, dedup, and consolidation."""

    def __init__(self, converter: CurrencyConverter | None = None):
        self.converter = converter or CurrencyConverter()
        self.normalizer = RecordNormalizer(self.converter)
        self.grouper = RecordGrouper()
        self.matcher = AssetMatcher()
        self.deduplicator = Deduplicator()
        self.consolidator = LedgerConsolidator(self.converter)
        self.builder = LedgerBuilder(self.consolidator)

    def ingest(
        self,
        snapshot: list[Ledger],
        raw_records: list[dict | ExtractedRecord],
        target_ledger_id: str | None = None,
        overrides: IngestionOverrides | None = None,
    ) -> IngestionResult:
        """Fold one batch of extracted records into a ledger snapshot.

        Steps:
        1. Apply user overrides, then normalize (malformed records dropped)
        2. Group by (product, currency), inferring missing names
        3. Resolve each group: manual target, strict, fuzzy, or new ledger
        4. Drop rows already in the target history or earlier in this batch
        5. Merge ledgers sharing an identity key and recompute every ledger
        """
        summary = IngestionSummary(records_received=len(raw_records))
        working = list(snapshot)
        target = (
            self.matcher.find_by_id(working, target_ledger_id) if target_ledger_id is not None else None
        )

        if overrides is not None:
            raw_records = [overrides.apply(raw) for raw in raw_records]
        report = self.normalizer.normalize_batch(raw_records, target)
        summary.records_processed = len(report.records)
        summary.records_dropped = report.dropped
        summary.unknown_currency = report.unknown_currency

        added: set[str] = set()

        for group in self.grouper.group(report.records):
            match = self.matcher.resolve(group, working, target_ledger_id)
            if match.ambiguous is not None:
                summary.ambiguous_matches += 1

            candidates = self.builder.build_transactions(group)
            base = match.ledger
            if base is None:
                base = self.matcher.new_ledger(group).model_copy(update={"remark": AI_CREATED_REMARK})

            unique, skipped = self.deduplicator.filter_new(candidates, base.history)
            summary.duplicates_skipped += len(skipped)
            if not unique:
                continue

            updated = base.model_copy(update={
                "history": [*unique, *base.history],
                "earnings_currency": self._earnings_currency_after(base, unique),
            })
            added.update(tx.id for tx in unique)

            if match.ledger is None:
                logger.info("Creating ledger %r (%s)", updated.product_name, updated.currency)
                working.append(updated)
            else:
                logger.info(
                    "Adding %d record(s) to ledger %s via %s match",
                    len(unique), updated.id, match.kind,
                )
                working = [updated if ledger.id == updated.id else ledger for ledger in working]

        consolidated = self.consolidator.consolidate(working)
        summary.ledgers_merged = len(working) - len(consolidated)

        result = self._documents(snapshot, consolidated, added, summary)
        logger.info("Ingestion finished: %s", summary.describe())
        return result

    @staticmethod
    def _documents(
        snapshot: list[Ledger],
        consolidated: list[Ledger],
        added: set[str],
        summary: IngestionSummary,
    ) -> IngestionResult:
        """Derive create/update documents and counts from the consolidated snapshot.

        A ledger created in this batch and then merged into an existing one
        surfaces as a patch on the survivor. Added transactions that the
        merge dropped by signature count as duplicates, not new records.
        """
        originals = {ledger.id: ledger for ledger in snapshot}
        created: list[Ledger] = []
        patches: list[LedgerPatch] = []
        surviving = 0

        for ledger in consolidated:
            surviving += sum(1 for tx in ledger.history if tx.id in added)
            original = originals.get(ledger.id)
            if original is None:
                created.append(ledger)
                continue

            earnings_currency = ledger.earnings_currency
            if earnings_currency == original.earnings_currency:
                earnings_currency = None
            history_changed = {tx.id for tx in ledger.history} != {tx.id for tx in original.history}
            if history_changed or earnings_currency is not None:
                patches.append(LedgerPatch(
                    ledger_id=ledger.id, history=ledger.history, earnings_currency=earnings_currency
                ))

        kept = {ledger.id for ledger in consolidated}
        summary.new_records = surviving
        summary.duplicates_skipped += len(added) - surviving
        summary.ledgers_created = len(created)
        summary.ledgers_updated = len(patches)
        return IngestionResult(
            snapshot=consolidated,
            created=created,
            updated=patches,
            removed=[ledger_id for ledger_id in originals if ledger_id not in kept],
            summary=summary,
        )

    @staticmethod
    def _earnings_currency_after(ledger: Ledger, new_transactions: list[Transaction]) -> Currency:
        """An incoming earning denominated outside the principal currency relabels earnings."""
        earnings_currency = ledger.earnings_currency
        for tx in new_transactions:
            if tx.type == TransactionType.EARNING and tx.currency and tx.currency != ledger.currency:
                earnings_currency = tx.currency
        return earnings_currency


__all__ = ["IngestionEngine", "IngestionOverrides", "IngestionResult"]
