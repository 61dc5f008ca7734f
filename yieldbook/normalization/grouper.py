"""Batch grouping of normalized records by (product, currency)."""

import logging

from yieldbook.models.enums import AssetClass, Currency
from yieldbook.models.ledger import NormalizedRecord, RecordGroup
from yieldbook.normalization.labels import classify_asset_class

logger = logging.getLogger(__name__)


class RecordGrouper:
    """Buckets one batch of records, inferring missing product names from context.

    A record is "strong" when it carries a real product name and "weak"
    otherwise. Within a batch, each currency maps to the name of the last
    strong record seen in it, and weak records in that currency take that
    name. A batch holding two different products in one currency therefore
    attributes all of its weak records to only one of them; the conflict is
    logged rather than guessed around.
    """

    def group(self, records: list[NormalizedRecord]) -> list[RecordGroup]:
        inferred = self.infer_names(records)
        buckets: dict[tuple[str, Currency], list[NormalizedRecord]] = {}

        for record in records:
            if not record.named and record.currency in inferred:
                record = record.model_copy(
                    update={"product_name": inferred[record.currency], "named": True}
                )
            buckets.setdefault((record.product_name, record.currency), []).append(record)

        return [
            self._build_group(product_name, currency, members)
            for (product_name, currency), members in buckets.items()
        ]

    @staticmethod
    def infer_names(records: list[NormalizedRecord]) -> dict[Currency, str]:
        """Currency -> product name from strong records; last one wins."""
        names: dict[Currency, str] = {}
        for record in records:
            if not record.named:
                continue
            previous = names.get(record.currency)
            if previous is not None and previous != record.product_name:
                logger.warning(
                    "Batch mixes products in %s (%r, %r); unnamed records go to %r",
                    record.currency, previous, record.product_name, record.product_name,
                )
            names[record.currency] = record.product_name
        return names

    @staticmethod
    def _build_group(
        product_name: str, currency: Currency, members: list[NormalizedRecord]
    ) -> RecordGroup:
        institution = next((r.institution for r in members if r.institution), "")
        hint = next((r.asset_class for r in members if r.asset_class is not None), None)
        asset_class = hint or classify_asset_class(product_name, default=AssetClass.FUND)
        return RecordGroup(
            product_name=product_name,
            currency=currency,
            named=members[0].named,
            institution=institution,
            asset_class=asset_class,
            records=members,
        )
