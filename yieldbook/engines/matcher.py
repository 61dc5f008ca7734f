"""Asset matching engine: resolve a record group to an existing ledger."""

import logging
from dataclasses import dataclass

from yieldbook.exceptions import AmbiguousMatchError, LedgerNotFoundError
from yieldbook.models.enums import MatchKind
from yieldbook.models.ledger import UNNAMED_INSTITUTION, Ledger, RecordGroup
from yieldbook.normalization.labels import normalize_name

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """Outcome of resolving one group. ``ledger`` is None when a new one is needed."""

    kind: MatchKind
    ledger: Ledger | None = None
    ambiguous: AmbiguousMatchError | None = None


class AssetMatcher:
    """Resolves record groups to ledgers: manual target, strict, fuzzy, or new."""

    def resolve(
        self,
        group: RecordGroup,
        ledgers: list[Ledger],
        target_ledger_id: str | None = None,
    ) -> MatchResult:
        """Match a group to a ledger.

        Args:
            group: Records sharing one (product, currency) key.
            ledgers: Current ledger snapshot.
            target_ledger_id: Caller-chosen ledger; overrides name and currency.

        Returns:
            MatchResult whose kind is CREATED when no ledger qualifies.
        """
        if target_ledger_id is not None:
            return MatchResult(MatchKind.MANUAL, self.find_by_id(ledgers, target_ledger_id))

        strict = self.match_strict(group, ledgers)
        if strict is not None:
            return MatchResult(MatchKind.STRICT, strict)

        try:
            fuzzy = self.match_fuzzy(group, ledgers)
        except AmbiguousMatchError as exc:
            logger.warning("%s; creating a new ledger instead", exc)
            return MatchResult(MatchKind.CREATED, ambiguous=exc)
        if fuzzy is not None:
            return MatchResult(MatchKind.FUZZY, fuzzy)
        return MatchResult(MatchKind.CREATED)

    @staticmethod
    def find_by_id(ledgers: list[Ledger], ledger_id: str) -> Ledger:
        for ledger in ledgers:
            if ledger.id == ledger_id:
                return ledger
        raise LedgerNotFoundError(ledger_id)

    @staticmethod
    def match_strict(group: RecordGroup, ledgers: list[Ledger]) -> Ledger | None:
        """Identical institution, product name, and principal currency.

        A group without an institution compares as the placeholder new_ledger seeds.
        """
        institution = group.institution or UNNAMED_INSTITUTION
        for ledger in ledgers:
            if (
                ledger.institution == institution
                and ledger.product_name == group.product_name
                and ledger.currency == group.currency
            ):
                return ledger
        return None

    @staticmethod
    def match_fuzzy(group: RecordGroup, ledgers: list[Ledger]) -> Ledger | None:
        """Substring containment on normalized names, gated on currency.

        Returns the single qualifying ledger, None when there is none, and
        raises AmbiguousMatchError when more than one qualifies.
        """
        group_name = normalize_name(group.product_name)
        if not group_name:
            return None

        candidates = []
        for ledger in ledgers:
            if group.currency not in (ledger.currency, ledger.earnings_currency):
                continue
            ledger_name = normalize_name(ledger.product_name)
            if not ledger_name:
                continue
            if ledger_name in group_name or group_name in ledger_name:
                candidates.append(ledger)

        if len(candidates) > 1:
            raise AmbiguousMatchError(group.product_name, [c.id for c in candidates])
        return candidates[0] if candidates else None

    @staticmethod
    def new_ledger(group: RecordGroup) -> Ledger:
        """Seed a ledger for an unmatched group; history is filled by the caller."""
        return Ledger(
            institution=group.institution or UNNAMED_INSTITUTION,
            product_name=group.product_name,
            asset_class=group.asset_class,
            currency=group.currency,
            earnings_currency=group.currency,
        )
