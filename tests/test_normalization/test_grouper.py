"""Tests for batch grouping and name inference."""

import logging
from datetime import date
from decimal import Decimal

from yieldbook.models.enums import AssetClass, Currency, TransactionType
from yieldbook.models.ledger import UNNAMED_PRODUCT, NormalizedRecord
from yieldbook.normalization.grouper import RecordGrouper


def _record(product: str | None, currency=Currency.CNY, day: int = 1, **extra) -> NormalizedRecord:
    return NormalizedRecord(
        date=date(2024, 3, day),
        type=TransactionType.EARNING,
        amount=Decimal("1"),
        currency=currency,
        product_name=product or UNNAMED_PRODUCT,
        named=product is not None,
        **extra,
    )


class TestGroup:
    def test_groups_by_product_and_currency(self):
        groups = RecordGrouper().group([
            _record("易方达蓝筹精选"),
            _record("易方达蓝筹精选", day=2),
            _record("易方达蓝筹精选", Currency.USD),
        ])
        assert sorted((g.product_name, g.currency, len(g.records)) for g in groups) == [
            ("易方达蓝筹精选", Currency.CNY, 2),
            ("易方达蓝筹精选", Currency.USD, 1),
        ]

    def test_weak_records_take_strong_name_in_same_currency(self):
        groups = RecordGrouper().group([_record(None, day=1), _record("招商中证白酒", day=2)])
        assert len(groups) == 1
        assert groups[0].product_name == "招商中证白酒"
        assert groups[0].named is True

    def test_no_inference_across_currencies(self):
        groups = RecordGrouper().group([_record("招商中证白酒"), _record(None, Currency.HKD)])
        unnamed = next(g for g in groups if g.currency == Currency.HKD)
        assert unnamed.product_name == UNNAMED_PRODUCT
        assert unnamed.named is False

    def test_last_strong_name_wins(self, caplog):
        records = [_record("易方达蓝筹精选"), _record("富国蓝筹混合", day=2), _record(None, day=3)]
        with caplog.at_level(logging.WARNING):
            groups = RecordGrouper().group(records)
        by_name = {g.product_name: g for g in groups}
        assert len(by_name["富国蓝筹混合"].records) == 2
        assert len(by_name["易方达蓝筹精选"].records) == 1
        assert "mixes products" in caplog.text


class TestGroupAttributes:
    def test_first_non_empty_institution(self):
        groups = RecordGrouper().group([
            _record("余额宝"), _record("余额宝", day=2, institution="支付宝"),
        ])
        assert groups[0].institution == "支付宝"

    def test_asset_class_hint_wins(self):
        groups = RecordGrouper().group([_record("招商中证白酒", asset_class=AssetClass.STOCK)])
        assert groups[0].asset_class == AssetClass.STOCK

    def test_asset_class_classified_from_name(self):
        assert RecordGrouper().group([_record("工银黄金ETF")])[0].asset_class == AssetClass.GOLD

    def test_unclassifiable_name_defaults_to_fund(self):
        assert RecordGrouper().group([_record("招商中证白酒")])[0].asset_class == AssetClass.FUND

    def test_empty_batch(self):
        assert RecordGrouper().group([]) == []
