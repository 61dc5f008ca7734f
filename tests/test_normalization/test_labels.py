"""Tests for name normalization and label classification."""

import pytest

from yieldbook.models.enums import AssetClass
from yieldbook.normalization.labels import (
    classify_asset_class,
    is_generic_institution,
    is_placeholder_name,
    normalize_name,
    parse_asset_class,
)


class TestNormalizeName:
    def test_strips_punctuation_and_spaces(self):
        assert normalize_name("易方达·蓝筹 精选(A)") == "易方达蓝筹精选a"

    def test_empty(self):
        assert normalize_name(None) == ""
        assert normalize_name("—··—") == ""


class TestPlaceholders:
    @pytest.mark.parametrize("name", [None, "", "  ", "未命名资产", "Unknown", "N/A", "***"])
    def test_placeholder_names(self, name):
        assert is_placeholder_name(name)

    def test_real_name(self):
        assert not is_placeholder_name("招商中证白酒")

    @pytest.mark.parametrize("name", ["", "未命名渠道", "其他", "Other"])
    def test_generic_institutions(self, name):
        assert is_generic_institution(name)

    def test_specific_institution(self):
        assert not is_generic_institution("支付宝")


class TestClassify:
    def test_exact_enum_value(self):
        assert parse_asset_class("gold") == AssetClass.GOLD
        assert parse_asset_class("Crypto") is None

    @pytest.mark.parametrize("label,expected", [
        ("工银黄金ETF", AssetClass.GOLD),
        ("腾讯控股 股票", AssetClass.STOCK),
        ("易方达沪深300指数", AssetClass.FUND),
        ("余额宝", AssetClass.FUND),
        ("定期存款", AssetClass.OTHER),
    ])
    def test_keyword_table(self, label, expected):
        assert classify_asset_class(label) == expected

    def test_gold_checked_before_fund(self):
        assert classify_asset_class("黄金基金") == AssetClass.GOLD

    def test_custom_default(self):
        assert classify_asset_class("招商中证白酒", default=AssetClass.FUND) == AssetClass.FUND
