"""Tests for portfolio-wide summaries, statements and the earnings calendar."""

from datetime import date
from decimal import Decimal

import pytest

from yieldbook.engines.portfolio import BLANK_INSTITUTION_LABEL, PortfolioAnalyzer
from yieldbook.models.enums import AssetClass, Currency, TransactionType


@pytest.fixture
def analyzer(converter):
    return PortfolioAnalyzer(converter)


@pytest.fixture
def ledgers(consolidator, bluechip_ledger, usd_ledger):
    return consolidator.consolidate([bluechip_ledger, usd_ledger])


class TestSummarize:
    def test_totals_in_display_currency(self, analyzer, ledgers):
        summary = analyzer.summarize(ledgers, Currency.CNY, today=date(2024, 3, 31))
        assert summary.total_assets == Decimal("2080")
        assert summary.total_earnings == Decimal("80")
        assert summary.total_principal == Decimal("2000")
        assert summary.total_yield == Decimal("4")
        assert summary.days_invested == 90
        assert summary.annualized_yield > 0

    def test_usd_display(self, analyzer, ledgers):
        summary = analyzer.summarize(ledgers, Currency.USD, today=date(2024, 3, 31))
        assert float(summary.total_assets) == pytest.approx(2080 / 7.2)

    def test_allocation_by_class(self, analyzer, ledgers):
        gold = ledgers[1].model_copy(update={"asset_class": AssetClass.GOLD})
        summary = analyzer.summarize([ledgers[0], gold], today=date(2024, 3, 31))
        labels = {item.label: item.value for item in summary.allocation}
        assert labels == {"基金": Decimal("1008"), "黄金": Decimal("1072")}

    def test_institution_groups(self, analyzer, ledgers):
        blank = ledgers[1].model_copy(update={"institution": ""})
        summary = analyzer.summarize([ledgers[0], blank], today=date(2024, 3, 31))
        groups = {group.institution: group for group in summary.institutions}
        assert groups["支付宝"].ledger_ids == ["ledger-bluechip"]
        assert groups[BLANK_INSTITUTION_LABEL].total == Decimal("1072")

    def test_empty_portfolio(self, analyzer):
        summary = analyzer.summarize([], today=date(2024, 3, 31))
        assert summary.total_assets == 0
        assert summary.total_yield == 0
        assert summary.days_invested == 0
        assert summary.allocation == []


class TestStatement:
    def test_grouped_by_month_newest_first(self, ledgers):
        months = PortfolioAnalyzer.statement(ledgers)
        assert [month.month for month in months] == ["2024-03", "2024-01"]
        assert [line.date for line in months[1].lines] == [
            date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1),
        ]

    def test_line_currency_resolved(self, ledgers):
        months = PortfolioAnalyzer.statement(ledgers)
        march = {line.type: line for line in months[0].lines}
        assert march[TransactionType.EARNING].currency == Currency.USD
        assert march[TransactionType.DEPOSIT].currency == Currency.CNY
        assert months[1].lines[0].currency == Currency.CNY


class TestEarningsCalendar:
    def test_every_day_of_month(self, ledgers):
        days = PortfolioAnalyzer.earnings_calendar(ledgers[0], 2024, 1)
        assert len(days) == 31
        assert days[0].deposits == Decimal("1000")
        assert days[1].earning == Decimal("5")
        assert days[2].earning == Decimal("3")
        assert days[3].earning == 0

    def test_leap_february(self, ledgers):
        assert len(PortfolioAnalyzer.earnings_calendar(ledgers[0], 2024, 2)) == 29
