"""Tests for text report rendering."""

from datetime import date

import pytest

from yieldbook.engines.portfolio import PortfolioAnalyzer
from yieldbook.engines.yields import YieldCalculator
from yieldbook.reports.calendar import CalendarReportGenerator
from yieldbook.reports.portfolio import PortfolioReportGenerator
from yieldbook.reports.statement import StatementReportGenerator


@pytest.fixture
def ledgers(consolidator, bluechip_ledger, usd_ledger):
    return consolidator.consolidate([bluechip_ledger, usd_ledger])


class TestPortfolioReport:
    def test_render(self, converter, ledgers):
        today = date(2024, 3, 31)
        summary = PortfolioAnalyzer(converter).summarize(ledgers, today=today)
        yields = {ledger.id: YieldCalculator(converter).report(ledger, today) for ledger in ledgers}
        text = PortfolioReportGenerator().render(summary, ledgers, yields)

        assert "PORTFOLIO SUMMARY (CNY)" in text
        assert "¥2080.00" in text
        assert "基金" in text
        assert "易方达蓝筹精选 [CNY]" in text
        assert "earnings $10.00" in text


class TestStatementReport:
    def test_render(self, ledgers):
        text = StatementReportGenerator().render(PortfolioAnalyzer.statement(ledgers))
        assert text.index("2024-03") < text.index("2024-01")
        assert "$10.00" in text
        assert "¥1000.00" in text

    def test_empty(self):
        assert "(no transactions)" in StatementReportGenerator().render([])


class TestCalendarReport:
    def test_render(self, ledgers):
        ledger = ledgers[0]
        days = PortfolioAnalyzer.earnings_calendar(ledger, 2024, 1)
        text = CalendarReportGenerator().render(ledger, 2024, 1, days)
        assert "EARNINGS CALENDAR 2024-01: 易方达蓝筹精选" in text
        assert "2024-01-02  earning ¥5.00" in text
        assert "deposit ¥1000.00" in text
        assert "Month total: ¥8.00" in text
        assert "2024-01-04" not in text
