"""Tests for holding, trailing-week and overall annualized yields."""

from datetime import date
from decimal import Decimal

import pytest

from yieldbook.engines.yields import YieldCalculator, annualize_growth
from yieldbook.models.enums import Currency, TransactionType
from yieldbook.models.ledger import Ledger, Transaction


@pytest.fixture
def calculator(converter):
    return YieldCalculator(converter)


class TestHoldingYield:
    def test_single_currency(self, calculator, consolidator, bluechip_ledger):
        ledger = consolidator.recompute(bluechip_ledger)
        assert calculator.holding_yield(ledger) == Decimal("0.8")

    def test_usd_earnings_converted_before_dividing(self, calculator, consolidator, usd_ledger):
        ledger = consolidator.recompute(usd_ledger)
        assert calculator.earnings_base(ledger) == Decimal("72")
        assert calculator.principal_base(ledger) == Decimal("1000")
        assert calculator.holding_yield(ledger) == Decimal("7.2")

    def test_zero_principal(self, calculator):
        ledger = Ledger(product_name="空", currency=Currency.CNY, earnings_currency=Currency.CNY)
        assert calculator.holding_yield(ledger) == 0


class TestSevenDay:
    def test_window_uses_last_seven_days(self, calculator, consolidator, bluechip_ledger):
        ledger = consolidator.recompute(bluechip_ledger)
        # 8 / 1000 * 365 / 7 * 100
        expected = Decimal("8") / Decimal("1000") * 365 / 7 * 100
        assert calculator.seven_day_annualized(ledger, date(2024, 1, 7)) == expected

    def test_window_excludes_older_days(self, calculator, consolidator, bluechip_ledger):
        ledger = consolidator.recompute(bluechip_ledger)
        # Jan 3 only; Jan 2 falls outside [Jan 3, Jan 9]
        expected = Decimal("3") / Decimal("1000") * 365 / 7 * 100
        assert calculator.seven_day_annualized(ledger, date(2024, 1, 9)) == expected


class TestOverallAnnualized:
    def test_zero_within_first_week(self, calculator, consolidator, bluechip_ledger):
        ledger = consolidator.recompute(bluechip_ledger)
        assert calculator.overall_annualized(ledger, date(2024, 1, 8)) == 0

    def test_compounds_after_a_week(self, calculator, consolidator, bluechip_ledger):
        ledger = consolidator.recompute(bluechip_ledger)
        result = calculator.overall_annualized(ledger, date(2024, 2, 1))
        expected = (1.008 ** (365 / 31) - 1) * 100
        assert float(result) == pytest.approx(expected, rel=1e-9)

    def test_zero_when_ratio_not_positive(self):
        assert annualize_growth(Decimal("-5"), Decimal("100"), 30) == 0
        assert annualize_growth(Decimal("0"), Decimal("100"), 30) == 0

    def test_zero_principal(self):
        assert annualize_growth(Decimal("10"), Decimal("0"), 30) == 0


class TestReport:
    def test_report_fields(self, calculator, consolidator, bluechip_ledger):
        report = calculator.report(consolidator.recompute(bluechip_ledger), today=date(2024, 1, 31))
        assert report.ledger_id == "ledger-bluechip"
        assert report.days_held == 30
        assert report.principal_base == Decimal("1000")
        assert report.earnings_base == Decimal("8")

    def test_days_held_empty_history(self, calculator):
        ledger = Ledger(product_name="空", currency=Currency.CNY, earnings_currency=Currency.CNY)
        assert calculator.days_held(ledger, date(2024, 1, 1)) == 0

    def test_days_held_never_negative(self, calculator):
        ledger = Ledger(
            product_name="未来", currency=Currency.CNY, earnings_currency=Currency.CNY,
            history=[Transaction(date=date(2025, 1, 1), type=TransactionType.DEPOSIT, amount=Decimal("1"))],
        )
        assert calculator.days_held(ledger, date(2024, 1, 1)) == 0
