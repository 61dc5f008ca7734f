"""Portfolio-wide views: dashboard totals, monthly statement, earnings calendar."""

import calendar
from datetime import date
from decimal import Decimal

from yieldbook.engines.currency import CurrencyConverter
from yieldbook.engines.yields import annualize_growth
from yieldbook.models.enums import ASSET_CLASS_LABELS, AssetClass, Currency, TransactionType
from yieldbook.models.ledger import Ledger
from yieldbook.models.reports import (
    AllocationSlice,
    CalendarDay,
    InstitutionGroup,
    PortfolioSummary,
    StatementLine,
    StatementMonth,
)

BLANK_INSTITUTION_LABEL = "其他"


class PortfolioAnalyzer:
    """Aggregates consolidated ledgers into display-currency views."""

    def __init__(self, converter: CurrencyConverter | None = None):
        self.converter = converter or CurrencyConverter()

    def summarize(
        self,
        ledgers: list[Ledger],
        display_currency: Currency = Currency.CNY,
        today: date | None = None,
    ) -> PortfolioSummary:
        today = today or date.today()
        total_assets = Decimal("0")
        total_earnings = Decimal("0")
        by_class: dict[AssetClass, Decimal] = {}
        institutions: dict[str, InstitutionGroup] = {}

        for ledger in ledgers:
            value = self.converter.convert(ledger.current_amount, ledger.currency, display_currency)
            total_assets += value
            total_earnings += self.converter.convert(
                ledger.total_earnings, ledger.earnings_currency, display_currency
            )
            by_class[ledger.asset_class] = by_class.get(ledger.asset_class, Decimal("0")) + value

            label = ledger.institution or BLANK_INSTITUTION_LABEL
            group = institutions.setdefault(label, InstitutionGroup(institution=label))
            group.ledger_ids.append(ledger.id)
            group.total += value

        total_principal = total_assets - total_earnings
        total_yield = (
            total_earnings / total_principal * 100 if total_principal > 0 else Decimal("0")
        )
        dates = [tx.date for ledger in ledgers for tx in ledger.history]
        days_invested = max(0, (today - min(dates)).days) if dates else 0

        allocation = [
            AllocationSlice(asset_class=asset_class, label=ASSET_CLASS_LABELS[asset_class], value=by_class[asset_class])
            for asset_class in AssetClass
            if by_class.get(asset_class, Decimal("0")) > 0
        ]

        return PortfolioSummary(
            display_currency=display_currency,
            total_assets=total_assets,
            total_earnings=total_earnings,
            total_principal=total_principal,
            total_yield=total_yield,
            annualized_yield=annualize_growth(total_assets, total_principal, days_invested),
            days_invested=days_invested,
            allocation=allocation,
            institutions=list(institutions.values()),
        )

    @staticmethod
    def statement(ledgers: list[Ledger]) -> list[StatementMonth]:
        """Every transaction across ledgers, grouped by month, newest first."""
        lines: list[StatementLine] = []
        for ledger in ledgers:
            for tx in ledger.history:
                lines.append(StatementLine(
                    date=tx.date,
                    type=tx.type,
                    amount=tx.amount,
                    currency=tx.resolved_currency(ledger.currency, ledger.earnings_currency),
                    description=tx.description,
                    ledger_id=ledger.id,
                    product_name=ledger.product_name,
                ))
        lines.sort(key=lambda line: line.date, reverse=True)

        months: dict[str, StatementMonth] = {}
        for line in lines:
            key = line.date.strftime("%Y-%m")
            months.setdefault(key, StatementMonth(month=key)).lines.append(line)
        return [months[key] for key in sorted(months, reverse=True)]

    @staticmethod
    def earnings_calendar(ledger: Ledger, year: int, month: int) -> list[CalendarDay]:
        """One entry per day of the month: earnings (display currency) and deposits."""
        _, days_in_month = calendar.monthrange(year, month)
        deposits: dict[date, Decimal] = {}
        for tx in ledger.history:
            if tx.type == TransactionType.DEPOSIT:
                deposits[tx.date] = deposits.get(tx.date, Decimal("0")) + tx.amount

        days = []
        for day_number in range(1, days_in_month + 1):
            day = date(year, month, day_number)
            days.append(CalendarDay(
                day=day,
                earning=ledger.daily_earnings.get(day, Decimal("0")),
                deposits=deposits.get(day, Decimal("0")),
            ))
        return days
