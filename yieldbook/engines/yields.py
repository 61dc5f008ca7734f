"""Yield calculations over a consolidated ledger."""

from datetime import date, timedelta
from decimal import Decimal

from yieldbook.engines.currency import CurrencyConverter
from yieldbook.models.ledger import Ledger
from yieldbook.models.reports import YieldReport

HUNDRED = Decimal("100")
DAYS_PER_YEAR = Decimal("365")
TRAILING_DAYS = 7
MIN_DAYS_FOR_ANNUALIZED = 7


def annualize_growth(current: Decimal, principal: Decimal, days_held: int) -> Decimal:
    """Compound growth normalized to 365 days, in percent.

    Zero unless held more than MIN_DAYS_FOR_ANNUALIZED days with a positive
    principal and growth ratio.
    """
    if days_held <= MIN_DAYS_FOR_ANNUALIZED or principal <= 0:
        return Decimal("0")
    ratio = current / principal
    if ratio <= 0:
        return Decimal("0")
    return (ratio ** (DAYS_PER_YEAR / Decimal(days_held)) - 1) * HUNDRED


class YieldCalculator:
    """Holding, trailing-week and overall annualized yields for one ledger."""

    def __init__(self, converter: CurrencyConverter | None = None):
        self.converter = converter or CurrencyConverter()

    def earnings_base(self, ledger: Ledger) -> Decimal:
        """Total earnings expressed in the principal currency."""
        return self.converter.convert(ledger.total_earnings, ledger.earnings_currency, ledger.currency)

    def principal_base(self, ledger: Ledger) -> Decimal:
        return ledger.current_amount - self.earnings_base(ledger)

    def holding_yield(self, ledger: Ledger) -> Decimal:
        principal = self.principal_base(ledger)
        if principal <= 0:
            return Decimal("0")
        return self.earnings_base(ledger) / principal * HUNDRED

    def seven_day_annualized(self, ledger: Ledger, today: date) -> Decimal:
        principal = self.principal_base(ledger)
        if principal <= 0:
            return Decimal("0")
        window = sum(
            (ledger.daily_earnings.get(today - timedelta(days=offset), Decimal("0"))
             for offset in range(TRAILING_DAYS)),
            Decimal("0"),
        )
        window_base = self.converter.convert(window, ledger.earnings_currency, ledger.currency)
        return window_base / principal * DAYS_PER_YEAR / TRAILING_DAYS * HUNDRED

    @staticmethod
    def days_held(ledger: Ledger, today: date) -> int:
        earliest = ledger.earliest_date
        if earliest is None:
            return 0
        return max(0, (today - earliest).days)

    def overall_annualized(self, ledger: Ledger, today: date) -> Decimal:
        return annualize_growth(
            ledger.current_amount, self.principal_base(ledger), self.days_held(ledger, today)
        )

    def report(self, ledger: Ledger, today: date | None = None) -> YieldReport:
        today = today or date.today()
        return YieldReport(
            ledger_id=ledger.id,
            principal_base=self.principal_base(ledger),
            earnings_base=self.earnings_base(ledger),
            holding_yield=self.holding_yield(ledger),
            seven_day_annualized=self.seven_day_annualized(ledger, today),
            overall_annualized=self.overall_annualized(ledger, today),
            days_held=self.days_held(ledger, today),
        )
