"""Earnings calendar report generator."""

from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from yieldbook.models.enums import CURRENCY_SYMBOLS
from yieldbook.models.ledger import Ledger
from yieldbook.models.reports import CalendarDay

TEMPLATE_DIR = Path(__file__).parent / "templates"


class CalendarReportGenerator:
    """Generates one ledger's earnings calendar for a month."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True, lstrip_blocks=True)

    def render(self, ledger: Ledger, year: int, month: int, days: list[CalendarDay]) -> str:
        template = self.env.get_template("calendar.txt")
        return template.render(
            ledger=ledger,
            year=year,
            month=month,
            days=[day for day in days if day.earning or day.deposits],
            month_total=sum((day.earning for day in days), Decimal("0")),
            symbol=CURRENCY_SYMBOLS[ledger.earnings_currency],
            deposit_symbol=CURRENCY_SYMBOLS[ledger.currency],
        )
