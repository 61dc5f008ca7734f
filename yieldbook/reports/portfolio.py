"""Portfolio dashboard report generator."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from yieldbook.models.enums import CURRENCY_SYMBOLS
from yieldbook.models.ledger import Ledger
from yieldbook.models.reports import PortfolioSummary, YieldReport

TEMPLATE_DIR = Path(__file__).parent / "templates"


class PortfolioReportGenerator:
    """Generates the dashboard: totals, allocation, and per-ledger yields."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True, lstrip_blocks=True)

    def render(
        self,
        summary: PortfolioSummary,
        ledgers: list[Ledger],
        yields: dict[str, YieldReport],
    ) -> str:
        template = self.env.get_template("portfolio.txt")
        by_id = {ledger.id: ledger for ledger in ledgers}
        return template.render(
            summary=summary,
            symbol=CURRENCY_SYMBOLS[summary.display_currency],
            symbols=CURRENCY_SYMBOLS,
            ledgers=by_id,
            yields=yields,
        )
