"""Monthly transaction statement generator."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from yieldbook.models.enums import CURRENCY_SYMBOLS
from yieldbook.models.reports import StatementMonth

TEMPLATE_DIR = Path(__file__).parent / "templates"


class StatementReportGenerator:
    """Generates the month-by-month statement, most recent month first."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True, lstrip_blocks=True)

    def render(self, months: list[StatementMonth]) -> str:
        template = self.env.get_template("statement.txt")
        return template.render(months=months, symbols=CURRENCY_SYMBOLS)
