"""Text report generation for yieldbook."""

from yieldbook.reports.calendar import CalendarReportGenerator
from yieldbook.reports.portfolio import PortfolioReportGenerator
from yieldbook.reports.statement import StatementReportGenerator

__all__ = [
    "CalendarReportGenerator",
    "PortfolioReportGenerator",
    "StatementReportGenerator",
]
