"""Consolidation and aggregation engines."""

from yieldbook.engines.consolidator import LedgerConsolidator
from yieldbook.engines.currency import CurrencyConverter
from yieldbook.engines.dedup import Deduplicator
from yieldbook.engines.matcher import AssetMatcher
from yieldbook.engines.portfolio import PortfolioAnalyzer
from yieldbook.engines.yields import YieldCalculator

__all__ = [
    "AssetMatcher",
    "CurrencyConverter",
    "Deduplicator",
    "LedgerConsolidator",
    "PortfolioAnalyzer",
    "YieldCalculator",
]
