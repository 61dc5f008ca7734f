"""Enumerations for yieldbook."""

from enum import StrEnum


class Currency(StrEnum):
    CNY = "CNY"
    USD = "USD"
    HKD = "HKD"


class TransactionType(StrEnum):
    DEPOSIT = "deposit"
    EARNING = "earning"


class AssetClass(StrEnum):
    FUND = "Fund"
    STOCK = "Stock"
    GOLD = "Gold"
    OTHER = "Other"


class MatchKind(StrEnum):
    """How an incoming record group was resolved to a ledger."""

    MANUAL = "manual"
    STRICT = "strict"
    FUZZY = "fuzzy"
    CREATED = "created"


CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.CNY: "¥",
    Currency.USD: "$",
    Currency.HKD: "HK$",
}

ASSET_CLASS_LABELS: dict[AssetClass, str] = {
    AssetClass.FUND: "基金",
    AssetClass.STOCK: "股票",
    AssetClass.GOLD: "黄金",
    AssetClass.OTHER: "其他",
}
