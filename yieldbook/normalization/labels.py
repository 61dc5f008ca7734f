"""Free-text label handling: name normalization, placeholders, and classification."""

import re

from yieldbook.models.enums import AssetClass
from yieldbook.models.ledger import UNNAMED_INSTITUTION, UNNAMED_PRODUCT

_NON_NAME_CHARS = re.compile(r"[^\u4e00-\u9fa5a-zA-Z0-9]")

PLACEHOLDER_PRODUCT_NAMES = {
    "",
    UNNAMED_PRODUCT,
    "未命名",
    "未知",
    "未知产品",
    "unknown",
    "unnamed",
    "n/a",
    "none",
    "null",
}

GENERIC_INSTITUTIONS = {
    "",
    UNNAMED_INSTITUTION,
    "其他",
    "未知",
    "unknown",
    "other",
}

# Checked in order; first hit wins.
ASSET_CLASS_KEYWORDS: list[tuple[AssetClass, tuple[str, ...]]] = [
    (AssetClass.GOLD, ("黄金", "金条", "积存金", "gold")),
    (AssetClass.STOCK, ("股票", "个股", "stock", "equity", "shares")),
    (AssetClass.FUND, ("基金", "理财", "余额宝", "零钱通", "etf", "fund", "lof", "债", "混合", "指数")),
]


def normalize_name(name: str | None) -> str:
    """Keep only CJK ideographs, ASCII letters and digits, lowercased."""
    if not name:
        return ""
    return _NON_NAME_CHARS.sub("", name).lower()


def is_placeholder_name(name: str | None) -> bool:
    if name is None:
        return True
    return name.strip().lower() in PLACEHOLDER_PRODUCT_NAMES or not normalize_name(name)


def is_generic_institution(name: str | None) -> bool:
    if name is None:
        return True
    return name.strip().lower() in GENERIC_INSTITUTIONS


def parse_asset_class(label: str | None) -> AssetClass | None:
    """Exact enum value (case-insensitive) or None."""
    if not label:
        return None
    for member in AssetClass:
        if member.value.lower() == label.strip().lower():
            return member
    return None


def classify_asset_class(label: str | None, default: AssetClass = AssetClass.OTHER) -> AssetClass:
    """Map a free-text product label onto an AssetClass via the keyword table."""
    exact = parse_asset_class(label)
    if exact is not None:
        return exact
    text = (label or "").lower()
    for asset_class, keywords in ASSET_CLASS_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return asset_class
    return default
