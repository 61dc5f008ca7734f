"""Fixed-rate currency conversion through a base currency."""

import json
from decimal import Decimal
from pathlib import Path

from yieldbook.exceptions import UnknownCurrencyError
from yieldbook.models.enums import Currency

BASE_CURRENCY = Currency.CNY

# Units of the base currency per one unit of each currency.
DEFAULT_RATES: dict[Currency, Decimal] = {
    Currency.CNY: Decimal("1"),
    Currency.USD: Decimal("7.2"),
    Currency.HKD: Decimal("0.92"),
}


def parse_currency(code: str | Currency) -> Currency:
    """Resolve a currency code, raising UnknownCurrencyError for anything unsupported."""
    if isinstance(code, Currency):
        return code
    try:
        return Currency(str(code).strip().upper())
    except ValueError:
        raise UnknownCurrencyError(str(code)) from None


class CurrencyConverter:
    """Converts amounts between currencies using a static rate table."""

    def __init__(self, rates: dict[Currency, Decimal] | None = None):
        table = DEFAULT_RATES if rates is None else rates
        self.rates: dict[Currency, Decimal] = {
            parse_currency(code): Decimal(str(rate)) for code, rate in table.items()
        }
        for code, rate in self.rates.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive, got {rate}")

    @classmethod
    def from_file(cls, path: Path) -> "CurrencyConverter":
        """Load a {"CNY": 1, "USD": 7.2, ...} rate table from JSON."""
        raw = json.loads(path.read_text())
        if not isinstance(raw, dict):
            raise ValueError(f"Rate file {path} must contain a JSON object")
        return cls({parse_currency(code): Decimal(str(rate)) for code, rate in raw.items()})

    def rate(self, currency: Currency | str) -> Decimal:
        code = parse_currency(currency)
        if code not in self.rates:
            raise UnknownCurrencyError(code.value)
        return self.rates[code]

    def supports(self, currency: Currency | str) -> bool:
        try:
            return parse_currency(currency) in self.rates
        except UnknownCurrencyError:
            return False

    def convert(self, amount: Decimal, from_currency: Currency | str, to_currency: Currency | str) -> Decimal:
        """Convert via the base currency: amount * rate(from) / rate(to)."""
        source = parse_currency(from_currency)
        target = parse_currency(to_currency)
        if source == target:
            return amount
        return amount * self.rate(source) / self.rate(target)
