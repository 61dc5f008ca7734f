"""Shared test fixtures for yieldbook."""

from datetime import date
from decimal import Decimal

import pytest

from yieldbook.db.repository import LedgerRepository
from yieldbook.db.schema import create_schema
from yieldbook.engines.consolidator import LedgerConsolidator
from yieldbook.engines.currency import CurrencyConverter
from yieldbook.models.enums import AssetClass, Currency, TransactionType
from yieldbook.models.ledger import Ledger, Transaction


@pytest.fixture
def converter() -> CurrencyConverter:
    return CurrencyConverter()


@pytest.fixture
def consolidator(converter: CurrencyConverter) -> LedgerConsolidator:
    return LedgerConsolidator(converter)


@pytest.fixture
def bluechip_ledger() -> Ledger:
    """CNY fund: 1000 deposited on Jan 1, earnings of 5 and 3 on the next two days."""
    return Ledger(
        id="ledger-bluechip",
        institution="支付宝",
        product_name="易方达蓝筹精选",
        asset_class=AssetClass.FUND,
        currency=Currency.CNY,
        earnings_currency=Currency.CNY,
        history=[
            Transaction(id="tx-3", date=date(2024, 1, 3), type=TransactionType.EARNING, amount=Decimal("3")),
            Transaction(id="tx-2", date=date(2024, 1, 2), type=TransactionType.EARNING, amount=Decimal("5")),
            Transaction(id="tx-1", date=date(2024, 1, 1), type=TransactionType.DEPOSIT, amount=Decimal("1000")),
        ],
    )


@pytest.fixture
def fuguo_ledger() -> Ledger:
    return Ledger(
        id="ledger-fuguo",
        institution="天天基金",
        product_name="富国蓝筹混合",
        currency=Currency.CNY,
        earnings_currency=Currency.CNY,
        history=[
            Transaction(id="fg-1", date=date(2024, 2, 1), type=TransactionType.DEPOSIT, amount=Decimal("500")),
        ],
    )


@pytest.fixture
def usd_ledger() -> Ledger:
    """CNY principal whose earnings are reported in USD."""
    return Ledger(
        id="ledger-usd",
        institution="招商银行",
        product_name="美元理财",
        currency=Currency.CNY,
        earnings_currency=Currency.USD,
        history=[
            Transaction(
                id="usd-2", date=date(2024, 3, 2), type=TransactionType.EARNING,
                amount=Decimal("10"), currency=Currency.USD,
            ),
            Transaction(
                id="usd-1", date=date(2024, 3, 1), type=TransactionType.DEPOSIT,
                amount=Decimal("1000"), currency=Currency.CNY,
            ),
        ],
    )


@pytest.fixture
def db_conn(tmp_path):
    conn = create_schema(tmp_path / "yieldbook.db")
    yield conn
    conn.close()


@pytest.fixture
def repo(db_conn) -> LedgerRepository:
    return LedgerRepository(db_conn)
