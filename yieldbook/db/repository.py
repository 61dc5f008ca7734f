"""Data access layer for yieldbook ledgers."""

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from uuid import uuid4

from yieldbook.models.ledger import Ledger, Transaction
from yieldbook.models.reports import IngestionSummary


class LedgerRepository:
    """Snapshot storage: ``get()`` the whole ledger list, ``replace()`` it wholesale."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._writing = False

    @contextmanager
    def writer(self) -> Iterator["LedgerRepository"]:
        """Hold the database write lock for a read-modify-write cycle.

        ``BEGIN IMMEDIATE`` takes the reserved lock up front, so a second
        process running get -> ingest -> replace waits instead of
        interleaving with this one.
        """
        if self.conn.in_transaction:
            self.conn.commit()
        self.conn.execute("BEGIN IMMEDIATE")
        self._writing = True
        try:
            yield self
        except BaseException:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()
        finally:
            self._writing = False

    def _commit(self) -> None:
        if not self._writing:
            self.conn.commit()

    # --- Ledgers ---

    def get(self) -> list[Ledger]:
        """Load every ledger with its history, in stored order."""
        cursor = self.conn.execute("SELECT * FROM ledgers ORDER BY position")
        columns = [desc[0] for desc in cursor.description]
        rows = [dict(zip(columns, row)) for row in cursor.fetchall()]

        histories: dict[str, list[Transaction]] = {row["id"]: [] for row in rows}
        cursor = self.conn.execute("SELECT * FROM transactions ORDER BY ledger_id, position")
        tx_columns = [desc[0] for desc in cursor.description]
        for values in cursor.fetchall():
            tx = dict(zip(tx_columns, values))
            if tx["ledger_id"] not in histories:
                continue
            histories[tx["ledger_id"]].append(Transaction(
                id=tx["id"],
                date=date.fromisoformat(tx["tx_date"]),
                type=tx["tx_type"],
                amount=Decimal(tx["amount"]),
                currency=tx["currency"],
                description=tx["description"],
            ))

        return [
            Ledger(
                id=row["id"],
                institution=row["institution"],
                product_name=row["product_name"],
                asset_class=row["asset_class"],
                currency=row["currency"],
                earnings_currency=row["earnings_currency"],
                remark=row["remark"],
                history=histories[row["id"]],
                current_amount=Decimal(row["current_amount"]),
                total_earnings=Decimal(row["total_earnings"]),
                daily_earnings={
                    date.fromisoformat(day): Decimal(value)
                    for day, value in json.loads(row["daily_earnings"]).items()
                },
                seven_day_yield=Decimal(row["seven_day_yield"]),
            )
            for row in rows
        ]

    def replace(self, ledgers: list[Ledger]) -> None:
        """Overwrite the stored snapshot with ``ledgers``."""
        self.conn.execute("DELETE FROM transactions")
        self.conn.execute("DELETE FROM ledgers")
        for position, ledger in enumerate(ledgers):
            self.conn.execute(
                """INSERT INTO ledgers
                   (id, position, institution, product_name, asset_class, currency,
                    earnings_currency, remark, current_amount, total_earnings,
                    daily_earnings, seven_day_yield)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    ledger.id,
                    position,
                    ledger.institution,
                    ledger.product_name,
                    ledger.asset_class.value,
                    ledger.currency.value,
                    ledger.earnings_currency.value,
                    ledger.remark,
                    str(ledger.current_amount),
                    str(ledger.total_earnings),
                    json.dumps({day.isoformat(): str(value) for day, value in ledger.daily_earnings.items()}),
                    str(ledger.seven_day_yield),
                ),
            )
            self.conn.executemany(
                """INSERT INTO transactions
                   (id, ledger_id, position, tx_date, tx_type, amount, currency, description)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                [
                    (
                        tx.id,
                        ledger.id,
                        tx_position,
                        tx.date.isoformat(),
                        tx.type.value,
                        str(tx.amount),
                        tx.currency.value if tx.currency else None,
                        tx.description,
                    )
                    for tx_position, tx in enumerate(ledger.history)
                ],
            )
        self._commit()

    # --- Import batches ---

    def record_import_batch(self, source: str, file_path: str, summary: IngestionSummary) -> str:
        """Log one ingestion run. Returns the batch ID."""
        batch_id = str(uuid4())
        self.conn.execute(
            """INSERT INTO import_batches
               (id, source, file_path, record_count, new_records, summary, status)
               VALUES (?, ?, ?, ?, ?, ?, 'completed')""",
            (
                batch_id,
                source,
                file_path,
                summary.records_received,
                summary.new_records,
                summary.model_dump_json(),
            ),
        )
        self._commit()
        return batch_id

    def get_import_batches(self) -> list[dict]:
        """Retrieve import batch records, oldest first."""
        cursor = self.conn.execute("SELECT * FROM import_batches ORDER BY imported_at, rowid")
        columns = [desc[0] for desc in cursor.description]
        rows = []
        for row in cursor.fetchall():
            record = dict(zip(columns, row))
            record["summary"] = json.loads(record["summary"])
            rows.append(record)
        return rows
