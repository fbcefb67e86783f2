"""SQLite implementation of the ledger store."""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Sequence
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path

from nexus_ledger.domain.postings import LedgerUpdate, PostingResult
from nexus_ledger.domain.value_objects import PaymentMethod, Register, TransactionKind
from nexus_ledger.exceptions import DuplicateTransactionError, StorageError
from nexus_ledger.repositories.interfaces import (
    HistoryFilter,
    LedgerStore,
    PostedTransaction,
)


class SQLiteDatabase:
    """SQLite database connection manager."""

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            -- One row per posted idempotency key
            CREATE TABLE IF NOT EXISTS posted_transactions (
                idempotency_key TEXT PRIMARY KEY,
                result_json TEXT NOT NULL,
                posted_at TEXT NOT NULL,
                kind TEXT,
                transaction_date TEXT,
                payment_method TEXT,
                amount TEXT,
                description TEXT,
                party_name TEXT
            );
            CREATE INDEX IF NOT EXISTS idx_posted_transactions_date
                ON posted_transactions(transaction_date);

            -- Running balance per account, in normal-balance terms
            CREATE TABLE IF NOT EXISTS account_balances (
                account_id TEXT PRIMARY KEY,
                balance TEXT NOT NULL
            );

            -- Every ledger update, including AR/AP, capital and dividend rows
            CREATE TABLE IF NOT EXISTS register_rows (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                idempotency_key TEXT NOT NULL,
                register TEXT NOT NULL,
                key TEXT NOT NULL,
                amount TEXT NOT NULL,
                account_id TEXT,
                due_date TEXT,
                shares INTEGER NOT NULL DEFAULT 0,
                memo TEXT NOT NULL DEFAULT '',
                FOREIGN KEY (idempotency_key)
                    REFERENCES posted_transactions(idempotency_key)
            );
            CREATE INDEX IF NOT EXISTS idx_register_rows_register
                ON register_rows(register, key);
            """
        )
        conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class SQLiteLedgerStore(LedgerStore):
    """Ledger store that applies each posting inside one SQL transaction.

    The posted_transactions primary key makes the duplicate check part of
    the same transaction as the balance updates.
    """

    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db
        self._lock = threading.Lock()

    def apply_atomically(
        self,
        updates: Sequence[LedgerUpdate],
        idempotency_key: str,
        result: PostingResult,
        record: PostedTransaction | None = None,
    ) -> None:
        with self._lock:
            conn = self._db.get_connection()
            try:
                conn.execute("BEGIN IMMEDIATE")
                conn.execute(
                    """
                    INSERT INTO posted_transactions (
                        idempotency_key, result_json, posted_at, kind,
                        transaction_date, payment_method, amount, description, party_name
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        idempotency_key,
                        json.dumps(result.to_dict()),
                        datetime.now(UTC).isoformat(),
                        *_record_columns(record),
                    ),
                )
                for update in updates:
                    self._apply_one(conn, idempotency_key, update)
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                original = self.get_result(idempotency_key)
                if original is not None:
                    raise DuplicateTransactionError(idempotency_key, original) from exc
                raise StorageError(
                    f"Integrity error while posting {idempotency_key}: {exc}",
                    context={"idempotency_key": idempotency_key},
                ) from exc
            except sqlite3.Error as exc:
                if conn.in_transaction:
                    conn.rollback()
                raise StorageError(
                    f"Failed to post {idempotency_key}: {exc}",
                    context={"idempotency_key": idempotency_key},
                ) from exc
            except StorageError:
                if conn.in_transaction:
                    conn.rollback()
                raise

    def _apply_one(
        self, conn: sqlite3.Connection, idempotency_key: str, update: LedgerUpdate
    ) -> None:
        if update.register == Register.GENERAL_LEDGER:
            if not update.account_id:
                raise StorageError(
                    "General ledger update without an account id",
                    context={"idempotency_key": idempotency_key},
                )
            row = conn.execute(
                "SELECT balance FROM account_balances WHERE account_id = ?",
                (update.account_id,),
            ).fetchone()
            current = Decimal(row["balance"]) if row else Decimal("0")
            conn.execute(
                """
                INSERT INTO account_balances (account_id, balance) VALUES (?, ?)
                ON CONFLICT(account_id) DO UPDATE SET balance = excluded.balance
                """,
                (update.account_id, str(current + update.amount)),
            )
        conn.execute(
            """
            INSERT INTO register_rows
                (idempotency_key, register, key, amount, account_id, due_date, shares, memo)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                idempotency_key,
                update.register.value,
                update.key,
                str(update.amount),
                update.account_id,
                update.due_date.isoformat() if update.due_date else None,
                update.shares,
                update.memo,
            ),
        )

    def get_result(self, idempotency_key: str) -> PostingResult | None:
        row = (
            self._db.get_connection()
            .execute(
                "SELECT result_json FROM posted_transactions WHERE idempotency_key = ?",
                (idempotency_key,),
            )
            .fetchone()
        )
        if row is None:
            return None
        return PostingResult.from_dict(json.loads(row["result_json"]))

    def get_balance(self, account_id: str) -> Decimal:
        row = (
            self._db.get_connection()
            .execute(
                "SELECT balance FROM account_balances WHERE account_id = ?",
                (account_id,),
            )
            .fetchone()
        )
        return Decimal(row["balance"]) if row else Decimal("0")

    def balances(self) -> dict[str, Decimal]:
        rows = (
            self._db.get_connection()
            .execute("SELECT account_id, balance FROM account_balances ORDER BY account_id")
            .fetchall()
        )
        return {row["account_id"]: Decimal(row["balance"]) for row in rows}

    def register_rows(self, register: Register) -> list[LedgerUpdate]:
        rows = (
            self._db.get_connection()
            .execute(
                """
                SELECT register, key, amount, account_id, due_date, shares, memo
                FROM register_rows WHERE register = ? ORDER BY id
                """,
                (register.value,),
            )
            .fetchall()
        )
        return [
            LedgerUpdate(
                register=Register(row["register"]),
                key=row["key"],
                amount=Decimal(row["amount"]),
                account_id=row["account_id"],
                due_date=date.fromisoformat(row["due_date"]) if row["due_date"] else None,
                shares=row["shares"],
                memo=row["memo"],
            )
            for row in rows
        ]

    def history(self, filters: HistoryFilter | None = None) -> list[PostedTransaction]:
        filters = filters or HistoryFilter()
        clauses = ["kind IS NOT NULL"]
        params: list[str] = []
        if filters.kind is not None:
            clauses.append("kind = ?")
            params.append(filters.kind.value)
        if filters.date_from is not None:
            clauses.append("transaction_date >= ?")
            params.append(filters.date_from.isoformat())
        if filters.date_to is not None:
            clauses.append("transaction_date <= ?")
            params.append(filters.date_to.isoformat())

        rows = (
            self._db.get_connection()
            .execute(
                f"""
                SELECT idempotency_key, kind, transaction_date, payment_method,
                       amount, description, party_name
                FROM posted_transactions
                WHERE {" AND ".join(clauses)}
                ORDER BY transaction_date DESC, rowid DESC
                """,
                params,
            )
            .fetchall()
        )
        # Amounts are stored as text, so amount bounds are applied here.
        records = (_row_to_record(row) for row in rows)
        return [record for record in records if filters.matches(record)]


def _record_columns(
    record: PostedTransaction | None,
) -> tuple[str | None, str | None, str | None, str | None, str | None, str | None]:
    if record is None:
        return (None, None, None, None, None, None)
    return (
        record.kind.value,
        record.transaction_date.isoformat(),
        record.payment_method.value,
        str(record.amount),
        record.description,
        record.party_name,
    )


def _row_to_record(row: sqlite3.Row) -> PostedTransaction:
    return PostedTransaction(
        idempotency_key=row["idempotency_key"],
        kind=TransactionKind(row["kind"]),
        transaction_date=date.fromisoformat(row["transaction_date"]),
        payment_method=PaymentMethod(row["payment_method"]),
        amount=Decimal(row["amount"]),
        description=row["description"],
        party_name=row["party_name"],
    )
