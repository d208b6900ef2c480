"""Append-only, hash-chained operation journal backed by SQLite.

The journal is the durable source of truth for the marketplace ledger.  The
in-memory listing and proceeds maps are rebuilt from it on startup.

Design:
- Append-only: entries are only ever inserted; no update, no delete.
- Hash-chained: each entry includes SHA-256 of the previous entry.
- Two-phase append: ``record()`` inserts inside an open transaction and
  commits only when the surrounding operation (including its external
  transfer) succeeds.  A rolled-back operation leaves no entry.
- Amounts and token ids are stored as decimal text so values wider than
  SQLite's 64-bit INTEGER survive unchanged.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path

from nftmarket.core.errors import JournalIntegrityError
from nftmarket.models.journal import JournalEntry, OperationKind

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_JOURNAL = """
CREATE TABLE IF NOT EXISTS operation_journal (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id            TEXT NOT NULL UNIQUE,
    operation           TEXT NOT NULL,
    collection          TEXT NOT NULL DEFAULT '',
    token_id            TEXT,
    actor               TEXT NOT NULL,
    counterparty        TEXT NOT NULL DEFAULT '',
    price               TEXT NOT NULL DEFAULT '0',
    amount              TEXT NOT NULL DEFAULT '0',
    timestamp_utc       TEXT NOT NULL,
    previous_entry_hash TEXT NOT NULL DEFAULT '',
    entry_hash          TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_TOKEN = """
CREATE INDEX IF NOT EXISTS idx_journal_token
    ON operation_journal(collection, token_id, id);
"""

_SELECT_COLUMNS = """
    entry_id, operation, collection, token_id, actor, counterparty,
    price, amount, timestamp_utc, previous_entry_hash, entry_hash
"""


def _entry_hash(entry_dict: dict) -> str:
    """Seal for one journal row: SHA-256 over its sorted, compact JSON form.

    The ``entry_hash`` field itself is left out; ``previous_entry_hash`` is
    included, which links each row to the one before it.
    """
    sealed_fields = {k: v for k, v in entry_dict.items() if k != "entry_hash"}
    payload = json.dumps(
        sealed_fields, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class EventJournal:
    """Append-only, hash-chained operation journal.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with closing(self._connect()) as conn:
            conn.execute(_CREATE_JOURNAL)
            conn.execute(_CREATE_IDX_TOKEN)
            conn.commit()

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    @contextmanager
    def record(self, entry: JournalEntry) -> Iterator[JournalEntry]:
        """Seal and insert *entry*, committing only if the block succeeds.

        Yields the sealed entry.  Any exception raised inside the ``with``
        block rolls the insert back and propagates.
        """
        conn = self._connect()
        try:
            previous_hash = self._latest_hash(conn)
            sealed = self._seal(entry, previous_hash)
            self._insert(conn, sealed)
            yield sealed
            conn.commit()
            logger.debug(
                "Journaled %s (%s).", sealed.operation.value, sealed.entry_hash[:12]
            )
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def append(self, entry: JournalEntry) -> JournalEntry:
        """Seal, insert and commit *entry* immediately."""
        with self.record(entry) as sealed:
            return sealed

    @staticmethod
    def _seal(entry: JournalEntry, previous_hash: str) -> JournalEntry:
        entry_dict = entry.model_dump(mode="json")
        entry_dict["previous_entry_hash"] = previous_hash
        entry_dict["entry_hash"] = ""
        return entry.model_copy(
            update={
                "previous_entry_hash": previous_hash,
                "entry_hash": _entry_hash(entry_dict),
            }
        )

    @staticmethod
    def _insert(conn: sqlite3.Connection, entry: JournalEntry) -> None:
        conn.execute(
            """
            INSERT INTO operation_journal
                (entry_id, operation, collection, token_id, actor, counterparty,
                 price, amount, timestamp_utc, previous_entry_hash, entry_hash)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.entry_id,
                entry.operation.value,
                entry.collection,
                None if entry.token_id is None else str(entry.token_id),
                entry.actor,
                entry.counterparty,
                str(entry.price),
                str(entry.amount),
                entry.timestamp_utc.isoformat()
                if isinstance(entry.timestamp_utc, datetime)
                else entry.timestamp_utc,
                entry.previous_entry_hash,
                entry.entry_hash,
            ),
        )

    @staticmethod
    def _latest_hash(conn: sqlite3.Connection) -> str:
        row = conn.execute(
            "SELECT entry_hash FROM operation_journal ORDER BY id DESC LIMIT 1"
        ).fetchone()
        return row[0] if row else ""

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def entries(self) -> list[JournalEntry]:
        """Return every committed entry in commit order."""
        with closing(self._connect()) as conn:
            rows = conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM operation_journal ORDER BY id ASC"
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def latest(self) -> JournalEntry | None:
        """Return the most recently committed entry, or None."""
        with closing(self._connect()) as conn:
            row = conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM operation_journal "
                "ORDER BY id DESC LIMIT 1"
            ).fetchone()
        return self._row_to_entry(row) if row else None

    def entries_for(self, collection: str, token_id: int) -> list[JournalEntry]:
        """Return the history of one token, oldest first."""
        with closing(self._connect()) as conn:
            rows = conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM operation_journal "
                "WHERE collection = ? AND token_id = ? ORDER BY id ASC",
                (collection, str(token_id)),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def __len__(self) -> int:
        with closing(self._connect()) as conn:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM operation_journal"
            ).fetchone()
        return count

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self) -> bool:
        """Verify the hash chain integrity of the whole journal.

        Returns True if the chain is valid, raises JournalIntegrityError
        otherwise.
        """
        prev_hash = ""
        for entry in self.entries():
            if entry.previous_entry_hash != prev_hash:
                raise JournalIntegrityError(
                    f"Chain broken at entry {entry.entry_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {entry.previous_entry_hash!r}"
                )

            expected_hash = _entry_hash(entry.model_dump(mode="json"))
            if entry.entry_hash != expected_hash:
                raise JournalIntegrityError(
                    f"Tampered entry {entry.entry_id}: "
                    f"expected hash={expected_hash!r}, "
                    f"got {entry.entry_hash!r}"
                )

            prev_hash = entry.entry_hash

        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_entry(row: tuple) -> JournalEntry:
        (
            entry_id,
            operation,
            collection,
            token_id,
            actor,
            counterparty,
            price,
            amount,
            timestamp_utc,
            previous_entry_hash,
            entry_hash,
        ) = row
        return JournalEntry(
            entry_id=entry_id,
            operation=OperationKind(operation),
            collection=collection,
            token_id=None if token_id is None else int(token_id),
            actor=actor,
            counterparty=counterparty,
            price=int(price),
            amount=int(amount),
            timestamp_utc=timestamp_utc,
            previous_entry_hash=previous_entry_hash,
            entry_hash=entry_hash,
        )
