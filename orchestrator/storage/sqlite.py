"""SQLite-backed key/value storage."""

import sqlite3
from pathlib import Path

from orchestrator.storage.ports import StoragePort


class SqliteStorage(StoragePort):
    """Stores values in a single ``kv_store`` table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.init_db()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                create table if not exists kv_store (
                    key text primary key,
                    value blob not null
                )
                """
            )
            conn.commit()

    def read(self, key: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute(
                "select value from kv_store where key = ?",
                (key,),
            ).fetchone()
        if not row:
            return None
        return bytes(row["value"])

    def write(self, key: str, data: bytes) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                insert into kv_store (key, value)
                values (?, ?)
                on conflict(key) do update set
                    value = excluded.value
                """,
                (key, data),
            )
            conn.commit()

