import os
import sqlite3

from batchcursor import BatchItemIterator, CancellationToken

DB_PATH = "batchcursor_example.db"
TOTAL_RECORDS = 250
FETCH_SIZE = 40


class SQLiteBatchSource:
    """Reads a query result with fetchmany(), one batch per round trip."""

    def __init__(self, conn: sqlite3.Connection, query: str, fetch_size: int):
        self.conn = conn
        self.cursor = conn.execute(query)
        self.fetch_size = fetch_size
        self._batch: list = []
        self._disposed = False

    def advance_batch(self, cancellation: CancellationToken | None = None) -> bool:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        self._batch = self.cursor.fetchmany(self.fetch_size)
        return bool(self._batch)

    def current_batch(self) -> list:
        return self._batch

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.cursor.close()
        self.conn.close()


def setup_db():
    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)
    conn = sqlite3.connect(DB_PATH)
    conn.execute("CREATE TABLE users (id INTEGER, name TEXT)")
    conn.executemany(
        "INSERT INTO users VALUES (?, ?)",
        [(i, f"User {i}") for i in range(1, TOTAL_RECORDS + 1)],
    )
    conn.commit()
    conn.close()


def main():
    setup_db()

    source = SQLiteBatchSource(
        sqlite3.connect(DB_PATH),
        "SELECT id, name FROM users ORDER BY id",
        FETCH_SIZE,
    )

    with BatchItemIterator(source) as rows:
        for user_id, name in rows:
            if user_id % 50 == 0:
                print(f"{user_id}: {name}")

    print(
        f"Read {rows.stats.items_yielded} rows "
        f"in {rows.stats.batches_fetched} batches"
    )

    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)


if __name__ == "__main__":
    main()
