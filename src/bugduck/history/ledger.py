"""
HistoryLedger: persistent record of every injection.

Entries live in two places: a SQLite key-value table keyed by entry id, and
an append-only JSON-lines log that can be tailed or shipped elsewhere.
Storage failures are logged and swallowed so that a broken history never
blocks an injection.
"""

import json
import sqlite3
import time
import uuid
from collections import Counter
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from bugduck.logging_config import logger
from bugduck.mutation.config import get_mutation_config
from bugduck.schemas import DiffRange, HistoryEntry


class HistoryLedger:
    """
    Store and query injection history.

    Metrics:
    - Runs recorded
    - Bugs applied per kind
    - Files touched
    """

    def __init__(self, db_path: Optional[str] = None, log_path: Optional[str] = None):
        """
        Initialize history ledger.

        Args:
            db_path: Path to the SQLite history database
            log_path: Path to the append-only JSON-lines log
        """
        config = get_mutation_config()
        self.db_path = db_path or config["history_db"]
        self.log_path = log_path or config["history_log"]
        self._init_database()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection that commits on success and always closes."""
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_database(self):
        """Initialize ledger database with schema."""
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            with self._connection() as conn:
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS history (
                        id TEXT PRIMARY KEY,
                        timestamp REAL NOT NULL,
                        payload TEXT NOT NULL
                    )
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_history_timestamp
                    ON history(timestamp)
                """)

            logger.debug(f"History ledger initialized: {self.db_path}")

        except sqlite3.Error as e:
            logger.error(f"Failed to initialize history database: {e}")

    @staticmethod
    def build_entry(file_path: str, bugs: List[Any], diff: DiffRange) -> HistoryEntry:
        """Assemble a HistoryEntry for one injection into ``file_path``."""
        resolved = Path(file_path).resolve()
        return HistoryEntry(
            id=uuid.uuid4().hex,
            timestamp=time.time(),
            file_path=str(resolved),
            file_uri=resolved.as_uri(),
            bugs=list(bugs),
            start_line=diff.start_line,
            end_line=diff.end_line,
            before_snippet=diff.before_snippet,
            after_snippet=diff.after_snippet,
        )

    def record(self, entry: HistoryEntry) -> bool:
        """
        Persist one entry to both the database and the log.

        Returns:
            True if both stores accepted the entry
        """
        payload = entry.model_dump_json()
        stored = True

        try:
            with self._connection() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO history (id, timestamp, payload) VALUES (?, ?, ?)",
                    (entry.id, entry.timestamp, payload),
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to record history entry {entry.id}: {e}")
            stored = False

        try:
            Path(self.log_path).parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(payload + "\n")
        except OSError as e:
            logger.error(f"Failed to append history log: {e}")
            stored = False

        if stored:
            logger.debug(f"Recorded history {entry.id}: {[str(b) for b in entry.bugs]} in {entry.file_path}")
        return stored

    def _load(self, payload: str) -> Optional[HistoryEntry]:
        try:
            return HistoryEntry.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Skipping unreadable history entry: {e}")
            return None

    def recent(self, limit: int = 10) -> List[HistoryEntry]:
        """
        Get the most recent entries, newest first.

        Args:
            limit: Number of entries to retrieve
        """
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    "SELECT payload FROM history ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to read history: {e}")
            return []

        entries = [self._load(row[0]) for row in rows]
        return [e for e in entries if e is not None]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        try:
            with self._connection() as conn:
                row = conn.execute("SELECT payload FROM history WHERE id = ?", (entry_id,)).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to read history entry {entry_id}: {e}")
            return None

        return self._load(row[0]) if row else None

    def stats(self) -> Dict[str, Any]:
        """
        Get overall statistics from the ledger.

        Returns:
            Dict with total runs, total bugs, bugs per kind and files touched
        """
        try:
            with self._connection() as conn:
                rows = conn.execute("SELECT payload FROM history").fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to get statistics: {e}")
            rows = []

        by_kind: Counter = Counter()
        files = set()
        runs = 0
        for row in rows:
            entry = self._load(row[0])
            if entry is None:
                continue
            runs += 1
            files.add(entry.file_path)
            by_kind.update(str(b) for b in entry.bugs)

        return {
            "total_runs": runs,
            "total_bugs": sum(by_kind.values()),
            "bugs_by_kind": dict(by_kind.most_common()),
            "files_touched": len(files),
        }

    def read_log(self) -> List[Dict[str, Any]]:
        """Raw entries from the append-only log, oldest first."""
        path = Path(self.log_path)
        if not path.exists():
            return []

        entries = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping malformed history log line: {e}")
        return entries
