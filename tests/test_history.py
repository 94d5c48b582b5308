"""
Tests for the injection history ledger.
"""

import json
import sqlite3
from unittest.mock import MagicMock, patch

from bugduck.history import HistoryLedger
from bugduck.mutation import BugKind, compute_diff_range


def _entry(path, bugs):
    diff = compute_diff_range("if (a < b) {}\n", "if (a <= b) {}\n")
    return HistoryLedger.build_entry(str(path), bugs, diff)


def test_build_entry(isolated_project):
    target = isolated_project / "loop.js"
    target.write_text("x", encoding="utf-8")

    entry = _entry(target, [BugKind.OFF_BY_ONE])

    assert len(entry.id) == 32
    assert entry.file_path == str(target.resolve())
    assert entry.file_uri.startswith("file://")
    assert entry.file_uri.endswith("/loop.js")
    assert (entry.start_line, entry.end_line) == (1, 1)
    assert entry.before_snippet == "if (a < b) {}"
    assert entry.after_snippet == "if (a <= b) {}"


def test_record_and_read_back(isolated_project):
    ledger = HistoryLedger()
    entry = _entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE, BugKind.HOMOGLYPH_SABOTAGE])

    assert ledger.record(entry)

    assert ledger.get(entry.id) == entry
    assert ledger.recent() == [entry]
    assert ledger.get("missing") is None


def test_recent_is_newest_first(isolated_project):
    ledger = HistoryLedger()
    older = _entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE])
    newer = _entry(isolated_project / "b.js", [BugKind.BOOLEAN_NEGATION])
    newer = newer.model_copy(update={"timestamp": older.timestamp + 5})
    ledger.record(older)
    ledger.record(newer)

    assert [e.id for e in ledger.recent()] == [newer.id, older.id]
    assert [e.id for e in ledger.recent(limit=1)] == [newer.id]


def test_stats(isolated_project):
    ledger = HistoryLedger()
    ledger.record(_entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE, BugKind.HOMOGLYPH_SABOTAGE]))
    ledger.record(_entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE]))
    ledger.record(_entry(isolated_project / "b.js", [BugKind.SCOPE_GASLIGHTING]))

    stats = ledger.stats()

    assert stats["total_runs"] == 3
    assert stats["total_bugs"] == 4
    assert stats["files_touched"] == 2
    assert stats["bugs_by_kind"]["offByOne"] == 2


def test_empty_stats(isolated_project):
    assert HistoryLedger().stats() == {
        "total_runs": 0,
        "total_bugs": 0,
        "bugs_by_kind": {},
        "files_touched": 0,
    }


def test_log_is_append_only_jsonl(isolated_project):
    ledger = HistoryLedger()
    first = _entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE])
    second = _entry(isolated_project / "b.js", [BugKind.INDEX_OFF_BY_ONE])
    ledger.record(first)
    ledger.record(second)

    records = ledger.read_log()

    assert [r["id"] for r in records] == [first.id, second.id]
    assert records[1]["bugs"] == ["indexOffByOne"]
    lines = (isolated_project / ".bugduck" / "history.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["file_uri"] == first.file_uri


def test_malformed_log_lines_are_skipped(isolated_project):
    ledger = HistoryLedger()
    ledger.record(_entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE]))
    with open(ledger.log_path, "a", encoding="utf-8") as f:
        f.write("{not json\n")

    assert len(ledger.read_log()) == 1


def test_connection_is_closed_when_sqlite_fails(isolated_project):
    ledger = HistoryLedger()
    conn = MagicMock()
    conn.execute.side_effect = sqlite3.OperationalError("disk I/O error")

    with patch("bugduck.history.ledger.sqlite3.connect", return_value=conn):
        assert ledger.recent() == []
        assert ledger.get("anything") is None
        assert ledger.stats()["total_runs"] == 0
        assert ledger.record(_entry(isolated_project / "a.js", [BugKind.OFF_BY_ONE])) is False

    assert conn.close.call_count == 4
    conn.commit.assert_not_called()
