"""
Tests for the on-save handler, driven without a live observer.
"""

import random

import pytest
from watchdog.events import DirModifiedEvent, FileModifiedEvent, FileMovedEvent

from bugduck.history import HistoryLedger
from bugduck.watcher import EditGuard, SaveHandler

SOURCE = "export function check(a, b) {\n  return a < b && b !== 0;\n}\n"


@pytest.fixture
def handler(isolated_project):
    return SaveHandler(isolated_project, rng=random.Random(8), roast=False, debounce_delay=0.0)


@pytest.fixture
def source_file(isolated_project):
    path = isolated_project / "check.js"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def test_save_injects_and_records(handler, source_file):
    result = handler.process(str(source_file))

    assert result is not None
    assert result.applied
    assert source_file.read_text(encoding="utf-8") == result.code
    assert handler.injections == 1
    assert len(HistoryLedger().recent()) == 1


def test_own_write_does_not_retrigger(handler, source_file):
    first = handler.process(str(source_file))
    mutated = source_file.read_text(encoding="utf-8")

    # The save event produced by our own write
    assert handler.process(str(source_file)) is None
    assert source_file.read_text(encoding="utf-8") == mutated
    assert first is not None
    assert handler.injections == 1


def test_user_save_after_injection_is_handled(handler, source_file):
    handler.process(str(source_file))
    source_file.write_text(SOURCE, encoding="utf-8")

    result = handler.process(str(source_file))

    assert result is not None
    assert handler.injections == 2


def test_duplicate_event_for_one_save_is_dropped(isolated_project):
    path = isolated_project / "plain.js"
    path.write_text("foo(bar);\n", encoding="utf-8")
    handler = SaveHandler(isolated_project, rng=random.Random(1), roast=False)

    first = handler.process(str(path))
    assert first is not None and first.nothing_to_break
    assert handler.process(str(path)) is None


def test_unparseable_save_is_skipped(handler, isolated_project):
    path = isolated_project / "half.ts"
    path.write_text("function (", encoding="utf-8")

    assert handler.process(str(path)) is None
    assert path.read_text(encoding="utf-8") == "function ("
    assert handler.injections == 0


def test_failed_write_releases_guard(isolated_project, source_file):
    class FailingEditor:
        def read(self, path):
            return source_file.read_text(encoding="utf-8")

        def write(self, path, content):
            return False, None

    guard = EditGuard()
    handler = SaveHandler(
        isolated_project, rng=random.Random(2), editor=FailingEditor(), guard=guard, roast=False
    )

    assert handler.process(str(source_file)) is None
    assert guard.should_react(str(source_file), "anything")
    assert handler.injections == 0


def test_ignored_paths(handler, isolated_project, tmp_path):
    assert handler.should_ignore_path(str(isolated_project / "README.md"))
    assert handler.should_ignore_path(str(isolated_project / "node_modules" / "lib" / "x.js"))
    assert handler.should_ignore_path(str(isolated_project / "dist" / "bundle.js"))
    assert handler.should_ignore_path(str(tmp_path / "elsewhere.js"))
    assert not handler.should_ignore_path(str(isolated_project / "src" / "app.tsx"))


def test_events_are_debounced_then_flushed(handler, source_file):
    handler.on_modified(FileModifiedEvent(str(source_file)))
    handler.on_modified(FileModifiedEvent(str(source_file)))
    handler.on_modified(DirModifiedEvent(str(source_file.parent)))

    assert handler.events_processed == 2
    assert list(handler.pending) == [str(source_file)]

    assert handler.flush(force=True) == 1
    assert handler.pending == {}
    assert handler.injections == 1


def test_rename_save_tracks_destination(handler, source_file, isolated_project):
    handler.on_moved(FileMovedEvent(str(isolated_project / ".check.js.swp"), str(source_file)))
    assert str(source_file) in handler.pending


def test_flush_waits_for_quiet_period(isolated_project, source_file):
    handler = SaveHandler(isolated_project, rng=random.Random(3), roast=False, debounce_delay=60.0)
    handler.on_modified(FileModifiedEvent(str(source_file)))

    assert handler.flush() == 0
    assert str(source_file) in handler.pending
