"""
Tests for the File Monitor
==========================

The event handler is driven with synthetic watchdog events.
"""

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from tasklink.core.status import ChangeType
from tasklink.errors import FileMonitorError
from tasklink.file_monitor import FileEventHandler, FileMonitor


@pytest.fixture
def calls():
    return []


@pytest.fixture
def handler(calls):
    return FileEventHandler(lambda change, path: calls.append((change, path)), debounce_time=0.5)


def test_create_modify_delete(handler, calls, temp_dir):
    path = str(temp_dir / "Payment.js")
    handler.on_created(FileCreatedEvent(path))
    handler.on_modified(FileModifiedEvent(path))
    handler.on_deleted(FileDeletedEvent(path))

    assert calls == [
        (ChangeType.CREATE, path),
        (ChangeType.MODIFY, path),
        (ChangeType.DELETE, path),
    ]


def test_move_is_delete_then_create(handler, calls, temp_dir):
    old, new = str(temp_dir / "old.py"), str(temp_dir / "new.py")
    handler.on_moved(FileMovedEvent(old, new))
    assert calls == [(ChangeType.DELETE, old), (ChangeType.CREATE, new)]


def test_directory_events_are_ignored(handler, calls, temp_dir):
    handler.on_created(DirCreatedEvent(str(temp_dir / "pkg")))
    assert calls == []


def test_duplicate_events_are_debounced(handler, calls, temp_dir):
    path = str(temp_dir / "Payment.js")
    handler.on_modified(FileModifiedEvent(path))
    handler.on_modified(FileModifiedEvent(path))
    assert calls == [(ChangeType.MODIFY, path)]


def test_debounce_expires(calls, temp_dir):
    handler = FileEventHandler(lambda change, path: calls.append((change, path)), debounce_time=0)
    path = str(temp_dir / "Payment.js")
    handler.on_modified(FileModifiedEvent(path))
    handler.on_modified(FileModifiedEvent(path))
    assert len(calls) == 2


def test_expired_debounce_entries_are_dropped(calls, temp_dir):
    handler = FileEventHandler(lambda change, path: calls.append((change, path)), debounce_time=0)
    for name in ("Payment.js", "Invoice.js", "Refund.js"):
        handler.on_modified(FileModifiedEvent(str(temp_dir / name)))
    assert list(handler.last_processed) == [f"modify:{temp_dir / 'Refund.js'}"]


@pytest.mark.parametrize(
    "relative",
    [
        ".git/HEAD",
        "node_modules/lib/index.js",
        "pkg/__pycache__/mod.cpython-312.pyc",
        ".tasklink.json",
        ".tasklink-session.json",
        "CLAUDE.md",
        "CLAUDE.md.backup.20260101000000",
        "notes.txt.swp",
    ],
)
def test_default_ignore_patterns(handler, calls, temp_dir, relative):
    handler.on_modified(FileModifiedEvent(str(temp_dir / relative)))
    assert calls == []


def test_custom_ignore_pattern(calls, temp_dir):
    handler = FileEventHandler(lambda change, path: calls.append(path), ignore_patterns=[])
    handler.on_modified(FileModifiedEvent(str(temp_dir / ".git" / "HEAD")))
    assert len(calls) == 1


def test_failing_callback_does_not_raise(temp_dir):
    def explode(change, path):
        raise RuntimeError("boom")

    handler = FileEventHandler(explode)
    handler.on_modified(FileModifiedEvent(str(temp_dir / "a.py")))


def test_monitor_requires_existing_directory(temp_dir):
    monitor = FileMonitor(lambda change, path: None)
    with pytest.raises(FileMonitorError):
        monitor.add_watch_path(temp_dir / "missing")


def test_monitor_requires_a_watch_path():
    monitor = FileMonitor(lambda change, path: None)
    with pytest.raises(FileMonitorError):
        monitor.start()


def test_monitor_start_stop(temp_dir):
    monitor = FileMonitor(lambda change, path: None)
    monitor.add_watch_path(temp_dir)
    monitor.add_ignore_pattern("*.log")

    with monitor:
        assert monitor.is_running
    assert not monitor.is_running
    assert "*.log" in monitor.event_handler.ignore_patterns
