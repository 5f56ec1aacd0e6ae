import fnmatch
import os
import time
from collections.abc import Callable
from pathlib import Path
from threading import Lock
from typing import Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from tasklink.core.status import ChangeType
from tasklink.errors import FileMonitorError
from tasklink.utils.rich_console import get_console_logger

logger = get_console_logger()

ChangeCallback = Callable[[ChangeType, str], None]

DEFAULT_IGNORE_PATTERNS = [
    "*/.git/*",
    "*/.hg/*",
    "*/.svn/*",
    "*/node_modules/*",
    "*/__pycache__/*",
    "*/.venv/*",
    "*/venv/*",
    "*/dist/*",
    "*/build/*",
    "*.pyc",
    "*.swp",
    "*~",
    "*/.tasklink.json",
    "*/.tasklink-session.json",
    "*/CLAUDE.md",
    "*/CLAUDE.md.backup.*",
]


class FileEventHandler(FileSystemEventHandler):
    """
    Turns watchdog file events into change callbacks, with debouncing.

    Directory events are ignored. A move is reported as a delete of the old
    path followed by a create of the new one.
    """

    def __init__(
        self,
        callback: ChangeCallback,
        ignore_patterns: Optional[list[str]] = None,
        debounce_time: float = 0.5,
    ) -> None:
        """
        Initialize the event handler.
        Args:
            callback: Called with the change type and the path of the file
            ignore_patterns: fnmatch patterns of paths that are never reported
            debounce_time: Time in seconds to wait before processing duplicate events
        """
        super().__init__()
        self.callback = callback
        self.ignore_patterns = list(DEFAULT_IGNORE_PATTERNS if ignore_patterns is None else ignore_patterns)
        self.debounce_time = debounce_time
        self.last_processed: dict[str, float] = {}
        self._lock = Lock()

    def _matches_ignore_pattern(self, file_path: str) -> bool:
        normalized = file_path.replace(os.sep, "/")
        return any(fnmatch.fnmatch(normalized, pattern) for pattern in self.ignore_patterns)

    def _should_process(self, change_type: ChangeType, file_path: str) -> bool:
        if self._matches_ignore_pattern(file_path):
            return False

        event_key = f"{change_type.value}:{file_path}"
        with self._lock:
            current_time = time.monotonic()
            last_time = self.last_processed.get(event_key)
            if last_time is not None and current_time - last_time < self.debounce_time:
                return False
            self.last_processed = {
                key: seen
                for key, seen in self.last_processed.items()
                if current_time - seen < self.debounce_time
            }
            self.last_processed[event_key] = current_time
        return True

    def _dispatch_change(self, change_type: ChangeType, file_path: str) -> None:
        if not self._should_process(change_type, file_path):
            return
        try:
            self.callback(change_type, file_path)
        except Exception as error:
            # The observer thread must survive a failing callback
            logger.error(f"Error handling {change_type.value} of {file_path}: {error}")

    @staticmethod
    def _path(raw_path) -> str:
        return os.fsdecode(raw_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._dispatch_change(ChangeType.CREATE, self._path(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._dispatch_change(ChangeType.MODIFY, self._path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._dispatch_change(ChangeType.DELETE, self._path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._dispatch_change(ChangeType.DELETE, self._path(event.src_path))
            self._dispatch_change(ChangeType.CREATE, self._path(event.dest_path))


class FileMonitor:
    """
    Watches project directories and reports file changes.
    """

    def __init__(
        self,
        callback: ChangeCallback,
        ignore_patterns: Optional[list[str]] = None,
        debounce_time: float = 0.5,
    ) -> None:
        self.observer = Observer()
        self.event_handler = FileEventHandler(callback, ignore_patterns, debounce_time)
        self.watch_paths: dict[str, bool] = {}  # path -> recursive
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    def add_watch_path(self, watch_path: str | Path, recursive: bool = True) -> None:
        """Add a directory to monitor."""
        watch_path = str(Path(watch_path).resolve())
        if not os.path.isdir(watch_path):
            raise FileMonitorError(f"Watch path does not exist: {watch_path}")
        self.watch_paths[watch_path] = recursive
        if self._is_running:
            self.observer.schedule(self.event_handler, watch_path, recursive=recursive)
            logger.info(f"Added watch path: {watch_path}")

    def add_ignore_pattern(self, pattern: str) -> None:
        self.event_handler.ignore_patterns.append(pattern)
        logger.debug(f"Added ignore pattern: {pattern}")

    def start(self) -> None:
        """Start monitoring."""
        if not self.watch_paths:
            raise FileMonitorError("No watch paths configured")
        if self._is_running:
            logger.warning("Monitor is already running")
            return

        for watch_path, recursive in self.watch_paths.items():
            self.observer.schedule(self.event_handler, watch_path, recursive=recursive)
            logger.info(f"Started monitoring: {watch_path} (recursive={recursive})")

        try:
            self.observer.start()
        except OSError as error:
            raise FileMonitorError(f"Failed to start file monitor: {error}") from error
        self._is_running = True

    def stop(self) -> None:
        """Stop monitoring."""
        if not self._is_running:
            return
        self.observer.stop()
        self.observer.join()
        self.observer = Observer()  # An observer thread can only be started once
        self._is_running = False
        logger.info("File monitor stopped")

    def __enter__(self) -> "FileMonitor":
        """Start monitoring when entering context."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Stop monitoring when exiting context."""
        self.stop()
