"""Filesystem watching for textsite.

ChangeWatcher subscribes to content, template and configuration paths with a
watchdog Observer and re-runs a build callback when something changes. The
observer thread only enqueues events; the receive loop runs on the calling
thread and filters events through a Debouncer.

Key classes:
- Debouncer: Accepts an event only when the window since the last accepted one has passed.
- ChangeWatcher: Schedules paths and runs the blocking receive loop.
"""

from __future__ import annotations

import logging
import queue
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import SiteError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5

# Renames arrive as "moved"; open/close notifications never change content.
QUALIFYING_EVENTS = frozenset({"created", "modified", "deleted", "moved"})


class Debouncer:
    """Drops events that arrive within a fixed window of the last accepted one.

    Dropped events are not queued for later; an edit landing right after an
    accepted one is lost until the next change.

    Attributes:
        window: Minimum seconds between accepted events.
        last_accepted: Clock reading of the last accepted event, if any.
    """

    def __init__(
        self,
        window: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window = window
        self.clock = clock
        self.last_accepted: float | None = None

    def accept(self) -> bool:
        """Return True and record the time if an event should trigger now."""
        now = self.clock()
        if self.last_accepted is not None and now - self.last_accepted <= self.window:
            return False
        self.last_accepted = now
        return True


class _QueueHandler(FileSystemEventHandler):
    """Pushes qualifying watchdog events into the watcher's queue."""

    def __init__(self, watcher: ChangeWatcher):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if self.watcher.qualifies(event):
            self.watcher.events.put(event)


class ChangeWatcher:
    """Runs a callback whenever watched paths change.

    Attributes:
        debouncer: Debounce filter shared by all events.
        events: Queue filled by the observer thread.
        ignored: Directories whose events are discarded, such as build output.
    """

    def __init__(
        self,
        debouncer: Debouncer | None = None,
        ignored: Iterable[Path] = (),
        observer_factory: Callable[[], Observer] = Observer,
    ):
        self.debouncer = debouncer or Debouncer()
        self.events: queue.Queue[FileSystemEvent] = queue.Queue()
        self.ignored = [Path(path).resolve() for path in ignored]
        self._observer_factory = observer_factory
        self._observer: Observer | None = None
        self._handler = _QueueHandler(self)
        # Files watched through their parent directory.
        self._files: set[Path] = set()
        self._directories: list[Path] = []

    def watch(self, path: Path) -> None:
        """Subscribe to a directory recursively, or to a single file.

        Args:
            path: Directory or file to watch. Missing paths are skipped.
        """
        resolved = Path(path).resolve()
        if self._observer is None:
            self._observer = self._observer_factory()
        if resolved.is_dir():
            self._directories.append(resolved)
            self._observer.schedule(self._handler, str(resolved), recursive=True)
        elif resolved.is_file():
            self._files.add(resolved)
            self._observer.schedule(self._handler, str(resolved.parent), recursive=False)
        else:
            logger.warning("Not watching missing path %s", path)

    def qualifies(self, event: FileSystemEvent) -> bool:
        """Decide whether an event may trigger a rebuild."""
        if event.event_type not in QUALIFYING_EVENTS:
            return False
        paths = [Path(str(event.src_path)).resolve()]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(Path(str(dest)).resolve())
        return any(self._is_watched(path) for path in paths)

    def _is_watched(self, path: Path) -> bool:
        for ignored in self.ignored:
            if path == ignored or ignored in path.parents:
                return False
        if path in self._files:
            return True
        return any(path == root or root in path.parents for root in self._directories)

    def run(self, callback: Callable[[], object], max_events: int | None = None) -> None:
        """Block on the event queue and invoke callback for accepted events.

        The loop runs until the process ends. Build failures raised by the
        callback are logged and the loop keeps waiting.

        Args:
            callback: Rebuild function.
            max_events: Stop after consuming this many events; None runs forever.
        """
        if self._observer is not None and not self._observer.is_alive():
            self._observer.start()
        consumed = 0
        while max_events is None or consumed < max_events:
            event = self.events.get()
            consumed += 1
            if not self.debouncer.accept():
                logger.debug("Dropping debounced event for %s", event.src_path)
                continue
            logger.info("Change detected in %s; rebuilding", event.src_path)
            try:
                callback()
            except (SiteError, OSError) as exc:
                logger.error("Build failed: %s", exc)

    def stop(self) -> None:
        if self._observer is not None and self._observer.is_alive():
            self._observer.stop()
            self._observer.join()
