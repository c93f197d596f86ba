"""Poll-based tail of a single log file.

A ``LogTail`` follows one file the way ``tail -F`` does: it starts at the
current end of the file, emits every complete line appended afterwards,
and survives the file being truncated or replaced.

Change detection uses watchdog's ``PollingObserver`` (stat snapshots on
a fixed interval) rather than native filesystem notifications, which do
not fire reliably for every writer and platform.  Tails share a
``TailObserver``: one observer thread, and one scheduled watch per
directory however many tails live in it.  Each change notification is
handed to a ``dispatch`` callable so the actual read happens wherever
the owner wants it: inline on the watcher thread, or on an asyncio loop
via ``loop_dispatch``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.api import ObservedWatch
from watchdog.observers.polling import PollingObserver

from logrelay.core.framing import split_lines

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1

Dispatch = Callable[..., Any]


def inline(callback: Callable[..., Any], *args: Any) -> None:
    """Run *callback* immediately on the calling thread."""
    callback(*args)


def loop_dispatch(loop: asyncio.AbstractEventLoop) -> Dispatch:
    """Return a dispatcher that schedules callbacks on *loop*."""
    return loop.call_soon_threadsafe


# ---------------------------------------------------------------------------
# Shared observer
# ---------------------------------------------------------------------------


class _DirectoryHandler(FileSystemEventHandler):
    """Forwards events in one directory to the tails following them."""

    def __init__(self) -> None:
        super().__init__()
        # Replaced, never mutated, so the observer thread can read it unlocked.
        self.tails: dict[str, tuple[LogTail, ...]] = {}

    def on_any_event(self, event: FileSystemEvent) -> None:
        tails = self.tails
        for path in (event.src_path, getattr(event, "dest_path", "")):
            if not path:
                continue
            for tail in tails.get(os.fsdecode(path), ()):
                tail.notify()


class TailObserver:
    """One ``PollingObserver`` shared by any number of ``LogTail`` objects.

    A directory is scheduled when its first tail is added and unscheduled
    when its last tail is removed, so idle cost grows with the number of
    files in the watched directories and not with the number of tails.
    The observer thread starts on the first ``add`` and ``stop`` ends it;
    a later ``add`` starts a fresh one.

    Parameters
    ----------
    interval:
        Polling interval in seconds.
    """

    def __init__(self, interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self._interval = interval
        self._lock = threading.Lock()
        self._observer: PollingObserver | None = None
        self._watches: dict[str, tuple[ObservedWatch, _DirectoryHandler]] = {}

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._observer is not None

    @property
    def directories(self) -> list[str]:
        """Directories currently scheduled on the observer."""
        return list(self._watches)

    def add(self, tail: LogTail) -> None:
        """Deliver change notifications for *tail*'s file to it.

        Raises
        ------
        OSError
            If the observer thread or the directory watch cannot start.
        """
        directory = str(tail.path.parent)
        with self._lock:
            if self._observer is None:
                observer = PollingObserver(timeout=self._interval)
                observer.start()
                self._observer = observer
                logger.debug("Started file observer polling every %.3fs", self._interval)
            entry = self._watches.get(directory)
            if entry is None:
                handler = _DirectoryHandler()
                watch = self._observer.schedule(handler, directory, recursive=False)
                entry = self._watches[directory] = (watch, handler)
                logger.debug("Watching directory %s", directory)
            handler = entry[1]
            following = handler.tails.get(tail.path_str, ())
            if tail not in following:
                handler.tails = {**handler.tails, tail.path_str: (*following, tail)}

    def remove(self, tail: LogTail) -> None:
        """Stop notifying *tail*.  No-op if it was never added."""
        directory = str(tail.path.parent)
        with self._lock:
            entry = self._watches.get(directory)
            if entry is None:
                return
            watch, handler = entry
            following = handler.tails.get(tail.path_str, ())
            if tail not in following:
                return
            tails = dict(handler.tails)
            rest = tuple(t for t in following if t is not tail)
            if rest:
                tails[tail.path_str] = rest
            else:
                del tails[tail.path_str]
            handler.tails = tails
            if handler.tails:
                return
            del self._watches[directory]
            if self._observer is not None:
                self._observer.unschedule(watch)
            logger.debug("Stopped watching directory %s", directory)

    def stop(self) -> None:
        """Stop the observer thread and forget every watch."""
        with self._lock:
            observer, self._observer = self._observer, None
            self._watches.clear()
        if observer is not None:
            # The observer thread exits on its next tick; not joined so the
            # caller never waits on a poll interval.
            observer.stop()
            logger.debug("Stopped file observer")

    def __repr__(self) -> str:
        return f"TailObserver(interval={self._interval}, directories={self.directories})"


# ---------------------------------------------------------------------------
# Tail
# ---------------------------------------------------------------------------


class LogTail:
    """Follows appended lines of one file.

    Parameters
    ----------
    path:
        File to follow.  It does not have to exist yet, but its parent
        directory does.
    on_line:
        Called with each complete line, without its line terminator.
    on_error:
        Called with a message when the file cannot be watched or read.
    interval:
        Polling interval in seconds, used only when the tail owns its
        observer.
    encoding:
        Text encoding of the file.  Undecodable bytes are replaced.
    dispatch:
        Callable used to run reads triggered by the observer thread.
    observer:
        Shared observer to register with.  Without one the tail starts a
        private observer and stops it again on ``unwatch``.
    """

    def __init__(
        self,
        path: Path | str,
        on_line: Callable[[str], None],
        on_error: Callable[[str], None],
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        encoding: str = "utf-8",
        dispatch: Dispatch = inline,
        observer: TailObserver | None = None,
    ) -> None:
        self._path = Path(path).absolute()
        self.path_str = str(self._path)
        self._on_line = on_line
        self._on_error = on_error
        self._encoding = encoding
        self._dispatch = dispatch
        self._owns_observer = observer is None
        self._observer = observer if observer is not None else TailObserver(interval)

        self._lock = threading.RLock()
        self._registered = False
        self._watching = False
        self._offset = 0
        self._inode: int | None = None
        self._pending = b""

    @property
    def path(self) -> Path:
        return self._path

    @property
    def watching(self) -> bool:
        return self._watching

    @property
    def observer(self) -> TailObserver:
        return self._observer

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def watch(self) -> None:
        """Start following the file.  Returns without waiting for data."""
        with self._lock:
            if self._watching:
                return
            self._reset_position()
            self._watching = True

        directory = self._path.parent
        if not directory.is_dir():
            self._report(f"Cannot tail {self._path}: directory {directory} does not exist")
            return
        if self._path.exists() and not self._path.is_file():
            self._report(f"Cannot tail {self._path}: not a regular file")

        try:
            self._observer.add(self)
        except OSError as exc:
            self._report(f"Cannot tail {self._path}: {exc}")
            return

        with self._lock:
            raced = not self._watching
            self._registered = not raced
        if raced:
            # unwatch() ran during start-up; never release under the tail lock
            self._release()
            return
        logger.debug("Tailing %s every %.3fs", self._path, self._observer.interval)

    def unwatch(self) -> None:
        """Stop following the file.  Safe to call at any time."""
        with self._lock:
            registered, self._registered = self._registered, False
            was_watching, self._watching = self._watching, False
            self._pending = b""
        if registered:
            self._release()
        if was_watching:
            logger.debug("Stopped tailing %s", self._path)

    def _release(self) -> None:
        self._observer.remove(self)
        if self._owns_observer:
            self._observer.stop()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def notify(self) -> None:
        """Schedule a read pass through the dispatcher."""
        if self._watching:
            self._dispatch(self.poll)

    def poll(self) -> None:
        """Read whatever was appended since the last pass and emit lines."""
        with self._lock:
            if not self._watching:
                return
            chunk = self._read_appended()
            if not chunk:
                return
            data = self._pending + chunk
            cut = data.rfind(b"\n") + 1
            self._pending = data[cut:]
            if cut == 0:
                return
            for line in split_lines(data[:cut].decode(self._encoding, errors="replace")):
                self._on_line(line)

    def _reset_position(self) -> None:
        self._pending = b""
        try:
            st = os.stat(self._path)
        except OSError:
            self._offset = 0
            self._inode = None
            return
        self._offset = st.st_size
        self._inode = st.st_ino

    def _read_appended(self) -> bytes:
        try:
            st = os.stat(self._path)
        except FileNotFoundError:
            # Removed or rotated away; pick the new file up from its start.
            self._offset = 0
            self._inode = None
            self._pending = b""
            return b""
        except OSError as exc:
            self._report(f"Cannot stat {self._path}: {exc}")
            return b""

        if not stat.S_ISREG(st.st_mode):
            self._report(f"Cannot tail {self._path}: not a regular file")
            return b""

        if st.st_ino != self._inode or st.st_size < self._offset:
            if self._inode is not None:
                logger.debug("%s was truncated or replaced, rereading", self._path)
            self._inode = st.st_ino
            self._offset = 0
            self._pending = b""

        if st.st_size == self._offset:
            return b""

        try:
            with open(self._path, "rb") as fh:
                fh.seek(self._offset)
                chunk = fh.read(st.st_size - self._offset)
        except OSError as exc:
            self._report(f"Cannot read {self._path}: {exc}")
            return b""

        self._offset += len(chunk)
        return chunk

    def _report(self, message: str) -> None:
        logger.debug(message)
        self._on_error(message)

    def __repr__(self) -> str:
        state = "watching" if self._watching else "idle"
        return f"LogTail({self.path_str!r}, {state})"
