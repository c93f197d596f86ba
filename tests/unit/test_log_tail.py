"""Tests for LogTail — appended-line detection, truncation, recreation."""

from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from logrelay.core.log_tail import LogTail, TailObserver


class _Collector:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.errors: list[str] = []


@pytest.fixture
def collector() -> _Collector:
    return _Collector()


@pytest.fixture
def make_tail(collector: _Collector, idle_interval: float):
    tails: list[LogTail] = []

    def _factory(path: Path, **kwargs) -> LogTail:
        kwargs.setdefault("interval", idle_interval)
        tail = LogTail(path, collector.lines.append, collector.errors.append, **kwargs)
        tails.append(tail)
        return tail

    yield _factory
    for tail in tails:
        tail.unwatch()


class TestLogTail:
    def test_emits_appended_lines(self, tmp_path, collector, make_tail, append):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log)
        tail.watch()

        append(log, "hello\nworld\r\n")
        tail.poll()

        assert collector.lines == ["hello", "world"]
        assert collector.errors == []

    def test_existing_content_is_not_replayed(self, tmp_path, collector, make_tail, append):
        log = tmp_path / "out.log"
        log.write_text("old line\n")
        tail = make_tail(log)
        tail.watch()

        append(log, "new line\n")
        tail.poll()

        assert collector.lines == ["new line"]

    def test_partial_line_waits_for_newline(self, tmp_path, collector, make_tail, append):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log)
        tail.watch()

        append(log, "hel")
        tail.poll()
        assert collector.lines == []

        append(log, "lo\n")
        tail.poll()
        assert collector.lines == ["hello"]

    def test_file_created_after_watch_is_read_from_start(self, tmp_path, collector, make_tail):
        log = tmp_path / "late.log"
        tail = make_tail(log)
        tail.watch()

        tail.poll()
        log.write_text("first\n")
        tail.poll()

        assert collector.lines == ["first"]

    def test_truncation_restarts_from_zero(self, tmp_path, collector, make_tail, append):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log)
        tail.watch()

        append(log, "a long first line\n")
        tail.poll()
        with open(log, "w", encoding="utf-8") as fh:
            fh.write("b\n")
        tail.poll()

        assert collector.lines == ["a long first line", "b"]

    def test_recreated_file_is_followed(self, tmp_path, collector, make_tail, append):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log)
        tail.watch()

        append(log, "before\n")
        tail.poll()
        os.remove(log)
        tail.poll()
        log.write_text("after rotation\n")
        tail.poll()

        assert collector.lines == ["before", "after rotation"]

    def test_poll_without_changes_emits_nothing(self, tmp_path, collector, make_tail):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log)
        tail.watch()

        tail.poll()
        tail.poll()

        assert collector.lines == []

    def test_unwatch_stops_delivery(self, tmp_path, collector, make_tail, append):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log)
        tail.watch()
        tail.unwatch()

        append(log, "ignored\n")
        tail.poll()

        assert collector.lines == []
        assert tail.watching is False

    def test_unwatch_is_idempotent(self, tmp_path, make_tail):
        tail = make_tail(tmp_path / "out.log")
        tail.unwatch()
        tail.watch()
        tail.unwatch()
        tail.unwatch()
        assert tail.watching is False

    def test_missing_directory_reports_error(self, tmp_path, collector, make_tail):
        tail = make_tail(tmp_path / "nope" / "out.log")
        tail.watch()

        assert len(collector.errors) == 1
        assert "does not exist" in collector.errors[0]

    def test_unreadable_path_reports_error(self, tmp_path, collector, make_tail):
        log = tmp_path / "out.log"
        tail = make_tail(log)
        tail.watch()
        log.mkdir()
        (log / "filler").write_text("x" * 10)

        tail.poll()

        assert collector.errors == [f"Cannot tail {log}: not a regular file"]
        assert collector.lines == []

    def test_dispatch_receives_reads(self, tmp_path, collector, make_tail, append):
        scheduled = []
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log, dispatch=lambda fn, *args: scheduled.append(fn))
        tail.watch()

        append(log, "queued\n")
        tail.notify()
        assert collector.lines == []

        for fn in scheduled:
            fn()
        assert collector.lines == ["queued"]

    def test_observer_picks_up_appends(self, tmp_path, collector, make_tail, append, wait_for):
        log = tmp_path / "out.log"
        log.write_text("")
        tail = make_tail(log, interval=0.05)
        tail.watch()

        append(log, "seen by the observer\n")

        assert wait_for(lambda: collector.lines == ["seen by the observer"])


class TestNonRegularPath:
    def test_directory_at_path_reported_on_watch(self, tmp_path, collector, make_tail):
        log = tmp_path / "out.log"
        log.mkdir()
        tail = make_tail(log)

        tail.watch()

        assert collector.errors == [f"Cannot tail {log}: not a regular file"]

    def test_directory_created_at_path_reported_by_observer(
        self, tmp_path, collector, make_tail, wait_for
    ):
        log = tmp_path / "out.log"
        tail = make_tail(log, interval=0.05)
        tail.watch()

        log.mkdir()

        assert wait_for(lambda: any("not a regular file" in e for e in collector.errors))
        assert collector.lines == []


class TestTailObserver:
    @pytest.fixture
    def observer(self, idle_interval):
        shared = TailObserver(idle_interval)
        yield shared
        shared.stop()

    def _tail(self, path, observer, sink=None):
        sink = [] if sink is None else sink
        return LogTail(path, sink.append, sink.append, observer=observer)

    def test_one_watch_per_directory(self, tmp_path, observer):
        tails = [self._tail(tmp_path / f"app{i}.log", observer) for i in range(10)]
        for tail in tails:
            tail.watch()

        assert observer.directories == [str(tmp_path)]

        for tail in tails[:-1]:
            tail.unwatch()
        assert observer.directories == [str(tmp_path)]

        tails[-1].unwatch()
        assert observer.directories == []

    def test_threads_do_not_grow_with_tails(self, tmp_path, observer):
        before = threading.active_count()
        tails = [self._tail(tmp_path / f"app{i}.log", observer) for i in range(20)]
        for tail in tails:
            tail.watch()

        # One dispatch thread plus one emitter for the shared directory.
        assert threading.active_count() - before <= 2

        for tail in tails:
            tail.unwatch()

    def test_separate_directories_get_separate_watches(self, tmp_path, observer):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        first = self._tail(tmp_path / "a" / "x.log", observer)
        second = self._tail(tmp_path / "b" / "x.log", observer)
        first.watch()
        second.watch()

        assert sorted(observer.directories) == [str(tmp_path / "a"), str(tmp_path / "b")]

        first.unwatch()
        assert observer.directories == [str(tmp_path / "b")]
        second.unwatch()

    def test_unwatch_leaves_shared_observer_running(self, tmp_path, observer):
        tail = self._tail(tmp_path / "out.log", observer)
        tail.watch()
        tail.unwatch()

        assert observer.running is True

        observer.stop()
        assert observer.running is False

    def test_add_after_stop_starts_a_new_observer(self, tmp_path, observer):
        observer.stop()
        tail = self._tail(tmp_path / "out.log", observer)

        tail.watch()

        assert observer.running is True
        assert observer.directories == [str(tmp_path)]
        tail.unwatch()

    def test_private_observer_stops_with_tail(self, tmp_path, make_tail):
        tail = make_tail(tmp_path / "out.log")
        tail.watch()
        assert tail.observer.running is True

        tail.unwatch()

        assert tail.observer.running is False

    def test_remove_unknown_tail_is_noop(self, tmp_path, observer):
        observer.remove(self._tail(tmp_path / "out.log", observer))
        assert observer.directories == []

    def test_changes_reach_only_the_matching_tail(self, tmp_path, append, wait_for):
        shared = TailObserver(0.05)
        out_lines: list[str] = []
        other_lines: list[str] = []
        out = tmp_path / "out.log"
        other = tmp_path / "other.log"
        out.write_text("")
        other.write_text("")
        tails = [self._tail(out, shared, out_lines), self._tail(other, shared, other_lines)]
        try:
            for tail in tails:
                tail.watch()

            append(out, "only here\n")

            assert wait_for(lambda: out_lines == ["only here"])
            assert other_lines == []
        finally:
            for tail in tails:
                tail.unwatch()
            shared.stop()

    def test_two_tails_on_one_file_both_receive(self, tmp_path, append, wait_for):
        shared = TailObserver(0.05)
        first: list[str] = []
        second: list[str] = []
        log = tmp_path / "combined.log"
        log.write_text("")
        tails = [self._tail(log, shared, first), self._tail(log, shared, second)]
        try:
            for tail in tails:
                tail.watch()

            append(log, "both\n")

            assert wait_for(lambda: first == ["both"] and second == ["both"])
        finally:
            for tail in tails:
                tail.unwatch()
            shared.stop()
