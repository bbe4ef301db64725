"""Tests for the auto-refresh scheduler."""

import threading
import time

import pytest

from rich_cores.refresh import AutoRefresher


def live_threads(name):
    return [t for t in threading.enumerate() if t.name.startswith(name) and t.is_alive()]


class TestAutoRefresher:
    def test_ticks_until_stopped(self):
        ticked = threading.Event()
        count = []

        def tick():
            count.append(1)
            if len(count) >= 3:
                ticked.set()

        refresher = AutoRefresher(tick, name="ticks")
        refresher.start(0.01)
        try:
            assert ticked.wait(2)
        finally:
            refresher.stop()
        assert not refresher.is_running

    def test_rejects_non_positive_interval(self):
        refresher = AutoRefresher(lambda: None)
        with pytest.raises(ValueError):
            refresher.start(0)
        with pytest.raises(ValueError):
            refresher.start(-1)
        assert not refresher.is_running

    def test_start_twice_leaves_one_thread(self):
        refresher = AutoRefresher(lambda: None, name="twice")
        refresher.start(0.05)
        first = refresher.thread
        assert refresher.start(0.05) is True
        try:
            first.join(1)
            assert not first.is_alive()
            assert len(live_threads("twice")) == 1
            assert refresher.interval == 0.05
        finally:
            refresher.stop()

    def test_stop_idempotent(self):
        refresher = AutoRefresher(lambda: None)
        assert refresher.stop() is False
        refresher.start(0.05)
        assert refresher.stop() is True
        assert refresher.stop() is False
        assert refresher.interval is None

    def test_restart_after_stop(self):
        ticked = threading.Event()
        refresher = AutoRefresher(ticked.set, name="restart")
        refresher.start(10)
        refresher.stop()
        refresher.start(0.01)
        try:
            assert ticked.wait(2)
        finally:
            refresher.stop()

    def test_failing_tick_keeps_ticking(self):
        calls = []
        recovered = threading.Event()

        def tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            recovered.set()

        refresher = AutoRefresher(tick, name="failing")
        refresher.start(0.01)
        try:
            assert recovered.wait(2)
        finally:
            refresher.stop()

    def test_stop_from_tick(self):
        stopped = threading.Event()

        def tick():
            refresher.stop()
            stopped.set()

        refresher = AutoRefresher(tick, name="selfstop")
        refresher.start(0.01)
        assert stopped.wait(2)
        assert not refresher.is_running

    def test_stop_does_not_wait_for_slow_tick(self):
        entered = threading.Event()
        release = threading.Event()

        def tick():
            entered.set()
            release.wait(5)

        refresher = AutoRefresher(tick, name="slow")
        refresher.start(0.01)
        try:
            assert entered.wait(2)
            started = time.monotonic()
            assert refresher.stop() is True
            assert time.monotonic() - started < 0.5
            assert not refresher.is_running
        finally:
            release.set()
        for thread in live_threads("slow"):
            thread.join(1)
        assert live_threads("slow") == []
