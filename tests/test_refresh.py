"""
Tests for RefreshLoop.

Covers:
- run_once: executes the task, skips while inactive, contains failures
- Threaded loop: passes run, never overlap, stop() cancels re-arming
"""
import threading
import time

from refresh import RefreshLoop


def test_run_once_returns_task_result():
    loop = RefreshLoop(lambda: "frame")
    assert loop.run_once() == "frame"
    assert loop.passes == 1


def test_run_once_skips_when_inactive():
    calls = []
    loop = RefreshLoop(lambda: calls.append(1), is_active=lambda: False)
    assert loop.run_once() is None
    assert calls == []
    assert loop.passes == 0


def test_failure_does_not_escape_pass():
    def boom():
        raise ValueError("bad snapshot")

    loop = RefreshLoop(boom)
    assert loop.run_once() is None
    assert loop.passes == 0


def test_thread_runs_and_stops():
    ticked = threading.Event()
    loop = RefreshLoop(ticked.set, interval=0.001)
    loop.start()
    try:
        assert ticked.wait(2.0)
        assert loop.running
    finally:
        loop.stop()
    assert not loop.running
    count = loop.passes
    time.sleep(0.05)
    assert loop.passes == count


def test_passes_never_overlap():
    in_flight = []
    overlaps = []
    done = threading.Event()

    def task():
        in_flight.append(1)
        if len(in_flight) > 1:
            overlaps.append(len(in_flight))
        time.sleep(0.002)
        in_flight.pop()
        if loop.passes >= 5:
            done.set()

    loop = RefreshLoop(task, interval=0.0)
    loop.start()
    try:
        assert done.wait(2.0)
    finally:
        loop.stop()
    assert overlaps == []


def test_start_is_idempotent():
    loop = RefreshLoop(lambda: None, interval=0.01)
    loop.start()
    first = loop._thread
    loop.start()
    assert loop._thread is first
    loop.stop()


def test_idle_loop_does_no_work():
    calls = []
    loop = RefreshLoop(lambda: calls.append(1), interval=0.001,
                       is_active=lambda: False, idle_interval=0.001)
    loop.start()
    time.sleep(0.05)
    loop.stop()
    assert calls == []
