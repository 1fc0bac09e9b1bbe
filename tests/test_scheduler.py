import threading
import time

from apscheduler.schedulers.base import STATE_STOPPED

from app.services.scheduler import PeriodicTask


def test_interval_below_one_minute_falls_back_to_default():
    assert PeriodicTask("t", lambda: None, 0).interval_minutes == 5
    assert PeriodicTask("t", lambda: None, -3).interval_minutes == 5
    assert PeriodicTask("t", lambda: None, 2).interval_minutes == 2


def test_first_run_happens_on_start():
    ran = threading.Event()
    task = PeriodicTask("immediate", ran.set, 60)

    task.start()
    try:
        assert ran.wait(5)
        status = task.get_status()
        assert status["running"] is True
        assert [job["id"] for job in status["jobs"]] == ["immediate"]
    finally:
        task.stop()

    assert task.running is False


def test_disabled_task_does_not_start():
    calls = []
    task = PeriodicTask("off", lambda: calls.append(1), 1, enabled=False)

    task.start()
    task.stop()

    assert calls == []
    assert task.get_status() == {"name": "off", "enabled": False, "running": False, "jobs": []}


def test_failing_run_is_contained():
    def explode():
        raise RuntimeError("boom")

    PeriodicTask("failing", explode, 1)._run()


def test_start_twice_keeps_one_scheduler():
    ran = threading.Event()
    task = PeriodicTask("once", ran.set, 60)

    task.start()
    first = task._scheduler
    task.start()
    try:
        assert task._scheduler is first
    finally:
        task.stop()


def test_stop_shuts_scheduler_down_for_good():
    calls = []
    task = PeriodicTask("stoppable", lambda: calls.append(1), 1)

    task.start()
    scheduler = task._scheduler
    deadline = time.monotonic() + 5
    while not calls and time.monotonic() < deadline:
        time.sleep(0.01)
    task.stop()

    assert calls == [1]
    assert task._scheduler is None
    assert scheduler.state == STATE_STOPPED
    assert scheduler.get_jobs() == []
    assert task.get_status()["jobs"] == []

    time.sleep(0.2)
    assert calls == [1]
