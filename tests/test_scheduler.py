"""Tests del ReminderScheduler: armado, cancelación y disparo como mucho una vez."""
import logging
import threading

import pytest

from medreminder.core.errors import NotificationError
from medreminder.reminders import AlertPayload, ReminderScheduler


def _payload(reminder_id="r1"):
    return AlertPayload(
        reminder_id=reminder_id,
        medicine_name="Aspirin",
        guardian_phone="+15551234567",
        scheduled_time="08:00",
    )


def test_arm_then_cancel_never_fires(scheduler, timers):
    fired = []
    scheduler.arm("r1", 10, _payload(), fired.append)

    assert scheduler.cancel("r1") is True
    assert timers.advance_all() == 0
    assert fired == []
    assert not scheduler.is_armed("r1")


def test_deadline_elapses_fires_exactly_once(scheduler, timers):
    fired = []
    timer = scheduler.arm("r1", 10, _payload(), fired.append)
    timers.advance_all()

    # Segunda invocación del mismo callback (p.ej. carrera en el límite)
    timers.handles[0].run()

    assert fired == [_payload()]
    assert timer.fired is True
    assert len(scheduler) == 0


def test_deadline_is_measured_from_arm_time(scheduler, timers, clock):
    timer = scheduler.arm("r1", 10, _payload(), lambda p: None)

    assert timers.handles[0].delay == 10
    assert (timer.deadline - timer.armed_at).total_seconds() == 10
    assert timer.armed_at == clock.now


def test_rearm_replaces_previous_timer(scheduler, timers):
    fired = []
    scheduler.arm("r1", 10, _payload(), lambda p: fired.append("first"))
    scheduler.arm("r1", 20, _payload(), lambda p: fired.append("second"))

    assert timers.handles[0].cancelled is True
    assert scheduler.armed_ids() == ["r1"]

    # Aun si el timer viejo llegara a ejecutarse, no dispara
    timers.handles[0].run()
    timers.advance_all()

    assert fired == ["second"]


def test_cancel_unknown_or_fired_returns_false(scheduler, timers):
    assert scheduler.cancel("missing") is False

    scheduler.arm("r1", 10, _payload(), lambda p: None)
    timers.advance_all()

    assert scheduler.cancel("r1") is False


def test_cancel_twice_second_returns_false(scheduler):
    scheduler.arm("r1", 10, _payload(), lambda p: None)

    assert scheduler.cancel("r1") is True
    assert scheduler.cancel("r1") is False


def test_cancelled_callback_racing_at_boundary_is_skipped(scheduler, timers):
    fired = []
    scheduler.arm("r1", 10, _payload(), fired.append)
    scheduler.cancel("r1")

    # threading.Timer.cancel() no detiene un callback que ya arrancó
    timers.handles[0].run()

    assert fired == []


def test_cancel_arriving_mid_fire_does_not_suppress_alert(scheduler, timers):
    results = []

    def on_fire(payload):
        results.append(scheduler.cancel(payload.reminder_id))

    scheduler.arm("r1", 10, _payload(), on_fire)
    timers.advance_all()

    assert results == [False]
    assert len(scheduler) == 0


def test_failed_alert_is_swallowed_and_entry_removed(scheduler, timers):
    def boom(payload):
        raise RuntimeError("sink down")

    scheduler.arm("r1", 10, _payload(), boom)
    timers.advance_all()

    assert not scheduler.is_armed("r1")
    assert scheduler.get("r1") is None


def test_in_flight_fire_does_not_remove_newer_timer(scheduler, timers):
    fired = []

    def rearm_during_fire(payload):
        scheduler.arm("r1", 10, _payload(), fired.append)

    scheduler.arm("r1", 10, _payload(), rearm_during_fire)
    timers.handles[0].run()

    assert scheduler.is_armed("r1")
    timers.advance_all()
    assert fired == [_payload()]


def test_shutdown_cancels_pending(scheduler, timers):
    scheduler.arm("a", 10, _payload("a"), lambda p: None)
    scheduler.arm("b", 10, _payload("b"), lambda p: None)

    assert scheduler.shutdown() == 2
    assert all(h.cancelled for h in timers.handles)
    assert len(scheduler) == 0


def test_threading_timer_fires_after_delay():
    scheduler = ReminderScheduler()
    done = threading.Event()
    fired = []

    def on_fire(payload):
        fired.append(payload.reminder_id)
        done.set()

    scheduler.arm("r1", 0.05, _payload(), on_fire)

    assert done.wait(timeout=5)
    assert fired == ["r1"]


def test_threading_timer_cancel_prevents_fire():
    scheduler = ReminderScheduler()
    fired = threading.Event()

    scheduler.arm("r1", 0.2, _payload(), lambda p: fired.set())
    assert scheduler.cancel("r1") is True

    assert not fired.wait(timeout=0.5)


def test_failed_schedule_leaves_nothing_armed(clock):
    def broken_schedule(delay, callback):
        raise RuntimeError("can't start new thread")

    scheduler = ReminderScheduler(schedule=broken_schedule, clock=clock)

    with pytest.raises(RuntimeError):
        scheduler.arm("r1", 10, _payload(), lambda p: None)

    assert scheduler.armed_ids() == []
    assert not scheduler.is_armed("r1")
    assert len(scheduler) == 0


def test_notification_error_is_logged_without_traceback(scheduler, timers, caplog):
    def disabled_sink(payload):
        raise NotificationError("SMS client not initialized")

    scheduler.arm("r1", 10, _payload(), disabled_sink)
    with caplog.at_level(logging.ERROR, logger="medreminder.reminders.scheduler"):
        timers.advance_all()

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].exc_info is None
    assert "SMS client not initialized" in errors[0].getMessage()
    assert not scheduler.is_armed("r1")


def test_unexpected_fire_error_keeps_traceback(scheduler, timers, caplog):
    def boom(payload):
        raise RuntimeError("sink down")

    scheduler.arm("r1", 10, _payload(), boom)
    with caplog.at_level(logging.ERROR, logger="medreminder.reminders.scheduler"):
        timers.advance_all()

    assert any(r.exc_info for r in caplog.records)
