from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import pytest
from fastapi.testclient import TestClient

from main import create_app
from medreminder.api.auth.auth_service import AuthService
from medreminder.core.errors import NotificationError
from medreminder.integrations.sms_client import SmsDelivery
from medreminder.reminders import ReminderScheduler, ReminderService, ReminderStore


class ManualHandle:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.ran = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        """Invoca el callback aunque esté cancelado (simula la carrera en el límite)."""
        self.ran = True
        self.callback()


class ManualTimers:
    """Sustituto de threading.Timer: nada dispara hasta que el test lo pide."""

    def __init__(self):
        self.handles: List[ManualHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def pending(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.ran]

    def advance_all(self) -> int:
        due = self.pending()
        for h in due:
            h.run()
        return len(due)


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingSink:
    enabled = True

    def __init__(self):
        self.sent = []

    def send(self, to, body, sender=None):
        self.sent.append((to, body))
        return SmsDelivery(sid=f"SM{len(self.sent):04d}", status="queued", to=to, sender=sender or "+10000000000")


class FailingSink:
    enabled = True

    def __init__(self):
        self.attempts = 0

    def send(self, to, body, sender=None):
        self.attempts += 1
        raise NotificationError("The 'To' number is not a valid phone number.", code=21211, status=400)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def store(clock):
    return ReminderStore(clock=clock)


@pytest.fixture
def scheduler(timers, clock):
    return ReminderScheduler(schedule=timers, clock=clock)


@pytest.fixture
def service(store, scheduler, sink):
    return ReminderService(store=store, scheduler=scheduler, sink=sink, alert_delay=10)


@pytest.fixture
def client(service):
    app = create_app(reminder_service=service, auth_service=AuthService())
    return TestClient(app)
