# medreminder/reminders/scheduler.py

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Protocol

from medreminder.core.errors import NotificationError
from medreminder.reminders.models import AlertPayload

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


ScheduleFn = Callable[[float, Callable[[], None]], TimerHandle]
OnFire = Callable[[AlertPayload], None]


def threading_schedule(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Primitiva por defecto: un threading.Timer daemon por recordatorio."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ArmedTimer:
    reminder_id: str
    armed_at: datetime
    deadline: datetime
    payload: AlertPayload
    handle: Optional[TimerHandle] = None
    fired: bool = False
    cancelled: bool = False


class ReminderScheduler:
    """
    Un timer diferido por recordatorio activo.

    Estados por id: unarmed -> armed -> fired | cancelled (ambos terminales).
    El check-and-set de `fired` se hace bajo el lock, así que la alerta se
    dispara como mucho una vez aunque cancel() y el disparo coincidan.
    """

    def __init__(
        self,
        schedule: ScheduleFn = threading_schedule,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._schedule = schedule
        self._clock = clock
        self._armed: Dict[str, ArmedTimer] = {}
        self._lock = threading.Lock()

    def arm(self, reminder_id: str, delay_seconds: float, payload: AlertPayload, on_fire: OnFire) -> ArmedTimer:
        armed_at = self._clock()
        timer = ArmedTimer(
            reminder_id=reminder_id,
            armed_at=armed_at,
            deadline=armed_at + timedelta(seconds=delay_seconds),
            payload=payload,
        )

        with self._lock:
            previous = self._armed.pop(reminder_id, None)
            if previous is not None:
                previous.cancelled = True
            self._armed[reminder_id] = timer

        if previous is not None:
            logger.info("Clearing existing timer for reminder %s", reminder_id)
            self._release(previous)

        # Fuera del lock: una primitiva que dispare en el acto no debe bloquearse
        try:
            handle = self._schedule(delay_seconds, lambda: self._fire(timer, on_fire))
        except Exception:
            # Sin timer no puede quedar marcado como armado
            with self._lock:
                if self._armed.get(reminder_id) is timer:
                    del self._armed[reminder_id]
            logger.error("Could not schedule timer for reminder %s", reminder_id)
            raise
        with self._lock:
            timer.handle = handle
            release_now = timer.cancelled
        if release_now:
            # cancel() llegó antes de tener handle
            self._release(timer)

        logger.info("Timer armed for reminder %s: %ss (deadline %s)", reminder_id, delay_seconds, timer.deadline.isoformat())
        return timer

    def cancel(self, reminder_id: str) -> bool:
        with self._lock:
            timer = self._armed.get(reminder_id)
            if timer is None or timer.fired:
                return False
            del self._armed[reminder_id]
            timer.cancelled = True
            handle = timer.handle

        if handle is not None:
            handle.cancel()
        logger.info("Timer cancelled for reminder %s", reminder_id)
        return True

    def _fire(self, timer: ArmedTimer, on_fire: OnFire) -> None:
        with self._lock:
            if timer.fired or timer.cancelled:
                logger.debug("Timer for reminder %s already fired or cancelled, skipping", timer.reminder_id)
                return
            timer.fired = True

        elapsed = (self._clock() - timer.armed_at).total_seconds()
        logger.info("Timer triggered after %.1f seconds for reminder %s", elapsed, timer.reminder_id)
        try:
            on_fire(timer.payload)
        except NotificationError as e:
            logger.error("Error sending alert for reminder %s: %s (code=%s)", timer.reminder_id, e.message, e.code)
        except Exception:
            # Alerta best-effort: sin reintentos, nadie espera el resultado
            logger.exception("Alert for reminder %s failed", timer.reminder_id)
        finally:
            with self._lock:
                if self._armed.get(timer.reminder_id) is timer:
                    del self._armed[timer.reminder_id]
            logger.info("Removed reminder %s from active reminders", timer.reminder_id)

    def _release(self, timer: ArmedTimer) -> None:
        if timer.handle is not None:
            timer.handle.cancel()

    def is_armed(self, reminder_id: str) -> bool:
        with self._lock:
            timer = self._armed.get(reminder_id)
            return timer is not None and not timer.fired

    def get(self, reminder_id: str) -> Optional[ArmedTimer]:
        with self._lock:
            return self._armed.get(reminder_id)

    def armed_ids(self) -> List[str]:
        with self._lock:
            return list(self._armed)

    def shutdown(self) -> int:
        """Cancela todo lo pendiente; devuelve cuántos timers se liberaron."""
        with self._lock:
            pending = [t for t in self._armed.values() if not t.fired]
            for t in pending:
                t.cancelled = True
                del self._armed[t.reminder_id]
        for t in pending:
            self._release(t)
        if pending:
            logger.info("Scheduler shutdown: cancelled %d pending timers", len(pending))
        return len(pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._armed)
