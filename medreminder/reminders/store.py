# medreminder/reminders/store.py

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from medreminder.core.errors import NotFound, ValidationError
from medreminder.reminders.models import ReminderRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReminderStore:
    """
    Registro en memoria de todos los recordatorios creados (activos y tomados).

    - Reusar un id sobrescribe el registro y lo vuelve a 'active'.
    - 'taken' es terminal: takenAt se fija una sola vez.
    - Sin límite de retención; vive lo que vive el proceso.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._records: Dict[str, ReminderRecord] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def create(
        self,
        reminder_id: str,
        medicine_name: Optional[str],
        guardian_phone: Optional[str],
        scheduled_time: Optional[str],
    ) -> ReminderRecord:
        if not reminder_id:
            raise ValidationError("Missing reminder ID")
        record = ReminderRecord(
            id=reminder_id,
            medicine_name=medicine_name,
            guardian_phone=guardian_phone,
            scheduled_time=scheduled_time,
            created_at=self._clock(),
        )
        with self._lock:
            # dict conserva la posición original de una clave reasignada
            self._records[reminder_id] = record
            return replace(record)

    def get(self, reminder_id: str) -> ReminderRecord:
        with self._lock:
            record = self._records.get(reminder_id)
            if record is None:
                raise NotFound("Reminder not found")
            return replace(record)

    def mark_taken(self, reminder_id: str, taken_at: Optional[datetime] = None) -> ReminderRecord:
        with self._lock:
            record = self._records.get(reminder_id)
            if record is None:
                raise NotFound("Reminder not found")
            if record.status != "taken":
                record.status = "taken"
                record.taken_at = taken_at or self._clock()
            return replace(record)

    def list(self) -> List[ReminderRecord]:
        with self._lock:
            return [replace(r) for r in self._records.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
