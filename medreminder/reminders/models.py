# medreminder/reminders/models.py

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

ReminderStatus = Literal["active", "taken"]


@dataclass
class ReminderRecord:
    id: str
    medicine_name: Optional[str]
    guardian_phone: Optional[str]
    scheduled_time: Optional[str]
    created_at: datetime
    status: ReminderStatus = "active"
    taken_at: Optional[datetime] = None


@dataclass(frozen=True)
class AlertPayload:
    """Copia de los datos del recordatorio al armar el timer (no se vuelve a leer del store)."""

    reminder_id: str
    medicine_name: Optional[str]
    guardian_phone: str
    scheduled_time: Optional[str]


@dataclass
class ArmedReminder:
    record: ReminderRecord
    started_at: datetime
    deadline: datetime
