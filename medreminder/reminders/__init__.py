from medreminder.reminders.models import AlertPayload, ArmedReminder, ReminderRecord
from medreminder.reminders.scheduler import ArmedTimer, ReminderScheduler, threading_schedule
from medreminder.reminders.service import ReminderService
from medreminder.reminders.store import ReminderStore

__all__ = [
    "AlertPayload",
    "ArmedReminder",
    "ArmedTimer",
    "ReminderRecord",
    "ReminderScheduler",
    "ReminderService",
    "ReminderStore",
    "threading_schedule",
]
