# medreminder/reminders/service.py

import logging
from typing import List, Optional

from medreminder.core import config
from medreminder.core.errors import InvalidPhoneFormat, ValidationError
from medreminder.integrations.sms_client import NotificationSink, SmsDelivery
from medreminder.reminders.models import AlertPayload, ArmedReminder, ReminderRecord
from medreminder.reminders.scheduler import ReminderScheduler
from medreminder.reminders.store import ReminderStore

logger = logging.getLogger(__name__)

ALERT_TEMPLATE = (
    "Alert: Your loved one has not taken their {medicine} medication "
    "which was scheduled for {time}. Please check on them."
)


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and phone.startswith("+")


def build_alert_body(payload: AlertPayload) -> str:
    return ALERT_TEMPLATE.format(medicine=payload.medicine_name, time=payload.scheduled_time)


class ReminderService:
    def __init__(
        self,
        store: ReminderStore,
        scheduler: ReminderScheduler,
        sink: NotificationSink,
        alert_delay: Optional[float] = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.sink = sink
        self.alert_delay = config.alert_delay_seconds() if alert_delay is None else alert_delay

    def create_reminder(
        self,
        reminder_id: Optional[str],
        medicine_name: Optional[str],
        guardian_phone: Optional[str],
        scheduled_time: Optional[str],
    ) -> ArmedReminder:
        if not reminder_id:
            raise ValidationError("Missing reminder ID")

        # El registro se guarda antes de validar el teléfono (el cliente lo ve en la lista aunque falle)
        record = self.store.create(reminder_id, medicine_name, guardian_phone, scheduled_time)

        if not is_valid_phone(guardian_phone):
            logger.warning("Invalid phone number format for reminder %s: %s", reminder_id, guardian_phone)
            raise InvalidPhoneFormat()

        payload = AlertPayload(
            reminder_id=reminder_id,
            medicine_name=medicine_name,
            guardian_phone=guardian_phone,
            scheduled_time=scheduled_time,
        )
        timer = self.scheduler.arm(reminder_id, self.alert_delay, payload, self.send_alert)
        logger.info("Reminder %s set up (%s), %d active timers", reminder_id, medicine_name, len(self.scheduler))
        return ArmedReminder(record=record, started_at=timer.armed_at, deadline=timer.deadline)

    def mark_taken(self, reminder_id: str) -> ReminderRecord:
        if not reminder_id:
            raise ValidationError("Invalid reminder ID")
        try:
            record = self.store.mark_taken(reminder_id)
        finally:
            try:
                self.scheduler.cancel(reminder_id)
            except Exception:
                logger.exception("Error while cancelling timer for reminder %s", reminder_id)
        logger.info("Reminder %s marked as taken at %s", reminder_id, record.taken_at)
        return record

    def list_reminders(self) -> List[ReminderRecord]:
        return self.store.list()

    def send_alert(self, payload: AlertPayload) -> SmsDelivery:
        logger.info("Sending missed-dose SMS for reminder %s to %s", payload.reminder_id, payload.guardian_phone)
        delivery = self.sink.send(payload.guardian_phone, build_alert_body(payload))
        logger.info("SMS sent for reminder %s: sid=%s status=%s", payload.reminder_id, delivery.sid, delivery.status)
        return delivery

    def send_test_sms(self, phone: Optional[str], body: str, validate_phone: bool = False) -> SmsDelivery:
        if validate_phone and not is_valid_phone(phone):
            raise InvalidPhoneFormat()
        if not phone:
            raise ValidationError("Missing phone number")
        logger.info("Sending test SMS to %s", phone)
        return self.sink.send(phone, body)

    def shutdown(self) -> None:
        self.scheduler.shutdown()
