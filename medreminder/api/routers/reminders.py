# medreminder/api/routers/reminders.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from medreminder.core.deps import get_reminder_service
from medreminder.core.errors import NotFound, ValidationError
from medreminder.reminders.service import ReminderService
from medreminder.schemas.reminders import (
    ReminderCreate,
    ReminderCreatedOut,
    ReminderOut,
    ReminderTakenOut,
    ReminderTimerDetails,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.post("", response_model=ReminderCreatedOut)
def create_reminder(
    body: ReminderCreate,
    service: ReminderService = Depends(get_reminder_service),
):
    reminder_id = str(body.reminder_id) if body.reminder_id is not None else None
    logger.info("Setting up reminder %s (%s) for %s at %s", reminder_id, body.medicine_name, body.guardian_phone, body.time)
    try:
        armed = service.create_reminder(reminder_id, body.medicine_name, body.guardian_phone, body.time)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return ReminderCreatedOut(
        message="Reminder timer set successfully",
        details=ReminderTimerDetails(
            reminder_id=armed.record.id,
            start_time=armed.started_at,
            scheduled_sms_time=armed.deadline,
        ),
    )


@router.post("/{reminder_id}/taken", response_model=ReminderTakenOut)
def mark_reminder_taken(
    reminder_id: str,
    service: ReminderService = Depends(get_reminder_service),
):
    if not reminder_id.strip():
        raise HTTPException(status_code=400, detail="Invalid reminder ID")
    try:
        record = service.mark_taken(reminder_id)
    except NotFound:
        raise HTTPException(status_code=404, detail={"message": "Reminder not found", "reminderId": reminder_id})

    return ReminderTakenOut(
        message="Reminder marked as taken successfully",
        reminder_id=record.id,
        status=record.status,
        taken_at=record.taken_at,
    )


@router.get("", response_model=List[ReminderOut], response_model_exclude_none=True)
def list_reminders(service: ReminderService = Depends(get_reminder_service)):
    return [ReminderOut.from_record(r) for r in service.list_reminders()]
