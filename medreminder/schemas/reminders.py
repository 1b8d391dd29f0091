from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from medreminder.reminders.models import ReminderRecord, ReminderStatus


class ReminderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # el frontend a veces manda el id numérico (Date.now())
    reminder_id: Optional[Union[str, int]] = Field(None, alias="reminderId")
    medicine_name: Optional[str] = Field(None, alias="medicineName")
    guardian_phone: Optional[str] = Field(None, alias="guardianPhone")
    time: Optional[str] = None


class ReminderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    medicine_name: Optional[str] = Field(None, alias="medicineName")
    guardian_phone: Optional[str] = Field(None, alias="guardianPhone")
    time: Optional[str] = None
    status: ReminderStatus
    created_at: datetime = Field(alias="createdAt")
    taken_at: Optional[datetime] = Field(None, alias="takenAt")

    @classmethod
    def from_record(cls, record: ReminderRecord) -> "ReminderOut":
        return cls(
            id=record.id,
            medicine_name=record.medicine_name,
            guardian_phone=record.guardian_phone,
            time=record.scheduled_time,
            status=record.status,
            created_at=record.created_at,
            taken_at=record.taken_at,
        )


class ReminderTimerDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reminder_id: str = Field(alias="reminderId")
    start_time: datetime = Field(alias="startTime")
    scheduled_sms_time: datetime = Field(alias="scheduledSMSTime")


class ReminderCreatedOut(BaseModel):
    message: str
    details: ReminderTimerDetails


class ReminderTakenOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    reminder_id: str = Field(alias="reminderId")
    status: ReminderStatus
    taken_at: datetime = Field(alias="takenAt")


class SmsTestIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: Optional[str] = Field(None, alias="phoneNumber")
