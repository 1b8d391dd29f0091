# medreminder/api/routers/notifications_sms.py

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Path

from medreminder.core import config
from medreminder.core.deps import get_reminder_service
from medreminder.core.errors import InvalidPhoneFormat, NotificationError, ValidationError
from medreminder.reminders.service import ReminderService
from medreminder.schemas.reminders import SmsTestIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notifications - SMS"])

TEST_BODY = (
    "This is a test message from your Medicine Reminder App. "
    "If you receive this, SMS notifications are working correctly!"
)


def _sink_error_detail(e: NotificationError) -> dict:
    return {
        "error": "Failed to send SMS",
        "details": e.message,
        "code": e.code,
        "moreInfo": e.more_info,
    }


# =========================
# Endpoints
# =========================

@router.post("/test-sms")
def send_test_sms(
    payload: SmsTestIn,
    service: ReminderService = Depends(get_reminder_service),
):
    if not service.sink.enabled:
        raise HTTPException(status_code=500, detail={"error": "SMS client not initialized"})
    try:
        delivery = service.send_test_sms(payload.phone_number, TEST_BODY)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotificationError as e:
        logger.error("Error sending test SMS: %s (code=%s)", e.message, e.code)
        raise HTTPException(status_code=500, detail=_sink_error_detail(e))
    return {"message": "Test SMS sent successfully", "messageSid": delivery.sid}


@router.post("/immediate-test-sms")
def send_immediate_test_sms(
    payload: SmsTestIn,
    service: ReminderService = Depends(get_reminder_service),
):
    if not service.sink.enabled:
        raise HTTPException(
            status_code=500,
            detail={"error": "SMS client not initialized", "twilioStatus": config.credential_status()},
        )

    body = (
        f"Test message sent at {datetime.now().strftime('%H:%M:%S')}. "
        "If you receive this, your medicine reminder SMS notifications are working!"
    )
    try:
        delivery = service.send_test_sms(payload.phone_number, body, validate_phone=True)
    except InvalidPhoneFormat as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid phone number format", "message": e.message})
    except NotificationError as e:
        logger.error("Error sending immediate test SMS: %s (code=%s)", e.message, e.code)
        raise HTTPException(status_code=500, detail=_sink_error_detail(e))

    return {
        "message": "Test SMS sent successfully",
        "messageSid": delivery.sid,
        "details": {"to": delivery.to, "from": delivery.sender, "status": delivery.status},
    }


@router.get("/test-sms/{phone_number}")
def send_test_sms_by_path(
    phone_number: str = Path(..., description="Destino en E.164, ej. +15551234567"),
    service: ReminderService = Depends(get_reminder_service),
):
    try:
        delivery = service.send_test_sms(phone_number, "Test SMS from Medicine Reminder App")
    except NotificationError as e:
        logger.error("SMS test error: %s (code=%s, status=%s)", e.message, e.code, e.status)
        raise HTTPException(status_code=500, detail=e.message)
    return {"success": True, "messageId": delivery.sid}
