# medreminder/integrations/sms_client.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from medreminder.core import config
from medreminder.core.errors import NotificationError

logger = logging.getLogger(__name__)


@dataclass
class SmsDelivery:
    sid: str
    status: Optional[str]
    to: str
    sender: Optional[str]
    error_message: Optional[str] = None


class NotificationSink(Protocol):
    enabled: bool

    def send(self, to: str, body: str, sender: Optional[str] = None) -> SmsDelivery:
        ...


class DisabledSmsSink:
    """Modo degradado: sin credenciales no se envía nada."""

    enabled = False

    def send(self, to: str, body: str, sender: Optional[str] = None) -> SmsDelivery:
        raise NotificationError("SMS client not initialized")


class TwilioSmsSink:
    enabled = True

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        api_base: str = config.TWILIO_API_BASE,
        timeout: float = config.SMS_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not account_sid or not auth_token:
            raise NotificationError("Missing TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN")
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _messages_url(self) -> str:
        return f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"

    def send(self, to: str, body: str, sender: Optional[str] = None) -> SmsDelivery:
        sender = sender or self.from_number
        form = {"To": to, "From": sender, "Body": body}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                r = client.post(self._messages_url(), data=form, auth=(self.account_sid, self.auth_token))
        except httpx.HTTPError as e:
            raise NotificationError(f"SMS request failed: {e}") from e

        data = _json_or_text(r)
        if r.status_code >= 300:
            raise NotificationError(
                data.get("message") or f"Twilio error {r.status_code}",
                code=data.get("code"),
                more_info=data.get("more_info"),
                status=r.status_code,
            )

        return SmsDelivery(
            sid=data.get("sid", ""),
            status=data.get("status"),
            to=data.get("to") or to,
            sender=data.get("from") or sender,
            error_message=data.get("error_message"),
        )


def _json_or_text(r: httpx.Response) -> Dict[str, Any]:
    try:
        data = r.json()
    except ValueError:
        return {"message": r.text or None}
    return data if isinstance(data, dict) else {"message": str(data)}


def build_sms_sink() -> NotificationSink:
    """
    Twilio si hay credenciales; si no (o si falla la inicialización) queda
    deshabilitado sin tumbar el proceso.
    """
    if not (config.TWILIO_ACCOUNT_SID and config.TWILIO_AUTH_TOKEN):
        logger.info("Twilio credentials not found. SMS notifications will be disabled.")
        return DisabledSmsSink()
    try:
        sink = TwilioSmsSink(
            config.TWILIO_ACCOUNT_SID,
            config.TWILIO_AUTH_TOKEN,
            config.TWILIO_PHONE_NUMBER,
        )
    except NotificationError as e:
        logger.error("Error initializing Twilio client: %s. SMS notifications will be disabled.", e)
        return DisabledSmsSink()
    logger.info("Twilio client initialized; using phone number %s", config.TWILIO_PHONE_NUMBER or "<unset>")
    return sink
