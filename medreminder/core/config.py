# medreminder/core/config.py

import logging
import os
import secrets
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# -------------------------
# Entorno
# -------------------------
APP_ENV = os.getenv("APP_ENV", "production").lower()
PORT = int(os.getenv("PORT", "5001"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS: List[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Ventana antes de avisar al tutor (segundos)
ALERT_DELAY_SECONDS = float(os.getenv("ALERT_DELAY_SECONDS", str(5 * 60)))
ALERT_DELAY_DEV_SECONDS = float(os.getenv("ALERT_DELAY_DEV_SECONDS", "10"))

# -------------------------
# JWT (HS256)
# -------------------------
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ISSUER = os.getenv("JWT_ISSUER", "medreminder")
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))

if not JWT_SECRET:
    # Sin secreto configurado los tokens solo valen mientras viva el proceso
    JWT_SECRET = secrets.token_urlsafe(32)
    logger.warning("JWT_SECRET not set; using a random per-process secret")

# -------------------------
# Twilio
# -------------------------
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")
TWILIO_API_BASE = os.getenv("TWILIO_API_BASE", "https://api.twilio.com/2010-04-01").rstrip("/")
SMS_TIMEOUT_SECONDS = float(os.getenv("SMS_TIMEOUT_SECONDS", "30"))


def is_development() -> bool:
    return APP_ENV == "development"


def alert_delay_seconds() -> float:
    return ALERT_DELAY_DEV_SECONDS if is_development() else ALERT_DELAY_SECONDS


def credential_status() -> dict:
    return {
        "accountSid": "Set" if TWILIO_ACCOUNT_SID else "Not set",
        "authToken": "Set" if TWILIO_AUTH_TOKEN else "Not set",
        "phoneNumber": TWILIO_PHONE_NUMBER or None,
    }


def log_environment_status() -> None:
    status = credential_status()
    logger.info("Environment check (APP_ENV=%s, alert delay=%ss):", APP_ENV, alert_delay_seconds())
    logger.info("- TWILIO_ACCOUNT_SID: %s", status["accountSid"])
    logger.info("- TWILIO_AUTH_TOKEN: %s", status["authToken"])
    logger.info("- TWILIO_PHONE_NUMBER: %s", status["phoneNumber"] or "Not set")
