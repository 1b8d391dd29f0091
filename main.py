# main.py

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from medreminder.api.auth.auth_service import AuthService
from medreminder.api.models.user import UserOut
from medreminder.api.routers import auth as auth_router
from medreminder.api.routers import notifications_sms, reminders
from medreminder.core import config
from medreminder.core.auth import get_current_user
from medreminder.core.logging_config import setup_logging
from medreminder.integrations.sms_client import build_sms_sink
from medreminder.reminders import ReminderScheduler, ReminderService, ReminderStore

logger = logging.getLogger(__name__)

DESCRIPTION = """
Medicine reminder backend: if a dose is not marked as **taken** before the alert
deadline, the guardian receives an SMS.

**What it does**
- **Auth:** Signup/login with hashed passwords and HS256 JWT (24h).
- **Reminders:** `POST /api/reminders` stores the reminder and arms a timer; `POST /api/reminders/{id}/taken`
  cancels it. `GET /api/reminders` lists every reminder (active and taken).
- **Alerts:** Twilio SMS to the guardian when the timer fires. Best effort: no retries.
- **SMS tests:** `/api/test-sms`, `/api/immediate-test-sms`, `/api/test-sms/{phone}`.

**Notes**
- Everything lives in process memory; restarting the server drops users, reminders and pending timers.
- The alert delay is short in `APP_ENV=development` (`ALERT_DELAY_DEV_SECONDS`) and longer otherwise.
"""


def build_reminder_service() -> ReminderService:
    return ReminderService(
        store=ReminderStore(),
        scheduler=ReminderScheduler(),
        sink=build_sms_sink(),
    )


def create_app(
    reminder_service: Optional[ReminderService] = None,
    auth_service: Optional[AuthService] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config.log_environment_status()
        logger.info("Server running on port %s", config.PORT)
        yield
        app.state.reminder_service.shutdown()

    app = FastAPI(
        title="Medicine Reminder API",
        description=DESCRIPTION,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.reminder_service = reminder_service or build_reminder_service()
    app.state.auth_service = auth_service or AuthService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------
    # Routers bajo /api
    # -------------------------------------------------------------------
    app.include_router(auth_router.router, prefix="/api")
    app.include_router(reminders.router, prefix="/api")
    app.include_router(notifications_sms.router, prefix="/api")

    # -------------------------------------------------------------------
    # Endpoints públicos
    # -------------------------------------------------------------------
    @app.get("/")
    def read_root():
        return {"message": "Welcome to Medicine Reminder API"}

    @app.get("/users/me", response_model=UserOut, tags=["Authentication"])
    async def read_current_user(current_user: Annotated[UserOut, Depends(get_current_user)]):
        return current_user

    @app.get("/health", tags=["Health"])
    def health(request: Request):
        service: ReminderService = request.app.state.reminder_service
        return {
            "status": "ok",
            "time": datetime.now(timezone.utc).isoformat(),
            "sms_enabled": service.sink.enabled,
            "armed_reminders": len(service.scheduler),
            "reminders_total": len(service.store),
        }

    return app


setup_logging(config.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
