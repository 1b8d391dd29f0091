# medreminder/core/errors.py

from typing import Optional


class ReminderAppError(Exception):
    """Base de los errores de dominio; los routers los traducen a HTTPException."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReminderAppError):
    status_code = 400


class InvalidPhoneFormat(ValidationError):
    def __init__(self, message: str = "Phone number must start with + and country code (e.g., +1 for US)"):
        super().__init__(message)


class AuthError(ReminderAppError):
    status_code = 401


class NotFound(ReminderAppError):
    status_code = 404


class NotificationError(ReminderAppError):
    """Fallo del proveedor de SMS (o cliente deshabilitado)."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        more_info: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.more_info = more_info
        self.status = status
