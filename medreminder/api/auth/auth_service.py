# medreminder/api/auth/auth_service.py

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, Union

from medreminder.api.models.user import LoginIn, SignupIn, UserOut
from medreminder.core.auth import create_access_token
from medreminder.core.errors import AuthError, InvalidPhoneFormat, ValidationError
from medreminder.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

SIGNUP_FIELDS = ("name", "email", "password", "age", "gender", "patient_name", "guardian_phone")


@dataclass
class User:
    id: str
    name: str
    email: str
    password_hash: str
    age: Union[int, str]
    gender: str
    patient_name: str
    guardian_phone: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_out(self) -> UserOut:
        return UserOut(
            id=self.id,
            name=self.name,
            email=self.email,
            age=self.age,
            gender=self.gender,
            patient_name=self.patient_name,
            guardian_phone=self.guardian_phone,
            created_at=self.created_at,
        )


class UserStore:
    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def add(self, user: User) -> None:
        with self._lock:
            if any(u.email.lower() == user.email.lower() for u in self._users.values()):
                raise ValidationError("Email already registered")
            self._users[user.id] = user

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.email.lower() == email.lower()), None)


class AuthService:
    def __init__(self, users: Optional[UserStore] = None):
        self.users = users or UserStore()

    def sign_up_user(self, body: SignupIn) -> Tuple[UserOut, str]:
        values = {name: getattr(body, name) for name in SIGNUP_FIELDS}
        if any(v is None or (isinstance(v, str) and not v.strip()) for v in values.values()):
            raise ValidationError("All fields are required")
        if not values["guardian_phone"].startswith("+"):
            raise InvalidPhoneFormat("Phone number must start with + and country code")

        user = User(
            id=uuid.uuid4().hex,
            name=values["name"],
            email=str(values["email"]),
            password_hash=get_password_hash(values["password"]),
            age=values["age"],
            gender=values["gender"],
            patient_name=values["patient_name"],
            guardian_phone=values["guardian_phone"],
        )
        self.users.add(user)
        logger.info("User registered: %s", user.id)
        return user.to_out(), create_access_token(user.id)

    def sign_in_user(self, body: LoginIn) -> Tuple[UserOut, str]:
        if not body.email or not body.password:
            raise ValidationError("Email and password are required")

        user = self.users.find_by_email(body.email)
        if user is None or not verify_password(body.password, user.password_hash):
            logger.info("Failed login attempt for %s", body.email)
            raise AuthError("Invalid email or password")

        return user.to_out(), create_access_token(user.id)

    def get_user(self, user_id: str) -> Optional[UserOut]:
        user = self.users.get(user_id)
        return user.to_out() if user else None
