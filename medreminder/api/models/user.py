# medreminder/api/models/user.py

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SignupIn(BaseModel):
    """
    Modelo de entrada para el registro. Los campos son opcionales a nivel de
    esquema para que el servicio responda 400 (no 422) cuando falta alguno.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    age: Optional[Union[int, str]] = None
    gender: Optional[str] = None
    patient_name: Optional[str] = Field(None, alias="patientName")
    guardian_phone: Optional[str] = Field(None, alias="guardianPhone")


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    """
    Modelo de salida (sin contraseña).
    """
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    name: str
    email: EmailStr
    age: Union[int, str]
    gender: str
    patient_name: str = Field(alias="patientName")
    guardian_phone: str = Field(alias="guardianPhone")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class AuthOut(BaseModel):
    user: UserOut
    token: str
