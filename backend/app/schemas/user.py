"""User schemas used for registration and responses."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    role: Literal["student", "tutor"] = "student"
    whatsapp_to: Optional[str] = None
    subjects: List[str] = []


class UserRead(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    role: str
    whatsapp_to: Optional[str] = None
    subjects: List[str] = []

    model_config = ConfigDict(from_attributes=True)
