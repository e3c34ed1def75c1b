from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from labbooker.models.user import ROLE_ADMIN, ROLE_USER


class UserCreate(BaseModel):
    username: str
    email: Optional[str] = None
    password: str


class UserUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[str] = None

    @field_validator("role")
    @classmethod
    def check_role(cls, value):
        if value is not None and value not in (ROLE_USER, ROLE_ADMIN):
            raise ValueError(f"role must be {ROLE_USER} or {ROLE_ADMIN}")
        return value


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str
