from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, field_validator
from labbooker.models.resource import RESOURCE_STATUSES, RESOURCE_TYPES


def check_choice(value, choices, field):
    if value is not None and value not in choices:
        raise ValueError(f"{field} must be one of {', '.join(choices)}")
    return value


class ResourceBase(BaseModel):
    name: str
    description: Optional[str] = None
    resource_type: str = "SSH"
    is_active: bool = True
    status: str = "online"
    connection_metadata: Optional[Dict[str, Any]] = None

    @field_validator("resource_type")
    @classmethod
    def check_resource_type(cls, value):
        return check_choice(value, RESOURCE_TYPES, "resource_type")

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        return check_choice(value, RESOURCE_STATUSES, "status")


class ResourceCreate(ResourceBase):
    pass


class ResourceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    resource_type: Optional[str] = None
    is_active: Optional[bool] = None
    status: Optional[str] = None
    connection_metadata: Optional[Dict[str, Any]] = None

    @field_validator("resource_type")
    @classmethod
    def check_resource_type(cls, value):
        return check_choice(value, RESOURCE_TYPES, "resource_type")

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        return check_choice(value, RESOURCE_STATUSES, "status")


class ResourceResponse(ResourceBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
