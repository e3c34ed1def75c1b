from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, field_validator
from labbooker.models.reservation import RESERVATION_STATUSES
from labbooker.utils.validation_helpers import normalize_timestamp


class BookingCreate(BaseModel):
    booking_type_id: int
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def check_timestamps(cls, value):
        return normalize_timestamp(value)


class BookingUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_timestamps(cls, value):
        return normalize_timestamp(value)


class BookingStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        if value not in RESERVATION_STATUSES:
            raise ValueError(f"status must be one of {', '.join(RESERVATION_STATUSES)}")
        return value


class BookingResponse(BaseModel):
    id: int
    user_id: int
    booking_type_id: int
    resource_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    status: str
    access_code: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    available: bool
    resource_id: Optional[int] = None
    reason: Optional[str] = None


class ConnectionInfoResponse(BaseModel):
    reservation_id: int
    values: Dict[str, Any]

    model_config = ConfigDict(from_attributes=True)


class SweepResponse(BaseModel):
    expired: int
    activated: int
