from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class BookingTypeBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    max_duration_hours: Optional[float] = Field(default=None, gt=0)
    is_active: bool = True


class BookingTypeCreate(BookingTypeBase):
    resource_ids: List[int] = []


class BookingTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    max_duration_hours: Optional[float] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class BookingTypeResponse(BookingTypeBase):
    id: int
    resource_ids: List[int] = []

    model_config = ConfigDict(from_attributes=True)
