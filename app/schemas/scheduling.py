# app/schemas/scheduling.py
from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime, time
from enum import Enum
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class BookingStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _validate_timezone(value: str) -> str:
    value = value.strip()
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown IANA timezone: {value}")
    return value


class AvailabilityRuleCreate(BaseModel):
    """Recurring weekly availability window"""
    day_of_week: int = Field(..., ge=0, le=6, description="0 (Sunday) to 6 (Saturday)")
    start_time: time = Field(..., description="Local start time of day")
    end_time: time = Field(..., description="Local end time of day")
    timezone: str = Field("UTC", description="IANA zone the times are expressed in")
    effective_date: date = Field(..., description="First date the rule applies")
    end_date: Optional[date] = Field(None, description="Last date the rule applies (inclusive)")

    @field_validator("timezone")
    @classmethod
    def timezone_exists(cls, v: str) -> str:
        return _validate_timezone(v)

    @model_validator(mode="after")
    def check_ranges(self) -> "AvailabilityRuleCreate":
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        if self.end_date is not None and self.end_date < self.effective_date:
            raise ValueError("End date must be on or after effective date")
        return self


class AvailabilityRuleUpdate(BaseModel):
    """Partial update; merged values are re-validated by the service"""
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    timezone: Optional[str] = None
    effective_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator("timezone")
    @classmethod
    def timezone_exists(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_timezone(v)


class SlotResponse(BaseModel):
    """Bookable slot"""
    id: str
    coach_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    is_available: bool = True


class SlotListResponse(BaseModel):
    slots: List[SlotResponse] = Field(default_factory=list)


class BookingRequest(BaseModel):
    """Session booking request for a slot returned by the slot listing"""
    coach_id: UUID = Field(..., description="Coach being booked")
    client_id: UUID = Field(..., description="Client making the booking")
    start_time: datetime = Field(..., description="Slot start (UTC or offset-qualified)")
    end_time: datetime = Field(..., description="Slot end (UTC or offset-qualified)")
    duration_minutes: int = Field(..., description="Session length in minutes")
    package_id: Optional[UUID] = Field(None, description="Optional coach package")
    location_type: str = Field("virtual", max_length=20)
    notes: Optional[str] = Field(None, max_length=1000)
