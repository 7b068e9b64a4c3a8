# app/schemas/__init__.py
from .scheduling import (
    BookingStatus,
    AvailabilityRuleCreate,
    AvailabilityRuleUpdate,
    SlotResponse,
    SlotListResponse,
    BookingRequest,
)

__all__ = [
    "BookingStatus",
    "AvailabilityRuleCreate",
    "AvailabilityRuleUpdate",
    "SlotResponse",
    "SlotListResponse",
    "BookingRequest",
]
