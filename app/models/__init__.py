# app/models/__init__.py
from .base import Base
from .availability import AvailabilityRule
from .package import CoachPackage
from .booking import Booking, ACTIVE_BOOKING_STATUSES, NO_OVERLAP_CONSTRAINT
from .payment import Payment

__all__ = [
    "Base",
    "AvailabilityRule",
    "CoachPackage",
    "Booking",
    "ACTIVE_BOOKING_STATUSES",
    "NO_OVERLAP_CONSTRAINT",
    "Payment",
]
