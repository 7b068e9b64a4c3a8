# ============================================================================
# FILE: app/api/dependencies.py
# Request-scoped wiring of stores and services
# ============================================================================
from fastapi import Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.clock import get_clock
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.rule_service import AvailabilityRuleService
from app.services.booking.booking_service import BookingService
from app.services.payment.payment_service import PaymentService
from app.services.storage.scheduling_store import SchedulingStore


def get_store(db: Session = Depends(get_db)) -> SchedulingStore:
    """One store per request, bound to the request's session"""
    return SchedulingStore(db)


def get_payment_service() -> PaymentService:
    return PaymentService()


def get_availability_service(
        store: SchedulingStore = Depends(get_store),
        clock=Depends(get_clock)
) -> AvailabilityService:
    return AvailabilityService(store, clock)


def get_rule_service(store: SchedulingStore = Depends(get_store)) -> AvailabilityRuleService:
    return AvailabilityRuleService(store)


def get_booking_service(
        store: SchedulingStore = Depends(get_store),
        payments: PaymentService = Depends(get_payment_service),
        clock=Depends(get_clock)
) -> BookingService:
    return BookingService(store, payments, clock)
