# ============================================================================
# app/services/booking/booking_service.py
# ============================================================================
"""Service for reserving coaching sessions without double-booking"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from app.config.settings import Settings, get_settings
from app.core.exceptions import (
    BookingConflictError,
    InvalidInputError,
    NotFoundError,
    SlotUnavailableError,
)
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking
from app.schemas.scheduling import BookingStatus
from app.services.availability.slot_generator import as_utc
from app.services.payment.payment_service import compute_platform_fee

logger = logging.getLogger(__name__)


class BookingService:
    """
    Creates bookings for a chosen slot.

    The overlap pre-check only gives a fast answer for obviously taken
    slots; the storage layer's exclusion constraint decides the race
    between concurrent bookers and a lost race is reported as
    SlotUnavailableError like any other conflict.
    """

    def __init__(self, store, payments, clock, settings: Settings = None):
        self.store = store
        self.payments = payments
        self.clock = clock
        self.settings = settings or get_settings()

    def create_booking(
            self,
            coach_id: UUID,
            client_id: UUID,
            start_time: datetime,
            end_time: datetime,
            duration_minutes: int,
            package_id: Optional[UUID] = None,
            location_type: str = "virtual",
            notes: Optional[str] = None
    ) -> Booking:
        """
        Reserve [start_time, end_time) with the coach.

        Raises:
            InvalidInputError: missing or inconsistent fields (no storage call made)
            NotFoundError: package missing, inactive or owned by another coach
            SlotUnavailableError: interval overlaps an active booking
            InternalError: storage failure
        """
        start, end = self._validate_request(coach_id, client_id, start_time, end_time, duration_minutes)

        package = None
        if package_id is not None:
            package = self.store.get_package(package_id, coach_id)
            if package is None:
                raise NotFoundError(
                    "Package not found or inactive",
                    details={"package_id": str(package_id), "coach_id": str(coach_id)}
                )

        conflict_details = {
            "coach_id": str(coach_id),
            "start_time": start.isoformat(),
            "end_time": end.isoformat(),
        }

        existing = self.store.get_bookings_overlapping(coach_id, start, end, ACTIVE_BOOKING_STATUSES)
        if existing:
            logger.info(f"Slot {start.isoformat()} for coach {coach_id} already taken (pre-check)")
            raise SlotUnavailableError(details=conflict_details)

        booking = Booking(
            id=uuid4(),
            coach_id=coach_id,
            client_id=client_id,
            package_id=package_id,
            scheduled_start=start,
            scheduled_end=end,
            duration_minutes=duration_minutes,
            status=BookingStatus.SCHEDULED.value,
            price_paid=package.price if package is not None else None,
            location_type=location_type,
            client_notes=notes or None,
        )

        try:
            booking = self.store.insert_booking(booking)
        except BookingConflictError as exc:
            logger.info(f"Slot {start.isoformat()} for coach {coach_id} lost to a concurrent booking")
            raise SlotUnavailableError(details=conflict_details) from exc

        logger.info(f"Booked session {booking.id} for client {client_id} with coach {coach_id} at {start.isoformat()}")

        if package is not None and package.price:
            self._emit_pending_payment(booking, package.price)

        return booking

    def _validate_request(
            self,
            coach_id: UUID,
            client_id: UUID,
            start_time: datetime,
            end_time: datetime,
            duration_minutes: int
    ):
        missing = [
            name for name, value in (
                ("coach_id", coach_id),
                ("client_id", client_id),
                ("start_time", start_time),
                ("end_time", end_time),
                ("duration_minutes", duration_minutes),
            )
            if value is None
        ]
        if missing:
            raise InvalidInputError(
                "Coach ID, client ID, start time, end time, and duration are required",
                details={"missing": missing}
            )

        start = as_utc(start_time)
        end = as_utc(end_time)

        if end <= start:
            raise InvalidInputError(
                "End time must be after start time",
                details={"start_time": start.isoformat(), "end_time": end.isoformat()}
            )

        max_duration = self.settings.MAX_SLOT_DURATION_MINUTES
        if not 0 < duration_minutes <= max_duration:
            raise InvalidInputError(
                f"Duration must be between 1 and {max_duration} minutes",
                details={"duration_minutes": duration_minutes}
            )

        if end - start != timedelta(minutes=duration_minutes):
            raise InvalidInputError(
                "Duration does not match the requested time range",
                details={"duration_minutes": duration_minutes}
            )

        if start <= self.clock.now():
            raise InvalidInputError(
                "Sessions can only be booked in the future",
                details={"start_time": start.isoformat()}
            )

        return start, end

    def _emit_pending_payment(self, booking: Booking, price) -> None:
        """Payment reconciliation is retried separately; the booking already stands"""
        fee = compute_platform_fee(price, self.settings.PLATFORM_FEE_PERCENT)
        try:
            self.payments.emit_pending_payment(booking.id, price, fee)
        except Exception as exc:
            logger.error(f"Failed to emit pending payment for booking {booking.id}: {exc}")
