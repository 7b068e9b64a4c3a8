# ============================================================================
# app/services/payment/payment_service.py
# ============================================================================
"""Pending payment records for priced bookings"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
from uuid import UUID

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.booking import Booking
from app.models.payment import Payment

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def compute_platform_fee(amount: Union[Decimal, int, float, str], fee_percent: int) -> Decimal:
    """Platform fee on `amount`, rounded half-up to cents"""
    value = Decimal(str(amount))
    return (value * Decimal(fee_percent) / Decimal(100)).quantize(CENTS, rounding=ROUND_HALF_UP)


class PaymentService:
    """Hands pending payment records to the worker queue"""

    def emit_pending_payment(self, booking_id: UUID, amount: Decimal, fee_amount: Decimal) -> None:
        """Enqueue the pending payment; safe to call again for the same booking"""
        from app.tasks.payment_tasks import record_pending_payment

        record_pending_payment.delay(str(booking_id), str(amount), str(fee_amount))
        logger.info(f"Queued pending payment for booking {booking_id} (amount={amount}, fee={fee_amount})")

    @staticmethod
    def record_pending_payment(
            db: Session,
            booking_id: str,
            amount: Decimal,
            fee_amount: Decimal
    ) -> str:
        """
        Write the pending payment row for a booking.

        Returns "created", "exists" (an earlier attempt already landed) or
        "booking_not_found".
        """
        booking = db.query(Booking).filter_by(id=booking_id).first()
        if not booking:
            logger.error(f"Booking {booking_id} not found for pending payment")
            return "booking_not_found"

        settings = get_settings()
        stmt = insert(Payment).values(
            booking_id=booking.id,
            client_id=booking.client_id,
            coach_id=booking.coach_id,
            amount=amount,
            platform_fee=fee_amount,
            currency=settings.PAYMENT_CURRENCY,
            status="pending",
            description=f"Coaching session {booking.scheduled_start.isoformat()}",
            payment_metadata={
                "session_id": str(booking.id),
                "package_id": str(booking.package_id) if booking.package_id else None,
            },
        ).on_conflict_do_nothing(index_elements=["booking_id"])

        result = db.execute(stmt)
        db.commit()

        return "created" if result.rowcount else "exists"
