# ===== app/tasks/payment_tasks.py =====
from decimal import Decimal
import logging

from app.config.celery_config import celery_app
from app.config.database import worker_session
from app.config.settings import get_settings
from app.services.payment.payment_service import PaymentService

logger = logging.getLogger(__name__)
settings = get_settings()


@celery_app.task(bind=True, max_retries=settings.PAYMENT_TASK_MAX_RETRIES)
def record_pending_payment(self, booking_id: str, amount: str, fee_amount: str):
    """
    Record a pending payment for a booked session

    Args:
        booking_id: The booking the payment belongs to (idempotency key)
        amount: Package price as a decimal string
        fee_amount: Platform fee as a decimal string
    """
    try:
        with worker_session() as db:
            status = PaymentService.record_pending_payment(
                db,
                booking_id=booking_id,
                amount=Decimal(amount),
                fee_amount=Decimal(fee_amount)
            )
    except Exception as exc:
        logger.error(f"Failed to record pending payment for booking {booking_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min, ...
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )

    logger.info(f"Pending payment for booking {booking_id}: {status}")
    return {"status": status, "booking_id": booking_id}
