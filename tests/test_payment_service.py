# tests/test_payment_service.py
from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

from app.services.payment.payment_service import PaymentService, compute_platform_fee
from tests.conftest import MONDAY, make_booking, utc


def test_platform_fee_rounds_half_up_to_cents():
    assert compute_platform_fee(Decimal("100.00"), 10) == Decimal("10.00")
    assert compute_platform_fee(Decimal("99.95"), 10) == Decimal("10.00")
    assert compute_platform_fee("12.345", 10) == Decimal("1.23")
    assert compute_platform_fee(Decimal("0.05"), 10) == Decimal("0.01")
    assert compute_platform_fee(80, 0) == Decimal("0.00")


def test_emit_enqueues_task_with_string_arguments():
    booking_id = uuid4()

    with patch("app.tasks.payment_tasks.record_pending_payment.delay") as delay:
        PaymentService().emit_pending_payment(booking_id, Decimal("100.00"), Decimal("10.00"))

    delay.assert_called_once_with(str(booking_id), "100.00", "10.00")


def _db_with_booking(booking, rowcount=1):
    db = MagicMock()
    db.query.return_value.filter_by.return_value.first.return_value = booking
    db.execute.return_value.rowcount = rowcount
    return db


def test_record_creates_pending_payment(coach_id):
    booking = make_booking(coach_id, utc(MONDAY, 9), utc(MONDAY, 10))
    db = _db_with_booking(booking)

    status = PaymentService.record_pending_payment(db, str(booking.id), Decimal("100.00"), Decimal("10.00"))

    assert status == "created"
    db.execute.assert_called_once()
    db.commit.assert_called_once()


def test_record_is_idempotent_per_booking(coach_id):
    booking = make_booking(coach_id, utc(MONDAY, 9), utc(MONDAY, 10))
    db = _db_with_booking(booking, rowcount=0)

    status = PaymentService.record_pending_payment(db, str(booking.id), Decimal("100.00"), Decimal("10.00"))

    assert status == "exists"


def test_record_for_missing_booking():
    db = _db_with_booking(None)

    status = PaymentService.record_pending_payment(db, str(uuid4()), Decimal("100.00"), Decimal("10.00"))

    assert status == "booking_not_found"
    db.execute.assert_not_called()
