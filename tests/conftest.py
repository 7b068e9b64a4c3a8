# tests/conftest.py
"""
Shared fixtures: an in-memory store that mirrors SchedulingStore, a
recording payment emitter and a frozen clock. The store's insert enforces
the per-coach overlap constraint under a lock the way Postgres does.
"""
import threading
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import configure_mappers

from app.core.clock import FixedClock
from app.core.exceptions import BookingConflictError
from app.models import AvailabilityRule, Booking, CoachPackage, NO_OVERLAP_CONSTRAINT
from app.models.booking import ACTIVE_BOOKING_STATUSES

configure_mappers()

# 2024-01-01 is a Monday; 2024-01-08 is the Monday most tests book against
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2024, 1, 8)


def utc(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def make_rule(
        coach_id: UUID,
        day_of_week: int = 1,
        start: time = time(9, 0),
        end: time = time(11, 0),
        tz: str = "UTC",
        effective_date: date = date(2023, 12, 1),
        end_date: Optional[date] = None,
        is_active: bool = True
) -> AvailabilityRule:
    return AvailabilityRule(
        id=uuid4(),
        coach_id=coach_id,
        day_of_week=day_of_week,
        start_time=start,
        end_time=end,
        timezone=tz,
        effective_date=effective_date,
        end_date=end_date,
        is_active=is_active,
    )


def make_booking(
        coach_id: UUID,
        start: datetime,
        end: datetime,
        status: str = "scheduled",
        client_id: Optional[UUID] = None
) -> Booking:
    return Booking(
        id=uuid4(),
        coach_id=coach_id,
        client_id=client_id or uuid4(),
        scheduled_start=start,
        scheduled_end=end,
        duration_minutes=int((end - start).total_seconds() // 60),
        status=status,
    )


class InMemorySchedulingStore:
    """Test double for SchedulingStore"""

    def __init__(self):
        self.rules: List[AvailabilityRule] = []
        self.packages: List[CoachPackage] = []
        self.bookings: List[Booking] = []
        self.calls: List[str] = []
        self.race_barrier: Optional[threading.Barrier] = None
        self.conflict_on_insert = False
        self._lock = threading.Lock()

    # rules

    def get_active_availability_rules(self, coach_id, weekdays, window_start, window_end):
        self.calls.append("get_active_availability_rules")
        weekdays = set(weekdays)
        return [
            r for r in self.rules
            if r.coach_id == coach_id
            and r.is_active
            and r.day_of_week in weekdays
            and r.effective_date <= window_end
            and (r.end_date is None or r.end_date >= window_start)
        ]

    def list_rules(self, coach_id):
        self.calls.append("list_rules")
        return sorted(
            (r for r in self.rules if r.coach_id == coach_id),
            key=lambda r: (r.day_of_week, r.start_time)
        )

    def get_rule(self, rule_id, coach_id):
        self.calls.append("get_rule")
        return next((r for r in self.rules if r.id == rule_id and r.coach_id == coach_id), None)

    def save_rule(self, rule):
        self.calls.append("save_rule")
        if rule not in self.rules:
            self.rules.append(rule)
        return rule

    def delete_rule(self, rule):
        self.calls.append("delete_rule")
        self.rules.remove(rule)

    # packages

    def get_package(self, package_id, coach_id):
        self.calls.append("get_package")
        return next(
            (p for p in self.packages if p.id == package_id and p.coach_id == coach_id and p.is_active),
            None
        )

    def list_packages(self, coach_id):
        self.calls.append("list_packages")
        return sorted(
            (p for p in self.packages if p.coach_id == coach_id and p.is_active),
            key=lambda p: p.price or 0
        )

    # bookings

    def get_bookings_overlapping(self, coach_id, start, end, statuses):
        self.calls.append("get_bookings_overlapping")
        statuses = set(statuses)
        with self._lock:
            found = [
                b for b in self.bookings
                if b.coach_id == coach_id
                and b.status in statuses
                and b.scheduled_start < end
                and b.scheduled_end > start
            ]
        if self.race_barrier is not None:
            self.race_barrier.wait(timeout=5)
        return found

    def insert_booking(self, booking):
        self.calls.append("insert_booking")
        if self.conflict_on_insert:
            raise BookingConflictError(NO_OVERLAP_CONSTRAINT)
        with self._lock:
            for existing in self.bookings:
                if (
                    existing.coach_id == booking.coach_id
                    and existing.status in ACTIVE_BOOKING_STATUSES
                    and existing.scheduled_start < booking.scheduled_end
                    and existing.scheduled_end > booking.scheduled_start
                ):
                    raise BookingConflictError(NO_OVERLAP_CONSTRAINT)
            self.bookings.append(booking)
        return booking


class RecordingPayments:
    """Test double for PaymentService"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.emitted = []

    def emit_pending_payment(self, booking_id, amount, fee_amount):
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.emitted.append((booking_id, Decimal(str(amount)), Decimal(str(fee_amount))))


@pytest.fixture
def coach_id() -> UUID:
    return uuid4()


@pytest.fixture
def client_id() -> UUID:
    return uuid4()


@pytest.fixture
def store() -> InMemorySchedulingStore:
    return InMemorySchedulingStore()


@pytest.fixture
def payments() -> RecordingPayments:
    return RecordingPayments()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def package_factory(store):
    def _make(coach_id: UUID, price: Optional[str] = "100.00", is_active: bool = True) -> CoachPackage:
        package = CoachPackage(
            id=uuid4(),
            coach_id=coach_id,
            name="Single session",
            duration_minutes=60,
            price=Decimal(price) if price is not None else None,
            is_active=is_active,
        )
        store.packages.append(package)
        return package

    return _make
