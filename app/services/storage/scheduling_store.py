# ============================================================================
# app/services/storage/scheduling_store.py
# Storage access for rules, packages and bookings - one instance per request
# ============================================================================
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BookingConflictError, InternalError
from app.models.availability import AvailabilityRule
from app.models.booking import Booking, NO_OVERLAP_CONSTRAINT
from app.models.package import CoachPackage

logger = logging.getLogger(__name__)

EXCLUSION_VIOLATION_SQLSTATE = "23P01"


def constraint_name_from_error(error: IntegrityError) -> str:
    """Best-effort name of the constraint behind an IntegrityError"""
    orig = getattr(error, "orig", None)
    diag = getattr(orig, "diag", None)

    constraint_name = ""
    if diag is not None:
        constraint_name = getattr(diag, "constraint_name", "") or ""

    if not constraint_name and orig is not None and NO_OVERLAP_CONSTRAINT in str(orig):
        constraint_name = NO_OVERLAP_CONSTRAINT

    return constraint_name


def is_overlap_violation(error: IntegrityError) -> bool:
    if constraint_name_from_error(error) == NO_OVERLAP_CONSTRAINT:
        return True
    return getattr(getattr(error, "orig", None), "pgcode", None) == EXCLUSION_VIOLATION_SQLSTATE


def is_deadlock(error: OperationalError) -> bool:
    return "deadlock detected" in str(getattr(error, "orig", error)).lower()


class SchedulingStore:
    """SQLAlchemy-backed access to availability rules, packages and bookings"""

    def __init__(self, db: Session):
        self.db = db

    def _internal(self, action: str, exc: Exception) -> InternalError:
        logger.exception(f"Storage failure while trying to {action}: {exc}")
        return InternalError(f"Storage failure while trying to {action}")

    # ------------------------------------------------------------------
    # Availability rules
    # ------------------------------------------------------------------

    def get_active_availability_rules(
            self,
            coach_id: UUID,
            weekdays: Iterable[int],
            window_start: date,
            window_end: date
    ) -> List[AvailabilityRule]:
        """Active rules on the given weekdays whose date range intersects the window"""
        weekdays = sorted(set(weekdays))
        if not weekdays:
            return []

        try:
            return self.db.query(AvailabilityRule).filter(
                AvailabilityRule.coach_id == coach_id,
                AvailabilityRule.is_active.is_(True),
                AvailabilityRule.day_of_week.in_(weekdays),
                AvailabilityRule.effective_date <= window_end,
                or_(
                    AvailabilityRule.end_date.is_(None),
                    AvailabilityRule.end_date >= window_start
                )
            ).order_by(
                AvailabilityRule.day_of_week.asc(),
                AvailabilityRule.start_time.asc()
            ).all()
        except SQLAlchemyError as exc:
            raise self._internal("load availability rules", exc) from exc

    def list_rules(self, coach_id: UUID) -> List[AvailabilityRule]:
        try:
            return self.db.query(AvailabilityRule).filter(
                AvailabilityRule.coach_id == coach_id
            ).order_by(
                AvailabilityRule.day_of_week.asc(),
                AvailabilityRule.start_time.asc()
            ).all()
        except SQLAlchemyError as exc:
            raise self._internal("list availability rules", exc) from exc

    def get_rule(self, rule_id: UUID, coach_id: UUID) -> Optional[AvailabilityRule]:
        try:
            return self.db.query(AvailabilityRule).filter(
                AvailabilityRule.id == rule_id,
                AvailabilityRule.coach_id == coach_id
            ).first()
        except SQLAlchemyError as exc:
            raise self._internal("load availability rule", exc) from exc

    def save_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
        try:
            self.db.add(rule)
            self.db.commit()
            self.db.refresh(rule)
            return rule
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise self._internal("save availability rule", exc) from exc

    def delete_rule(self, rule: AvailabilityRule) -> None:
        try:
            self.db.delete(rule)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise self._internal("delete availability rule", exc) from exc

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    def get_package(self, package_id: UUID, coach_id: UUID) -> Optional[CoachPackage]:
        """Active package owned by the coach, or None"""
        try:
            return self.db.query(CoachPackage).filter(
                CoachPackage.id == package_id,
                CoachPackage.coach_id == coach_id,
                CoachPackage.is_active.is_(True)
            ).first()
        except SQLAlchemyError as exc:
            raise self._internal("load package", exc) from exc

    def list_packages(self, coach_id: UUID) -> List[CoachPackage]:
        try:
            return self.db.query(CoachPackage).filter(
                CoachPackage.coach_id == coach_id,
                CoachPackage.is_active.is_(True)
            ).order_by(CoachPackage.price.asc()).all()
        except SQLAlchemyError as exc:
            raise self._internal("list packages", exc) from exc

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def get_bookings_overlapping(
            self,
            coach_id: UUID,
            start: datetime,
            end: datetime,
            statuses: Iterable[str]
    ) -> List[Booking]:
        """Bookings in `statuses` whose [scheduled_start, scheduled_end) intersects [start, end)"""
        try:
            return self.db.query(Booking).filter(
                Booking.coach_id == coach_id,
                Booking.status.in_(list(statuses)),
                Booking.scheduled_start < end,
                Booking.scheduled_end > start
            ).order_by(Booking.scheduled_start.asc()).all()
        except SQLAlchemyError as exc:
            raise self._internal("load bookings", exc) from exc

    def insert_booking(self, booking: Booking) -> Booking:
        """
        Insert and commit a booking in one statement.

        The overlap-exclusion constraint decides races between concurrent
        bookers; a violation surfaces as BookingConflictError.
        """
        try:
            self.db.add(booking)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_overlap_violation(exc):
                raise BookingConflictError(NO_OVERLAP_CONSTRAINT) from exc
            raise self._internal("insert booking", exc) from exc
        except OperationalError as exc:
            self.db.rollback()
            if is_deadlock(exc):
                raise BookingConflictError("deadlock") from exc
            raise self._internal("insert booking", exc) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise self._internal("insert booking", exc) from exc

        try:
            self.db.refresh(booking)
        except SQLAlchemyError as exc:
            raise self._internal("reload inserted booking", exc) from exc
        return booking
