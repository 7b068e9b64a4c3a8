# ===== app/models/booking.py =====
from sqlalchemy import Column, String, Integer, Numeric, Text, DateTime, ForeignKey, CheckConstraint, Index, text
from sqlalchemy.dialects.postgresql import UUID, ExcludeConstraint
from sqlalchemy.sql import func
from .base import Base
import uuid

NO_OVERLAP_CONSTRAINT = "bookings_no_overlap_per_coach"

# Statuses that occupy the coach's calendar
ACTIVE_BOOKING_STATUSES = ("scheduled", "confirmed")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    coach_id = Column(UUID(as_uuid=True), nullable=False)
    client_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    package_id = Column(UUID(as_uuid=True), ForeignKey("coach_packages.id"), nullable=True)

    # Session details
    scheduled_start = Column(DateTime(timezone=True), nullable=False)
    scheduled_end = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    location_type = Column(String(20), default="virtual")
    client_notes = Column(Text, nullable=True)
    price_paid = Column(Numeric(10, 2), nullable=True)

    # Status tracking
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled, confirmed, completed, cancelled

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("scheduled_end > scheduled_start", name="check_booking_time_order"),
        CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'completed', 'cancelled')",
            name="check_booking_status",
        ),
        ExcludeConstraint(
            (coach_id, "="),
            (func.tstzrange(scheduled_start, scheduled_end, text("'[)'")), "&&"),
            name=NO_OVERLAP_CONSTRAINT,
            using="gist",
            where=text("status IN ('scheduled', 'confirmed')"),
        ),
        Index("idx_bookings_coach_start", "coach_id", "scheduled_start"),
    )

    def __repr__(self):
        return f"<Booking(id={self.id}, coach_id={self.coach_id}, start={self.scheduled_start})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "coach_id": str(self.coach_id),
            "client_id": str(self.client_id),
            "package_id": str(self.package_id) if self.package_id else None,
            "scheduled_start": self.scheduled_start.isoformat(),
            "scheduled_end": self.scheduled_end.isoformat(),
            "duration_minutes": self.duration_minutes,
            "status": self.status,
            "price_paid": float(self.price_paid) if self.price_paid is not None else None,
            "location_type": self.location_type,
            "client_notes": self.client_notes,
        }
