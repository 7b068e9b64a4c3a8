# ===== app/models/availability.py =====
from sqlalchemy import Column, String, Integer, Boolean, Time, Date, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class AvailabilityRule(Base):
    """Coach-defined recurring weekly availability window"""
    __tablename__ = "availability_rules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    coach_id = Column(UUID(as_uuid=True), nullable=False)

    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    start_time = Column(Time, nullable=False)  # local to `timezone`
    end_time = Column(Time, nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")

    effective_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # inclusive, NULL = open-ended

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_rule_time_order"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="check_rule_day_of_week"),
        CheckConstraint(
            "end_date IS NULL OR end_date >= effective_date",
            name="check_rule_date_range",
        ),
        Index("idx_availability_rules_coach_day", "coach_id", "day_of_week", "is_active"),
    )

    def __repr__(self):
        return f"<AvailabilityRule(id={self.id}, coach_id={self.coach_id}, day={self.day_of_week})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "coach_id": str(self.coach_id),
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "timezone": self.timezone,
            "effective_date": self.effective_date.isoformat() if self.effective_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
        }
