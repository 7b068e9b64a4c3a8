# ===== app/services/availability/availability_service.py =====
from typing import List
from datetime import date
from uuid import UUID
import logging

from app.config.settings import Settings, get_settings
from app.core.exceptions import InvalidInputError
from app.models.booking import ACTIVE_BOOKING_STATUSES
from app.services.availability.slot_generator import (
    Slot,
    generate_slots,
    rule_bounds_span,
    weekdays_in_window,
)

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Lists bookable slots for a coach from availability rules and existing bookings"""

    def __init__(self, store, clock, settings: Settings = None):
        self.store = store
        self.clock = clock
        self.settings = settings or get_settings()

    def list_slots(
            self,
            coach_id: UUID,
            window_start: date,
            window_end: date,
            duration_minutes: int
    ) -> List[Slot]:
        """
        Free slots of `duration_minutes` for the coach over the window.

        Only the rule and booking reads touch storage; expansion and
        exclusion run in memory against that snapshot. Having no
        availability is an empty list, not an error.
        """
        max_duration = self.settings.MAX_SLOT_DURATION_MINUTES
        if duration_minutes is None or not 0 < duration_minutes <= max_duration:
            raise InvalidInputError(
                f"Duration must be between 1 and {max_duration} minutes",
                details={"duration_minutes": duration_minutes}
            )

        if window_end < window_start:
            return []

        window_days = (window_end - window_start).days + 1
        if window_days > self.settings.MAX_SLOT_WINDOW_DAYS:
            raise InvalidInputError(
                f"Date window may span at most {self.settings.MAX_SLOT_WINDOW_DAYS} days",
                details={"window_days": window_days}
            )

        rules = self.store.get_active_availability_rules(
            coach_id, weekdays_in_window(window_start, window_end), window_start, window_end
        )

        if not rules:
            logger.info(f"No availability rules found for coach {coach_id} between {window_start} and {window_end}")
            return []

        span = rule_bounds_span(rules, window_start, window_end)
        if span is None:
            return []

        # Rule bounds in non-UTC zones can spill past the UTC calendar window
        bookings = self.store.get_bookings_overlapping(
            coach_id, span[0], span[1], ACTIVE_BOOKING_STATUSES
        )

        slots = generate_slots(
            coach_id=coach_id,
            rules=rules,
            bookings=bookings,
            window_start=window_start,
            window_end=window_end,
            duration_minutes=duration_minutes,
            now=self.clock.now(),
            step_minutes=self.settings.SLOT_STEP_MINUTES,
        )

        logger.info(
            f"Generated {len(slots)} slots for coach {coach_id} "
            f"({len(rules)} rules, {len(bookings)} bookings, {window_start}..{window_end})"
        )
        return slots
