# ===== app/services/availability/slot_generator.py =====
"""
Expand recurring weekly availability rules into bookable slots.

Everything in this module is pure: the caller loads rules and bookings,
passes them in together with "now", and gets back a sorted list of free
slots. Rules and bookings are duck-typed so ORM rows and plain objects
both work.

Cost is O(days x matching rules x candidates per window); the date cursor
is bounded by the requested window.
"""
import logging
from bisect import bisect_left
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.models.booking import ACTIVE_BOOKING_STATUSES

logger = logging.getLogger(__name__)

DEFAULT_STEP_MINUTES = 30


@dataclass(frozen=True)
class Slot:
    """A concrete, dated, bookable interval (UTC)"""
    coach_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int

    @property
    def key(self) -> Tuple[UUID, datetime, datetime]:
        return self.coach_id, self.start_time, self.end_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": f"{self.coach_id}-{self.start_time.isoformat()}",
            "coach_id": str(self.coach_id),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_minutes": self.duration_minutes,
            "is_available": True,
        }


def as_utc(value: datetime) -> datetime:
    """Normalize to aware UTC; naive values are taken to already be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def rule_weekday(day: date) -> int:
    """Weekday in rule numbering (0=Sunday ... 6=Saturday)"""
    return (day.weekday() + 1) % 7


def iter_window_dates(window_start: date, window_end: date) -> Iterator[date]:
    """Every calendar date in [window_start, window_end]"""
    for offset in range((window_end - window_start).days + 1):
        yield window_start + timedelta(days=offset)


def weekdays_in_window(window_start: date, window_end: date) -> Set[int]:
    if window_end < window_start:
        return set()
    # A week covers every weekday, no need to walk further
    last = min(window_end, window_start + timedelta(days=6))
    return {rule_weekday(day) for day in iter_window_dates(window_start, last)}


def rule_applies_on(rule, day: date) -> bool:
    if not rule.is_active:
        return False
    if rule.day_of_week != rule_weekday(day):
        return False
    if rule.effective_date is not None and day < rule.effective_date:
        return False
    if rule.end_date is not None and day > rule.end_date:
        return False
    return True


def iter_rule_occurrences(rules: Iterable, window_start: date, window_end: date) -> Iterator[Tuple[date, Any]]:
    """Lazily yield (date, rule) for each rule active on each date of the window"""
    if window_end < window_start:
        return

    by_weekday: Dict[int, List[Any]] = defaultdict(list)
    for rule in rules:
        by_weekday[rule.day_of_week].append(rule)

    for day in iter_window_dates(window_start, window_end):
        for rule in by_weekday.get(rule_weekday(day), ()):
            if rule_applies_on(rule, day):
                yield day, rule


def bind_rule_to_date(rule, day: date) -> Optional[Tuple[datetime, datetime]]:
    """
    Bind a rule's local start/end times to a date in the rule's timezone.

    Returns the (start, end) bounds in UTC, or None when the rule cannot
    produce slots on that date (inverted times, unknown zone, or a DST
    transition that collapses the window).
    """
    start_time: time = rule.start_time
    end_time: time = rule.end_time

    if start_time is None or end_time is None or start_time >= end_time:
        logger.warning(f"Skipping availability rule {getattr(rule, 'id', None)}: start_time must be before end_time")
        return None

    try:
        tz = ZoneInfo(rule.timezone or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Skipping availability rule {getattr(rule, 'id', None)}: unknown timezone {rule.timezone!r}")
        return None

    bound_start = datetime.combine(day, start_time.replace(tzinfo=None), tzinfo=tz).astimezone(timezone.utc)
    bound_end = datetime.combine(day, end_time.replace(tzinfo=None), tzinfo=tz).astimezone(timezone.utc)

    if bound_end <= bound_start:
        return None

    return bound_start, bound_end


def rule_bounds_span(rules: Iterable, window_start: date, window_end: date) -> Optional[Tuple[datetime, datetime]]:
    """Earliest start and latest end (UTC) over every rule occurrence in the window"""
    span_start: Optional[datetime] = None
    span_end: Optional[datetime] = None

    for day, rule in iter_rule_occurrences(rules, window_start, window_end):
        bounds = bind_rule_to_date(rule, day)
        if bounds is None:
            continue
        if span_start is None or bounds[0] < span_start:
            span_start = bounds[0]
        if span_end is None or bounds[1] > span_end:
            span_end = bounds[1]

    if span_start is None or span_end is None:
        return None
    return span_start, span_end


def iter_candidate_starts(
        bound_start: datetime,
        bound_end: datetime,
        duration_minutes: int,
        step_minutes: int = DEFAULT_STEP_MINUTES
) -> Iterator[datetime]:
    """
    Candidate slot starts inside [bound_start, bound_end].

    Starts advance by min(step_minutes, duration) so candidates overlap
    instead of being laid back to back; a start is valid while
    start + duration <= bound_end.
    """
    if duration_minutes <= 0 or step_minutes <= 0:
        return

    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=min(step_minutes, duration_minutes))

    current = bound_start
    while current + duration <= bound_end:
        yield current
        current += step


class BookedIntervals:
    """
    Active bookings for one coach, queryable for overlap.

    Exact (start, end) matches are pruned from a set first; the half-open
    overlap test against the sorted intervals is authoritative.
    """

    def __init__(self, bookings: Iterable, statuses: Iterable[str] = ACTIVE_BOOKING_STATUSES):
        active_statuses = set(statuses)
        intervals = sorted(
            (as_utc(b.scheduled_start), as_utc(b.scheduled_end))
            for b in bookings
            if b.status in active_statuses
        )

        self._exact: Set[Tuple[datetime, datetime]] = set(intervals)
        self._starts: List[datetime] = [start for start, _ in intervals]

        # Running max of end times so one bisect answers "does anything overlap"
        self._max_end: List[datetime] = []
        for _, end in intervals:
            self._max_end.append(end if not self._max_end else max(self._max_end[-1], end))

    def __len__(self) -> int:
        return len(self._starts)

    def blocks(self, start: datetime, end: datetime) -> bool:
        if (start, end) in self._exact:
            return True

        # Intervals starting before `end` are the only ones that can overlap
        idx = bisect_left(self._starts, end)
        return idx > 0 and self._max_end[idx - 1] > start


def generate_slots(
        coach_id: UUID,
        rules: Iterable,
        bookings: Iterable,
        window_start: date,
        window_end: date,
        duration_minutes: int,
        now: datetime,
        step_minutes: int = DEFAULT_STEP_MINUTES
) -> List[Slot]:
    """
    Free slots for a coach over [window_start, window_end].

    Slots overlapping an active booking, or not strictly after `now`, are
    dropped. Output is sorted by (start_time, coach_id) and duplicates from
    overlapping rules collapse on (coach_id, start_time, end_time).
    """
    if duration_minutes <= 0 or window_end < window_start:
        return []

    booked = BookedIntervals(bookings)
    now = as_utc(now)
    duration = timedelta(minutes=duration_minutes)

    seen: Set[Tuple[UUID, datetime, datetime]] = set()
    slots: List[Slot] = []

    for day, rule in iter_rule_occurrences(rules, window_start, window_end):
        bounds = bind_rule_to_date(rule, day)
        if bounds is None:
            continue

        for start in iter_candidate_starts(bounds[0], bounds[1], duration_minutes, step_minutes):
            if start <= now:
                continue

            end = start + duration
            key = (coach_id, start, end)
            if key in seen or booked.blocks(start, end):
                continue

            seen.add(key)
            slots.append(Slot(coach_id=coach_id, start_time=start, end_time=end, duration_minutes=duration_minutes))

    slots.sort(key=lambda s: (s.start_time, str(s.coach_id)))
    return slots
