"""Availability queries built on the conflict detector"""
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from pydantic import BaseModel

from domain.conflicts import ConflictDetector, intervals_overlap
from domain.entities import Booking, Yacht
from domain.enums import AvailabilityStatus, BookingStatus, BookingType
from domain.value_objects import TimeSlot

logger = logging.getLogger(__name__)


class DateAvailability(BaseModel):
    """Calendar cell for one yacht on one day"""
    day: date
    resource_id: str
    is_available: bool
    status: AvailabilityStatus
    bookings_on_date: List[Booking] = []
    conflict_count: int = 0
    is_transition_day: bool = False


class ResourceSuggestion(BaseModel):
    """Another yacht free for the requested interval"""
    yacht: Yacht
    slot: TimeSlot
    suitability_score: int


class AvailabilityService:
    """Answers availability questions; never tests overlap on its own"""

    def __init__(self, detector: Optional[ConflictDetector] = None):
        self.detector = detector or ConflictDetector()

    @property
    def rules(self):
        return self.detector.rules

    # ==================== POINT QUERIES ====================
    def is_resource_available(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        existing_bookings: Iterable[Booking]
    ) -> bool:
        """True when [start, end) on the yacht has no blocking conflict"""
        candidate = Booking(resource_id=resource_id, start=start, end=end)
        return self.detector.check_conflicts(candidate, existing_bookings).is_available

    def get_availability_for_date(
        self,
        day: date,
        resource_id: str,
        existing_bookings: Iterable[Booking],
        tz: tzinfo = timezone.utc
    ) -> DateAvailability:
        """Report which bookings intersect the calendar day [day 00:00, day+1 00:00)"""
        if not resource_id:
            raise ValueError("resource_id is required")

        day_start = datetime.combine(day, time.min, tzinfo=tz)
        day_end = day_start + timedelta(days=1)
        day_slot = TimeSlot(start=day_start, end=day_end)

        bookings = [
            b for b in self.detector.relevant_bookings(resource_id, existing_bookings)
            if intervals_overlap(b, day_slot)
        ]
        bookings.sort(key=lambda b: b.start)

        candidate = Booking(resource_id=resource_id, start=day_start, end=day_end)
        report = self.detector.check_conflicts(candidate, bookings)
        blocking = report.blocking_conflicts

        blacked_out = bool(self.rules.blackouts_between(resource_id, day_start, day_end))
        status = self._cell_status(bookings, blacked_out)

        # Check-out or check-in happening inside the day
        transition = any(
            day_start < b.start < day_end or day_start < b.end < day_end
            for b in bookings
        )

        return DateAvailability(
            day=day,
            resource_id=resource_id,
            is_available=report.is_available,
            status=status,
            bookings_on_date=bookings,
            conflict_count=len(blocking),
            is_transition_day=transition,
        )

    def get_range_availability(
        self,
        first_day: date,
        last_day: date,
        resource_id: str,
        existing_bookings: Iterable[Booking],
        tz: tzinfo = timezone.utc
    ) -> List[DateAvailability]:
        """Daily availability rows for first_day..last_day inclusive"""
        if last_day < first_day:
            return []

        snapshot = list(existing_bookings)
        days = (last_day - first_day).days + 1
        return [
            self.get_availability_for_date(first_day + timedelta(days=offset), resource_id, snapshot, tz)
            for offset in range(days)
        ]

    # ==================== SLOT SEARCH ====================
    def find_available_slots(
        self,
        resource_id: str,
        search_start: datetime,
        search_end: datetime,
        desired_duration_hours: float,
        existing_bookings: Iterable[Booking],
        exclude_id=None
    ) -> List[TimeSlot]:
        """Maximal free gaps inside [search_start, search_end) at least desired_duration_hours long.

        Single sweep over occupied intervals sorted by start. Gaps are shrunk
        by the hard turnaround minimum on each side that touches a booking.
        """
        if not resource_id:
            raise ValueError("resource_id is required")
        if search_end <= search_start:
            return []

        desired = timedelta(hours=desired_duration_hours)
        turnaround = timedelta(hours=self.rules.min_turnaround_hours)
        occupied = self.detector.occupied_intervals(resource_id, existing_bookings, exclude_id)

        slots: List[TimeSlot] = []
        cursor = search_start
        for interval in occupied:
            # Intervals just outside the window still claim their turnaround inside it
            if interval.start - turnaround >= search_end:
                break
            if interval.end + turnaround <= search_start:
                continue

            gap_end = min(interval.start - turnaround, search_end)
            self._append_gap(slots, cursor, gap_end, desired)
            cursor = max(cursor, interval.end + turnaround)
            if cursor >= search_end:
                break

        self._append_gap(slots, cursor, search_end, desired)
        logger.debug(
            "Found %d slot(s) of %sh on %s between %s and %s",
            len(slots), desired_duration_hours, resource_id, search_start, search_end
        )
        return slots

    def suggest_alternatives(
        self,
        candidate: Booking,
        existing_bookings: Iterable[Booking],
        max_suggestions: int = 3,
        not_before: Optional[datetime] = None
    ) -> List[TimeSlot]:
        """Candidate-length intervals on the same yacht, nearest to the requested start first"""
        if not candidate.has_valid_interval():
            raise ValueError("candidate needs a valid timezone-aware interval")
        if max_suggestions <= 0:
            return []

        duration = candidate.end - candidate.start
        window = timedelta(days=self.rules.suggestion_window_days)
        search_start = candidate.start - window
        if not_before is not None:
            search_start = max(search_start, not_before)
        search_end = candidate.end + window

        slots = self.find_available_slots(
            candidate.resource_id,
            search_start,
            search_end,
            duration.total_seconds() / 3600,
            existing_bookings,
            exclude_id=candidate.booking_id,
        )

        placements = []
        for slot in slots:
            # Nearest placement of the charter inside this gap
            latest_start = slot.end - duration
            start = min(max(candidate.start, slot.start), latest_start)
            placements.append(TimeSlot(start=start, end=start + duration))

        placements.sort(key=lambda s: (abs((s.start - candidate.start).total_seconds()), s.start))
        return placements[:max_suggestions]

    def suggest_alternative_resources(
        self,
        candidate: Booking,
        existing_bookings: Iterable[Booking],
        yachts: Iterable[Yacht]
    ) -> List[ResourceSuggestion]:
        """Other yachts that fit the party and are free for the same interval"""
        if not candidate.has_valid_interval():
            raise ValueError("candidate needs a valid timezone-aware interval")

        snapshot = list(existing_bookings)
        guests = candidate.guest_count or 1
        suggestions = []
        for yacht in yachts:
            if yacht.resource_id == candidate.resource_id or yacht.max_guests < guests:
                continue
            if self.is_resource_available(yacht.resource_id, candidate.start, candidate.end, snapshot):
                suggestions.append(ResourceSuggestion(
                    yacht=yacht,
                    slot=candidate.as_slot(),
                    suitability_score=yacht.suitability_score(guests),
                ))

        suggestions.sort(key=lambda s: (-s.suitability_score, s.yacht.resource_id))
        return suggestions

    # ==================== HELPERS ====================
    @staticmethod
    def _append_gap(slots: List[TimeSlot], start: datetime, end: datetime, desired: timedelta) -> None:
        if end > start and end - start >= desired:
            slots.append(TimeSlot(start=start, end=end))

    @staticmethod
    def _cell_status(bookings: List[Booking], blacked_out: bool) -> AvailabilityStatus:
        if blacked_out:
            return AvailabilityStatus.BLACKOUT
        if not bookings:
            return AvailabilityStatus.AVAILABLE

        booking = bookings[0]
        if booking.booking_type == BookingType.BLOCKED:
            return AvailabilityStatus.BLOCKED
        if booking.booking_type == BookingType.MAINTENANCE:
            return AvailabilityStatus.MAINTENANCE
        if booking.booking_type == BookingType.OWNER:
            return AvailabilityStatus.OWNER
        if booking.status == BookingStatus.CONFIRMED:
            return AvailabilityStatus.CONFIRMED
        return AvailabilityStatus.PENDING
