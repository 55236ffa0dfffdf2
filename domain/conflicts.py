"""
Booking conflict detection.

Every temporal check reduces to the half-open overlap primitive
``overlaps(a_start, a_end, b_start, b_end)`` plus a yacht equality check.
The detector is stateless: it works on the snapshot of bookings passed in
and returns a new ConflictReport on every call.
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel

from domain.entities import Booking
from domain.enums import BookingStatus, BookingType, ConflictSeverity, ConflictType
from domain.rules import BusinessRuleSet
from domain.value_objects import BlackoutPeriod, TimeSlot, is_aware, overlap_duration, overlaps

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def intervals_overlap(a, b) -> bool:
    """Overlap test for any two objects exposing ``start`` and ``end``"""
    return overlaps(a.start, a.end, b.start, b.end)


class Conflict(BaseModel):
    """One entry of a conflict report"""
    conflicting_booking_id: Optional[UUID] = None
    severity: ConflictSeverity
    conflict_type: ConflictType
    reason: str
    start: datetime
    end: datetime
    overlap_hours: float = 0.0


class ConflictReport(BaseModel):
    """Result of checking one candidate against a snapshot"""
    is_available: bool
    conflicts: List[Conflict] = []
    suggestions: List[TimeSlot] = []

    @property
    def blocking_conflicts(self) -> List[Conflict]:
        return [c for c in self.conflicts if c.severity.is_blocking]

    @property
    def advisories(self) -> List[Conflict]:
        return [c for c in self.conflicts if not c.severity.is_blocking]


class ConflictDetector:
    """Classifies overlaps between a candidate booking and existing bookings on the same yacht"""

    def __init__(self, rules: Optional[BusinessRuleSet] = None):
        self.rules = rules or BusinessRuleSet()

    # ==================== SNAPSHOT FILTERING ====================
    def relevant_bookings(
        self,
        resource_id: str,
        existing_bookings: Iterable[Booking],
        exclude_id: Optional[UUID] = None
    ) -> List[Booking]:
        """Active, well-formed bookings on the yacht, minus the excluded one"""
        relevant = []
        for booking in existing_bookings:
            if booking.resource_id != resource_id:
                continue
            if not booking.status.is_active:
                continue
            if exclude_id is not None and booking.booking_id == exclude_id:
                continue
            if not booking.has_valid_interval():
                logger.warning(
                    "Skipping booking %s on %s with degenerate interval %s - %s",
                    booking.booking_id, booking.resource_id, booking.start, booking.end
                )
                continue
            relevant.append(booking)
        return relevant

    def blocks_time(self, booking: Booking) -> bool:
        """Whether an overlap with this booking would block a candidate"""
        return self.rules.pending_blocks or not booking.status.is_tentative

    def occupied_intervals(
        self,
        resource_id: str,
        existing_bookings: Iterable[Booking],
        exclude_id: Optional[UUID] = None
    ) -> List[TimeSlot]:
        """Blocking bookings and blackouts on the yacht, sorted by start"""
        occupied = [
            booking.as_slot()
            for booking in self.relevant_bookings(resource_id, existing_bookings, exclude_id)
            if self.blocks_time(booking)
        ]
        occupied.extend(
            TimeSlot(start=b.start, end=b.end) for b in self.rules.blackouts_for(resource_id)
        )
        return sorted(occupied, key=lambda slot: (slot.start, slot.end))

    # ==================== MAIN CHECK ====================
    def check_conflicts(
        self,
        candidate: Booking,
        existing_bookings: Iterable[Booking],
        exclude_id: Optional[UUID] = None
    ) -> ConflictReport:
        """Check a candidate booking against a snapshot of existing bookings.

        Args:
            candidate: booking being created, edited or moved
            existing_bookings: snapshot supplied by the caller
            exclude_id: booking to ignore, typically the one being edited

        Returns:
            ConflictReport; ``is_available`` is False iff a high or medium conflict exists

        Raises:
            ValueError: candidate lacks a yacht or a valid timezone-aware interval
        """
        self._require_checkable(candidate)

        conflicts: List[Conflict] = []
        for booking in self.relevant_bookings(candidate.resource_id, existing_bookings, exclude_id):
            if booking.booking_id == candidate.booking_id:
                continue
            conflict = self._classify(candidate, booking)
            if conflict is not None:
                conflicts.append(conflict)

        for blackout in self.rules.blackouts_between(candidate.resource_id, candidate.start, candidate.end):
            conflicts.append(self._blackout_conflict(candidate, blackout))

        conflicts.sort(key=lambda c: (
            -c.severity.rank,
            abs((c.start - candidate.start).total_seconds()),
            str(c.conflicting_booking_id or ""),
        ))

        is_available = not any(c.severity.is_blocking for c in conflicts)
        if not is_available:
            logger.info(
                "Candidate %s on %s blocked by %d conflict(s)",
                candidate.booking_id, candidate.resource_id,
                sum(1 for c in conflicts if c.severity.is_blocking)
            )

        return ConflictReport(is_available=is_available, conflicts=conflicts)

    def conflicts_with(self, candidate: Booking, other: Booking) -> bool:
        """True when the two bookings are on the same yacht and their intervals overlap"""
        return candidate.resource_id == other.resource_id and intervals_overlap(candidate, other)

    # ==================== CLASSIFICATION ====================
    def _classify(self, candidate: Booking, existing: Booking) -> Optional[Conflict]:
        overlap = overlap_duration(candidate.start, candidate.end, existing.start, existing.end)

        if overlap > timedelta(0):
            shorter = min(candidate.end - candidate.start, existing.end - existing.start)
            ratio = overlap / shorter
            if not self.blocks_time(existing):
                severity = ConflictSeverity.LOW
            elif ratio >= self.rules.high_overlap_ratio:
                severity = ConflictSeverity.HIGH
            else:
                severity = ConflictSeverity.MEDIUM
            return Conflict(
                conflicting_booking_id=existing.booking_id,
                severity=severity,
                conflict_type=self._conflict_type(existing),
                reason=(
                    f"Overlaps {self._describe(existing)} "
                    f"({ratio:.0%} of the shorter charter)"
                ),
                start=existing.start,
                end=existing.end,
                overlap_hours=overlap.total_seconds() / 3600,
            )

        gap = max(existing.start - candidate.end, candidate.start - existing.end)
        if gap < timedelta(hours=self.rules.min_turnaround_hours):
            # Tentative neighbours stay advisory when they do not block
            severity = ConflictSeverity.HIGH if self.blocks_time(existing) else ConflictSeverity.LOW
            required = self.rules.min_turnaround_hours
        elif gap < timedelta(hours=self.rules.recommended_turnaround_hours):
            severity = ConflictSeverity.LOW
            required = self.rules.recommended_turnaround_hours
        else:
            return None

        return Conflict(
            conflicting_booking_id=existing.booking_id,
            severity=severity,
            conflict_type=ConflictType.TURNAROUND,
            reason=(
                f"Only {gap.total_seconds() / 3600:g}h turnaround next to "
                f"{self._describe(existing)}; {required:g}h required"
            ),
            start=existing.start,
            end=existing.end,
        )

    def _blackout_conflict(self, candidate: Booking, blackout: BlackoutPeriod) -> Conflict:
        overlap = overlap_duration(candidate.start, candidate.end, blackout.start, blackout.end)
        return Conflict(
            severity=ConflictSeverity.HIGH,
            conflict_type=ConflictType.BLACKOUT,
            reason=(
                f"{blackout.reason} on {candidate.resource_id} from "
                f"{blackout.start.strftime(TIMESTAMP_FORMAT)} to {blackout.end.strftime(TIMESTAMP_FORMAT)}"
            ),
            start=blackout.start,
            end=blackout.end,
            overlap_hours=overlap.total_seconds() / 3600,
        )

    @staticmethod
    def _conflict_type(booking: Booking) -> ConflictType:
        if booking.booking_type == BookingType.BLOCKED:
            return ConflictType.BLOCKED_PERIOD
        if booking.booking_type == BookingType.MAINTENANCE:
            return ConflictType.MAINTENANCE
        if booking.booking_type == BookingType.OWNER:
            return ConflictType.OWNER_USE
        if booking.status == BookingStatus.CONFIRMED:
            return ConflictType.CONFIRMED_BOOKING
        return ConflictType.PENDING_BOOKING

    @staticmethod
    def _describe(booking: Booking) -> str:
        label = booking.booking_no or str(booking.booking_id)
        return (
            f"{booking.booking_type.value} {label} on {booking.resource_id} from "
            f"{booking.start.strftime(TIMESTAMP_FORMAT)} to {booking.end.strftime(TIMESTAMP_FORMAT)}"
        )

    @staticmethod
    def _require_checkable(candidate: Booking) -> None:
        if candidate is None:
            raise ValueError("candidate booking is required")
        if not candidate.resource_id:
            raise ValueError("candidate booking has no resource_id")
        if candidate.start is None or candidate.end is None:
            raise ValueError("candidate booking needs both start and end")
        if not (is_aware(candidate.start) and is_aware(candidate.end)):
            raise ValueError("candidate datetimes must be timezone-aware")
        if candidate.end <= candidate.start:
            raise ValueError("candidate end must be after start")
