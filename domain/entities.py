"""Domain Entities - Aggregates"""
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID, uuid4
from datetime import datetime, timedelta, timezone
from typing import Optional
from decimal import Decimal

from domain.enums import BookingStatus, BookingType
from domain.value_objects import ContactDetails, TimeSlot, is_aware


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Yacht(BaseModel):
    """Bookable resource; time-exclusivity is enforced per yacht"""
    model_config = ConfigDict(from_attributes=True)

    resource_id: str
    name: str
    max_guests: int = Field(ge=1)
    min_booking_hours: float = Field(default=4, ge=0)
    home_marina: Optional[str] = None

    def suitability_score(self, guest_count: int) -> int:
        """Score 0-100 ranking this yacht as an alternative for a party size"""
        score = 50

        # Prefer yachts the party fills well
        utilization = guest_count / self.max_guests
        if 0.7 <= utilization <= 1.0:
            score += 30
        elif utilization >= 0.5:
            score += 20
        else:
            score += 10

        if self.max_guests >= 10:
            score += 10
        elif self.max_guests >= 8:
            score += 5

        if self.min_booking_hours <= 4:
            score += 10
        elif self.min_booking_hours <= 6:
            score += 5

        return min(100, score)


class Booking(BaseModel):
    """Booking Aggregate Root Entity

    Interval fields are optional and unordered at construction; the
    validator and the conflict detector report on malformed intervals.
    """
    model_config = ConfigDict(from_attributes=True)

    # Identity
    booking_id: UUID = Field(default_factory=uuid4)
    booking_no: str = ""

    # Reference to the yacht
    resource_id: Optional[str] = None

    # Occupied interval [start, end)
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    status: BookingStatus = BookingStatus.PENDING
    booking_type: BookingType = BookingType.CHARTER

    guest_count: Optional[int] = None
    total_value: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    contact: ContactDetails = Field(default_factory=ContactDetails)

    summary: str = ""
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    created_by: str = "SYSTEM"
    version: int = 1

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        resource_id: str,
        start: datetime,
        end: datetime,
        guest_count: int,
        total_value: Decimal = Decimal("0"),
        deposit_amount: Decimal = Decimal("0"),
        contact: Optional[ContactDetails] = None,
        booking_type: BookingType = BookingType.CHARTER,
        summary: str = "",
        notes: Optional[str] = None,
        created_by: str = "SYSTEM"
    ) -> "Booking":
        """Create a new pending booking with a generated booking number"""
        if not resource_id:
            raise ValueError("resource_id is required")

        return Booking(
            booking_no=Booking._generate_booking_no(start),
            resource_id=resource_id,
            start=start,
            end=end,
            guest_count=guest_count,
            total_value=total_value,
            deposit_amount=deposit_amount,
            contact=contact or ContactDetails(),
            booking_type=booking_type,
            summary=summary,
            notes=notes,
            status=BookingStatus.PENDING,
            created_by=created_by
        )

    # ==================== MODIFICATION METHODS ====================
    def update_details(
        self,
        guest_count: Optional[int] = None,
        total_value: Optional[Decimal] = None,
        deposit_amount: Optional[Decimal] = None,
        contact: Optional[ContactDetails] = None,
        summary: Optional[str] = None,
        notes: Optional[str] = None
    ) -> None:
        """Update non-interval fields"""
        self._require_active("update")

        if guest_count is not None:
            self.guest_count = guest_count
        if total_value is not None:
            self.total_value = total_value
        if deposit_amount is not None:
            self.deposit_amount = deposit_amount
        if contact is not None:
            self.contact = contact
        if summary is not None:
            self.summary = summary
        if notes is not None:
            self.notes = notes

        self._touch()

    def move(
        self,
        new_start: datetime,
        new_end: datetime,
        new_resource_id: Optional[str] = None
    ) -> None:
        """Move to a new interval and optionally to another yacht"""
        self._require_active("move")

        self.start = new_start
        self.end = new_end
        if new_resource_id:
            self.resource_id = new_resource_id

        self._touch()

    # ==================== STATE TRANSITION METHODS ====================
    def confirm(self) -> None:
        """Confirm a tentative booking"""
        if not self.status.is_tentative:
            raise ValueError(
                f"Cannot confirm booking with status {self.status.value}"
            )

        self.status = BookingStatus.CONFIRMED
        self._touch()

    def cancel(self, reason: str = "") -> None:
        """Soft-cancel; the record stays in storage"""
        if not self.status.is_active:
            raise ValueError(
                f"Cannot cancel booking with status {self.status.value}"
            )

        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason or None
        self._touch()

    def complete(self) -> None:
        """Mark a confirmed charter as completed"""
        if self.status != BookingStatus.CONFIRMED:
            raise ValueError(
                f"Cannot complete booking with status {self.status.value}"
            )

        self.status = BookingStatus.COMPLETED
        self._touch()

    def mark_no_show(self) -> None:
        if self.status != BookingStatus.CONFIRMED:
            raise ValueError(
                f"Cannot mark as no-show with status {self.status.value}"
            )

        self.status = BookingStatus.NO_SHOW
        self._touch()

    # ==================== QUERY METHODS ====================
    def has_valid_interval(self) -> bool:
        """Both endpoints present, timezone-aware and ordered"""
        return (
            self.start is not None
            and self.end is not None
            and is_aware(self.start)
            and is_aware(self.end)
            and self.start < self.end
        )

    def duration(self) -> Optional[timedelta]:
        if self.start is None or self.end is None:
            return None
        return self.end - self.start

    def duration_hours(self) -> Optional[float]:
        duration = self.duration()
        if duration is None:
            return None
        return duration.total_seconds() / 3600

    def as_slot(self) -> TimeSlot:
        """Interval as a value object; raises if the interval is invalid"""
        return TimeSlot(start=self.start, end=self.end)

    def is_active(self) -> bool:
        return self.status.is_active

    # ==================== PRIVATE METHODS ====================
    def _require_active(self, action: str) -> None:
        if not self.status.is_active:
            raise ValueError(
                f"Cannot {action} booking with status {self.status.value}"
            )

    def _touch(self) -> None:
        self.modified_at = _utcnow()
        self.version += 1

    @staticmethod
    def _generate_booking_no(start: Optional[datetime] = None) -> str:
        """Generate a booking reference such as BK2506-7QX2"""
        import random
        import string
        stamp = (start or _utcnow()).strftime("%y%m")
        suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=4))
        return f"BK{stamp}-{suffix}"
