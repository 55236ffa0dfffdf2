"""Domain Enums"""
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    DEPOSIT_PENDING = "deposit_pending"
    FINAL_PAYMENT_PENDING = "final_payment_pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_tentative(self) -> bool:
        return self in TENTATIVE_STATUSES

    @property
    def is_active(self) -> bool:
        """Active bookings occupy their yacht for conflict purposes"""
        return self not in INACTIVE_STATUSES


TENTATIVE_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.DEPOSIT_PENDING,
    BookingStatus.FINAL_PAYMENT_PENDING,
})

INACTIVE_STATUSES = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
    BookingStatus.NO_SHOW,
})


class BookingType(str, Enum):
    CHARTER = "charter"
    OWNER = "owner"
    MAINTENANCE = "maintenance"
    BLOCKED = "blocked"


class ConflictSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]

    @property
    def is_blocking(self) -> bool:
        return self is not ConflictSeverity.LOW


class ConflictType(str, Enum):
    CONFIRMED_BOOKING = "confirmed_booking"
    PENDING_BOOKING = "pending_booking"
    OWNER_USE = "owner_use"
    MAINTENANCE = "maintenance"
    BLOCKED_PERIOD = "blocked_period"
    BLACKOUT = "blackout"
    TURNAROUND = "turnaround"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    CONFIRMED = "confirmed"
    PENDING = "pending"
    OWNER = "owner"
    MAINTENANCE = "maintenance"
    BLOCKED = "blocked"
    BLACKOUT = "blackout"


class OperationType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    MOVE = "MOVE"
    CANCEL = "CANCEL"


class OperationState(str, Enum):
    PENDING = "PENDING"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"
