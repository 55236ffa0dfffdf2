"""Caller-side optimistic booking state with commit / rollback"""
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from domain.conflicts import ConflictDetector, ConflictReport
from domain.entities import Booking
from domain.enums import OperationState, OperationType
from domain.exceptions import BookingConflictError, BookingValidationError
from domain.rules import BusinessRuleSet
from domain.validation import BookingValidator

logger = logging.getLogger(__name__)

MAX_HISTORY = 50

Persist = Callable[[Booking], Awaitable[Booking]]
Subscriber = Callable[[str, "PendingOperation"], None]


class PendingOperation(BaseModel):
    """One tentative change: PENDING until committed or rolled back"""
    operation_id: UUID = Field(default_factory=uuid4)
    operation_type: OperationType
    booking_id: UUID
    new_data: Optional[Booking] = None
    previous: Optional[Booking] = None
    state: OperationState = OperationState.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    report: Optional[ConflictReport] = None


class BookingStateManager:
    """In-memory booking snapshot for a UI session.

    Protocol: (1) validate + check conflicts against the current snapshot,
    (2) apply the change tentatively, (3) attempt persistence,
    (4) commit, or restore the pre-update snapshot on failure.
    """

    def __init__(self, rules: Optional[BusinessRuleSet] = None, capacity_lookup: Optional[Callable[[str], Optional[int]]] = None):
        self.rules = rules or BusinessRuleSet()
        self.validator = BookingValidator()
        self.detector = ConflictDetector(self.rules)
        self.capacity_lookup = capacity_lookup
        self._bookings: Dict[UUID, Booking] = {}
        self._pending: Dict[UUID, PendingOperation] = {}
        self._history: List[PendingOperation] = []
        self._subscribers: List[Subscriber] = []

    # ==================== SNAPSHOT ====================
    def set_bookings(self, bookings: List[Booking]) -> None:
        self._bookings = {b.booking_id: b.model_copy(deep=True) for b in bookings}
        self._notify("loaded", None)

    def snapshot(self) -> List[Booking]:
        """Copy of the current (possibly tentative) state"""
        return [b.model_copy(deep=True) for b in self._bookings.values()]

    def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        booking = self._bookings.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    def bookings_for_resource(self, resource_id: str) -> List[Booking]:
        return [b.model_copy(deep=True) for b in self._bookings.values() if b.resource_id == resource_id]

    # ==================== SUBSCRIPTIONS ====================
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe function"""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event: str, operation: Optional[PendingOperation]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event, operation)
            except Exception:
                logger.exception("Booking state subscriber failed on %s", event)

    # ==================== TWO-PHASE PROTOCOL ====================
    def begin(self, operation_type: OperationType, booking: Booking, now: Optional[datetime] = None) -> PendingOperation:
        """Validate and conflict-check, then apply the change tentatively.

        Raises:
            BookingValidationError / BookingConflictError: change is rejected; state untouched
        """
        previous = self._bookings.get(booking.booking_id)
        if operation_type != OperationType.CREATE and previous is None:
            raise ValueError(f"Booking {booking.booking_id} is not in the snapshot")

        report = None
        if operation_type != OperationType.CANCEL:
            capacity = self.capacity_lookup(booking.resource_id) if self.capacity_lookup else None
            validation = self.validator.validate(booking, self.rules, capacity=capacity, now=now)
            if not validation.is_valid:
                raise BookingValidationError(validation)
            report = self.detector.check_conflicts(
                booking, self._bookings.values(), exclude_id=booking.booking_id
            )
            if not report.is_available:
                raise BookingConflictError(report)

        operation = PendingOperation(
            operation_type=operation_type,
            booking_id=booking.booking_id,
            new_data=booking.model_copy(deep=True),
            previous=previous.model_copy(deep=True) if previous else None,
            report=report,
        )
        self._bookings[booking.booking_id] = booking.model_copy(deep=True)
        self._pending[operation.operation_id] = operation
        self._notify("pending", operation)
        return operation

    def commit(self, operation_id: UUID) -> PendingOperation:
        operation = self._take_pending(operation_id)
        operation.state = OperationState.COMMITTED
        self._history.append(operation)
        del self._history[:-MAX_HISTORY]
        self._notify("committed", operation)
        return operation

    def rollback(self, operation_id: UUID) -> PendingOperation:
        """Restore the pre-update record for this operation"""
        operation = self._take_pending(operation_id)
        self._restore(operation.booking_id, operation.previous)
        operation.state = OperationState.ROLLED_BACK
        logger.warning("Rolled back %s of booking %s", operation.operation_type.value, operation.booking_id)
        self._notify("rolled_back", operation)
        return operation

    async def apply(
        self,
        operation_type: OperationType,
        booking: Booking,
        persist: Persist,
        now: Optional[datetime] = None
    ) -> PendingOperation:
        """Run the full protocol against an async persistence call"""
        operation = self.begin(operation_type, booking, now=now)
        try:
            saved = await persist(booking)
        except Exception:
            self.rollback(operation.operation_id)
            raise

        if saved is not None:
            self._bookings[saved.booking_id] = saved.model_copy(deep=True)
        return self.commit(operation.operation_id)

    def pending_operations(self) -> List[PendingOperation]:
        return list(self._pending.values())

    # ==================== UNDO ====================
    def history(self) -> List[PendingOperation]:
        return list(self._history)

    async def undo_last(self, persist: Optional[Persist] = None) -> Optional[PendingOperation]:
        """Revert the most recent committed operation locally and, when given, in storage"""
        if not self._history:
            return None

        operation = self._history.pop()
        current = self._bookings.get(operation.booking_id)
        self._restore(operation.booking_id, operation.previous)
        if persist is not None and operation.previous is not None:
            try:
                await persist(operation.previous)
            except Exception:
                self._restore(operation.booking_id, current)
                self._history.append(operation)
                raise

        self._notify("undone", operation)
        return operation

    # ==================== PRIVATE ====================
    def _take_pending(self, operation_id: UUID) -> PendingOperation:
        operation = self._pending.pop(operation_id, None)
        if operation is None:
            raise ValueError(f"No pending operation {operation_id}")
        return operation

    def _restore(self, booking_id: UUID, previous: Optional[Booking]) -> None:
        if previous is None:
            self._bookings.pop(booking_id, None)
        else:
            self._bookings[booking_id] = previous.model_copy(deep=True)

    def stats(self) -> Dict[str, int]:
        return {
            "bookings": len(self._bookings),
            "pending_operations": len(self._pending),
            "history": len(self._history),
        }
