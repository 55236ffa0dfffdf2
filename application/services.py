"""Application Services - Booking workflow use cases"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from application.availability import AvailabilityService, ResourceSuggestion
from domain.conflicts import ConflictDetector, ConflictReport
from domain.entities import Booking, Yacht
from domain.enums import BookingType
from domain.exceptions import BookingConflictError, BookingValidationError
from domain.repositories import BookingRepository, YachtRepository
from domain.rules import BusinessRuleSet
from domain.validation import BookingValidator, ValidationResult
from domain.value_objects import ContactDetails

logger = logging.getLogger(__name__)


class BookingCheck(BaseModel):
    """Dry-run outcome of validating and conflict-checking a candidate"""
    validation: ValidationResult
    report: Optional[ConflictReport] = None
    alternative_yachts: List[ResourceSuggestion] = []

    @property
    def is_acceptable(self) -> bool:
        return self.validation.is_valid and self.report is not None and self.report.is_available


class BookingService:
    """Service for Booking business use cases

    Every mutation is re-validated and re-checked against a fresh snapshot
    from the repository immediately before it is persisted.
    """

    def __init__(self,
                 repository: BookingRepository,
                 yacht_repository: YachtRepository,
                 rules: Optional[BusinessRuleSet] = None):
        self.repository = repository
        self.yacht_repository = yacht_repository
        self.rules = rules or BusinessRuleSet()
        self.validator = BookingValidator()
        self.detector = ConflictDetector(self.rules)
        self.availability = AvailabilityService(self.detector)

    # ==================== CHECKS ====================
    async def check_booking(
        self,
        candidate: Booking,
        exclude_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
        enforce_advance_notice: Optional[bool] = None,
        max_suggestions: int = 3
    ) -> BookingCheck:
        """Validate, then check conflicts and gather alternatives without persisting"""
        yacht = await self._find_yacht(candidate.resource_id)
        validation = self.validator.validate(
            candidate,
            self.rules,
            capacity=yacht.max_guests if yacht else None,
            now=now,
            enforce_advance_notice=enforce_advance_notice
        )
        if candidate.resource_id and yacht is None:
            validation.add_error("resource_id", f"Unknown yacht {candidate.resource_id}")

        if yacht is None or not candidate.has_valid_interval():
            return BookingCheck(validation=validation)

        snapshot = await self._snapshot(candidate)
        report = self.detector.check_conflicts(candidate, snapshot, exclude_id=exclude_id)

        alternatives: List[ResourceSuggestion] = []
        if not report.is_available:
            reference = now or datetime.now(timezone.utc)
            report.suggestions = self.availability.suggest_alternatives(
                candidate,
                snapshot,
                max_suggestions=max_suggestions,
                not_before=reference + timedelta(hours=self.rules.min_advance_notice_hours)
            )
            alternatives = await self._alternative_yachts(candidate)

        return BookingCheck(validation=validation, report=report, alternative_yachts=alternatives)

    # ==================== CREATE / READ ====================
    async def create_booking(
        self,
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
        created_by: str = "SYSTEM",
        now: Optional[datetime] = None
    ) -> Booking:
        """Create new booking with full validation and conflict check"""
        booking = Booking.create(
            resource_id=resource_id,
            start=start,
            end=end,
            guest_count=guest_count,
            total_value=total_value,
            deposit_amount=deposit_amount,
            contact=contact,
            booking_type=booking_type,
            summary=summary,
            notes=notes,
            created_by=created_by
        )

        await self._ensure_acceptable(booking, now=now)
        saved = await self.repository.save(booking)
        logger.info("Created booking %s on %s (%s - %s)", saved.booking_no, resource_id, start, end)
        return saved

    async def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        """Get booking by ID"""
        return await self.repository.find_by_id(booking_id)

    async def get_booking_by_number(self, booking_no: str) -> Optional[Booking]:
        """Get booking by booking number"""
        return await self.repository.find_by_booking_no(booking_no)

    async def get_all_bookings(self) -> List[Booking]:
        """Get all bookings"""
        return await self.repository.find_all()

    async def get_bookings_for_resource(
        self,
        resource_id: str,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None
    ) -> List[Booking]:
        """Get a yacht's bookings, optionally within a window"""
        return await self.repository.find_by_resource(resource_id, window_start, window_end)

    # ==================== MUTATIONS ====================
    async def update_booking(
        self,
        booking_id: UUID,
        guest_count: Optional[int] = None,
        total_value: Optional[Decimal] = None,
        deposit_amount: Optional[Decimal] = None,
        contact: Optional[ContactDetails] = None,
        summary: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Optional[Booking]:
        """Update booking details; the interval is changed only via move_booking"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            return None

        try:
            booking.update_details(
                guest_count=guest_count,
                total_value=total_value,
                deposit_amount=deposit_amount,
                contact=contact,
                summary=summary,
                notes=notes
            )
        except ValueError as e:
            raise ValueError(f"Cannot update booking: {str(e)}")

        await self._ensure_acceptable(booking, now=now)
        return await self.repository.update(booking)

    async def move_booking(
        self,
        booking_id: UUID,
        new_start: datetime,
        new_end: datetime,
        new_resource_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Optional[Booking]:
        """Move booking to a new interval and optionally another yacht"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            return None

        try:
            booking.move(new_start, new_end, new_resource_id)
        except ValueError as e:
            raise ValueError(f"Cannot move booking: {str(e)}")

        await self._ensure_acceptable(booking, now=now, enforce_advance_notice=True)
        moved = await self.repository.update(booking)
        logger.info("Moved booking %s to %s (%s - %s)", moved.booking_no, moved.resource_id, new_start, new_end)
        return moved

    async def confirm_booking(self, booking_id: UUID, now: Optional[datetime] = None) -> Optional[Booking]:
        """Confirm a tentative booking after re-checking it"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            return None

        try:
            booking.confirm()
        except ValueError as e:
            raise ValueError(f"Cannot confirm booking: {str(e)}")

        await self._ensure_acceptable(booking, now=now)
        return await self.repository.update(booking)

    async def cancel_booking(
        self,
        booking_id: UUID,
        reason: str = "Customer requested cancellation"
    ) -> Optional[Booking]:
        """Soft-cancel booking"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            return None

        try:
            booking.cancel(reason)
        except ValueError as e:
            raise ValueError(f"Cannot cancel booking: {str(e)}")

        logger.info("Cancelled booking %s: %s", booking.booking_no, reason)
        return await self.repository.update(booking)

    async def complete_booking(self, booking_id: UUID) -> Optional[Booking]:
        """Mark charter as completed"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            return None

        try:
            booking.complete()
        except ValueError as e:
            raise ValueError(f"Cannot complete booking: {str(e)}")

        return await self.repository.update(booking)

    # ==================== PRIVATE HELPERS ====================
    async def _ensure_acceptable(
        self,
        booking: Booking,
        now: Optional[datetime] = None,
        enforce_advance_notice: Optional[bool] = None
    ) -> None:
        check = await self.check_booking(
            booking,
            exclude_id=booking.booking_id,
            now=now,
            enforce_advance_notice=enforce_advance_notice
        )
        if not check.validation.is_valid:
            logger.info("Rejected booking %s: %s", booking.booking_id, check.validation.errors)
            raise BookingValidationError(check.validation)
        if not check.report.is_available:
            raise BookingConflictError(check.report)

    async def _find_yacht(self, resource_id: Optional[str]) -> Optional[Yacht]:
        if not resource_id:
            return None
        return await self.yacht_repository.find_by_id(resource_id)

    async def _snapshot(self, candidate: Booking) -> List[Booking]:
        # Wide enough for alternative suggestions around the candidate
        margin = timedelta(days=self.rules.suggestion_window_days + 1, hours=self.rules.min_turnaround_hours)
        return await self.repository.find_by_resource(
            candidate.resource_id,
            candidate.start - margin,
            candidate.end + margin
        )

    async def _alternative_yachts(self, candidate: Booking) -> List[ResourceSuggestion]:
        yachts = await self.yacht_repository.find_all()
        snapshot: List[Booking] = []
        for yacht in yachts:
            if yacht.resource_id != candidate.resource_id:
                snapshot.extend(await self.repository.find_by_resource(
                    yacht.resource_id, candidate.start, candidate.end
                ))
        return self.availability.suggest_alternative_resources(candidate, snapshot, yachts)
