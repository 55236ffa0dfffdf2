"""Booking record validation against structure and business rules"""
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel

from domain.entities import Booking
from domain.enums import BookingType
from domain.rules import BusinessRuleSet
from domain.value_objects import is_aware

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{6,14}$")
PHONE_SEPARATORS = re.compile(r"[\s\-().]")

MAX_EMAIL_LENGTH = 254
RECOMMENDED_DEPOSIT_RATIO = Decimal("0.20")


def is_valid_email(email: Optional[str]) -> bool:
    """RFC-5322-like address shape"""
    if not email or not isinstance(email, str):
        return False
    email = email.strip()
    return len(email) <= MAX_EMAIL_LENGTH and EMAIL_PATTERN.match(email) is not None


def is_valid_phone(phone: Optional[str]) -> bool:
    """Permissive international number: optional +, 7-15 digits once separators are stripped"""
    if not phone or not isinstance(phone, str):
        return False
    return PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", phone)) is not None


class ValidationResult(BaseModel):
    """Outcome of validating one booking; errors are keyed by field name"""
    is_valid: bool = True
    errors: Dict[str, str] = {}
    warnings: List[str] = []

    def add_error(self, field: str, message: str) -> None:
        # First failure per field wins
        self.errors.setdefault(field, message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class BookingValidator:
    """Runs every applicable check and collects all failures"""

    def validate(
        self,
        booking: Booking,
        rules: BusinessRuleSet,
        capacity: Optional[int] = None,
        now: Optional[datetime] = None,
        enforce_advance_notice: Optional[bool] = None
    ) -> ValidationResult:
        """Validate a booking.

        Args:
            booking: record to check
            rules: business rules in force
            capacity: maximum guests of the booked yacht, when known
            now: reference instant for advance-notice checks (defaults to current UTC time)
            enforce_advance_notice: override; by default only tentative bookings
                are held to the advance-notice window, so historical records load cleanly
        """
        if booking is None:
            raise TypeError("booking is required")
        if rules is None:
            raise TypeError("rules are required")

        result = ValidationResult()
        now = now or datetime.now(timezone.utc)
        if enforce_advance_notice is None:
            enforce_advance_notice = booking.status.is_tentative

        if not booking.resource_id:
            result.add_error("resource_id", "Yacht is required")

        interval_ok = self._check_interval(booking, result)
        if interval_ok:
            self._check_duration(booking, rules, result)
            if enforce_advance_notice:
                self._check_advance_notice(booking, rules, now, result)

        self._check_guests(booking, capacity, result)
        self._check_amounts(booking, result)
        self._check_contact(booking, result)

        return result

    # ==================== INDIVIDUAL CHECKS ====================
    def _check_interval(self, booking: Booking, result: ValidationResult) -> bool:
        """Returns True when start/end are usable for dependent checks"""
        usable = True
        for field, value in (("start", booking.start), ("end", booking.end)):
            if value is None:
                result.add_error(field, f"{field.capitalize()} date and time is required")
                usable = False
            elif not is_aware(value):
                result.add_error(field, f"{field.capitalize()} must include a timezone")
                usable = False

        if usable and booking.end <= booking.start:
            result.add_error("end", "End must be after start")
            usable = False

        return usable

    def _check_duration(self, booking: Booking, rules: BusinessRuleSet, result: ValidationResult) -> None:
        hours = booking.duration_hours()
        if hours < rules.min_duration_hours:
            result.add_error(
                "duration",
                f"Minimum charter duration is {rules.min_duration_hours:g} hours"
            )
        elif hours > rules.max_duration_hours:
            result.add_error(
                "duration",
                f"Maximum charter duration is {rules.max_duration_hours:g} hours"
            )
        elif hours <= 24 and booking.booking_type == BookingType.CHARTER:
            result.add_warning("Single-day charter - consider turnaround time")

    def _check_advance_notice(
        self,
        booking: Booking,
        rules: BusinessRuleSet,
        now: datetime,
        result: ValidationResult
    ) -> None:
        lead_time = booking.start - now
        if lead_time < timedelta(hours=rules.min_advance_notice_hours):
            result.add_error(
                "start",
                f"Bookings require at least {rules.min_advance_notice_hours:g} hours advance notice"
            )
        elif lead_time > timedelta(days=rules.max_advance_booking_days):
            result.add_error(
                "start",
                f"Bookings cannot be made more than {rules.max_advance_booking_days} days in advance"
            )

    def _check_guests(self, booking: Booking, capacity: Optional[int], result: ValidationResult) -> None:
        if booking.guest_count is None:
            result.add_error("guest_count", "Guest count is required")
        elif booking.guest_count < 1:
            result.add_error("guest_count", "At least 1 guest is required")
        elif capacity is not None and booking.guest_count > capacity:
            result.add_error("guest_count", f"Maximum {capacity} guests for this yacht")

    def _check_amounts(self, booking: Booking, result: ValidationResult) -> None:
        if booking.total_value < 0:
            result.add_error("total_value", "Total value cannot be negative")
        if booking.deposit_amount < 0:
            result.add_error("deposit_amount", "Deposit cannot be negative")
        elif booking.deposit_amount > booking.total_value >= 0:
            result.add_error("deposit_amount", "Deposit cannot exceed total value")
        elif booking.total_value > 0 and booking.deposit_amount < booking.total_value * RECOMMENDED_DEPOSIT_RATIO:
            result.add_warning(
                f"Deposit is below the recommended {RECOMMENDED_DEPOSIT_RATIO * 100:.0f}% of total value"
            )

    def _check_contact(self, booking: Booking, result: ValidationResult) -> None:
        email = booking.contact.customer_email
        phone = booking.contact.customer_phone

        if email:
            if not is_valid_email(email):
                result.add_error("customer_email", "Please enter a valid email address")
        elif booking.booking_type == BookingType.CHARTER:
            result.add_error("customer_email", "Customer email is required")

        if phone and not is_valid_phone(phone):
            result.add_error("customer_phone", "Please enter a valid phone number")
