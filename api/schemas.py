"""API Schemas - Request and Response DTOs"""
from pydantic import AwareDatetime, BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Dict, List, Optional

from domain.enums import AvailabilityStatus, BookingStatus, BookingType, ConflictSeverity, ConflictType


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class ContactRequest(BaseModel):
    """Contact details DTO"""
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class CreateBookingRequest(BaseModel):
    """Create booking request DTO"""
    resource_id: str
    start: AwareDatetime
    end: AwareDatetime
    guest_count: int
    total_value: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    contact: ContactRequest = ContactRequest()
    booking_type: BookingType = Field(default=BookingType.CHARTER, description="Type of yacht use")
    summary: str = ""
    notes: Optional[str] = None
    created_by: str = "SYSTEM"


class UpdateBookingRequest(BaseModel):
    """Update booking details request DTO"""
    guest_count: Optional[int] = None
    total_value: Optional[Decimal] = None
    deposit_amount: Optional[Decimal] = None
    contact: Optional[ContactRequest] = None
    summary: Optional[str] = None
    notes: Optional[str] = None


class MoveBookingRequest(BaseModel):
    """Move booking request DTO"""
    start: AwareDatetime
    end: AwareDatetime
    resource_id: Optional[str] = None


class CancelBookingRequest(BaseModel):
    """Cancel booking request DTO"""
    reason: str = "Customer changed plans"


class CheckBookingRequest(BaseModel):
    """Dry-run check request DTO"""
    resource_id: Optional[str] = None
    start: Optional[AwareDatetime] = None
    end: Optional[AwareDatetime] = None
    guest_count: Optional[int] = None
    total_value: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    contact: ContactRequest = ContactRequest()
    booking_type: BookingType = BookingType.CHARTER
    exclude_id: Optional[UUID] = None
    max_suggestions: int = Field(default=3, ge=0, le=10)


class BookingResponse(BaseModel):
    """Booking response DTO"""
    booking_id: UUID
    booking_no: str
    resource_id: Optional[str]
    start: Optional[datetime]
    end: Optional[datetime]
    status: BookingStatus
    booking_type: BookingType
    guest_count: Optional[int]
    total_value: Decimal
    deposit_amount: Decimal
    contact: ContactRequest
    summary: str
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    modified_at: datetime
    created_by: str
    version: int


# ============================================================================
# CONFLICT & AVAILABILITY SCHEMAS
# ============================================================================

class TimeSlotResponse(BaseModel):
    """Free interval DTO"""
    start: datetime
    end: datetime


class ConflictResponse(BaseModel):
    """Conflict entry DTO"""
    conflicting_booking_id: Optional[UUID] = None
    severity: ConflictSeverity
    conflict_type: ConflictType
    reason: str
    start: datetime
    end: datetime
    overlap_hours: float


class ConflictReportResponse(BaseModel):
    """Conflict report DTO"""
    is_available: bool
    conflicts: List[ConflictResponse] = []
    suggestions: List[TimeSlotResponse] = []


class YachtResponse(BaseModel):
    """Yacht response DTO"""
    resource_id: str
    name: str
    max_guests: int
    min_booking_hours: float
    home_marina: Optional[str] = None


class AlternativeYachtResponse(BaseModel):
    """Alternative yacht DTO"""
    yacht: YachtResponse
    slot: TimeSlotResponse
    suitability_score: int


class BookingCheckResponse(BaseModel):
    """Dry-run check DTO"""
    is_valid: bool
    errors: Dict[str, str] = {}
    warnings: List[str] = []
    report: Optional[ConflictReportResponse] = None
    alternative_yachts: List[AlternativeYachtResponse] = []


class AvailabilityCheckRequest(BaseModel):
    """Interval availability request DTO"""
    resource_id: str
    start: AwareDatetime
    end: AwareDatetime


class AvailabilityCheckResponse(BaseModel):
    """Interval availability DTO"""
    resource_id: str
    start: datetime
    end: datetime
    is_available: bool


class DateAvailabilityResponse(BaseModel):
    """Calendar cell DTO"""
    day: date
    resource_id: str
    is_available: bool
    status: AvailabilityStatus
    bookings_on_date: List[BookingResponse] = []
    conflict_count: int
    is_transition_day: bool


class SlotSearchRequest(BaseModel):
    """Free slot search request DTO"""
    resource_id: str
    search_start: AwareDatetime
    search_end: AwareDatetime
    desired_duration_hours: float = Field(gt=0)


class AlternativesRequest(BaseModel):
    """Alternative interval request DTO"""
    resource_id: str
    start: AwareDatetime
    end: AwareDatetime
    guest_count: Optional[int] = None
    exclude_id: Optional[UUID] = None
    max_suggestions: int = Field(default=3, ge=0, le=10)


class AlternativesResponse(BaseModel):
    """Alternative intervals and yachts DTO"""
    suggestions: List[TimeSlotResponse] = []
    alternative_yachts: List[AlternativeYachtResponse] = []


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None
    role: Optional[str] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    disabled: bool = False
