import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from fastapi import FastAPI, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Bookings
    CreateBookingRequest, UpdateBookingRequest, MoveBookingRequest, CancelBookingRequest,
    CheckBookingRequest, BookingResponse, BookingCheckResponse,
    # Availability
    AvailabilityCheckRequest, AvailabilityCheckResponse, DateAvailabilityResponse,
    SlotSearchRequest, TimeSlotResponse, AlternativesRequest, AlternativesResponse,
    AlternativeYachtResponse, ConflictReportResponse, YachtResponse,
    # Auth
    Token, UserResponse
)

from api.dependencies import get_current_active_user, fake_users_db, get_user
from infrastructure.security import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from domain.auth import User

from application.availability import AvailabilityService
from application.services import BookingService
from config import Config
from domain.conflicts import ConflictDetector
from domain.entities import Booking
from domain.enums import BookingStatus, BookingType, ConflictSeverity
from domain.exceptions import BookingConflictError, BookingValidationError
from domain.value_objects import ContactDetails
from infrastructure.repositories.in_memory_repositories import (
    InMemoryBookingRepository, InMemoryYachtRepository
)

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="Yacht Charter Availability API",
    description="Booking validation, conflict detection and availability queries for a charter fleet",
    version="1.0.0"
)

# Initialize repositories and rules
booking_repo = InMemoryBookingRepository()
yacht_repo = InMemoryYachtRepository()
business_rules = Config.default_rules()


# Dependency injection
def get_booking_service() -> BookingService:
    return BookingService(booking_repo, yacht_repo, business_rules)


def get_availability_service() -> AvailabilityService:
    return AvailabilityService(ConflictDetector(business_rules))


# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}


@app.get("/api/enums/booking-status", tags=["Enum Reference"])
async def get_booking_statuses():
    """Get all BookingStatus enum values"""
    return {"values": [item.value for item in BookingStatus]}


@app.get("/api/enums/booking-type", tags=["Enum Reference"])
async def get_booking_types():
    """Get all BookingType enum values"""
    return {"values": [item.value for item in BookingType]}


@app.get("/api/enums/conflict-severity", tags=["Enum Reference"])
async def get_conflict_severities():
    """Get all ConflictSeverity values; low severity is advisory only"""
    return {
        "values": {item.value: item.is_blocking for item in ConflictSeverity},
        "description": "Value maps to whether the severity blocks a booking"
    }


@app.get("/api/rules", tags=["Enum Reference"])
async def get_business_rules(current_user: User = Depends(get_current_active_user)):
    """Business rules currently applied"""
    return business_rules.model_dump()


# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(fake_users_db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        subject=user.username, role=user.role, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}


@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user


# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingResponse, status_code=201, tags=["Bookings"])
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create new booking"""
    try:
        booking = await service.create_booking(
            resource_id=request.resource_id,
            start=request.start,
            end=request.end,
            guest_count=request.guest_count,
            total_value=request.total_value,
            deposit_amount=request.deposit_amount,
            contact=ContactDetails(**request.contact.model_dump()),
            booking_type=request.booking_type,
            summary=request.summary,
            notes=request.notes,
            created_by=request.created_by
        )
        return _booking_to_response(booking)
    except BookingConflictError as e:
        raise HTTPException(status_code=409, detail=_conflict_detail(e))
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/bookings", response_model=List[BookingResponse], tags=["Bookings"])
async def get_all_bookings(
    resource_id: Optional[str] = None,
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all bookings, or one yacht's bookings within an optional window"""
    if resource_id:
        bookings = await service.get_bookings_for_resource(resource_id, window_start, window_end)
    else:
        bookings = await service.get_all_bookings()
    return [_booking_to_response(b) for b in bookings]


@app.post("/api/bookings/check", response_model=BookingCheckResponse, tags=["Bookings"])
async def check_booking(
    request: CheckBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Validate and conflict-check a booking without saving it"""
    candidate = Booking(
        booking_id=request.exclude_id or uuid4(),
        resource_id=request.resource_id,
        start=request.start,
        end=request.end,
        guest_count=request.guest_count,
        total_value=request.total_value,
        deposit_amount=request.deposit_amount,
        contact=ContactDetails(**request.contact.model_dump()),
        booking_type=request.booking_type
    )
    check = await service.check_booking(
        candidate,
        exclude_id=request.exclude_id,
        max_suggestions=request.max_suggestions
    )
    return BookingCheckResponse(
        is_valid=check.validation.is_valid,
        errors=check.validation.errors,
        warnings=check.validation.warnings,
        report=ConflictReportResponse(**check.report.model_dump()) if check.report else None,
        alternative_yachts=[AlternativeYachtResponse(**a.model_dump()) for a in check.alternative_yachts]
    )


@app.get("/api/bookings/number/{booking_no}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking_by_number(
    booking_no: str,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get booking by booking number"""
    booking = await service.get_booking_by_number(booking_no)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return _booking_to_response(booking)


@app.get("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get booking by ID"""
    booking = await service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return _booking_to_response(booking)


@app.put("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def update_booking(
    booking_id: UUID,
    request: UpdateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Update booking details"""
    try:
        booking = await service.update_booking(
            booking_id=booking_id,
            guest_count=request.guest_count,
            total_value=request.total_value,
            deposit_amount=request.deposit_amount,
            contact=ContactDetails(**request.contact.model_dump()) if request.contact else None,
            summary=request.summary,
            notes=request.notes
        )
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return _booking_to_response(booking)
    except BookingConflictError as e:
        raise HTTPException(status_code=409, detail=_conflict_detail(e))
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/bookings/{booking_id}/move", response_model=BookingResponse, tags=["Bookings"])
async def move_booking(
    booking_id: UUID,
    request: MoveBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Move booking to another interval or yacht"""
    try:
        booking = await service.move_booking(
            booking_id=booking_id,
            new_start=request.start,
            new_end=request.end,
            new_resource_id=request.resource_id
        )
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return _booking_to_response(booking)
    except BookingConflictError as e:
        raise HTTPException(status_code=409, detail=_conflict_detail(e))
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/bookings/{booking_id}/confirm", response_model=BookingResponse, tags=["Bookings"])
async def confirm_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Confirm a tentative booking"""
    try:
        booking = await service.confirm_booking(booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return _booking_to_response(booking)
    except BookingConflictError as e:
        raise HTTPException(status_code=409, detail=_conflict_detail(e))
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/bookings/{booking_id}/cancel", response_model=BookingResponse, tags=["Bookings"])
async def cancel_booking(
    booking_id: UUID,
    request: CancelBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Soft-cancel booking"""
    try:
        booking = await service.cancel_booking(booking_id, reason=request.reason)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return _booking_to_response(booking)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/bookings/{booking_id}/complete", response_model=BookingResponse, tags=["Bookings"])
async def complete_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Mark charter as completed"""
    try:
        booking = await service.complete_booking(booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return _booking_to_response(booking)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================================
# YACHT ENDPOINTS
# ============================================================================

@app.get("/api/yachts", response_model=List[YachtResponse], tags=["Yachts"])
async def get_yachts(current_user: User = Depends(get_current_active_user)):
    """Get the fleet"""
    return [YachtResponse(**y.model_dump()) for y in await yacht_repo.find_all()]


@app.get("/api/yachts/{resource_id}", response_model=YachtResponse, tags=["Yachts"])
async def get_yacht(resource_id: str, current_user: User = Depends(get_current_active_user)):
    """Get yacht by resource ID"""
    yacht = await yacht_repo.find_by_id(resource_id)
    if not yacht:
        raise HTTPException(status_code=404, detail="Yacht not found")
    return YachtResponse(**yacht.model_dump())


# ============================================================================
# AVAILABILITY ENDPOINTS
# ============================================================================

@app.post("/api/availability/check", response_model=AvailabilityCheckResponse, tags=["Availability"])
async def check_availability(
    request: AvailabilityCheckRequest,
    availability: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Check whether a yacht is free for an interval"""
    try:
        snapshot = await booking_repo.find_by_resource(request.resource_id, request.start, request.end)
        is_available = availability.is_resource_available(
            request.resource_id, request.start, request.end, snapshot
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return AvailabilityCheckResponse(
        resource_id=request.resource_id,
        start=request.start,
        end=request.end,
        is_available=is_available
    )


@app.get("/api/availability/{resource_id}/date/{day}", response_model=DateAvailabilityResponse, tags=["Availability"])
async def get_date_availability(
    resource_id: str,
    day: date,
    availability: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Availability of one yacht on one calendar day (UTC)"""
    day_start = datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)
    snapshot = await booking_repo.find_by_resource(resource_id, day_start, day_start + timedelta(days=1))
    return _date_availability_to_response(
        availability.get_availability_for_date(day, resource_id, snapshot)
    )


@app.get("/api/availability/{resource_id}/calendar", response_model=List[DateAvailabilityResponse], tags=["Availability"])
async def get_calendar(
    resource_id: str,
    first_day: date,
    last_day: date,
    availability: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Daily availability for a date range (inclusive)"""
    if (last_day - first_day).days > 366:
        raise HTTPException(status_code=400, detail="Calendar range is limited to one year")
    window_start = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)
    window_end = datetime.combine(last_day, datetime.min.time(), tzinfo=timezone.utc) + timedelta(days=1)
    snapshot = await booking_repo.find_by_resource(resource_id, window_start, window_end)
    rows = availability.get_range_availability(first_day, last_day, resource_id, snapshot)
    return [_date_availability_to_response(row) for row in rows]


@app.post("/api/availability/slots", response_model=List[TimeSlotResponse], tags=["Availability"])
async def find_slots(
    request: SlotSearchRequest,
    availability: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Free gaps of at least the desired duration in a search window"""
    margin = timedelta(hours=business_rules.min_turnaround_hours)
    snapshot = await booking_repo.find_by_resource(
        request.resource_id, request.search_start - margin, request.search_end + margin
    )
    try:
        slots = availability.find_available_slots(
            request.resource_id,
            request.search_start,
            request.search_end,
            request.desired_duration_hours,
            snapshot
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [TimeSlotResponse(start=s.start, end=s.end) for s in slots]


@app.post("/api/availability/alternatives", response_model=AlternativesResponse, tags=["Availability"])
async def suggest_alternatives(
    request: AlternativesRequest,
    availability: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Nearby intervals on the same yacht and other free yachts"""
    candidate = Booking(
        booking_id=request.exclude_id or uuid4(),
        resource_id=request.resource_id,
        start=request.start,
        end=request.end,
        guest_count=request.guest_count
    )
    if not candidate.has_valid_interval():
        raise HTTPException(status_code=400, detail="start and end must be timezone-aware with start before end")

    margin = timedelta(days=business_rules.suggestion_window_days + 1, hours=business_rules.min_turnaround_hours)
    snapshot = await booking_repo.find_by_resource(request.resource_id, request.start - margin, request.end + margin)
    suggestions = availability.suggest_alternatives(
        candidate, snapshot, max_suggestions=request.max_suggestions
    )

    fleet_snapshot = await booking_repo.find_all()
    yachts = await yacht_repo.find_all()
    alternatives = availability.suggest_alternative_resources(candidate, fleet_snapshot, yachts)

    return AlternativesResponse(
        suggestions=[TimeSlotResponse(start=s.start, end=s.end) for s in suggestions],
        alternative_yachts=[AlternativeYachtResponse(**a.model_dump()) for a in alternatives]
    )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _booking_to_response(booking: Booking) -> BookingResponse:
    """Convert Booking entity to response DTO"""
    return BookingResponse(**booking.model_dump())


def _date_availability_to_response(row) -> DateAvailabilityResponse:
    data = row.model_dump(exclude={"bookings_on_date"})
    return DateAvailabilityResponse(
        **data,
        bookings_on_date=[_booking_to_response(b) for b in row.bookings_on_date]
    )


def _conflict_detail(error: BookingConflictError) -> dict:
    return {
        "message": str(error),
        "report": ConflictReportResponse(**error.report.model_dump()).model_dump(mode="json")
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
