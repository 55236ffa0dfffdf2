"""In-Memory Repository Implementations"""
from datetime import datetime
from typing import Optional, List, Dict
from uuid import UUID

from domain.repositories import BookingRepository, YachtRepository
from domain.entities import Booking, Yacht
from domain.value_objects import overlaps

DEFAULT_FLEET = [
    Yacht(resource_id="calico-moon", name="Calico Moon", max_guests=10, min_booking_hours=6),
    Yacht(resource_id="spectre", name="Spectre", max_guests=12, min_booking_hours=4),
    Yacht(resource_id="alrisha", name="Alrisha", max_guests=8, min_booking_hours=4),
    Yacht(resource_id="disk-drive", name="Disk Drive", max_guests=8, min_booking_hours=8),
    Yacht(resource_id="zavaria", name="Zavaria", max_guests=6, min_booking_hours=4),
    Yacht(resource_id="mridula-sarwar", name="Mridula Sarwar", max_guests=10, min_booking_hours=6),
]


class InMemoryBookingRepository(BookingRepository):
    """In-memory implementation of BookingRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Booking] = {}

    async def save(self, booking: Booking) -> Booking:
        """Save booking to memory"""
        self._storage[booking.booking_id] = booking.model_copy(deep=True)
        return booking

    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """Find booking by ID"""
        stored = self._storage.get(booking_id)
        return stored.model_copy(deep=True) if stored else None

    async def find_by_booking_no(self, booking_no: str) -> Optional[Booking]:
        """Find booking by booking number"""
        for booking in self._storage.values():
            if booking.booking_no == booking_no:
                return booking.model_copy(deep=True)
        return None

    async def find_by_resource(
        self,
        resource_id: str,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None
    ) -> List[Booking]:
        """Bookings on a yacht; rows with missing endpoints are kept for the detector to report"""
        results = []
        for booking in self._storage.values():
            if booking.resource_id != resource_id:
                continue
            if (
                window_start is not None and window_end is not None
                and booking.start is not None and booking.end is not None
                and not overlaps(booking.start, booking.end, window_start, window_end)
            ):
                continue
            results.append(booking.model_copy(deep=True))
        return results

    async def find_all(self) -> List[Booking]:
        """Find all bookings"""
        return [b.model_copy(deep=True) for b in self._storage.values()]

    async def update(self, booking: Booking) -> Booking:
        """Update booking"""
        if booking.booking_id in self._storage:
            self._storage[booking.booking_id] = booking.model_copy(deep=True)
            return booking
        raise ValueError("Booking not found")

    async def delete(self, booking_id: UUID) -> bool:
        """Delete booking"""
        if booking_id in self._storage:
            del self._storage[booking_id]
            return True
        return False


class InMemoryYachtRepository(YachtRepository):
    """In-memory implementation of YachtRepository"""

    def __init__(self, fleet: Optional[List[Yacht]] = None):
        self._storage: Dict[str, Yacht] = {}
        for yacht in (DEFAULT_FLEET if fleet is None else fleet):
            self._storage[yacht.resource_id] = yacht

    async def save(self, yacht: Yacht) -> Yacht:
        """Save yacht to memory"""
        self._storage[yacht.resource_id] = yacht
        return yacht

    async def find_by_id(self, resource_id: str) -> Optional[Yacht]:
        """Find yacht by resource ID"""
        return self._storage.get(resource_id)

    async def find_all(self) -> List[Yacht]:
        """Find all yachts"""
        return list(self._storage.values())
