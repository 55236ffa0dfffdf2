"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from domain.entities import Booking, Yacht


class BookingRepository(ABC):
    """Repository interface for Booking Aggregate"""

    @abstractmethod
    async def save(self, booking: Booking) -> Booking:
        """Save booking"""
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """Find booking by ID"""
        pass

    @abstractmethod
    async def find_by_booking_no(self, booking_no: str) -> Optional[Booking]:
        """Find booking by booking number"""
        pass

    @abstractmethod
    async def find_by_resource(
        self,
        resource_id: str,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None
    ) -> List[Booking]:
        """Snapshot of bookings on a yacht, optionally limited to a window"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Booking]:
        """Find all bookings"""
        pass

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        """Update booking"""
        pass

    @abstractmethod
    async def delete(self, booking_id: UUID) -> bool:
        """Physically delete booking"""
        pass


class YachtRepository(ABC):
    """Repository interface for Yacht"""

    @abstractmethod
    async def save(self, yacht: Yacht) -> Yacht:
        """Save yacht"""
        pass

    @abstractmethod
    async def find_by_id(self, resource_id: str) -> Optional[Yacht]:
        """Find yacht by resource ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Yacht]:
        """Find all yachts"""
        pass
