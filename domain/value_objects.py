"""Domain Value Objects"""
from pydantic import BaseModel, ConfigDict, field_validator, ValidationInfo
from datetime import datetime, timedelta
from typing import Optional


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap: [a_start, a_end) intersects [b_start, b_end)"""
    return a_start < b_end and b_start < a_end


def overlap_duration(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> timedelta:
    """Length of the intersection of two half-open intervals (zero when disjoint)"""
    if not overlaps(a_start, a_end, b_start, b_end):
        return timedelta(0)
    return min(a_end, b_end) - max(a_start, b_start)


def is_aware(value: datetime) -> bool:
    """True when value carries a usable UTC offset"""
    return value.tzinfo is not None and value.utcoffset() is not None


class TimeSlot(BaseModel):
    """Value Object for a half-open [start, end) interval on the timeline"""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator('start', 'end')
    @classmethod
    def must_be_timezone_aware(cls, v):
        if not is_aware(v):
            raise ValueError('Datetime must be timezone-aware')
        return v

    @field_validator('end')
    @classmethod
    def end_after_start(cls, v, info: ValidationInfo):
        start = info.data.get('start')
        if start is not None and v <= start:
            raise ValueError('End must be after start')
        return v

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_hours(self) -> float:
        """Length of the slot in hours"""
        return self.duration.total_seconds() / 3600


class BlackoutPeriod(BaseModel):
    """Value Object for a period during which a yacht (or every yacht) cannot be booked"""
    model_config = ConfigDict(frozen=True)

    resource_id: Optional[str] = None
    start: datetime
    end: datetime
    reason: str = "Blackout period"

    @field_validator('end')
    @classmethod
    def end_after_start(cls, v, info: ValidationInfo):
        start = info.data.get('start')
        if start is not None and v <= start:
            raise ValueError('Blackout end must be after start')
        return v

    def applies_to(self, resource_id: str) -> bool:
        """A blackout without a resource applies fleet-wide"""
        return self.resource_id is None or self.resource_id == resource_id

    def intersects(self, start: datetime, end: datetime) -> bool:
        return overlaps(self.start, self.end, start, end)


class ContactDetails(BaseModel):
    """Value Object for the primary charter contact"""
    model_config = ConfigDict(frozen=True)

    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
