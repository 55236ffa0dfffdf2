"""Business rule configuration consumed by validation and conflict detection"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List

from domain.value_objects import BlackoutPeriod


class BusinessRuleSet(BaseModel):
    """Read-only charter rules; every threshold the engine applies lives here"""
    model_config = ConfigDict(frozen=True)

    min_duration_hours: float = Field(default=4, ge=0)
    max_duration_hours: float = Field(default=14 * 24, gt=0)
    min_advance_notice_hours: float = Field(default=24, ge=0)
    max_advance_booking_days: int = Field(default=365, gt=0)

    # Gap between consecutive charters on one yacht
    recommended_turnaround_hours: float = Field(default=2, ge=0)
    min_turnaround_hours: float = Field(default=0, ge=0)

    # Share of the shorter interval at which an overlap becomes high severity
    high_overlap_ratio: float = Field(default=0.5, gt=0, le=1)

    # When False, overlaps with tentative bookings are reported as soft (low) conflicts
    pending_blocks: bool = True

    suggestion_window_days: int = Field(default=14, ge=0)
    blackout_periods: List[BlackoutPeriod] = []

    def blackouts_for(self, resource_id: str) -> List[BlackoutPeriod]:
        """Blackouts that apply to the given yacht"""
        return [b for b in self.blackout_periods if b.applies_to(resource_id)]

    def blackouts_between(self, resource_id: str, start: datetime, end: datetime) -> List[BlackoutPeriod]:
        """Blackouts on the given yacht overlapping [start, end)"""
        return [b for b in self.blackouts_for(resource_id) if b.intersects(start, end)]
