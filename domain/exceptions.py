"""Booking workflow exceptions"""


class BookingRejectedError(ValueError):
    """Base class for bookings the workflow refuses to persist"""


class BookingValidationError(BookingRejectedError):
    """Booking failed field or business-rule validation"""

    def __init__(self, validation):
        self.validation = validation
        fields = ", ".join(sorted(validation.errors)) or "unknown"
        super().__init__(f"Booking validation failed: {fields}")

    @property
    def errors(self):
        return self.validation.errors


class BookingConflictError(BookingRejectedError):
    """Booking overlaps an existing reservation or blackout on the same yacht"""

    def __init__(self, report):
        self.report = report
        count = len(report.blocking_conflicts)
        super().__init__(f"Yacht is not available: {count} blocking conflict(s)")
