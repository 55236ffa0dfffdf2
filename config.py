import os


class Config:
    # Auth
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")
    ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Default business rules (hours unless noted)
    MIN_DURATION_HOURS = float(os.getenv("MIN_DURATION_HOURS", "4"))
    MAX_DURATION_HOURS = float(os.getenv("MAX_DURATION_HOURS", str(14 * 24)))
    MIN_ADVANCE_NOTICE_HOURS = float(os.getenv("MIN_ADVANCE_NOTICE_HOURS", "24"))
    MAX_ADVANCE_BOOKING_DAYS = int(os.getenv("MAX_ADVANCE_BOOKING_DAYS", "365"))
    RECOMMENDED_TURNAROUND_HOURS = float(os.getenv("RECOMMENDED_TURNAROUND_HOURS", "2"))
    MIN_TURNAROUND_HOURS = float(os.getenv("MIN_TURNAROUND_HOURS", "0"))
    HIGH_OVERLAP_RATIO = float(os.getenv("HIGH_OVERLAP_RATIO", "0.5"))
    PENDING_BLOCKS = os.getenv("PENDING_BLOCKS", "true").lower() == "true"
    SUGGESTION_WINDOW_DAYS = int(os.getenv("SUGGESTION_WINDOW_DAYS", "14"))

    @classmethod
    def default_rules(cls):
        """Build the BusinessRuleSet used when a caller does not supply one"""
        from domain.rules import BusinessRuleSet

        return BusinessRuleSet(
            min_duration_hours=cls.MIN_DURATION_HOURS,
            max_duration_hours=cls.MAX_DURATION_HOURS,
            min_advance_notice_hours=cls.MIN_ADVANCE_NOTICE_HOURS,
            max_advance_booking_days=cls.MAX_ADVANCE_BOOKING_DAYS,
            recommended_turnaround_hours=cls.RECOMMENDED_TURNAROUND_HOURS,
            min_turnaround_hours=cls.MIN_TURNAROUND_HOURS,
            high_overlap_ratio=cls.HIGH_OVERLAP_RATIO,
            pending_blocks=cls.PENDING_BLOCKS,
            suggestion_window_days=cls.SUGGESTION_WINDOW_DAYS,
        )
