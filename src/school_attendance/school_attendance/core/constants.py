"""Constants and defaults.

Note: Keep attendance rule numbers here to avoid magic numbers spread across code.
"""

WINDOW_OPENS_BEFORE_START_MINUTES = 40
WINDOW_CLOSES_AFTER_END_MINUTES = 60
LATE_AFTER_START_MINUTES = 15

AUTO_MARK_COOLDOWN_DAYS = 7

MINUTES_PER_DAY = 24 * 60

DEFAULT_SCHOOL_TIMEZONE = "Africa/Nairobi"
