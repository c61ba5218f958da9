"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_WINDOW_DAYS = 30
DEFAULT_WEEKS = 5
DEFAULT_MONTHS = 6
DAYS_PER_WEEK = 7

AT_RISK_RATIO = 0.75
AT_RISK_PERCENT = 75
CRITICAL_RATIO = 0.60
MONTHLY_TARGET_PERCENT = 85

DEFAULT_LOW_ATTENDANCE_LIMIT = 10
DEFAULT_RECENT_SESSIONS_DAYS = 7
DEFAULT_RECENT_SESSIONS_LIMIT = 10

TIMETABLE_DAYS = 6
TIMETABLE_PERIODS = 5

MDC_MIN_YEAR = 1
MDC_MAX_YEAR = 4
MDC_MIN_SEMESTER = 1
MDC_MAX_SEMESTER = 8

# Hour labels used by the period pattern chart.
PERIOD_HOUR_LABELS = {
    1: "9AM",
    2: "10AM",
    3: "11AM",
    4: "2PM",
    5: "3PM",
}
