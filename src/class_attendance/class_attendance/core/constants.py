"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# September, 1-based as in datetime.date.month
ACADEMIC_YEAR_START_MONTH = 9
ACADEMIC_YEAR_START_DAY = 1

DAYS_PER_WEEK = 7
