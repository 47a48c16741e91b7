"""Constants for taskview.

This module centralizes the engine's tunable defaults and reserved tag names.
"""

# Recurrence expansion window (days, relative to the current calendar day)
DEFAULT_HORIZON_DAYS = 90
DEFAULT_LOOKBACK_DAYS = 14  # keeps recently passed occurrences visible as overdue

# Weekly buckets and the fallback TimeContext start weeks on Sunday (Sunday=0)
DEFAULT_WEEK_START_DAY = 0
DEFAULT_WEEK_INTERVAL = 1

# Monthly/yearly fallbacks when the rule leaves a field unset
DEFAULT_DAY_OF_MONTH = 1
DEFAULT_MONTH = 0  # January
DEFAULT_DAY_OF_YEAR = 1

# Reserved tags
SOMEDAY_TAG = "Someday"
OVERDUE_TAG = "Overdue"
