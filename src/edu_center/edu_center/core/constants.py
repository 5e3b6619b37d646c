"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_COMMIT_CONCURRENCY = 8
RATE_DECIMALS = 1
MONTH_FORMAT = "%Y-%m"
ISO_DATE_FORMAT = "%Y-%m-%d"
