"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Meeting names containing one of these terms recur on that weekday.
SUNDAY_TERMS = ("sunday",)
SATURDAY_TERMS = ("saturday", "shabibeh")

MAX_SEARCH_RESULTS = 20
LEADERBOARD_SIZE = 15

STREAK_GAP_DAYS = 7
# A current streak is broken once the latest attendance is older than this.
STREAK_GRACE_DAYS = 14

UNDO_WINDOW_SECONDS = 4.0

UNKNOWN_NAME = "Unknown"

ACCESS_KEY_CONFIG_KEY = "access_key"

# Least recently used marking sessions past this many are closed.
MAX_OPEN_SESSIONS = 16
