"""Application configuration constants."""
from __future__ import annotations

SESSION_COOKIE_NAME = "anicrunch.sid"

AUTH_RATE_LIMIT = "50 per 15 minutes"
SEARCH_RATE_LIMIT = "120 per 5 minutes"

MIN_SEARCH_QUERY_LENGTH = 3
MAX_SEARCH_QUERY_LENGTH = 100
SEARCH_RESULT_LIMIT = 24

MAX_USERNAME_LENGTH = 100

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
