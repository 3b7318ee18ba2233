"""Frontend configuration constants."""
from __future__ import annotations

JIKAN_BASE_URL = "https://api.jikan.moe/v4"

CRITICAL = "critical"
BACKGROUND = "background"
PRIORITIES = (CRITICAL, BACKGROUND)

SEARCH_DEBOUNCE_MS = 300
MIN_QUERY_LENGTH = 3

GENRE_PAGE_SIZE = 24
SEARCH_FALLBACK_LIMIT = 24

CARDS_PER_PAGE = 6
CAROUSEL_ROWS = ("seasonal", "trending")
ROW_LIMIT = 25
TOP_RAIL_LIMIT = 10

HERO_LIMIT = 7
HERO_INTERVAL_MS = 8000
HERO_SYNOPSIS_CHARS = 180
HERO_GENRE_COUNT = 3

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

GENRES = [
    {"id": 1, "name": "Action", "icon": "⚔️"},
    {"id": 2, "name": "Adventure", "icon": "🗺️"},
    {"id": 4, "name": "Comedy", "icon": "😂"},
    {"id": 8, "name": "Drama", "icon": "🎭"},
    {"id": 10, "name": "Fantasy", "icon": "🧙"},
    {"id": 14, "name": "Horror", "icon": "👻"},
    {"id": 22, "name": "Romance", "icon": "💕"},
    {"id": 24, "name": "Sci-Fi", "icon": "🚀"},
    {"id": 30, "name": "Sports", "icon": "⚽"},
    {"id": 36, "name": "Slice of Life", "icon": "🌸"},
]

ALL_CHIP = "all"
