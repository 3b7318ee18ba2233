"""Shared SlowAPI limiter so the app and its routers count against the same buckets."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.settings import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
