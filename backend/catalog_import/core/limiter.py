"""Rate limiter singleton shared by the import endpoints."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from catalog_import.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
