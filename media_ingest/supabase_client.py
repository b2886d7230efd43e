"""
Supabase client construction.

The client is built once per process from settings and handed explicitly to
the storage provider and catalog store that need it.
"""
from functools import lru_cache

import structlog
from supabase import create_client, Client

from .config import settings

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get or create the Supabase client instance.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY is missing
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "Missing Supabase credentials. Please set SUPABASE_URL and "
            "SUPABASE_KEY environment variables."
        )
    client = create_client(settings.supabase_url, settings.supabase_key)
    logger.info("supabase_client_initialized", url=settings.supabase_url)
    return client
