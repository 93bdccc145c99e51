# core/supabase_client.py
# Service-role Supabase client shared by server-side integrations

import logging

from django.conf import settings
from supabase import create_client, Client

logger = logging.getLogger("sciencehub")

_supabase_client = None


def get_supabase_client() -> Client | None:
    """
    Get the Supabase client instance (singleton pattern).
    Uses service_role key for admin access.

    Returns None when Supabase is not configured (local dev, tests).
    """
    global _supabase_client

    if _supabase_client is None:
        url = settings.SUPABASE_URL
        key = settings.SUPABASE_SERVICE_ROLE_KEY

        if not url or not key:
            logger.debug("Supabase credentials not configured")
            return None

        try:
            _supabase_client = create_client(url, key)
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error("Failed to create Supabase client: %s", e)
            return None

    return _supabase_client


def reset_supabase_client():
    """Drop the cached client (used after settings change)."""
    global _supabase_client
    _supabase_client = None
