# core/analytics.py
# Analytics tracking service for Supabase

import logging
from typing import Any

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger("sciencehub")

# --- Tracked actions ---
PROJECT_CREATED = "project.created"
APPLICATION_SUBMITTED = "application.submitted"
CHAT_OPENED = "chat.opened"
REVIEW_CREATED = "review.created"


def application_status_action(status: str) -> str:
    return f"application.{status}"


def _get_client():
    """Get Supabase client lazily."""
    from core.supabase_client import get_supabase_client
    return get_supabase_client()


def track_event(
    action: str,
    user_id: int | None = None,
    metadata: dict[str, Any] | None = None,
) -> bool:
    """
    Track an analytics event to Supabase.

    Args:
        action: The action type (e.g., "application.submitted")
        user_id: Optional acting user ID (Django integer)
        metadata: Optional additional metadata (entity ids, statuses)

    Returns:
        True if tracking succeeded, False otherwise. Never raises.
    """
    client = _get_client()
    if not client:
        logger.debug("Supabase client not available, skipping analytics for %s", action)
        return False

    try:
        # Django integer ids go into metadata; Supabase columns expect UUIDs
        enriched_metadata = metadata.copy() if metadata else {}
        enriched_metadata["django_user_id"] = user_id

        data = {
            "action": action,
            "metadata": enriched_metadata,
            "created_at": timezone.now().isoformat(),
        }

        client.table(settings.SCIENCEHUB["ANALYTICS_TABLE"]).insert(data).execute()
        logger.debug("Tracked analytics event: %s", action)
        return True
    except Exception as e:
        logger.warning("Failed to track analytics event %s: %s", action, e)
        return False
