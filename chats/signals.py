# chats/signals.py
import logging

from django.conf import settings
from django.db import transaction
from django.dispatch import receiver

from applications.models import Application
from applications.signals import application_status_changed
from .services import ChatService

logger = logging.getLogger("sciencehub.chats")


def _open_chat_after_accept(application_id, actor_id):
    """
    Follow-up to an acceptance. Runs after the accepting transaction has
    committed; a failure here leaves the acceptance in place and the
    client can still open the chat through POST /api/chats/.
    """
    try:
        application = Application.objects.select_related("project").get(pk=application_id)
        ChatService.open_for_application(application, actor_id=actor_id)
    except Exception as e:
        logger.warning(
            "Auto-open chat failed for application %s: %s",
            application_id, e,
        )


@receiver(application_status_changed, sender=Application)
def open_chat_on_accept(sender, application, old_status, new_status, caller, **kwargs):
    if new_status != Application.STATUS_ACCEPTED:
        return
    if not settings.SCIENCEHUB.get("AUTO_OPEN_CHAT_ON_ACCEPT", False):
        return

    transaction.on_commit(
        lambda: _open_chat_after_accept(application.pk, caller.user_id)
    )
