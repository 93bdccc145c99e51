# chats/services.py
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from applications.models import Application
from core import analytics
from core.exceptions import Conflict, InvalidState
from .models import Chat, Message, ChatReadState

logger = logging.getLogger("sciencehub.chats")


class ChatService:
    """
    Chat lifecycle and message bookkeeping shared by the API views and the
    accept hook.
    """

    @staticmethod
    def open_for_application(application: Application, actor_id=None) -> Chat:
        """
        Open the chat of an accepted application.

        Raises InvalidState unless the application is accepted and Conflict
        if the application already has a chat.
        """
        if application.status != Application.STATUS_ACCEPTED:
            raise InvalidState("Can only create chat for accepted applications")

        if Chat.objects.filter(application_id=application.pk).exists():
            raise Conflict("Chat already exists for this application")

        try:
            with transaction.atomic():
                chat = Chat.objects.create(
                    application=application,
                    company_id=application.project.company_id,
                    researcher_id=application.researcher_id,
                    status=Chat.STATUS_ACTIVE,
                )
        except IntegrityError:
            raise Conflict("Chat already exists for this application")

        logger.info(
            "Chat opened: chat=%s, application=%s, actor=%s",
            chat.id, application.pk, actor_id,
        )
        analytics.track_event(
            analytics.CHAT_OPENED,
            user_id=actor_id,
            metadata={"chat_id": chat.id, "application_id": application.pk},
        )
        return chat

    @staticmethod
    def post_message(chat: Chat, sender, content: str, message_type: str, file_url=None) -> Message:
        """
        Append a message and move the chat's updated_at to its timestamp.
        """
        with transaction.atomic():
            # status is read under the row lock, not from the caller's copy
            locked = Chat.objects.select_for_update().only("id", "status").get(pk=chat.pk)
            if locked.status != Chat.STATUS_ACTIVE:
                raise InvalidState("Chat is not active")

            message = Message.objects.create(
                chat=chat,
                sender=sender,
                content=content,
                message_type=message_type,
                file_url=file_url or None,
            )
            # queryset update skips auto_now
            Chat.objects.filter(pk=chat.pk).update(updated_at=message.created_at)

        logger.debug("Message posted: chat=%s, message=%s, sender=%s", chat.id, message.id, sender.pk)
        return message

    @staticmethod
    def last_message(chat: Chat):
        return chat.messages.order_by("-created_at", "-id").first()

    @staticmethod
    def unread_count(chat: Chat, user) -> int:
        messages = chat.messages.exclude(sender=user)
        marker = (
            ChatReadState.objects
            .filter(chat=chat, user=user)
            .values_list("last_read_message_id", flat=True)
            .first()
        )
        if marker:
            messages = messages.filter(id__gt=marker)
        return messages.count()

    @staticmethod
    def mark_read(chat: Chat, user, message: Message = None) -> ChatReadState:
        """
        Move the user's read marker to `message` (newest message when
        omitted). The marker never moves backwards.
        """
        if message is None:
            message = ChatService.last_message(chat)

        with transaction.atomic():
            state, _ = ChatReadState.objects.select_for_update().get_or_create(chat=chat, user=user)

            if message is not None and (
                state.last_read_message_id is None or message.id > state.last_read_message_id
            ):
                state.last_read_message = message
                state.last_read_at = timezone.now()
                state.save(update_fields=["last_read_message", "last_read_at"])

        return state
