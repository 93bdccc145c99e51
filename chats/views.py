import logging
from datetime import timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from applications.models import Application
from applications.policies import ensure_can_access
from core.generics import get_or_404
from users.resolver import resolve_caller
from .models import Chat, Message
from .policies import visible_chats_for, ensure_participant
from .serializers import (
    ChatSerializer,
    ChatDetailSerializer,
    ChatCreateSerializer,
    ChatStatusSerializer,
    MessageSerializer,
    MessageCreateSerializer,
    MarkReadSerializer,
)
from .services import ChatService
from .throttles import ChatMessageSendThrottle

logger = logging.getLogger("sciencehub.chats")


def _load_chat(chat_id):
    return get_or_404(
        Chat.objects.select_related(
            "application",
            "application__project",
            "application__project__company",
            "application__researcher",
        ),
        chat_id,
        "Chat",
    )


def _parse_since(raw):
    try:
        since = parse_datetime(raw)
    except ValueError:
        since = None
    if since is None:
        raise ValidationError({"since": "Invalid timestamp, expected ISO-8601"})
    if timezone.is_naive(since):
        since = timezone.make_aware(since, dt_timezone.utc)
    return since


class ChatListCreateView(APIView):
    """
    GET /api/chats/
    POST /api/chats/  {application_id}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caller = resolve_caller(request.user)
        chats = visible_chats_for(caller).order_by("-updated_at", "-id")
        data = ChatSerializer(chats, many=True, context={"request": request}).data
        return Response({"chats": data})

    def post(self, request):
        caller = resolve_caller(request.user)

        serializer = ChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = get_or_404(
            Application.objects.select_related("project"),
            serializer.validated_data["application_id"],
            "Application",
        )
        ensure_can_access(caller, application)

        chat = ChatService.open_for_application(application, actor_id=caller.user_id)
        chat = _load_chat(chat.id)

        return Response(
            {"chat": ChatSerializer(chat, context={"request": request}).data},
            status=status.HTTP_201_CREATED,
        )


class ChatDetailView(APIView):
    """
    GET /api/chats/<chat_id>/
    PUT|PATCH /api/chats/<chat_id>/  {status}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, chat_id):
        caller = resolve_caller(request.user)
        chat = _load_chat(chat_id)
        ensure_participant(caller, chat)
        return Response({"chat": ChatDetailSerializer(chat, context={"request": request}).data})

    def put(self, request, chat_id):
        caller = resolve_caller(request.user)
        chat = _load_chat(chat_id)
        ensure_participant(caller, chat)

        serializer = ChatStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data["status"]

        if new_status != chat.status:
            old_status = chat.status
            chat.status = new_status
            # updated_at tracks message activity only
            Chat.objects.filter(pk=chat.pk).update(status=new_status)
            logger.info(
                "Chat status change: chat=%s, from=%s, to=%s, actor=%s",
                chat.id, old_status, new_status, caller.user_id,
            )

        return Response({"chat": ChatSerializer(chat, context={"request": request}).data})

    patch = put


class ChatMessagesView(APIView):
    """
    GET /api/chats/<chat_id>/messages/?since=<ISO-8601>
    POST /api/chats/<chat_id>/messages/
    """
    permission_classes = [IsAuthenticated]
    throttle_classes = [ChatMessageSendThrottle]
    throttle_scope = "chat-message"

    def get(self, request, chat_id):
        caller = resolve_caller(request.user)
        chat = _load_chat(chat_id)
        ensure_participant(caller, chat)

        messages = chat.messages.select_related("sender")
        since = request.query_params.get("since")
        if since:
            messages = messages.filter(created_at__gt=_parse_since(since))

        messages = messages.order_by("created_at", "id")
        return Response({"messages": MessageSerializer(messages, many=True).data})

    def post(self, request, chat_id):
        caller = resolve_caller(request.user)
        chat = _load_chat(chat_id)
        ensure_participant(caller, chat)

        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = ChatService.post_message(
            chat,
            sender=request.user,
            content=serializer.validated_data.get("content", ""),
            message_type=serializer.validated_data["message_type"],
            file_url=serializer.validated_data.get("file_url"),
        )

        return Response({"message": MessageSerializer(message).data}, status=status.HTTP_201_CREATED)


class ChatMarkReadView(APIView):
    """
    POST /api/chats/<chat_id>/read/  {message_id?}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, chat_id):
        caller = resolve_caller(request.user)
        chat = _load_chat(chat_id)
        ensure_participant(caller, chat)

        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = None
        message_id = serializer.validated_data.get("message_id")
        if message_id is not None:
            message = Message.objects.filter(pk=message_id).first()
            if message is None or message.chat_id != chat.id:
                raise ValidationError({"message_id": "Message does not belong to this chat"})

        state = ChatService.mark_read(chat, request.user, message)

        return Response({
            "chat_id": chat.id,
            "last_read_message_id": state.last_read_message_id,
            "last_read_at": state.last_read_at,
            "unread_count": ChatService.unread_count(chat, request.user),
        })
