from rest_framework import serializers

from core.sanitizers import sanitize_description, validate_url, ValidationError as SanitizationError
from users.serializers import ResearcherSummarySerializer, CompanySummarySerializer, participant_display
from applications.models import Application
from .models import Chat, Message
from .services import ChatService


class MessageSerializer(serializers.ModelSerializer):
    sender = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            'id',
            'chat_id',
            'sender_id',
            'sender',
            'content',
            'message_type',
            'file_url',
            'created_at',
        ]
        read_only_fields = fields

    def get_sender(self, obj):
        return participant_display(obj.sender)


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="")
    message_type = serializers.ChoiceField(choices=Message.TYPE_CHOICES, default=Message.TYPE_TEXT)
    file_url = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_content(self, value):
        return sanitize_description(value)

    def validate_file_url(self, value):
        try:
            return validate_url(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def validate(self, attrs):
        if attrs['message_type'] == Message.TYPE_TEXT and not attrs.get('content'):
            raise serializers.ValidationError({"content": "Message content is required"})
        if attrs['message_type'] == Message.TYPE_FILE and not attrs.get('file_url'):
            raise serializers.ValidationError({"file_url": "File messages require a file_url"})
        return attrs


class ChatApplicationSerializer(serializers.ModelSerializer):
    """Application context shown in chat lists."""
    project = serializers.SerializerMethodField()
    researcher = ResearcherSummarySerializer(read_only=True)

    class Meta:
        model = Application
        fields = ['id', 'status', 'project_id', 'project', 'researcher_id', 'researcher']

    def get_project(self, obj):
        project = obj.project
        return {
            "id": project.id,
            "title": project.title,
            "company_id": project.company_id,
            "company": CompanySummarySerializer(project.company).data,
        }


class ChatSerializer(serializers.ModelSerializer):
    application = ChatApplicationSerializer(read_only=True)
    last_message = serializers.SerializerMethodField()
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = [
            'id',
            'application_id',
            'application',
            'company_id',
            'researcher_id',
            'status',
            'created_at',
            'updated_at',
            'last_message',
            'unread_count',
        ]
        read_only_fields = fields

    def get_last_message(self, obj):
        message = ChatService.last_message(obj)
        if message is None:
            return None
        return MessageSerializer(message).data

    def get_unread_count(self, obj):
        request = self.context.get("request")
        if request is None:
            return 0
        return ChatService.unread_count(obj, request.user)


class ChatDetailSerializer(ChatSerializer):
    messages = serializers.SerializerMethodField()

    class Meta(ChatSerializer.Meta):
        fields = ChatSerializer.Meta.fields + ['messages']
        read_only_fields = fields

    def get_messages(self, obj):
        messages = obj.messages.select_related("sender").order_by("created_at", "id")
        return MessageSerializer(messages, many=True).data


class ChatCreateSerializer(serializers.Serializer):
    application_id = serializers.IntegerField()


class ChatStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Chat.STATUS_CHOICES)


class MarkReadSerializer(serializers.Serializer):
    message_id = serializers.IntegerField(required=False, allow_null=True)
