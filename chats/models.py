from django.conf import settings
from django.db import models


class Chat(models.Model):
    """
    Conversation between a company and a researcher, one per accepted
    application. company and researcher are copied from the application
    when the chat is opened.
    """
    STATUS_ACTIVE = "active"
    STATUS_CLOSED = "closed"
    STATUS_ARCHIVED = "archived"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_CLOSED, "Closed"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    application = models.OneToOneField(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="chat"
    )
    company = models.ForeignKey(
        "users.CompanyProfile",
        on_delete=models.CASCADE,
        related_name="chats"
    )
    researcher = models.ForeignKey(
        "users.ResearcherProfile",
        on_delete=models.CASCADE,
        related_name="chats"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE
    )

    created_at = models.DateTimeField(auto_now_add=True)
    # touched to the newest message's created_at
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]
        indexes = [
            models.Index(fields=["company", "updated_at"], name="chat_company_updated_idx"),
            models.Index(fields=["researcher", "updated_at"], name="chat_researcher_updated_idx"),
        ]

    def __str__(self):
        return f"Chat #{self.pk} for application {self.application_id} ({self.status})"


class Message(models.Model):
    TYPE_TEXT = "text"
    TYPE_FILE = "file"

    TYPE_CHOICES = [
        (TYPE_TEXT, "Text"),
        (TYPE_FILE, "File"),
    ]

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages"
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_messages"
    )
    content = models.TextField(blank=True, default="")
    message_type = models.CharField(
        max_length=10,
        choices=TYPE_CHOICES,
        default=TYPE_TEXT
    )
    file_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["chat", "created_at"], name="message_chat_created_idx"),
        ]

    def __str__(self):
        return f"Message #{self.pk} in chat {self.chat_id} by {self.sender_id}"


class ChatReadState(models.Model):
    """
    Per-participant read marker. Messages after last_read_message that
    were sent by the other side count as unread.
    """
    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="read_states"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_read_states"
    )
    last_read_message = models.ForeignKey(
        Message,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+"
    )
    last_read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("chat", "user")

    def __str__(self):
        return f"{self.user_id} read chat {self.chat_id} up to {self.last_read_message_id}"
