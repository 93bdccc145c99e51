from django.contrib import admin
from .models import Chat, Message, ChatReadState


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ('id', 'application', 'company', 'researcher', 'status', 'updated_at')
    list_filter = ('status',)
    raw_id_fields = ('application', 'company', 'researcher')


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'chat', 'sender', 'message_type', 'created_at')
    list_filter = ('message_type',)
    search_fields = ('content',)
    raw_id_fields = ('chat', 'sender')


@admin.register(ChatReadState)
class ChatReadStateAdmin(admin.ModelAdmin):
    list_display = ('chat', 'user', 'last_read_message', 'last_read_at')
    raw_id_fields = ('chat', 'user', 'last_read_message')
