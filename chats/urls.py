from django.urls import path
from .views import ChatListCreateView, ChatDetailView, ChatMessagesView, ChatMarkReadView

urlpatterns = [
    path("", ChatListCreateView.as_view(), name="chat-list-create"),
    path("<int:chat_id>/", ChatDetailView.as_view(), name="chat-detail"),
    path("<int:chat_id>/messages/", ChatMessagesView.as_view(), name="chat-messages"),
    path("<int:chat_id>/read/", ChatMarkReadView.as_view(), name="chat-mark-read"),
]
