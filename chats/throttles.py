# chats/throttles.py

from rest_framework.throttling import ScopedRateThrottle


class ChatMessageSendThrottle(ScopedRateThrottle):
    """
    Throttle message sending per user per chat.

    Scope key: 'chat-message'
    Cache key shape:
      throttle_chat-message_u<user_id>_c<chat_id>
    """
    scope = "chat-message"

    def get_cache_key(self, request, view):
        # Only throttle POST (send message)
        if request.method != "POST":
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        chat_id = getattr(view, "kwargs", {}).get("chat_id") or "unknown"
        return f"throttle_{self.scope}_u{user.id}_c{chat_id}"
