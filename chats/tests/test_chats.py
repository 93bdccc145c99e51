from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from applications.models import Application
from chats.models import Chat, Message
from chats.services import ChatService
from core.exceptions import InvalidState
from projects.models import Project
from users.tests.factories import make_company, make_researcher


class ChatTestBase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company_user, self.company = make_company()
        self.researcher_user, self.researcher = make_researcher()
        self.outsider_user, self.outsider = make_researcher("grace", "Grace", "Hopper")

        self.project = Project.objects.create(
            company=self.company,
            title="Protein folding study",
            description="d",
            status=Project.STATUS_PUBLISHED,
        )
        self.application = Application.objects.create(
            project=self.project,
            researcher=self.researcher,
            cover_letter="Hello",
        )
        self.list_url = reverse("chat-list-create")

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def open_chat(self):
        Application.objects.filter(pk=self.application.pk).update(status=Application.STATUS_ACCEPTED)
        return Chat.objects.create(
            application=self.application,
            company=self.company,
            researcher=self.researcher,
        )

    def send(self, chat, user, content="Hi", **extra):
        self.auth(user)
        payload = {"content": content}
        payload.update(extra)
        return self.client.post(reverse("chat-messages", args=[chat.id]), payload, format="json")


class ChatCreateTests(ChatTestBase):
    def test_chat_opens_once_after_acceptance(self):
        self.auth(self.company_user)
        resp = self.client.put(
            reverse("application-detail", args=[self.application.id]),
            {"status": "accepted"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        resp = self.client.post(self.list_url, {"application_id": self.application.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        chat = resp.data["chat"]
        self.assertEqual(chat["status"], Chat.STATUS_ACTIVE)
        self.assertEqual(chat["company_id"], self.company.id)
        self.assertEqual(chat["researcher_id"], self.researcher.id)
        self.assertEqual(chat["application"]["project"]["title"], "Protein folding study")

        resp = self.client.post(self.list_url, {"application_id": self.application.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json(), {"error": "Chat already exists for this application"})
        self.assertEqual(Chat.objects.count(), 1)

    def test_chat_requires_accepted_application(self):
        self.auth(self.researcher_user)
        for state in (
            Application.STATUS_PENDING,
            Application.STATUS_REJECTED,
            Application.STATUS_WITHDRAWN,
        ):
            Application.objects.filter(pk=self.application.pk).update(status=state)
            resp = self.client.post(self.list_url, {"application_id": self.application.id}, format="json")
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, state)
            self.assertEqual(resp.json(), {"error": "Can only create chat for accepted applications"})
        self.assertFalse(Chat.objects.exists())

    def test_missing_or_unknown_application(self):
        self.auth(self.company_user)
        resp = self.client.post(self.list_url, {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("application_id", resp.json()["error"])

        resp = self.client.post(self.list_url, {"application_id": 55555}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json(), {"error": "Application not found"})

    def test_outsider_cannot_open_chat(self):
        Application.objects.filter(pk=self.application.pk).update(status=Application.STATUS_ACCEPTED)
        self.auth(self.outsider_user)
        resp = self.client.post(self.list_url, {"application_id": self.application.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class ChatMessagingTests(ChatTestBase):
    def test_closed_chat_rejects_messages(self):
        chat = self.open_chat()

        self.auth(self.company_user)
        resp = self.client.patch(reverse("chat-detail", args=[chat.id]), {"status": "closed"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["chat"]["status"], Chat.STATUS_CLOSED)

        resp = self.send(chat, self.researcher_user)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json(), {"error": "Chat is not active"})
        self.assertFalse(Message.objects.exists())

    def test_reopen_and_invalid_status(self):
        chat = self.open_chat()
        self.auth(self.researcher_user)
        url = reverse("chat-detail", args=[chat.id])

        self.client.put(url, {"status": "archived"}, format="json")
        resp = self.client.put(url, {"status": "active"}, format="json")
        self.assertEqual(resp.data["chat"]["status"], Chat.STATUS_ACTIVE)

        resp = self.client.put(url, {"status": "deleted"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_message_touches_chat(self):
        chat = self.open_chat()
        resp = self.send(chat, self.researcher_user, "First results attached")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        message = resp.data["message"]
        self.assertEqual(message["sender_id"], self.researcher_user.id)
        self.assertEqual(message["sender"]["kind"], "researcher")
        self.assertEqual(message["message_type"], Message.TYPE_TEXT)

        chat.refresh_from_db()
        stored = Message.objects.get(pk=message["id"])
        self.assertEqual(chat.updated_at, stored.created_at)

    def test_message_rejected_when_chat_closed_after_load(self):
        chat = self.open_chat()
        Chat.objects.filter(pk=chat.pk).update(status=Chat.STATUS_CLOSED)
        self.assertEqual(chat.status, Chat.STATUS_ACTIVE)

        with self.assertRaises(InvalidState):
            ChatService.post_message(chat, self.researcher_user, "late reply", Message.TYPE_TEXT)
        self.assertFalse(Message.objects.exists())

    def test_message_validation(self):
        chat = self.open_chat()
        self.assertEqual(self.send(chat, self.company_user, "").status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            self.send(chat, self.company_user, "x", message_type="video").status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        resp = self.send(chat, self.company_user, "", message_type="file")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("file_url", resp.json()["error"])

        resp = self.send(
            chat, self.company_user, "", message_type="file", file_url="https://files.example.com/nda.pdf"
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

    def test_outsider_cannot_read_or_write(self):
        chat = self.open_chat()
        self.assertEqual(self.send(chat, self.outsider_user).status_code, status.HTTP_403_FORBIDDEN)

        self.auth(self.outsider_user)
        self.assertEqual(
            self.client.get(reverse("chat-detail", args=[chat.id])).status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.assertEqual(
            self.client.get(reverse("chat-detail", args=[777])).status_code,
            status.HTTP_404_NOT_FOUND,
        )

    def test_detail_returns_messages_oldest_first(self):
        chat = self.open_chat()
        self.send(chat, self.company_user, "one")
        self.send(chat, self.researcher_user, "two")
        self.send(chat, self.company_user, "three")

        self.auth(self.researcher_user)
        resp = self.client.get(reverse("chat-detail", args=[chat.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([m["content"] for m in resp.data["chat"]["messages"]], ["one", "two", "three"])

    def test_messages_since(self):
        chat = self.open_chat()
        old = Message.objects.create(chat=chat, sender=self.company_user, content="old")
        Message.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(hours=2))
        Message.objects.create(chat=chat, sender=self.company_user, content="new")

        since = (timezone.now() - timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
        self.auth(self.researcher_user)
        resp = self.client.get(reverse("chat-messages", args=[chat.id]), {"since": since})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([m["content"] for m in resp.data["messages"]], ["new"])

        resp = self.client.get(reverse("chat-messages", args=[chat.id]), {"since": "yesterday"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class ChatListAndUnreadTests(ChatTestBase):
    def test_list_has_last_message_and_unread_count(self):
        chat = self.open_chat()
        self.send(chat, self.company_user, "Welcome aboard")
        self.send(chat, self.company_user, "Kickoff on Monday?")
        self.send(chat, self.researcher_user, "Works for me")

        self.auth(self.researcher_user)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        [listed] = resp.data["chats"]
        self.assertEqual(listed["last_message"]["content"], "Works for me")
        self.assertEqual(listed["unread_count"], 2)

        self.auth(self.company_user)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.data["chats"][0]["unread_count"], 1)

        self.auth(self.outsider_user)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.data["chats"], [])

    def test_mark_read_moves_forward_only(self):
        chat = self.open_chat()
        first = self.send(chat, self.company_user, "one").data["message"]
        self.send(chat, self.company_user, "two")

        self.auth(self.researcher_user)
        url = reverse("chat-mark-read", args=[chat.id])

        resp = self.client.post(url, {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["unread_count"], 0)
        newest_id = resp.data["last_read_message_id"]

        resp = self.client.post(url, {"message_id": first["id"]}, format="json")
        self.assertEqual(resp.data["last_read_message_id"], newest_id)
        self.assertEqual(resp.data["unread_count"], 0)

        self.send(chat, self.company_user, "three")
        self.auth(self.researcher_user)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.data["chats"][0]["unread_count"], 1)

    def test_mark_read_rejects_foreign_message(self):
        chat = self.open_chat()

        other_project = Project.objects.create(
            company=self.company, title="Other", description="d", status=Project.STATUS_PUBLISHED
        )
        other_application = Application.objects.create(
            project=other_project,
            researcher=self.researcher,
            cover_letter="x",
            status=Application.STATUS_ACCEPTED,
        )
        other_chat = Chat.objects.create(
            application=other_application, company=self.company, researcher=self.researcher
        )
        foreign = Message.objects.create(chat=other_chat, sender=self.company_user, content="elsewhere")

        self.auth(self.researcher_user)
        resp = self.client.post(
            reverse("chat-mark-read", args=[chat.id]), {"message_id": foreign.id}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_change_does_not_reorder_list(self):
        chat = self.open_chat()

        other_project = Project.objects.create(
            company=self.company, title="Other", description="d", status=Project.STATUS_PUBLISHED
        )
        other_application = Application.objects.create(
            project=other_project,
            researcher=self.researcher,
            cover_letter="x",
            status=Application.STATUS_ACCEPTED,
        )
        quiet_chat = Chat.objects.create(
            application=other_application, company=self.company, researcher=self.researcher
        )
        self.send(chat, self.company_user, "Newest activity")
        quiet_before = Chat.objects.get(pk=quiet_chat.pk).updated_at

        self.auth(self.company_user)
        resp = self.client.patch(reverse("chat-detail", args=[quiet_chat.id]), {"status": "archived"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(Chat.objects.get(pk=quiet_chat.pk).updated_at, quiet_before)

        resp = self.client.get(self.list_url)
        self.assertEqual([c["id"] for c in resp.data["chats"]], [chat.id, quiet_chat.id])
        self.assertEqual(resp.data["chats"][1]["status"], Chat.STATUS_ARCHIVED)
