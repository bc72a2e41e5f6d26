"""
Unit tests for the notification worker's message handler.
"""
import json
import pytest
from uuid import uuid4

from campus_connect.core.config import settings
from campus_connect.events.consumer import handle_message
from campus_connect.notifications.fanout import NotificationStatus


def body(payload: dict) -> bytes:
    return json.dumps(payload).encode()


@pytest.mark.unit
@pytest.mark.asyncio
class TestHandleMessage:

    async def test_event_created_notifies_every_student(
        self, session_factory, test_event, test_student, other_students, monkeypatch
    ):
        monkeypatch.setattr(settings, "EMAIL_USER", "events@example.com")
        monkeypatch.setattr(settings, "EMAIL_PASSWORD", "app-password")
        outbox = []

        async def sender(to, subject, text, html):
            outbox.append((to, subject, text))

        report = await handle_message(
            body({"type": "event.created", "event_id": str(test_event.id)}),
            session_factory=session_factory,
            sender=sender,
        )

        assert report.status == NotificationStatus.completed
        assert (report.sent, report.failed, report.total) == (3, 0, 3)
        assert {to for to, _, _ in outbox} == {
            "student@example.com", "student1@example.com", "student2@example.com",
        }
        assert all(subject == "New Event: Hack Night" for _, subject, _ in outbox)
        assert all("Hosted by: Test Admin" in text for _, _, text in outbox)

    async def test_without_credentials_nothing_is_sent(self, session_factory, test_event, test_student):
        async def sender(to, subject, text, html):
            raise AssertionError("should not send")

        report = await handle_message(
            body({"type": "event.created", "event_id": str(test_event.id)}),
            session_factory=session_factory,
            sender=sender,
        )

        assert report.status == NotificationStatus.not_configured

    async def test_missing_event_is_skipped(self, session_factory):
        report = await handle_message(
            body({"type": "event.created", "event_id": str(uuid4())}),
            session_factory=session_factory,
        )

        assert report is None

    async def test_unknown_message_type_is_ignored(self, session_factory):
        assert await handle_message(body({"type": "event.updated"}), session_factory=session_factory) is None
