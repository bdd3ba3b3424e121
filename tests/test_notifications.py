"""Tests for core/notifications.py — token registry and FCM fan-out."""

from firebase_admin import messaging

from core.models import Habit, PushPayload
from core.notifications import (
    build_message,
    get_user_tokens,
    register_token,
    send_habit_reminder,
    send_to_user,
    unregister_token,
    users_with_tokens,
)


class FakeSender:
    def __init__(self, fail_tokens=(), dead_tokens=()):
        self.sent: list[messaging.Message] = []
        self.fail_tokens = set(fail_tokens)
        self.dead_tokens = set(dead_tokens)

    def __call__(self, message):
        if message.token in self.dead_tokens:
            raise messaging.UnregisteredError("Requested entity was not found.")
        if message.token in self.fail_tokens:
            raise RuntimeError("network down")
        self.sent.append(message)
        return f"projects/test/messages/{len(self.sent)}"


def test_register_and_unregister_tokens(workspace):
    register_token("alice", "tok-1", workspace)
    register_token("alice", "tok-2", workspace)
    register_token("alice", "tok-1", workspace)
    assert get_user_tokens("alice", workspace) == ["tok-1", "tok-2"]
    assert users_with_tokens(workspace) == ["alice"]

    assert unregister_token("alice", "tok-1", workspace) is True
    assert unregister_token("alice", "tok-1", workspace) is False
    unregister_token("alice", "tok-2", workspace)
    assert users_with_tokens(workspace) == []


def test_build_message():
    msg = build_message("tok", PushPayload(title="Hi", body="There", tag="t", data={"type": "habit"}))
    assert msg.token == "tok"
    assert msg.notification.title == "Hi"
    assert msg.data == {"type": "habit", "tag": "t", "requireInteraction": "false"}
    assert msg.webpush.notification.tag == "t"
    assert msg.android.priority == "high"
    assert msg.apns.headers == {"apns-priority": "10"}


def test_send_to_user_without_tokens(workspace):
    sender = FakeSender()
    assert send_to_user("nobody", PushPayload(title="x"), workspace, sender) == 0
    assert sender.sent == []


def test_send_to_user_counts_deliveries_and_isolates_failures(workspace):
    for token in ("good-1", "flaky", "good-2"):
        register_token("alice", token, workspace)
    sender = FakeSender(fail_tokens={"flaky"})
    assert send_to_user("alice", PushPayload(title="x", body="y"), workspace, sender) == 2
    assert [m.token for m in sender.sent] == ["good-1", "good-2"]
    # transient failures keep the token
    assert "flaky" in get_user_tokens("alice", workspace)


def test_send_to_user_drops_unregistered_tokens(workspace):
    register_token("alice", "stale", workspace)
    register_token("alice", "fresh", workspace)
    sender = FakeSender(dead_tokens={"stale"})
    assert send_to_user("alice", PushPayload(title="x"), workspace, sender) == 1
    assert get_user_tokens("alice", workspace) == ["fresh"]


def test_send_habit_reminder_payload(workspace):
    register_token("alice", "tok", workspace)
    sender = FakeSender()
    habit = Habit(id="h-read", name="Read")
    assert send_habit_reminder("alice", habit, "Time to read", workspace, sender) == 1
    msg = sender.sent[0]
    assert msg.notification.title == "Habit time: Read"
    assert msg.notification.body == "Time to read"
    assert msg.data["habitId"] == "h-read"
    assert msg.data["tag"] == "habit-h-read"
