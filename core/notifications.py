"""Push notifications through Firebase Cloud Messaging.

Device tokens are kept in the ``fcm_tokens`` collection, one document per
user. Sending is best-effort: failures are logged and counted, never
raised to the caller.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from core.models import Habit, PushPayload
from core.store import delete_document, get_document, query_documents, set_document

logger = logging.getLogger(__name__)

TOKENS_COLLECTION = "fcm_tokens"

DEFAULT_TAG = "lifecompass-notification"
DEFAULT_ICON = "/icon-192.png"

Sender = Callable[[messaging.Message], Any]


# ── Token registry ────────────────────────────────────────────


def get_user_tokens(user_id: str, root: Path | None = None) -> list[str]:
    try:
        doc = get_document(TOKENS_COLLECTION, user_id, root)
    except Exception:
        logger.exception("Could not read FCM tokens for %s", user_id)
        return []
    if doc is None:
        return []
    return [str(t) for t in (doc.get("tokens") or [])]


def register_token(user_id: str, token: str, root: Path | None = None) -> list[str]:
    """Add a device token for *user_id*. Returns the user's token list."""
    tokens = get_user_tokens(user_id, root)
    if token not in tokens:
        tokens.append(token)
        set_document(TOKENS_COLLECTION, user_id, {"userId": user_id, "tokens": tokens}, root)
    return tokens


def unregister_token(user_id: str, token: str, root: Path | None = None) -> bool:
    tokens = get_user_tokens(user_id, root)
    if token not in tokens:
        return False
    tokens.remove(token)
    if tokens:
        set_document(TOKENS_COLLECTION, user_id, {"userId": user_id, "tokens": tokens}, root)
    else:
        delete_document(TOKENS_COLLECTION, user_id, root)
    return True


def users_with_tokens(root: Path | None = None) -> list[str]:
    return [doc["id"] for doc in query_documents(TOKENS_COLLECTION, root) if doc.get("tokens")]


# ── Firebase ──────────────────────────────────────────────────


def init_firebase() -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use.

    Uses the service-account file at LIFECOMPASS_FIREBASE_CREDENTIALS, or
    application default credentials when unset.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        path = os.environ.get("LIFECOMPASS_FIREBASE_CREDENTIALS", "")
        cred = credentials.Certificate(path) if path else None
        app = firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin SDK initialized")
        return app


def _firebase_send(message: messaging.Message) -> str:
    return messaging.send(message, app=init_firebase())


def build_message(token: str, payload: PushPayload) -> messaging.Message:
    tag = payload.tag or DEFAULT_TAG
    icon = payload.icon or DEFAULT_ICON
    link = os.environ.get("LIFECOMPASS_WEB_URL", "")
    # FCM only accepts absolute https links
    fcm_options = messaging.WebpushFCMOptions(link=link) if link.startswith("https://") else None
    return messaging.Message(
        token=token,
        notification=messaging.Notification(title=payload.title, body=payload.body),
        data={
            **{str(k): str(v) for k, v in payload.data.items()},
            "tag": tag,
            "requireInteraction": "true" if payload.require_interaction else "false",
        },
        webpush=messaging.WebpushConfig(
            notification=messaging.WebpushNotification(
                title=payload.title,
                body=payload.body,
                icon=icon,
                badge=DEFAULT_ICON,
                tag=tag,
                require_interaction=payload.require_interaction,
            ),
            fcm_options=fcm_options,
        ),
        android=messaging.AndroidConfig(priority="high"),
        apns=messaging.APNSConfig(headers={"apns-priority": "10"}),
    )


def _send_to_token(token: str, payload: PushPayload, sender: Sender) -> tuple[bool, bool]:
    """Returns (delivered, token_is_dead)."""
    try:
        sender(build_message(token, payload))
        return True, False
    except (messaging.UnregisteredError, exceptions.InvalidArgumentError) as e:
        logger.warning("Invalid FCM token %s...: %s", token[:20], e)
        return False, True
    except Exception:
        logger.exception("FCM send failed for token %s...", token[:20])
        return False, False


def send_to_user(
    user_id: str,
    payload: PushPayload,
    root: Path | None = None,
    sender: Sender | None = None,
) -> int:
    """Send *payload* to every device of *user_id*. Returns devices reached."""
    sender = sender or _firebase_send
    try:
        tokens = get_user_tokens(user_id, root)
        if not tokens:
            logger.warning("User %s has no FCM tokens registered", user_id)
            return 0

        delivered = 0
        for token in tokens:
            ok, dead = _send_to_token(token, payload, sender)
            if ok:
                delivered += 1
            if dead:
                unregister_token(user_id, token, root)

        logger.info("Notification sent to %d/%d devices of %s", delivered, len(tokens), user_id)
        return delivered
    except Exception:
        logger.exception("Failed to notify user %s", user_id)
        return 0


# ── Notification kinds ────────────────────────────────────────


def send_checkin_reminder(user_id: str, root: Path | None = None, sender: Sender | None = None) -> int:
    return send_to_user(
        user_id,
        PushPayload(
            title="Daily check-in time",
            body="How was your day? Log your mood, energy and productivity.",
            tag="daily-checkin",
            data={"type": "checkin"},
            require_interaction=True,
        ),
        root,
        sender,
    )


def send_habit_reminder(
    user_id: str,
    habit: Habit,
    description: str = "",
    root: Path | None = None,
    sender: Sender | None = None,
) -> int:
    return send_to_user(
        user_id,
        PushPayload(
            title=f"Habit time: {habit.name}",
            body=description or "Don't forget to complete your habit!",
            tag=f"habit-{habit.id}",
            data={"type": "habit", "habitId": habit.id},
        ),
        root,
        sender,
    )


def send_insight(
    user_id: str,
    title: str,
    body: str,
    root: Path | None = None,
    sender: Sender | None = None,
) -> int:
    return send_to_user(
        user_id,
        PushPayload(title=title, body=body, tag="daily-insight", data={"type": "insight"}),
        root,
        sender,
    )
