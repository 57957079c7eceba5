"""
Notification sink.

In-app notifications are kept per user in process memory; push messages are
logged and recorded alongside them so callers can inspect what was sent.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel

from ecotrack.core.logging import log_event


class Notification(BaseModel):
    user_id: str
    kind: str
    title: str
    message: str
    created_at: datetime
    read: bool = False


class PushMessage(BaseModel):
    user_id: str
    title: str
    body: str
    sent_at: datetime


class InMemoryNotificationSink:
    def __init__(self):
        self._notifications: Dict[str, List[Notification]] = defaultdict(list)
        self._pushes: Dict[str, List[PushMessage]] = defaultdict(list)
        self._lock = threading.Lock()

    def add_notification(
        self,
        user_id: str,
        kind: str,
        title: str,
        message: str,
        *,
        now: Optional[datetime] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            kind=kind,
            title=title,
            message=message,
            created_at=now or datetime.now(timezone.utc),
        )
        with self._lock:
            self._notifications[user_id].append(notification)
        return notification

    def send_push(self, user_id: str, title: str, body: str, *, now: Optional[datetime] = None) -> PushMessage:
        push = PushMessage(user_id=user_id, title=title, body=body, sent_at=now or datetime.now(timezone.utc))
        with self._lock:
            self._pushes[user_id].append(push)
        log_event("info", "notification.push", user_id=user_id, event_type="notification.push", extra={"title": title})
        return push

    def notifications_for(self, user_id: str) -> List[Notification]:
        """Newest first."""
        with self._lock:
            return list(reversed(self._notifications.get(user_id, [])))

    def pushes_for(self, user_id: str) -> List[PushMessage]:
        with self._lock:
            return list(self._pushes.get(user_id, []))
