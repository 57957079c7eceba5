"""
Community forum: posts, comments and likes.

All user text is sanitized before it is moderated or stored. Rejected text
raises ContentRejectedError; text that needs review is stored and logged.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import List, Optional

from ecotrack.core.errors import ContentRejectedError, DuplicateRecordError, NotFoundError, StoreError
from ecotrack.core.logging import log_event
from ecotrack.core.metrics import moderation_verdicts_total
from ecotrack.features.community.models import Comment, LikeToggle, Post, Submission
from ecotrack.features.moderation.moderator import (
    ModerationAction,
    ModerationResult,
    moderate,
    moderation_report,
    sanitize,
)
from ecotrack.features.records.store import RecordKind, RecordStore, log_store_failure

logger = logging.getLogger(__name__)


def like_id(post_id: str, user_id: str) -> str:
    """One like row per (post, user); the id doubles as the uniqueness key."""
    return hashlib.sha256(f"{post_id}:{user_id}".encode()).hexdigest()[:16]


class CommunityService:
    def __init__(self, store: RecordStore):
        self._store = store

    def review(self, text: str) -> ModerationResult:
        """Moderation verdict for text, without storing anything."""
        result = moderate(sanitize(text))
        moderation_verdicts_total.inc(labels={"action": result.action.value})
        return result

    def create_post(self, *, user_id: str, title: str, content: str, now: Optional[datetime] = None) -> Submission:
        title = sanitize(title)
        content = sanitize(content)
        result = self._screen(user_id, f"{title}\n{content}", target="post")

        row = self._store.insert(
            RecordKind.COMMUNITY_POST,
            {
                "user_id": user_id,
                "title": title,
                "content": content,
                "likes_count": 0,
                "created_at": now or datetime.now(timezone.utc),
            },
        )
        log_event(
            "info",
            "community.post.created",
            user_id=user_id,
            event_type="community.post.created",
            extra={"post_id": row["id"], "moderation": result.action.value},
        )
        return Submission(moderation=result, post=Post(**row))

    def add_comment(self, *, user_id: str, post_id: str, content: str, now: Optional[datetime] = None) -> Submission:
        self._require_post(post_id)
        content = sanitize(content)
        result = self._screen(user_id, content, target="comment")

        row = self._store.insert(
            RecordKind.POST_COMMENT,
            {
                "post_id": post_id,
                "user_id": user_id,
                "content": content,
                "created_at": now or datetime.now(timezone.utc),
            },
        )
        return Submission(moderation=result, comment=Comment(**row))

    def toggle_like(self, *, user_id: str, post_id: str, now: Optional[datetime] = None) -> LikeToggle:
        """Add the user's like, or remove it if already present."""
        post = self._require_post(post_id)
        key = like_id(post_id, user_id)

        if self._store.delete(RecordKind.POST_LIKE, key):
            liked = False
        else:
            try:
                self._store.insert(
                    RecordKind.POST_LIKE,
                    {"id": key, "post_id": post_id, "user_id": user_id, "created_at": now or datetime.now(timezone.utc)},
                )
            except DuplicateRecordError:
                # Lost a race with a concurrent like; the like stands
                pass
            liked = True

        # Recount rather than increment so the counter can't drift
        likes = self._store.query(RecordKind.POST_LIKE, {"post_id": post_id})
        updated = self._store.update(RecordKind.COMMUNITY_POST, post_id, {"likes_count": len(likes)})
        likes_count = (updated or post)["likes_count"]
        return LikeToggle(post_id=post_id, liked=liked, likes_count=likes_count)

    def list_posts(self, *, limit: int = 20, viewer_id: Optional[str] = None) -> List[Post]:
        """Newest posts first, each with its comments oldest first."""
        try:
            rows = self._store.query(
                RecordKind.COMMUNITY_POST, order_by="created_at", descending=True, limit=limit
            )
        except StoreError as e:
            log_store_failure(RecordKind.COMMUNITY_POST, "query", e, user_id=viewer_id)
            return []

        posts = []
        for row in rows:
            posts.append(Post(
                **row,
                comments=self._comments_for(row["id"]),
                liked_by_me=bool(viewer_id) and self._has_liked(row["id"], viewer_id),
            ))
        return posts

    # Internal helpers -------------------------------------------------
    def _screen(self, user_id: str, text: str, *, target: str) -> ModerationResult:
        result = self.review(text)
        if result.action == ModerationAction.REJECT:
            log_event(
                "warning",
                f"community.{target}.rejected",
                user_id=user_id,
                event_type=f"community.{target}.rejected",
                error_code="content_rejected",
                extra={"flags": [f.value for f in result.flags]},
            )
            raise ContentRejectedError(
                "Content violates community guidelines",
                flags=[f.value for f in result.flags],
            )
        if result.action == ModerationAction.REVIEW:
            report = moderation_report(text, result)
            log_event(
                "info",
                f"community.{target}.review",
                user_id=user_id,
                event_type=f"community.{target}.review",
                extra={"report": report.model_dump(mode="json")},
            )
        return result

    def _require_post(self, post_id: str) -> dict:
        row = self._store.get(RecordKind.COMMUNITY_POST, post_id)
        if row is None:
            raise NotFoundError(f"Post {post_id} not found")
        return row

    def _comments_for(self, post_id: str) -> List[Comment]:
        try:
            rows = self._store.query(RecordKind.POST_COMMENT, {"post_id": post_id}, order_by="created_at")
        except StoreError as e:
            log_store_failure(RecordKind.POST_COMMENT, "query", e)
            return []
        return [Comment(**r) for r in rows]

    def _has_liked(self, post_id: str, user_id: str) -> bool:
        try:
            return self._store.get(RecordKind.POST_LIKE, like_id(post_id, user_id)) is not None
        except StoreError as e:
            log_store_failure(RecordKind.POST_LIKE, "get", e, user_id=user_id)
            return False
