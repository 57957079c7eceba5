from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ecotrack.features.moderation.moderator import ModerationResult


class PostCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(..., min_length=1)


class Comment(BaseModel):
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime


class Post(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    likes_count: int = 0
    created_at: datetime
    comments: List[Comment] = []
    liked_by_me: bool = False


class Submission(BaseModel):
    """A stored post or comment plus the moderation verdict it passed with."""
    moderation: ModerationResult
    post: Optional[Post] = None
    comment: Optional[Comment] = None


class LikeToggle(BaseModel):
    post_id: str
    liked: bool
    likes_count: int
