"""
Content moderation for community text.

moderate() scores text with keyword and pattern heuristics and picks an
action; sanitize() strips executable markup. Both are pure.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

INAPPROPRIATE_KEYWORDS = (
    "damn", "hell", "crap", "stupid", "idiot",
    "buy now", "click here", "free money", "get rich quick",
    "hate", "discrimination", "racist", "sexist",
    "climate hoax", "global warming fake", "science lie",
)

SPAM_PATTERNS = (
    re.compile(r"(.)\1{4,}"),           # same character 5+ times
    re.compile(r"[A-Z]{5,}"),           # shouting
    re.compile(r"\b\d{10,}\b"),         # phone-number-like runs
    re.compile(r"https?://[^\s]+"),     # links
)

KEYWORD_PENALTY = 0.2
SPAM_PENALTY = 0.3
LENGTH_PENALTY = 0.1

MIN_LENGTH = 10
MAX_LENGTH = 2000

REJECT_BELOW = 0.3
REVIEW_BELOW = 0.7
APPROPRIATE_ABOVE = 0.7

EXCERPT_LENGTH = 100

_SANITIZE_RULES = (
    (re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE), ""),
    (re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE), ""),
    (re.compile(r"javascript:", re.IGNORECASE), ""),
    (re.compile(r"on\w+\s*=", re.IGNORECASE), ""),
)


class ModerationFlag(str, Enum):
    INAPPROPRIATE_LANGUAGE = "inappropriate_language"
    SPAM = "spam"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"


class ModerationAction(str, Enum):
    APPROVE = "approve"
    REVIEW = "review"
    REJECT = "reject"


class ModerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_appropriate: bool
    confidence: float
    flags: List[ModerationFlag]
    action: ModerationAction
    matched_keywords: List[str] = []


class ModerationReport(BaseModel):
    content: str
    timestamp: datetime
    result: ModerationResult
    review_required: bool
    auto_rejected: bool


def moderate(text: str) -> ModerationResult:
    """
    Score text and decide approve / review / reject.

    The action and is_appropriate use the raw score; the reported confidence
    is clamped at 0.
    """
    lowered = text.lower()
    confidence = 1.0
    flags: List[ModerationFlag] = []

    matched = [kw for kw in INAPPROPRIATE_KEYWORDS if kw in lowered]
    if matched:
        flags.append(ModerationFlag.INAPPROPRIATE_LANGUAGE)
        confidence -= KEYWORD_PENALTY * len(matched)

    if any(pattern.search(text) for pattern in SPAM_PATTERNS):
        flags.append(ModerationFlag.SPAM)
        confidence -= SPAM_PENALTY

    if len(text) < MIN_LENGTH:
        flags.append(ModerationFlag.TOO_SHORT)
        confidence -= LENGTH_PENALTY
    elif len(text) > MAX_LENGTH:
        flags.append(ModerationFlag.TOO_LONG)
        confidence -= LENGTH_PENALTY

    if confidence < REJECT_BELOW or ModerationFlag.INAPPROPRIATE_LANGUAGE in flags:
        action = ModerationAction.REJECT
    elif confidence < REVIEW_BELOW or flags:
        action = ModerationAction.REVIEW
    else:
        action = ModerationAction.APPROVE

    return ModerationResult(
        is_appropriate=confidence > APPROPRIATE_ABOVE and not flags,
        confidence=round(max(0.0, confidence), 4),
        flags=flags,
        action=action,
        matched_keywords=matched,
    )


def sanitize(text: str) -> str:
    """Strip script/iframe blocks, javascript: URIs and inline handlers.

    Rules repeat until nothing matches, so a payload nested inside another
    cannot reassemble once the outer one is removed. Every rule deletes, so
    each pass shortens the text and the loop ends.
    """
    while True:
        cleaned = text
        for pattern, replacement in _SANITIZE_RULES:
            cleaned = pattern.sub(replacement, cleaned)
        if cleaned == text:
            return text.strip()
        text = cleaned


def moderation_report(text: str, result: ModerationResult, now: Optional[datetime] = None) -> ModerationReport:
    excerpt = text[:EXCERPT_LENGTH] + ("..." if len(text) > EXCERPT_LENGTH else "")
    return ModerationReport(
        content=excerpt,
        timestamp=now or datetime.now(timezone.utc),
        result=result,
        review_required=result.action == ModerationAction.REVIEW,
        auto_rejected=result.action == ModerationAction.REJECT,
    )
