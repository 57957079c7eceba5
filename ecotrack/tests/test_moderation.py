"""Tests for content moderation and sanitization."""

from datetime import datetime, timezone

from ecotrack.features.moderation.moderator import (
    ModerationAction,
    ModerationFlag,
    moderate,
    moderation_report,
    sanitize,
)


def test_clean_text_is_approved():
    result = moderate("Switching to a bike for my commute this week")
    assert result.action == ModerationAction.APPROVE
    assert result.is_appropriate is True
    assert result.confidence == 1.0
    assert result.flags == []


def test_keyword_rejects():
    result = moderate("This plan is stupid and I do not like it")
    assert result.action == ModerationAction.REJECT
    assert result.flags == [ModerationFlag.INAPPROPRIATE_LANGUAGE]
    assert result.confidence == 0.8
    assert result.matched_keywords == ["stupid"]
    assert result.is_appropriate is False


def test_keywords_are_case_insensitive():
    result = moderate("That is Stupid of them")
    assert result.action == ModerationAction.REJECT
    assert "stupid" in result.matched_keywords


def test_link_goes_to_review():
    result = moderate("Check out https://example.com for tips")
    assert result.flags == [ModerationFlag.SPAM]
    assert result.action == ModerationAction.REVIEW
    assert result.confidence == 0.7
    assert result.is_appropriate is False


def test_shouting_and_short_text():
    result = moderate("WOWWWWW")
    assert set(result.flags) == {ModerationFlag.SPAM, ModerationFlag.TOO_SHORT}
    assert result.confidence == 0.6
    assert result.action == ModerationAction.REVIEW


def test_repeated_sales_pitch_with_link():
    result = moderate("BUY NOW BUY NOW http://x.com")
    assert ModerationFlag.SPAM in result.flags
    assert ModerationFlag.INAPPROPRIATE_LANGUAGE in result.flags
    assert result.matched_keywords == ["buy now"]
    assert result.confidence == 0.5
    assert result.action == ModerationAction.REJECT


def test_short_greeting_is_flagged_too_short():
    result = moderate("hi!!!")
    assert result.flags == [ModerationFlag.TOO_SHORT]
    assert result.confidence == 0.9
    assert result.action == ModerationAction.REVIEW
    assert result.is_appropriate is False


def test_long_text_is_flagged():
    result = moderate("Recycling helps. " * 150)
    assert result.flags == [ModerationFlag.TOO_LONG]
    assert result.action == ModerationAction.REVIEW


def test_confidence_is_clamped_but_action_uses_raw_score():
    result = moderate("damn hell crap stupid idiot hate")
    assert len(result.matched_keywords) == 6
    assert result.confidence == 0.0
    assert result.action == ModerationAction.REJECT


def test_sanitize_strips_executable_markup():
    assert sanitize("Nice bike<script>alert(1)</script>") == "Nice bike"
    assert sanitize("<IFRAME src='x'></IFRAME> ride") == "ride"
    assert sanitize("javascript:alert(1)") == "alert(1)"
    assert sanitize('<a onclick="go()">link</a>') == '<a "go()">link</a>'
    assert sanitize("  plain text  ") == "plain text"


def test_sanitize_removes_nested_payloads():
    assert sanitize("<scr<script>x</script>ipt>alert(1)</script>") == ""
    assert sanitize("jajavascript:vascript:alert(1)") == "alert(1)"
    assert sanitize("<ifr<iframe></iframe>ame src=x></iframe>ok") == "ok"


def test_report_excerpt_and_flags():
    text = "Check out https://example.com " + "x y " * 50
    result = moderate(text)
    report = moderation_report(text, result, now=datetime(2024, 1, 2, tzinfo=timezone.utc))
    assert len(report.content) == 103
    assert report.content.endswith("...")
    assert report.review_required is True
    assert report.auto_rejected is False


def test_report_short_text_not_truncated():
    result = moderate("stupid idea")
    report = moderation_report("stupid idea", result)
    assert report.content == "stupid idea"
    assert report.auto_rejected is True
