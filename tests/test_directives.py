"""Tests for reply directives embedded in message text."""

from __future__ import annotations

from courier.outbound.directives import parse_reply_directives


def test_plain_text_untouched():
    parsed = parse_reply_directives("hello there")
    assert parsed.text == "hello there"
    assert parsed.reply_to_id is None
    assert not parsed.reply_to_current
    assert parsed.media_url is None


def test_reply_to_id():
    parsed = parse_reply_directives("[[reply_to: 1712.0042]] on it")
    assert parsed.reply_to_id == "1712.0042"
    assert parsed.text == "on it"


def test_reply_to_current():
    parsed = parse_reply_directives("done [[reply_to_current]]")
    assert parsed.reply_to_current
    assert parsed.text == "done"


def test_media_lines():
    parsed = parse_reply_directives(
        "chart attached\nMEDIA: https://example.com/a.png\nMEDIA: https://example.com/b.png"
    )
    assert parsed.text == "chart attached"
    assert parsed.media_urls == ["https://example.com/a.png", "https://example.com/b.png"]
    assert parsed.media_url == "https://example.com/a.png"


def test_media_only():
    parsed = parse_reply_directives("MEDIA: https://example.com/a.png")
    assert parsed.text == ""
    assert parsed.media_url == "https://example.com/a.png"
