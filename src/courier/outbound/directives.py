"""Reply directives embedded in outbound message text.

Agents can steer delivery from inside the text they write:

- ``[[reply_to:<id>]]``   → reply to a specific message
- ``[[reply_to_current]]`` → reply to the message being handled
- a line ``MEDIA: <url>``  → attach media (first one wins for single-media sends)

Directives are stripped from the text before it is sent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_REPLY_TO_RE = re.compile(r"\[\[\s*reply_to\s*:\s*([^\]\s]+)\s*\]\]", re.IGNORECASE)
_REPLY_CURRENT_RE = re.compile(r"\[\[\s*reply_to_current\s*\]\]", re.IGNORECASE)
_MEDIA_LINE_RE = re.compile(r"^\s*MEDIA:\s*(\S+)\s*$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


@dataclass
class ReplyDirectives:
    text: str
    reply_to_id: str | None = None
    reply_to_current: bool = False
    media_urls: list[str] = field(default_factory=list)

    @property
    def media_url(self) -> str | None:
        return self.media_urls[0] if self.media_urls else None


def parse_reply_directives(text: str) -> ReplyDirectives:
    reply_to_id: str | None = None
    match = _REPLY_TO_RE.search(text)
    if match:
        reply_to_id = match.group(1)
    reply_to_current = bool(_REPLY_CURRENT_RE.search(text))
    media_urls = _MEDIA_LINE_RE.findall(text)

    cleaned = _REPLY_TO_RE.sub("", text)
    cleaned = _REPLY_CURRENT_RE.sub("", cleaned)
    cleaned = _MEDIA_LINE_RE.sub("", cleaned)
    cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned).strip()

    return ReplyDirectives(
        text=cleaned,
        reply_to_id=reply_to_id,
        reply_to_current=reply_to_current,
        media_urls=media_urls,
    )
