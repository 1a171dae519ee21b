"""Per-platform identifier conventions.

Each channel id maps to a small set of pure functions:

- ``normalize(raw)``        → platform syntax normalization, or None when
                              the input has no platform-specific form
- ``looks_like_id(value)``  → True when *value* is already a native id and
                              no directory lookup is needed
- ``preserve_case(raw, normalized)`` → final destination for the fast path
- ``format_entry_id(entry)`` → destination for a matched directory entry

Adding a platform means adding one ``TargetRules`` entry to ``TARGET_RULES``.
Channels without an entry accept any non-empty string as an identifier.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from courier.types import DirectoryEntry

_PREFIX_RE = re.compile(r"^(channel|group|user):", re.IGNORECASE)
_SIGIL_RE = re.compile(r"^[@#]")
_MENTION_RE = re.compile(r"^<@!?([^>]+)>$")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_target_input(raw: str | None) -> str:
    """Collapse internal whitespace and trim; None becomes ''."""
    if not raw:
        return ""
    return _WHITESPACE_RE.sub(" ", raw).strip()


def strip_target_prefixes(value: str) -> str:
    """Drop a ``channel:``/``group:``/``user:`` prefix and a leading ``#``/``@``."""
    return _SIGIL_RE.sub("", _PREFIX_RE.sub("", value.strip()), count=1).strip()


def _identity(_raw: str, normalized: str) -> str:
    return normalized


def _any_non_empty(value: str) -> bool:
    return bool(value.strip())


def _entry_id_default(entry: DirectoryEntry) -> str:
    return entry.id.strip()


@dataclass(frozen=True)
class TargetRules:
    normalize: Callable[[str], str | None] = lambda _raw: None
    looks_like_id: Callable[[str], bool] = _any_non_empty
    preserve_case: Callable[[str, str], str] = _identity
    format_entry_id: Callable[[DirectoryEntry], str] = _entry_id_default


DEFAULT_RULES = TargetRules()


# ---------------------------------------------------------------------------
# Discord: numeric snowflakes, <@123> mentions
# ---------------------------------------------------------------------------


def _discord_normalize(raw: str) -> str | None:
    trimmed = raw.strip()
    if not trimmed:
        return None
    mention = _MENTION_RE.match(trimmed)
    if mention:
        return f"user:{mention.group(1)}"
    lowered = trimmed.lower()
    if lowered.startswith("user:"):
        return f"user:{trimmed[5:].strip()}"
    if lowered.startswith(("channel:", "group:")):
        return f"channel:{strip_target_prefixes(trimmed)}"
    if trimmed.startswith("@"):
        return f"user:{trimmed[1:].strip()}"
    return f"channel:{strip_target_prefixes(trimmed)}"


def _discord_looks_like_id(value: str) -> bool:
    return re.fullmatch(r"\d{6,}", strip_target_prefixes(value)) is not None


def _prefixed_entry_id(entry: DirectoryEntry) -> str:
    """Keep an explicit prefix, else derive one from the entry kind (case kept)."""
    raw = entry.id.strip()
    if _PREFIX_RE.match(raw):
        prefix, _, rest = raw.partition(":")
        return f"{prefix.lower()}:{rest.strip()}"
    prefix = "user" if entry.kind == "user" else "channel"
    return f"{prefix}:{_SIGIL_RE.sub('', raw)}"


# ---------------------------------------------------------------------------
# Slack: case-insensitive alphanumeric ids (C…, U…, G…)
# ---------------------------------------------------------------------------


def _slack_normalize(raw: str) -> str | None:
    trimmed = raw.strip()
    if not trimmed:
        return None
    mention = _MENTION_RE.match(trimmed)
    if mention:
        return f"user:{mention.group(1)}".lower()
    lowered = trimmed.lower()
    if lowered.startswith("user:") or trimmed.startswith("@"):
        return f"user:{strip_target_prefixes(trimmed)}".lower()
    return f"channel:{strip_target_prefixes(trimmed)}".lower()


def _slack_looks_like_id(value: str) -> bool:
    return re.fullmatch(r"[A-Z0-9]{8,}", strip_target_prefixes(value), re.IGNORECASE) is not None


def _slack_preserve_case(raw: str, _normalized: str) -> str:
    trimmed = raw.strip()
    if re.match(r"^(channel|user):", trimmed, re.IGNORECASE):
        return trimmed
    if trimmed.startswith("#"):
        return f"channel:{trimmed[1:].strip()}"
    if trimmed.startswith("@"):
        return f"user:{trimmed[1:].strip()}"
    return trimmed


# ---------------------------------------------------------------------------
# Microsoft Teams: conversation/user tokens, thread ids
# ---------------------------------------------------------------------------


def _msteams_normalize(raw: str) -> str | None:
    trimmed = re.sub(r"^(msteams|teams):", "", raw.strip(), flags=re.IGNORECASE).strip()
    return trimmed or None


def _msteams_looks_like_id(value: str) -> bool:
    raw = value.strip()
    return bool(re.match(r"^(conversation|user):", raw, re.IGNORECASE)) or "@thread" in raw


# ---------------------------------------------------------------------------
# Telegram: @handles, numeric chat ids
# ---------------------------------------------------------------------------


def _telegram_normalize(raw: str) -> str | None:
    trimmed = re.sub(r"^(telegram|tg):", "", raw.strip(), flags=re.IGNORECASE).strip()
    if not trimmed:
        return None
    if trimmed.startswith("@") or re.fullmatch(r"-?\d+", trimmed):
        return f"telegram:{trimmed}"
    if raw.strip().lower().startswith(("telegram:", "tg:")):
        return f"telegram:{trimmed}"
    return None


def _telegram_looks_like_id(value: str) -> bool:
    raw = value.strip()
    return raw.lower().startswith("telegram:") or raw.startswith("@")


# ---------------------------------------------------------------------------
# WhatsApp: JIDs (…@s.whatsapp.net, …@g.us) and phone numbers
# ---------------------------------------------------------------------------

_PHONE_RE = re.compile(r"^\+?[\d\s().-]{3,}$")


def _whatsapp_normalize(raw: str) -> str | None:
    trimmed = re.sub(r"^whatsapp:", "", raw.strip(), flags=re.IGNORECASE)
    candidate = strip_target_prefixes(trimmed)
    if not candidate:
        return None
    if "@" in candidate:
        return candidate.lower()
    if _PHONE_RE.match(candidate):
        digits = re.sub(r"\D", "", candidate)
        if len(digits) >= 3:
            return f"{digits}@s.whatsapp.net"
    return None


def _whatsapp_looks_like_id(value: str) -> bool:
    candidate = strip_target_prefixes(value)
    return (
        "@" in candidate
        or re.fullmatch(r"\+?\d{3,}", candidate) is not None
        or candidate.lower().endswith("@g.us")
    )


def _whatsapp_entry_id(entry: DirectoryEntry) -> str:
    return _whatsapp_normalize(entry.id) or entry.id.strip()


TARGET_RULES: dict[str, TargetRules] = {
    "discord": TargetRules(
        normalize=_discord_normalize,
        looks_like_id=_discord_looks_like_id,
        format_entry_id=_prefixed_entry_id,
    ),
    "slack": TargetRules(
        normalize=_slack_normalize,
        looks_like_id=_slack_looks_like_id,
        preserve_case=_slack_preserve_case,
        format_entry_id=_prefixed_entry_id,
    ),
    "msteams": TargetRules(
        normalize=_msteams_normalize,
        looks_like_id=_msteams_looks_like_id,
    ),
    "telegram": TargetRules(
        normalize=_telegram_normalize,
        looks_like_id=_telegram_looks_like_id,
    ),
    "whatsapp": TargetRules(
        normalize=_whatsapp_normalize,
        looks_like_id=_whatsapp_looks_like_id,
        format_entry_id=_whatsapp_entry_id,
    ),
}

# Channels that are valid hints even without a dedicated rule set.
KNOWN_CHANNELS: frozenset[str] = frozenset({*TARGET_RULES, "signal", "imessage"})


def rules_for(channel: str) -> TargetRules:
    return TARGET_RULES.get(channel, DEFAULT_RULES)


def normalize_for_channel(channel: str, raw: str) -> str:
    """Platform-normalized form of *raw*, falling back to *raw* itself."""
    return rules_for(channel).normalize(raw) or raw
