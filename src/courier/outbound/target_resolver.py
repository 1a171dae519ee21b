"""Resolve human-supplied destinations into canonical platform targets.

Resolution order:

1. Whitespace-normalize the raw input; empty → "Target is required".
2. Detect the target kind (``@``/mention/``user:`` → user, else group).
3. If the platform-normalized input already looks like a native id, return
   it straight away (``source="normalized"``) with no directory round trip.
4. Otherwise search the channel directory (through the TTL cache, with one
   escalation to a live listing when the cached listing is empty) and match
   by exact or substring equality on id / name / handle.

Exactly one match resolves; several matches fail as ambiguous with the full
candidate list.  The resolver never picks a "best" match on its own.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol

from courier.errors import AmbiguousTargetError, TargetRequiredError, UnknownTargetError
from courier.logger import logger
from courier.outbound.directory_cache import (
    CacheSource,
    DirectoryCache,
    build_directory_cache_key,
)
from courier.outbound.target_rules import (
    normalize_for_channel,
    normalize_target_input,
    rules_for,
    strip_target_prefixes,
)
from courier.types import DirectoryEntry, ResolvedTarget, ResolveResult

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.outbound.deps import DirectoryProvider
    from courier.types import DirectoryEntryKind, TargetKind

_MENTION_PREFIX_RE = re.compile(r"^<@!?")


class DirectorySource(Protocol):
    def directory_for(self, channel: str) -> DirectoryProvider | None: ...


def detect_target_kind(raw: str, preferred: TargetKind | None = None) -> TargetKind:
    if preferred:
        return preferred
    trimmed = raw.strip()
    if not trimmed:
        return "group"
    lowered = trimmed.lower()
    if trimmed.startswith("@") or _MENTION_PREFIX_RE.match(trimmed) or lowered.startswith("user:"):
        return "user"
    return "group"


def _normalize_query(value: str) -> str:
    return value.strip().lower()


class TargetResolver:
    """Channel target resolution backed by a shared ``DirectoryCache``."""

    def __init__(
        self,
        directories: DirectorySource,
        cache: DirectoryCache[list[DirectoryEntry]] | None = None,
    ) -> None:
        self._directories = directories
        self.cache: DirectoryCache[list[DirectoryEntry]] = (
            cache if cache is not None else DirectoryCache()
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(
        self,
        config: Settings,
        channel: str,
        raw_input: str,
        account_id: str | None = None,
        preferred_kind: TargetKind | None = None,
    ) -> ResolveResult:
        raw = normalize_target_input(raw_input)
        if not raw:
            return ResolveResult.failure(TargetRequiredError("Target is required"))

        kind = detect_target_kind(raw, preferred_kind)
        rules = rules_for(channel)
        normalized = normalize_for_channel(channel, raw)
        if rules.looks_like_id(normalized):
            logger.debug("Target looks like an id", channel=channel, target=raw)
            return ResolveResult.success(
                ResolvedTarget(
                    to=rules.preserve_case(raw, normalized),
                    kind=kind,
                    display=strip_target_prefixes(raw),
                    source="normalized",
                )
            )

        query = strip_target_prefixes(raw)
        entries = await self._get_entries(
            config,
            channel,
            account_id,
            "user" if kind == "user" else "group",
            query=query,
            prefer_live_on_miss=True,
        )
        matches = [e for e in entries if self._matches(channel, e, query)]

        if len(matches) == 1:
            entry = matches[0]
            return ResolveResult.success(
                ResolvedTarget(
                    to=rules.format_entry_id(entry),
                    kind=kind,
                    display=entry.name or entry.handle or strip_target_prefixes(entry.id),
                    source="directory",
                )
            )
        if matches:
            return ResolveResult.failure(
                AmbiguousTargetError(
                    f'Ambiguous target "{raw}". Provide a unique name or an explicit id.',
                    candidates=matches,
                ),
                candidates=matches,
            )
        return ResolveResult.failure(UnknownTargetError(f'Unknown target "{raw}" for {channel}.'))

    async def lookup_display(
        self,
        config: Settings,
        channel: str,
        target_id: str,
        account_id: str | None = None,
    ) -> str | None:
        """Display label for a known id, from the cached group listing only."""
        normalized = normalize_for_channel(channel, target_id)
        entries = await self._get_entries(
            config, channel, account_id, "group", query=None, prefer_live_on_miss=False
        )
        rules = rules_for(channel)
        for entry in entries:
            if normalize_for_channel(channel, rules.format_entry_id(entry)) == normalized:
                return entry.name or entry.handle
        return None

    def reset(self, channel: str | None = None, account_id: str | None = None) -> None:
        """Drop cached listings for all channels, one channel, or one channel+account.

        Removes both ``cache`` and ``live`` keys for the scope.
        """
        if not channel:
            self.cache.clear()
            return
        channel_prefix = f"{channel}:"
        account_prefix = f"{channel}:{account_id or 'default'}:"

        def _match(key: str) -> bool:
            if not key.startswith(channel_prefix):
                return False
            if not account_id:
                return True
            return key.startswith(account_prefix)

        self.cache.clear_matching(_match)

    # ------------------------------------------------------------------
    # Directory access
    # ------------------------------------------------------------------

    async def _get_entries(
        self,
        config: Settings,
        channel: str,
        account_id: str | None,
        kind: DirectoryEntryKind,
        *,
        query: str | None,
        prefer_live_on_miss: bool,
    ) -> list[DirectoryEntry]:
        cache_key = build_directory_cache_key(channel, account_id, kind, "cache")
        cached = self.cache.get(cache_key, config)
        if cached is not None:
            logger.debug("Directory cache hit", key=cache_key, entries=len(cached))
            return cached

        entries = await self._list_entries(config, channel, account_id, kind, query, "cache")
        if entries or not prefer_live_on_miss:
            self.cache.set(cache_key, entries, config)
            return entries

        live_key = build_directory_cache_key(channel, account_id, kind, "live")
        cached_live = self.cache.get(live_key, config)
        if cached_live is not None:
            return cached_live
        logger.debug("Directory listing empty, escalating to live", channel=channel, kind=kind)
        live_entries = await self._list_entries(config, channel, account_id, kind, query, "live")
        self.cache.set(live_key, live_entries, config)
        return live_entries

    async def _list_entries(
        self,
        config: Settings,
        channel: str,
        account_id: str | None,
        kind: DirectoryEntryKind,
        query: str | None,
        source: CacheSource,
    ) -> list[DirectoryEntry]:
        directory = self._directories.directory_for(channel)
        if directory is None:
            return []
        base = "list_peers" if kind == "user" else "list_groups"
        fn = getattr(directory, base, None)
        if source == "live":
            fn = getattr(directory, f"{base}_live", None) or fn
        if fn is None:
            return []
        return list(await fn(config=config, account_id=account_id, query=query))

    def _matches(self, channel: str, entry: DirectoryEntry, query: str) -> bool:
        q = _normalize_query(query)
        if not q:
            return False
        entry_id = strip_target_prefixes(rules_for(channel).format_entry_id(entry))
        name = strip_target_prefixes(entry.name) if entry.name else ""
        handle = strip_target_prefixes(entry.handle) if entry.handle else ""
        candidates = [_normalize_query(v) for v in (entry_id, name, handle)]
        return any(c and (c == q or q in c) for c in candidates)
