"""Shared test helpers for courier."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from courier.outbound.deps import DispatchResult
from courier.types import DirectoryEntry

# ---------------------------------------------------------------------------
# Shared helpers (plain functions/classes, not fixtures, importable by test files)
# ---------------------------------------------------------------------------


def make_settings(channels: Any = (), **overrides):
    """Create a Settings object without touching config.toml or the environment.

    ``channels`` is either an iterable of channel ids (each gets a default
    ``ChannelConfig``) or a ready ``{id: ChannelConfig}`` mapping.

    Usage::

        s = make_settings(("slack", "discord"))
        s = make_settings(("slack",), tools=make_tools(broadcast=BroadcastConfig(enabled=False)))
    """
    from courier.config import ChannelConfig, LoggingConfig, Settings, ToolsConfig

    if isinstance(channels, dict):
        channel_map = dict(channels)
    else:
        channel_map = {name: ChannelConfig() for name in channels}

    defaults = {
        "channels": channel_map,
        "tools": ToolsConfig(),
        "logging": LoggingConfig(),
        "plugins": {},
    }
    defaults.update(overrides)
    return Settings.model_construct(**defaults)


def make_tools(*, broadcast=None, cross_context=None):
    from courier.config import (
        BroadcastConfig,
        CrossContextConfig,
        MessageToolConfig,
        ToolsConfig,
    )

    return ToolsConfig(
        message=MessageToolConfig(
            broadcast=broadcast or BroadcastConfig(),
            cross_context=cross_context or CrossContextConfig(),
        )
    )


def group(id: str, name: str | None = None, handle: str | None = None) -> DirectoryEntry:
    return DirectoryEntry(id=id, kind="group", name=name, handle=handle)


def peer(id: str, name: str | None = None, handle: str | None = None) -> DirectoryEntry:
    return DirectoryEntry(id=id, kind="user", name=name, handle=handle)


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDirectory:
    """Directory provider returning fixed listings and recording every call."""

    def __init__(
        self, groups=(), peers=(), *, error: Exception | None = None, delay: float = 0
    ) -> None:
        self.groups = list(groups)
        self.peers = list(peers)
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, str | None, str | None]] = []

    async def list_groups(self, *, config, account_id, query):
        self.calls.append(("list_groups", account_id, query))
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.groups)

    async def list_peers(self, *, config, account_id, query):
        self.calls.append(("list_peers", account_id, query))
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.peers)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class LiveFakeDirectory(FakeDirectory):
    """Directory whose batched listing can differ from its live listing."""

    def __init__(self, groups=(), peers=(), *, live_groups=(), live_peers=()) -> None:
        super().__init__(groups, peers)
        self.live_groups = list(live_groups)
        self.live_peers = list(live_peers)

    async def list_groups_live(self, *, config, account_id, query):
        self.calls.append(("list_groups_live", account_id, query))
        return list(self.live_groups)

    async def list_peers_live(self, *, config, account_id, query):
        self.calls.append(("list_peers_live", account_id, query))
        return list(self.live_peers)


class FakeDeps:
    """In-memory ``OutboundDeps``: records requests, optionally fails or delays sends."""

    def __init__(self, directories=None, *, action_result=None) -> None:
        self.directories: dict[str, Any] = dict(directories or {})
        self.action_result = action_result
        self.sent: list = []
        self.polls: list = []
        self.actions: list = []
        self.fail_for: set[tuple[str, str]] = set()
        self.delays: dict[str, float] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def directory_for(self, channel: str):
        return self.directories.get(channel)

    async def send_message(self, config, request):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(request.to, 0))
            if (request.channel, request.to) in self.fail_for:
                raise RuntimeError(f"send failed for {request.to}")
            self.sent.append(request)
            return DispatchResult(
                handled_by="core",
                payload={"ok": True, "to": request.to},
                raw={"messageId": f"m{len(self.sent)}"},
            )
        finally:
            self.in_flight -= 1

    async def send_poll(self, config, request):
        self.polls.append(request)
        return DispatchResult(
            handled_by="core", payload={"ok": True, "to": request.to}, raw={"pollId": "p1"}
        )

    async def dispatch_action(self, config, request):
        self.actions.append(request)
        return self.action_result


@pytest.fixture(autouse=True)
def _reset_settings_singleton():
    from courier.config import reset_settings

    reset_settings()
    yield
    reset_settings()
