"""Collaborator interfaces for the outbound pipeline.

The orchestrator never talks to a platform API itself.  Directory queries
and the actual send/poll/action dispatch go through an ``OutboundDeps``
implementation (in production :class:`courier.plugins.adapters.PluginOutboundDeps`,
in tests a small fake).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.types import DirectoryEntry, GatewayOptions, HandledBy, ToolContext, ToolResult


class DirectoryProvider(Protocol):
    """Per-channel directory listing.

    Providers may additionally implement ``list_peers_live`` /
    ``list_groups_live`` (same signature) to bypass any batched snapshot.
    They are not part of the protocol; call sites look them up with getattr.
    """

    async def list_peers(
        self, *, config: Settings, account_id: str | None, query: str | None
    ) -> list[DirectoryEntry]: ...

    async def list_groups(
        self, *, config: Settings, account_id: str | None, query: str | None
    ) -> list[DirectoryEntry]: ...


@dataclass(frozen=True)
class MirrorTarget:
    """Session the sent message should also be recorded against."""

    session_key: str
    agent_id: str | None = None


@dataclass
class SendRequest:
    channel: str
    to: str
    message: str
    params: dict[str, Any]
    media_url: str | None = None
    gif_playback: bool = False
    best_effort: bool | None = None
    account_id: str | None = None
    gateway: GatewayOptions | None = None
    tool_context: ToolContext | None = None
    mirror: MirrorTarget | None = None


@dataclass
class PollRequest:
    channel: str
    to: str
    question: str
    options: list[str]
    max_selections: int
    params: dict[str, Any]
    duration_hours: int | None = None
    account_id: str | None = None
    gateway: GatewayOptions | None = None
    tool_context: ToolContext | None = None


@dataclass
class PluginActionRequest:
    channel: str
    action: str
    params: dict[str, Any]
    account_id: str | None = None
    gateway: GatewayOptions | None = None
    tool_context: ToolContext | None = None
    dry_run: bool = False


@dataclass
class DispatchResult:
    """What a send/poll dispatch hands back to the orchestrator."""

    handled_by: HandledBy
    payload: Any = None
    tool_result: ToolResult | None = None
    raw: Any = None  # Transport-level result (message id etc.)


class OutboundDeps(Protocol):
    """Everything the orchestrator needs from the outside world."""

    def directory_for(self, channel: str) -> DirectoryProvider | None: ...

    async def send_message(self, config: Settings, request: SendRequest) -> DispatchResult: ...

    async def send_poll(self, config: Settings, request: PollRequest) -> DispatchResult: ...

    async def dispatch_action(
        self, config: Settings, request: PluginActionRequest
    ) -> ToolResult | None:
        """Run a generic action. Returns None when no plugin handled it."""
        ...
