"""Data models for courier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.errors import CourierError
    from courier.outbound.deps import OutboundDeps

TargetMode: TypeAlias = Literal["to", "channelId", "none"]
DirectoryEntryKind: TypeAlias = Literal["user", "group"]
TargetKind: TypeAlias = Literal["user", "group", "channel"]
TargetSource: TypeAlias = Literal["normalized", "directory"]
HandledBy: TypeAlias = Literal["plugin", "core", "dry-run"]


# --- Directory & resolution ---


@dataclass(frozen=True)
class DirectoryEntry:
    id: str  # Platform-native identifier (may carry a prefix like "user:")
    kind: DirectoryEntryKind = "group"
    name: str | None = None
    handle: str | None = None


@dataclass(frozen=True)
class ResolvedTarget:
    to: str  # Platform-ready destination, prefixes applied per platform convention
    kind: TargetKind
    source: TargetSource
    display: str | None = None


@dataclass
class ResolveResult:
    """Outcome of a target resolution: a target, or an error (+ candidates)."""

    target: ResolvedTarget | None = None
    error: CourierError | None = None
    candidates: list[DirectoryEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.target is not None

    @classmethod
    def success(cls, target: ResolvedTarget) -> ResolveResult:
        return cls(target=target)

    @classmethod
    def failure(
        cls, error: CourierError, candidates: list[DirectoryEntry] | None = None
    ) -> ResolveResult:
        return cls(error=error, candidates=list(candidates or []))


# --- Request side ---


@dataclass(frozen=True)
class ToolContext:
    """Conversation the caller is currently bound to (for cross-context checks)."""

    current_channel_id: str | None = None
    current_channel_provider: str | None = None
    current_thread_ts: str | None = None


@dataclass(frozen=True)
class GatewayOptions:
    """Transport descriptor forwarded untouched to the dispatch collaborators."""

    client_name: str
    mode: str
    url: str | None = None
    token: str | None = None
    timeout_ms: int | None = None
    client_display_name: str | None = None


@dataclass(frozen=True)
class ActionRequest:
    config: Settings
    action: str
    params: dict[str, Any]
    default_account_id: str | None = None
    tool_context: ToolContext | None = None
    gateway: GatewayOptions | None = None
    deps: OutboundDeps | None = None  # Overrides the runner's dispatch collaborators
    session_key: str | None = None
    agent_id: str | None = None
    dry_run: bool | None = None


@dataclass
class ResolvedActionContext:
    config: Settings
    params: dict[str, Any]  # Private working copy, never the caller's dict
    channel: str
    account_id: str | None
    dry_run: bool
    gateway: GatewayOptions | None
    request: ActionRequest


@dataclass
class ToolResult:
    """Result returned by a channel plugin's action handler."""

    content: list[dict[str, Any]] | None = None
    details: Any = None


# --- Result side (tagged union, discriminated by ``kind``) ---


@dataclass
class SendActionResult:
    channel: str
    to: str
    handled_by: HandledBy
    payload: Any
    dry_run: bool
    tool_result: ToolResult | None = None
    send_result: Any = None
    kind: Literal["send"] = field(default="send", init=False)
    action: Literal["send"] = field(default="send", init=False)


@dataclass
class PollActionResult:
    channel: str
    to: str
    handled_by: HandledBy
    payload: Any
    dry_run: bool
    tool_result: ToolResult | None = None
    poll_result: Any = None
    kind: Literal["poll"] = field(default="poll", init=False)
    action: Literal["poll"] = field(default="poll", init=False)


@dataclass
class PluginActionResult:
    channel: str
    action: str
    handled_by: HandledBy
    payload: Any
    dry_run: bool
    tool_result: ToolResult | None = None
    kind: Literal["action"] = field(default="action", init=False)


@dataclass
class BroadcastOutcome:
    channel: str
    to: str
    ok: bool
    error: str | None = None
    result: Any = None


@dataclass
class BroadcastActionResult:
    channel: str
    handled_by: HandledBy
    results: list[BroadcastOutcome]
    dry_run: bool
    kind: Literal["broadcast"] = field(default="broadcast", init=False)
    action: Literal["broadcast"] = field(default="broadcast", init=False)

    @property
    def payload(self) -> dict[str, Any]:
        return {
            "results": [
                {k: v for k, v in vars(o).items() if v is not None} for o in self.results
            ]
        }


ActionResult: TypeAlias = SendActionResult | BroadcastActionResult | PollActionResult | PluginActionResult


def get_tool_result(result: ActionResult) -> ToolResult | None:
    """Return the plugin tool result carried by *result*, if any."""
    return getattr(result, "tool_result", None)
