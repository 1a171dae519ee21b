"""Cross-context policy: guards messages leaving the current conversation.

When an action runs on behalf of a conversation (``ToolContext``), its
destination is compared against the conversation it is bound to:

  - different provider  → denied unless ``allow_across_providers``
  - same provider, different target → denied unless ``allow_within_provider``
  - same target → always allowed

Sends and polls that do cross contexts (and are allowed) get a marker so
recipients can tell where the message originated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from courier.errors import PolicyDeniedError
from courier.outbound.action_spec import MessageAction, parse_action
from courier.outbound.target_rules import normalize_for_channel, strip_target_prefixes

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.outbound.target_resolver import TargetResolver
    from courier.types import ToolContext

_MARKER_ACTIONS = frozenset({MessageAction.SEND, MessageAction.POLL})

# Channels that render rich embeds; markers go into an embed there.
_EMBED_CHANNELS = frozenset({"discord"})


@dataclass
class PolicyDecision:
    """Result of policy evaluation."""

    allowed: bool
    reason: str | None = None


@dataclass
class CrossContextDecoration:
    prefix: str
    suffix: str = ""
    embeds: list[dict[str, Any]] | None = None


@dataclass
class AppliedDecoration:
    message: str
    embeds: list[dict[str, Any]] | None = None


def _comparable(channel: str, target: str) -> str:
    return strip_target_prefixes(normalize_for_channel(channel, target)).lower()


def _render_marker(template: str, values: dict[str, str]) -> str:
    """Fill ``{channel}`` and ``{label}``; any other braces are kept literally."""
    for key, value in values.items():
        template = template.replace("{" + key + "}", value)
    return template


def _read_target(params: dict[str, Any]) -> str:
    for key in ("to", "channelId"):
        value = params.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


class CrossContextPolicy:
    """Default policy engine, driven by ``[tools.message.cross_context]``."""

    def __init__(self, resolver: TargetResolver | None = None) -> None:
        self._resolver = resolver

    def evaluate(
        self,
        channel: str,
        action: str,
        params: dict[str, Any],
        tool_context: ToolContext | None,
        config: Settings,
    ) -> PolicyDecision:
        current_id = (tool_context.current_channel_id or "").strip() if tool_context else ""
        if not current_id:
            return PolicyDecision(allowed=True)
        target = _read_target(params)
        if not target:
            return PolicyDecision(allowed=True)

        rules = config.tools.message.cross_context
        current_provider = (tool_context.current_channel_provider or "").strip().lower()
        if current_provider and current_provider != channel:
            if rules.allow_across_providers:
                return PolicyDecision(allowed=True)
            return PolicyDecision(
                allowed=False,
                reason=(
                    f'action={action} target provider "{channel}" while bound to '
                    f'"{current_provider}"'
                ),
            )

        if rules.allow_within_provider:
            return PolicyDecision(allowed=True)
        if _comparable(channel, target) == _comparable(channel, current_id):
            return PolicyDecision(allowed=True)
        return PolicyDecision(
            allowed=False,
            reason=f'action={action} target "{target}" while bound to "{current_id}"',
        )

    def enforce(
        self,
        channel: str,
        action: str,
        params: dict[str, Any],
        tool_context: ToolContext | None,
        config: Settings,
    ) -> None:
        decision = self.evaluate(channel, action, params, tool_context, config)
        if not decision.allowed:
            raise PolicyDeniedError(f"Cross-context messaging denied: {decision.reason}.")

    def should_apply_marker(self, action: str) -> bool:
        return parse_action(action) in _MARKER_ACTIONS

    async def build_decoration(
        self,
        config: Settings,
        channel: str,
        target: str,
        tool_context: ToolContext,
        account_id: str | None = None,
    ) -> CrossContextDecoration | None:
        marker = config.tools.message.cross_context.marker
        if not marker.enabled:
            return None
        current_id = (tool_context.current_channel_id or "").strip()
        if not current_id:
            return None
        origin = (tool_context.current_channel_provider or channel).strip().lower()
        if origin == channel and _comparable(channel, target) == _comparable(channel, current_id):
            return None

        label = None
        if self._resolver is not None:
            label = await self._resolver.lookup_display(config, origin, current_id, account_id)
        label = label or strip_target_prefixes(current_id)

        values = {"channel": origin, "label": label}
        embeds = None
        if channel in _EMBED_CHANNELS:
            embeds = [{"description": f"From {origin} {label}"}]
        return CrossContextDecoration(
            prefix=_render_marker(marker.prefix, values),
            suffix=_render_marker(marker.suffix, values),
            embeds=embeds,
        )


def apply_decoration(
    message: str, decoration: CrossContextDecoration, *, prefer_embeds: bool
) -> AppliedDecoration:
    if prefer_embeds and decoration.embeds:
        return AppliedDecoration(message=message, embeds=decoration.embeds)
    return AppliedDecoration(message=f"{decoration.prefix}{message}{decoration.suffix}")
