"""Pick the channel an action runs on.

An explicit hint wins (it must name a known channel).  Without a hint the
single configured channel is used; zero or several configured channels are
an error the caller has to resolve by passing ``channel``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from courier.errors import ChannelResolutionError
from courier.outbound.target_rules import KNOWN_CHANNELS

if TYPE_CHECKING:
    from courier.config import Settings


def list_configured_channels(config: Settings) -> list[str]:
    return config.enabled_channels()


def resolve_channel_selection(config: Settings, hint: str | None = None) -> str:
    configured = list_configured_channels(config)
    normalized = (hint or "").strip().lower()
    if normalized:
        if normalized not in KNOWN_CHANNELS and normalized not in config.channels:
            raise ChannelResolutionError(f"Unknown channel: {hint}")
        return normalized

    if len(configured) == 1:
        return configured[0]
    if not configured:
        raise ChannelResolutionError("Channel is required (no configured channels detected).")
    raise ChannelResolutionError(
        f"Channel is required when multiple channels are configured: {', '.join(configured)}"
    )
