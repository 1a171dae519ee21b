"""Pluggy hook specifications for courier plugins.

All hooks use the "courier" namespace and are validated by pluggy at
registration time.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("courier")


class CourierSpec:
    """Hook specifications for courier plugins."""

    @hookspec
    def courier_channel_adapter(self) -> Any | None:
        """Provide the outbound adapter for one chat platform.

        Returns:
            Adapter object with:
                - name (str): channel id (e.g., "slack", "discord")
                - directory (optional): object with async ``list_peers`` /
                  ``list_groups`` (and optionally ``*_live`` variants)
                - send(config, SendRequest) (optional): core send path
                - poll(config, PollRequest) (optional): core poll path
                - handle_action(config, PluginActionRequest) (optional):
                  returns a ToolResult, or None when the action is unhandled
            Or None if this plugin doesn't provide one.
        """
