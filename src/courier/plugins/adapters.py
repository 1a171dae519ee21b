"""Bridge from registered channel adapters to the outbound collaborators.

``PluginOutboundDeps`` implements :class:`courier.outbound.deps.OutboundDeps`
on top of whatever adapters the plugin manager collected.  For send and
poll the adapter's own ``handle_action`` gets the first chance (result is
tagged ``plugin``); otherwise its ``send``/``poll`` transport is used
(tagged ``core``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from courier.errors import UnsupportedActionError
from courier.outbound.deps import DispatchResult, PluginActionRequest
from courier.outbound.payload import extract_tool_payload
from courier.plugins import collect_hook_results

if TYPE_CHECKING:
    import pluggy

    from courier.config import Settings
    from courier.outbound.deps import DirectoryProvider, PollRequest, SendRequest
    from courier.types import ToolResult


@runtime_checkable
class ChannelAdapter(Protocol):
    name: str

    # Optional members, looked up with hasattr/getattr:
    #   directory: DirectoryProvider
    #   async send(config, SendRequest) -> Any
    #   async poll(config, PollRequest) -> Any
    #   async handle_action(config, PluginActionRequest) -> ToolResult | None


def _is_adapter(obj: Any) -> bool:
    return isinstance(obj, ChannelAdapter) and isinstance(obj.name, str) and bool(obj.name)


class PluginOutboundDeps:
    def __init__(self, adapters: list[Any]) -> None:
        self._adapters: dict[str, Any] = {a.name: a for a in adapters}

    @classmethod
    def from_plugin_manager(cls, pm: pluggy.PluginManager | None = None) -> PluginOutboundDeps:
        adapters = collect_hook_results(
            "courier_channel_adapter", _is_adapter, "channel adapter", pm=pm
        )
        return cls(adapters)

    @property
    def channel_names(self) -> list[str]:
        return sorted(self._adapters)

    def adapter_for(self, channel: str) -> Any | None:
        return self._adapters.get(channel)

    def directory_for(self, channel: str) -> DirectoryProvider | None:
        adapter = self._adapters.get(channel)
        return getattr(adapter, "directory", None) if adapter is not None else None

    async def send_message(self, config: Settings, request: SendRequest) -> DispatchResult:
        adapter = self._require(request.channel)
        handled = await self._try_plugin(
            adapter,
            config,
            PluginActionRequest(
                channel=request.channel,
                action="send",
                params={
                    **request.params,
                    "to": request.to,
                    "message": request.message,
                    "media": request.media_url,
                },
                account_id=request.account_id,
                gateway=request.gateway,
                tool_context=request.tool_context,
            ),
        )
        if handled is not None:
            return handled
        if not hasattr(adapter, "send"):
            raise UnsupportedActionError(f"Channel {request.channel} cannot send messages.")
        raw = await adapter.send(config, request)
        return DispatchResult(handled_by="core", payload=raw, raw=raw)

    async def send_poll(self, config: Settings, request: PollRequest) -> DispatchResult:
        adapter = self._require(request.channel)
        handled = await self._try_plugin(
            adapter,
            config,
            PluginActionRequest(
                channel=request.channel,
                action="poll",
                params={
                    **request.params,
                    "to": request.to,
                    "pollQuestion": request.question,
                    "pollOption": request.options,
                    "maxSelections": request.max_selections,
                },
                account_id=request.account_id,
                gateway=request.gateway,
                tool_context=request.tool_context,
            ),
        )
        if handled is not None:
            return handled
        if not hasattr(adapter, "poll"):
            raise UnsupportedActionError(f"Channel {request.channel} does not support polls.")
        raw = await adapter.poll(config, request)
        return DispatchResult(handled_by="core", payload=raw, raw=raw)

    async def dispatch_action(
        self, config: Settings, request: PluginActionRequest
    ) -> ToolResult | None:
        adapter = self._adapters.get(request.channel)
        if adapter is None or not hasattr(adapter, "handle_action"):
            return None
        return await adapter.handle_action(config, request)

    def _require(self, channel: str) -> Any:
        adapter = self._adapters.get(channel)
        if adapter is None:
            raise UnsupportedActionError(f"No channel adapter registered for {channel}.")
        return adapter

    async def _try_plugin(
        self, adapter: Any, config: Settings, request: PluginActionRequest
    ) -> DispatchResult | None:
        if not hasattr(adapter, "handle_action"):
            return None
        handled = await adapter.handle_action(config, request)
        if handled is None:
            return None
        return DispatchResult(
            handled_by="plugin", payload=extract_tool_payload(handled), tool_result=handled
        )
