"""Message action orchestrator: one entry point for every outbound action.

Pipeline for a single (non-broadcast) action::

    copy params → parse buttons → map ``target`` → require target
      → resolve channel / account / dry-run → resolve target
      → cross-context policy → dispatch (send | poll | plugin action)

Every validation, resolution, or policy error propagates to the caller
unchanged.  ``broadcast`` is handed to :mod:`courier.outbound.broadcast`
right after the buttons step.

Dry-run requests go through the full pipeline and only skip the final
dispatch, so they fail on exactly the same inputs a live request would.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from courier.errors import TargetRequiredError, UnsupportedActionError, ValidationError
from courier.logger import logger
from courier.outbound.action_spec import MessageAction, action_requires_target, parse_action
from courier.outbound.broadcast import run_broadcast
from courier.outbound.channel_selection import resolve_channel_selection
from courier.outbound.deps import MirrorTarget, PluginActionRequest, PollRequest, SendRequest
from courier.outbound.directives import parse_reply_directives
from courier.outbound.params import (
    apply_target_to_params,
    parse_buttons_param,
    read_boolean_param,
    read_number_param,
    read_string_array_param,
    read_string_param,
)
from courier.outbound.payload import extract_tool_payload
from courier.outbound.policy import CrossContextPolicy, apply_decoration
from courier.outbound.target_resolver import TargetResolver
from courier.types import (
    PluginActionResult,
    PollActionResult,
    ResolvedActionContext,
    SendActionResult,
)

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.outbound.deps import OutboundDeps
    from courier.types import ActionRequest, ActionResult


def _has_text(params: dict[str, Any], key: str) -> bool:
    value = params.get(key)
    return isinstance(value, str) and bool(value.strip())


class MessageActionRunner:
    """Validates, resolves, and routes message actions to their handlers."""

    def __init__(
        self,
        deps: OutboundDeps,
        *,
        resolver: TargetResolver | None = None,
        policy: CrossContextPolicy | None = None,
    ) -> None:
        self.deps = deps
        self.resolver = resolver if resolver is not None else TargetResolver(deps)
        self.policy = policy if policy is not None else CrossContextPolicy(self.resolver)

    async def run(self, request: ActionRequest) -> ActionResult:
        config = request.config
        params = dict(request.params)
        parse_buttons_param(params)

        action = parse_action(request.action)
        if action is MessageAction.BROADCAST:
            return await run_broadcast(self, request, params)

        apply_target_to_params(action, params)
        if action_requires_target(action) and not (
            _has_text(params, "to") or _has_text(params, "channelId")
        ):
            raise TargetRequiredError(f"Action {action} requires a target.")

        channel = resolve_channel_selection(config, read_string_param(params, "channel"))
        account_id = read_string_param(params, "accountId") or request.default_account_id
        if request.dry_run is not None:
            dry_run = bool(request.dry_run)
        else:
            dry_run = bool(read_boolean_param(params, "dryRun"))

        await self._resolve_action_target(config, channel, params, account_id)
        self.policy.enforce(channel, action, params, request.tool_context, config)

        ctx = ResolvedActionContext(
            config=config,
            params=params,
            channel=channel,
            account_id=account_id,
            dry_run=dry_run,
            gateway=request.gateway,
            request=request,
        )
        logger.info(
            "Dispatching message action",
            action=str(action),
            channel=channel,
            account=account_id,
            dry_run=dry_run,
        )

        match action:
            case MessageAction.SEND:
                return await self._handle_send(ctx)
            case MessageAction.POLL:
                return await self._handle_poll(ctx)
            case _:
                return await self._handle_plugin_action(ctx, action)

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    async def _resolve_action_target(
        self,
        config: Settings,
        channel: str,
        params: dict[str, Any],
        account_id: str | None,
    ) -> None:
        to_raw = params["to"].strip() if _has_text(params, "to") else ""
        if to_raw:
            resolved = await self.resolver.resolve(config, channel, to_raw, account_id)
            if resolved.target is None:
                raise resolved.error
            params["to"] = resolved.target.to

        channel_id_raw = params["channelId"].strip() if _has_text(params, "channelId") else ""
        if channel_id_raw:
            resolved = await self.resolver.resolve(
                config, channel, channel_id_raw, account_id, preferred_kind="group"
            )
            if resolved.target is None:
                raise resolved.error
            if resolved.target.kind == "user":
                raise ValidationError(f'Channel id "{channel_id_raw}" resolved to a user target.')
            to = resolved.target.to
            lowered = to.lower()
            for prefix in ("channel:", "group:"):
                if lowered.startswith(prefix):
                    to = to[len(prefix) :]
                    break
            params["channelId"] = to

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _decorate(self, ctx: ResolvedActionContext, action: MessageAction, to: str) -> str:
        """Apply the cross-context marker to ``params["message"]`` when needed."""
        params = ctx.params
        message = params.get("message") if isinstance(params.get("message"), str) else ""
        tool_context = ctx.request.tool_context
        if tool_context is None or not self.policy.should_apply_marker(action):
            return message
        decoration = await self.policy.build_decoration(
            ctx.config, ctx.channel, to, tool_context, ctx.account_id
        )
        if decoration is None:
            return message
        applied = apply_decoration(message, decoration, prefer_embeds=True)
        params["message"] = applied.message
        if applied.embeds:
            params["embeds"] = applied.embeds
        return applied.message

    async def _handle_send(self, ctx: ResolvedActionContext) -> SendActionResult:
        params = ctx.params
        to = read_string_param(params, "to", required=True)
        media_hint = read_string_param(params, "media", trim=False)
        message = (
            read_string_param(
                params, "message", required=not media_hint, allow_empty=True, trim=False
            )
            or ""
        )

        parsed = parse_reply_directives(message)
        params["message"] = parsed.text
        if not params.get("replyTo") and parsed.reply_to_id:
            params["replyTo"] = parsed.reply_to_id
        if parsed.reply_to_current:
            params["replyToCurrent"] = True
        if not params.get("media") and parsed.media_url:
            params["media"] = parsed.media_url

        message = await self._decorate(ctx, MessageAction.SEND, to)

        media_url = read_string_param(params, "media", trim=False)
        gif_playback = read_boolean_param(params, "gifPlayback") or False
        best_effort = read_boolean_param(params, "bestEffort")

        if ctx.dry_run:
            return SendActionResult(
                channel=ctx.channel,
                to=to,
                handled_by="dry-run",
                payload={"ok": True, "dryRun": True, "channel": ctx.channel, "to": to},
                dry_run=True,
            )

        request = ctx.request
        mirror = None
        if request.session_key:
            mirror = MirrorTarget(session_key=request.session_key, agent_id=request.agent_id)
        deps = request.deps or self.deps
        sent = await deps.send_message(
            ctx.config,
            SendRequest(
                channel=ctx.channel,
                to=to,
                message=message,
                params=params,
                media_url=media_url or None,
                gif_playback=gif_playback,
                best_effort=best_effort,
                account_id=ctx.account_id,
                gateway=ctx.gateway,
                tool_context=request.tool_context,
                mirror=mirror,
            ),
        )
        return SendActionResult(
            channel=ctx.channel,
            to=to,
            handled_by=sent.handled_by,
            payload=sent.payload,
            dry_run=False,
            tool_result=sent.tool_result,
            send_result=sent.raw,
        )

    async def _handle_poll(self, ctx: ResolvedActionContext) -> PollActionResult:
        params = ctx.params
        to = read_string_param(params, "to", required=True)
        question = read_string_param(params, "pollQuestion", required=True)
        options = read_string_array_param(params, "pollOption", required=True) or []
        if len(options) < 2:
            raise ValidationError("pollOption requires at least two values")
        allow_multiselect = read_boolean_param(params, "pollMulti") or False
        duration_hours = read_number_param(params, "pollDurationHours", integer=True)
        max_selections = max(2, len(options)) if allow_multiselect else 1

        await self._decorate(ctx, MessageAction.POLL, to)

        if ctx.dry_run:
            return PollActionResult(
                channel=ctx.channel,
                to=to,
                handled_by="dry-run",
                payload={"ok": True, "dryRun": True, "channel": ctx.channel, "to": to},
                dry_run=True,
            )

        request = ctx.request
        deps = request.deps or self.deps
        polled = await deps.send_poll(
            ctx.config,
            PollRequest(
                channel=ctx.channel,
                to=to,
                question=question,
                options=options,
                max_selections=max_selections,
                params=params,
                duration_hours=duration_hours,
                account_id=ctx.account_id,
                gateway=ctx.gateway,
                tool_context=request.tool_context,
            ),
        )
        return PollActionResult(
            channel=ctx.channel,
            to=to,
            handled_by=polled.handled_by,
            payload=polled.payload,
            dry_run=False,
            tool_result=polled.tool_result,
            poll_result=polled.raw,
        )

    async def _handle_plugin_action(
        self, ctx: ResolvedActionContext, action: MessageAction
    ) -> PluginActionResult:
        if ctx.dry_run:
            return PluginActionResult(
                channel=ctx.channel,
                action=str(action),
                handled_by="dry-run",
                payload={"ok": True, "dryRun": True, "channel": ctx.channel, "action": str(action)},
                dry_run=True,
            )

        request = ctx.request
        deps = request.deps or self.deps
        handled = await deps.dispatch_action(
            ctx.config,
            PluginActionRequest(
                channel=ctx.channel,
                action=str(action),
                params=ctx.params,
                account_id=ctx.account_id,
                gateway=ctx.gateway,
                tool_context=request.tool_context,
                dry_run=False,
            ),
        )
        if handled is None:
            raise UnsupportedActionError(
                f"Message action {action} not supported for channel {ctx.channel}."
            )
        return PluginActionResult(
            channel=ctx.channel,
            action=str(action),
            handled_by="plugin",
            payload=extract_tool_payload(handled),
            dry_run=False,
            tool_result=handled,
        )
