"""Broadcast: fan one send out over channels × raw targets.

Each (channel, target) pair is resolved and sent independently through the
orchestrator.  A failing pair becomes an ``ok=False`` outcome and never
affects the others; the broadcast itself only raises for its own
preconditions (feature disabled, no targets, no configured channels).

Outcomes are always reported in channel-major enumeration order, even when
``max_concurrency`` > 1 lets pairs complete out of order.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import TYPE_CHECKING, Any

from courier.errors import BroadcastPreconditionError
from courier.logger import logger
from courier.outbound.channel_selection import (
    list_configured_channels,
    resolve_channel_selection,
)
from courier.outbound.params import read_string_array_param, read_string_param
from courier.types import BroadcastActionResult, BroadcastOutcome, SendActionResult

if TYPE_CHECKING:
    from courier.outbound.action_runner import MessageActionRunner
    from courier.types import ActionRequest


async def _send_one(
    runner: MessageActionRunner,
    request: ActionRequest,
    params: dict[str, Any],
    channel: str,
    raw_target: str,
) -> BroadcastOutcome:
    try:
        resolved = await runner.resolver.resolve(request.config, channel, raw_target)
        if resolved.target is None:
            raise resolved.error
        to = resolved.target.to
        result = await runner.run(
            dataclasses.replace(
                request,
                action="send",
                params={**params, "channel": channel, "target": to},
            )
        )
    except Exception as exc:
        logger.warning("Broadcast target failed", channel=channel, target=raw_target, err=str(exc))
        return BroadcastOutcome(channel=channel, to=raw_target, ok=False, error=str(exc))
    send_result = result.send_result if isinstance(result, SendActionResult) else None
    return BroadcastOutcome(channel=channel, to=to, ok=True, result=send_result)


async def run_broadcast(
    runner: MessageActionRunner,
    request: ActionRequest,
    params: dict[str, Any],
) -> BroadcastActionResult:
    config = request.config
    settings = config.tools.message.broadcast
    if not settings.enabled:
        raise BroadcastPreconditionError(
            "Broadcast is disabled. Set tools.message.broadcast.enabled to true."
        )
    raw_targets = read_string_array_param(params, "targets") or []
    if not raw_targets:
        raise BroadcastPreconditionError("Broadcast requires at least one target in --targets.")
    configured = list_configured_channels(config)
    if not configured:
        raise BroadcastPreconditionError("Broadcast requires at least one configured channel.")

    hint = read_string_param(params, "channel")
    if hint and hint.lower() != "all":
        target_channels = [resolve_channel_selection(config, hint)]
    else:
        target_channels = configured

    pairs = [(ch, target) for ch in target_channels for target in raw_targets]
    semaphore = asyncio.Semaphore(settings.max_concurrency)

    async def _bounded(channel: str, raw_target: str) -> BroadcastOutcome:
        async with semaphore:
            return await _send_one(runner, request, params, channel, raw_target)

    # gather() preserves argument order regardless of completion order
    results = list(await asyncio.gather(*(_bounded(ch, t) for ch, t in pairs)))

    failed = sum(1 for r in results if not r.ok)
    logger.info(
        "Broadcast finished",
        channels=target_channels,
        ok=len(results) - failed,
        failed=failed,
        dry_run=bool(request.dry_run),
    )
    return BroadcastActionResult(
        channel=target_channels[0],
        handled_by="dry-run" if request.dry_run else "core",
        results=results,
        dry_run=bool(request.dry_run),
    )
