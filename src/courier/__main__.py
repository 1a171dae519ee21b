"""Entry point for `python -m courier` / `courier`.

Subcommands:
    courier message <action> [options]   Run one message action
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any


def _build_params(args: argparse.Namespace) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for attr, key in (
        ("channel", "channel"),
        ("target", "target"),
        ("message", "message"),
        ("media", "media"),
        ("account", "accountId"),
        ("reply_to", "replyTo"),
        ("buttons", "buttons"),
        ("poll_question", "pollQuestion"),
        ("poll_duration_hours", "pollDurationHours"),
    ):
        value = getattr(args, attr)
        if value is not None:
            params[key] = value
    if args.targets:
        params["targets"] = args.targets
    if args.poll_option:
        params["pollOption"] = args.poll_option
    if args.poll_multi:
        params["pollMulti"] = True
    for extra in args.param or []:
        key, sep, value = extra.partition("=")
        if not sep:
            raise SystemExit(f"--param expects key=value, got {extra!r}")
        params[key.strip()] = value
    return params


def _format_result(result: Any) -> str:
    from courier.types import BroadcastActionResult

    if isinstance(result, BroadcastActionResult):
        lines = []
        for outcome in result.results:
            status = "ok" if outcome.ok else f"failed: {outcome.error}"
            lines.append(f"{outcome.channel} → {outcome.to}: {status}")
        return "\n".join(lines) or "No targets."
    suffix = " (dry run)" if result.dry_run else ""
    to = getattr(result, "to", None)
    dest = f" → {to}" if to else ""
    return f"{result.action} via {result.channel}{dest} [{result.handled_by}]{suffix}"


async def _message(args: argparse.Namespace) -> int:
    from courier.config import get_settings
    from courier.errors import AmbiguousTargetError, CourierError
    from courier.logger import set_level
    from courier.outbound import MessageActionRunner
    from courier.plugins.adapters import PluginOutboundDeps
    from courier.types import ActionRequest

    s = get_settings()
    set_level(s.logging.level)
    runner = MessageActionRunner(PluginOutboundDeps.from_plugin_manager())
    request = ActionRequest(
        config=s,
        action=args.action,
        params=_build_params(args),
        dry_run=True if args.dry_run else None,
    )
    try:
        result = await runner.run(request)
    except AmbiguousTargetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        for entry in exc.candidates:
            label = entry.name or entry.handle or ""
            print(f"  {entry.id}  {label}".rstrip(), file=sys.stderr)
        return 1
    except CourierError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.payload, indent=2, default=str))
    else:
        print(_format_result(result))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="courier",
        description="Route message actions to chat platforms",
    )
    sub = parser.add_subparsers(dest="command")

    msg = sub.add_parser("message", help="Run a message action (send, poll, react, ...)")
    msg.add_argument("action", nargs="?", default="send", help="Action name (default: send)")
    msg.add_argument("--channel", help="Channel id, or 'all' for broadcast")
    msg.add_argument("--target", help="Destination (id, #channel, @user, or name)")
    msg.add_argument("--targets", nargs="+", help="Broadcast destinations")
    msg.add_argument("--message", help="Message text")
    msg.add_argument("--media", help="Media URL to attach")
    msg.add_argument("--account", help="Account id for multi-account channels")
    msg.add_argument("--reply-to", dest="reply_to", help="Message id to reply to")
    msg.add_argument("--buttons", help="Buttons as JSON")
    msg.add_argument("--poll-question", dest="poll_question")
    msg.add_argument("--poll-option", dest="poll_option", action="append")
    msg.add_argument("--poll-multi", dest="poll_multi", action="store_true")
    msg.add_argument("--poll-duration-hours", dest="poll_duration_hours")
    msg.add_argument("--param", action="append", help="Extra action parameter as key=value")
    msg.add_argument("--dry-run", dest="dry_run", action="store_true")
    msg.add_argument("--json", action="store_true", help="Print the result payload as JSON")

    args = parser.parse_args()

    match args.command:
        case "message":
            sys.exit(asyncio.run(_message(args)))
        case _:
            parser.print_help()
            sys.exit(2)


if __name__ == "__main__":
    main()
